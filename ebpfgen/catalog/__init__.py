# ebpfgen/catalog/__init__.py - Syscall catalog module
"""
Syscall descriptors read by the generator.

This module provides:
- syscalls.py: Descriptors, capability masks, built-in and YAML catalogs
"""
