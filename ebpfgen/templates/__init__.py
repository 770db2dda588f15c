# ebpfgen/templates/__init__.py - Template store module
"""
Access to the C template fragments.

This module provides:
- store.py: Template file index and loading
"""
