# ebpfgen/generator/__init__.py - Program generation module
"""
Generator module turning template fragments into one eBPF program.

This module provides:
- substitution.py: Template buffer and placeholder substitution
- selector.py: Handler template selection per syscall
- assembler.py: Assembly of the whole program text
- attach.py: Process filter and repeated string read expansion
"""
