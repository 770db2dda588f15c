# ebpfgen/exporters/__init__.py - Exporters module
"""
Exporters for the generated program.

This module provides:
- stdout.py: Console output and debug marks
- source.py: C source file output
"""
