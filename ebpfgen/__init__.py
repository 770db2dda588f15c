# ebpfgen/__init__.py - eBPF syscall tracing program generator
"""
Builds the source of a single eBPF syscall tracing program out of
pre-authored C template fragments.
"""

__version__ = "0.1.0"
