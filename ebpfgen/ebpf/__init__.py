# ebpfgen/ebpf/__init__.py - eBPF program templates
"""
C template fragments the generator assembles into one tracing program:
- trace_head.c, trace.h: program head and shared definitions
- template_*_str_*.c: syscall entry handlers by string argument count
- template_fork.c, template_exit.c: process lifecycle handlers
- trace_tracepoints.c: shared syscall exit handler
- pid_*_hook.c: process filters
- macro_*_string_mode.c: repeated string read blocks
"""
