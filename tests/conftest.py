# tests/conftest.py - Shared test fixtures
"""
Fixtures shared by the generator tests.

`mini_store` serves tiny one-line templates so that generated output
can be compared exactly.
"""

import pytest

from ebpfgen.catalog.syscalls import ArgMask, SyscallCatalog, SyscallDescriptor
from ebpfgen.templates.store import TemplateStore


MINI_TEMPLATES = {
    'trace_head.c': 'HEAD\n#include "trace.h"\nEND_HEAD\n',
    'trace.h': 'DEFS(READ_AND_SUBMIT_it_will_be_removed_N_MINUS_2_PACKETS)\n',
    'trace_tracepoints.c': 'TP{PID_CHECK_HOOK}\n',
    'template_0_str.c': 'H0 SYSCALL_NR SYSCALL_NAME_filled_for_replace{PID_CHECK_HOOK}\n',
    'template_1_str_fixed.c': 'H1F SYSCALL_NR SYSCALL_NAME_filled_for_replace a(STR1){PID_CHECK_HOOK}\n',
    'template_2_str_fixed.c': 'H2F SYSCALL_NR SYSCALL_NAME_filled_for_replace a(STR1) a(STR2){PID_CHECK_HOOK}\n',
    'template_3_str_fixed.c': 'H3F SYSCALL_NR SYSCALL_NAME_filled_for_replace a(STR1) a(STR2) a(STR3){PID_CHECK_HOOK}\n',
    'template_1_str_full.c': 'H1V SYSCALL_NR SYSCALL_NAME_filled_for_replace a(STR1){PID_CHECK_HOOK}\n',
    'template_2_str_full.c': 'H2V SYSCALL_NR SYSCALL_NAME_filled_for_replace a(STR1) a(STR2){PID_CHECK_HOOK}\n',
    'template_3_str_full.c': 'H3V SYSCALL_NR SYSCALL_NAME_filled_for_replace a(STR1) a(STR2) a(STR3){PID_CHECK_HOOK}\n',
    'template_fork.c': 'FORK SYSCALL_NR SYSCALL_NAME_filled_for_replace{PID_CHECK_HOOK}\n',
    'template_exit.c': 'EXIT SYSCALL_NR SYSCALL_NAME_filled_for_replace{PID_CHECK_HOOK}\n',
    'pid_check_ff_disabled_hook.c': 'check(TRACED_PID)',
    'pid_check_ff_full_hook.c': 'check_ff(TRACED_PID)',
    'pid_own_hook.c': 'own(MY_OWN_PID)',
    'macro_const_string_mode.c': '[const]',
    'macro_full_string_mode.c': '[full]',
}


@pytest.fixture
def mini_template_dir(tmp_path):
    """Directory holding the one-line templates"""
    template_dir = tmp_path / 'templates'
    template_dir.mkdir()
    for name, text in MINI_TEMPLATES.items():
        (template_dir / name).write_text(text)
    return template_dir


@pytest.fixture
def mini_store(mini_template_dir):
    return TemplateStore(str(mini_template_dir))


@pytest.fixture
def packaged_store():
    return TemplateStore()


@pytest.fixture
def catalog():
    """Small catalog covering every argument shape"""
    return SyscallCatalog([
        SyscallDescriptor.from_mask(257, 'openat', ArgMask.FD_1 | ArgMask.STR_2),
        SyscallDescriptor.from_mask(0, 'read', ArgMask.FD_1),
        SyscallDescriptor.from_mask(2, 'open', ArgMask.STR_1),
        SyscallDescriptor.from_mask(9, 'mmap', 0),
        SyscallDescriptor.from_mask(57, 'fork', 0),
        SyscallDescriptor.from_mask(60, 'exit', 0),
        SyscallDescriptor.from_mask(82, 'rename', ArgMask.STR_1 | ArgMask.STR_2),
        SyscallDescriptor.from_mask(99, 'gone', ArgMask.STR_1, available=False),
        SyscallDescriptor.from_mask(165, 'mount', ArgMask.STR_1 | ArgMask.STR_2 | ArgMask.STR_3),
    ])
