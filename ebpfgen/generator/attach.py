# ebpfgen/generator/attach.py - Process-attach post-processing
"""
Final pass over the assembled program: fills the process filter into
every handler and expands the repeated string reads.
"""

import os
from typing import Optional
import logging

from ebpfgen.catalog.syscalls import SyscallCatalog
from ebpfgen.errors import PlaceholderNotFoundError, UnresolvedPlaceholderError
from ebpfgen.generator.assembler import ProgramAssembler
from ebpfgen.generator.substitution import TemplateBuffer, Token, find_unresolved
from ebpfgen.templates.store import TemplateStore
from ebpfgen.utils.config import CaptureMode


class ProcessAttachProcessor:
    """
    Applies the process-attach policy to an assembled program.

    With a target pid only that process (and, in full-feature mode, its
    children) is traced. Without one the generator's own process is
    excluded, otherwise the tracer would trace its own reads of the
    event buffers.
    """

    def __init__(self, store: Optional[TemplateStore] = None):
        self.store = store or TemplateStore()
        self.logger = logging.getLogger(__name__)

    def apply(self, program_text: str, mode: CaptureMode) -> str:
        """
        Resolve the process filter and string read markers.

        Args:
            program_text: Output of ProgramAssembler.assemble()
            mode: Settings of the current run

        Returns:
            Program text without any placeholder left

        Raises:
            TemplateNotFoundError: If a fragment cannot be read
            PlaceholderNotFoundError: If a required marker is missing
            UnresolvedPlaceholderError: If tokens remain in the result
        """
        program = TemplateBuffer(program_text, name='<program>')

        hook = self.load_pid_hook(mode)
        program.replace_all(Token.PID_CHECK_HOOK, hook.text)

        if mode.uses_overflow_packets:
            block_name = self.store.index.repeated_read_block(mode.string_read_policy)
            block = self.store.load(block_name)
            program.replace_with_repeated_block(
                Token.N_MINUS_2_PACKETS, block.text, mode.extra_packet_count - 2
            )

        leftovers = find_unresolved(program.text)
        if leftovers:
            self.logger.error(f"Generated code still contains: {', '.join(leftovers)}")
            raise UnresolvedPlaceholderError(leftovers)

        return program.text

    def load_pid_hook(self, mode: CaptureMode) -> TemplateBuffer:
        """
        Process filter fragment for the current run, pid filled in.
        """
        index = self.store.index

        if mode.target_pid is not None and mode.target_pid > 0:
            hook = self.store.load(index.pid_check_hook(mode.full_feature_mode))
            token, value = Token.TRACED_PID, mode.target_pid
            self.logger.info(f"Tracing PID {mode.target_pid}")
        else:
            pid = os.getpid()
            self.logger.info(f"will not trace my own PID {pid} (0x{pid:X})")
            hook = self.store.load(index.pid_own)
            token, value = Token.MY_OWN_PID, pid

        if not hook.replace_all(token, str(value)):
            raise PlaceholderNotFoundError(token)
        return hook


def apply_attach_policy(program_text: str, mode: CaptureMode,
                        store: Optional[TemplateStore] = None) -> str:
    """
    Apply the process-attach policy with a default processor.
    """
    return ProcessAttachProcessor(store).apply(program_text, mode)


def generate(catalog: SyscallCatalog, mode: CaptureMode,
             store: Optional[TemplateStore] = None) -> str:
    """
    Assemble a program and apply the process-attach policy to it.

    Args:
        catalog: Syscalls to generate handlers for
        mode: Settings of the run
        store: Template source (default: packaged templates)

    Returns:
        Complete program text ready for compilation
    """
    store = store or TemplateStore()
    program = ProgramAssembler(store).assemble(catalog, mode)
    return ProcessAttachProcessor(store).apply(program, mode)
