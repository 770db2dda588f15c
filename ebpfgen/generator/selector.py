# ebpfgen/generator/selector.py - Syscall template selection
"""
Picks the handler template for one syscall and fills in the
syscall-specific placeholders.

Selection is resolved once per descriptor into a small closed set of
cases: the process lifecycle syscalls get dedicated templates when the
full-feature mode is on, everything else is chosen by its string
argument count.
"""

import enum
from dataclasses import dataclass
from typing import Union
import logging

from ebpfgen.catalog.syscalls import MAX_STR_ARG, SyscallDescriptor
from ebpfgen.generator.substitution import TemplateBuffer, Token
from ebpfgen.templates.store import TemplateStore
from ebpfgen.utils.config import CaptureMode


logger = logging.getLogger(__name__)


FORK_SYSCALLS = frozenset(['fork', 'vfork', 'clone'])
EXIT_SYSCALLS = frozenset(['exit', 'exit_group'])


class SpecialCase(enum.Enum):
    """Process lifecycle syscalls with their own templates."""
    FORK = 'fork'
    EXIT = 'exit'


@dataclass(frozen=True)
class GeneralCase:
    """Ordinary syscall, selected by its (clamped) string argument count."""
    arg_count: int


TemplateCase = Union[SpecialCase, GeneralCase]


def classify(descriptor: SyscallDescriptor, mode: CaptureMode) -> TemplateCase:
    """
    Decide which kind of template a syscall needs.

    The lifecycle special cases win over argument-count selection, but
    only in full-feature mode.

    Args:
        descriptor: Syscall to classify
        mode: Settings of the current run

    Returns:
        SpecialCase member or GeneralCase with the clamped count
    """
    if mode.full_feature_mode:
        if descriptor.name in FORK_SYSCALLS:
            return SpecialCase.FORK
        if descriptor.name in EXIT_SYSCALLS:
            return SpecialCase.EXIT

    nstr = descriptor.string_arg_count
    if nstr > MAX_STR_ARG:
        logger.warning(
            f"syscall '{descriptor.name}' has more than {MAX_STR_ARG} string arguments, "
            f"only first {MAX_STR_ARG} of them will be printed"
        )
        nstr = MAX_STR_ARG

    return GeneralCase(nstr)


class TemplateSelector:
    """
    Produces the filled handler template of a single syscall.
    """

    def __init__(self, store: TemplateStore):
        """
        Initialize the selector.

        Args:
            store: Source of the template fragments
        """
        self.store = store
        self.logger = logging.getLogger(__name__)

    def select(self, descriptor: SyscallDescriptor, mode: CaptureMode) -> TemplateBuffer:
        """
        Load and fill the handler template of a syscall.

        Args:
            descriptor: Syscall to generate the handler for
            mode: Settings of the current run

        Returns:
            Template with number, name and string positions substituted

        Raises:
            TemplateSelectionError: If the index has no template for the case
            TemplateNotFoundError: If the template file cannot be read
            PlaceholderNotFoundError: If a string position token is missing
        """
        case = classify(descriptor, mode)
        index = self.store.index

        if case is SpecialCase.FORK:
            text = self.store.load(index.fork)
        elif case is SpecialCase.EXIT:
            text = self.store.load(index.exit)
        else:
            text = self.store.load(index.handler(case.arg_count, mode.string_read_policy))
            for slot in range(case.arg_count):
                text.replace_with_char(Token.STR_ARGS[slot], descriptor.string_arg_positions[slot])

        text.replace_all(Token.SYSCALL_NR, str(descriptor.number))
        text.replace_all(Token.SYSCALL_NAME, descriptor.name)

        self.logger.debug(f"Selected {text.name} for syscall '{descriptor.name}' ({case})")
        return text
