# ebpfgen/templates/store.py - Template fragment loading
"""
Loads C template fragments by name and knows which file serves which
purpose.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import logging

from ebpfgen.catalog.syscalls import MAX_STR_ARG
from ebpfgen.errors import TemplateNotFoundError, TemplateSelectionError
from ebpfgen.generator.substitution import TemplateBuffer
from ebpfgen.utils.config import StringReadPolicy


# Packaged C fragments
DEFAULT_TEMPLATE_DIR = Path(__file__).parent.parent / 'ebpf'


def _default_handler_table() -> Dict[Tuple[int, StringReadPolicy], str]:
    table = {}
    for policy in StringReadPolicy:
        table[(0, policy)] = 'template_0_str.c'
        for nstr in range(1, MAX_STR_ARG + 1):
            suffix = 'fixed' if policy is StringReadPolicy.FIXED else 'full'
            table[(nstr, policy)] = f'template_{nstr}_str_{suffix}.c'
    return table


@dataclass(frozen=True)
class TemplateIndex:
    """
    File names of every template fragment.

    Handlers are keyed by (string argument count, string read policy);
    the variable-length policies share their handler templates and only
    differ in the repeated-read block.
    """
    head: str = 'trace_head.c'
    trace_h: str = 'trace.h'
    tracepoints: str = 'trace_tracepoints.c'
    fork: str = 'template_fork.c'
    exit: str = 'template_exit.c'
    pid_check_ff_disabled: str = 'pid_check_ff_disabled_hook.c'
    pid_check_ff_full: str = 'pid_check_ff_full_hook.c'
    pid_own: str = 'pid_own_hook.c'
    const_string_mode: str = 'macro_const_string_mode.c'
    full_string_mode: str = 'macro_full_string_mode.c'
    handlers: Dict[Tuple[int, StringReadPolicy], str] = field(default_factory=_default_handler_table)

    def handler(self, nstr: int, policy: StringReadPolicy) -> str:
        """
        File name of the handler template for a string count and policy.

        Raises:
            TemplateSelectionError: If the index has no such entry
        """
        try:
            return self.handlers[(nstr, policy)]
        except KeyError:
            raise TemplateSelectionError(
                f"no template for {nstr} string arguments in '{policy.value}' mode"
            ) from None

    def pid_check_hook(self, full_feature_mode: bool) -> str:
        return self.pid_check_ff_full if full_feature_mode else self.pid_check_ff_disabled

    def repeated_read_block(self, policy: StringReadPolicy) -> Optional[str]:
        if policy is StringReadPolicy.FULL_CONST_N:
            return self.const_string_mode
        if policy is StringReadPolicy.FULL:
            return self.full_string_mode
        return None

    def all_files(self) -> List[str]:
        """Every file name in the index, each listed once."""
        names = [
            self.head, self.trace_h, self.tracepoints, self.fork, self.exit,
            self.pid_check_ff_disabled, self.pid_check_ff_full, self.pid_own,
            self.const_string_mode, self.full_string_mode,
        ]
        names.extend(self.handlers[key] for key in sorted(
            self.handlers, key=lambda k: (k[0], k[1].value)))
        return list(dict.fromkeys(names))


class TemplateStore:
    """
    Reads template fragments from a directory.
    """

    def __init__(self, template_dir: Optional[str] = None, index: Optional[TemplateIndex] = None):
        """
        Initialize the store.

        Args:
            template_dir: Directory holding the fragments (default: packaged ones)
            index: File name index (default: TemplateIndex())
        """
        self.template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
        self.index = index or TemplateIndex()
        self.logger = logging.getLogger(__name__)

    def path(self, name: str) -> Path:
        return self.template_dir / name

    def load(self, name: str) -> TemplateBuffer:
        """
        Load a fragment with carriage returns removed.

        Args:
            name: File name inside the template directory

        Returns:
            TemplateBuffer with the fragment text

        Raises:
            TemplateNotFoundError: If the file is missing or unreadable
        """
        buffer = self.load_verbatim(name)
        buffer.text = buffer.text.replace('\r', '')
        return buffer

    def load_verbatim(self, name: str) -> TemplateBuffer:
        """
        Load a fragment exactly as stored, line endings included.
        """
        path = self.path(name)
        try:
            with open(path, 'r', newline='') as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"cannot load the file: {path}")
            raise TemplateNotFoundError(path, str(e)) from e

        self.logger.debug(f"Loaded template {path} ({len(text)} bytes)")
        return TemplateBuffer(text, name=name)

    def missing(self) -> List[str]:
        """File names from the index that do not exist in the directory."""
        return [name for name in self.index.all_files() if not self.path(name).is_file()]
