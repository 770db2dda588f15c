# ebpfgen/catalog/syscalls.py - Syscall descriptor catalog
"""
Static description of the traced syscalls: number, name, availability
and the shape of their arguments.

The generator only reads this data. A catalog can come from the built-in
x86_64 table or from a YAML file.
"""

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
import logging

import yaml

from ebpfgen.errors import ConfigError


logger = logging.getLogger(__name__)

# Maximum number of string arguments a handler template can capture
MAX_STR_ARG = 3


class ArgMask(enum.IntFlag):
    """
    Capability bits describing the argument shape of a syscall.
    """
    STR_1 = 1 << 0
    STR_2 = 1 << 1
    STR_3 = 1 << 2
    STR_4 = 1 << 3
    STR_5 = 1 << 4
    STR_6 = 1 << 5
    FD_1 = 1 << 6
    FD_2 = 1 << 7


STR_BITS = (
    ArgMask.STR_1, ArgMask.STR_2, ArgMask.STR_3,
    ArgMask.STR_4, ArgMask.STR_5, ArgMask.STR_6,
)


@dataclass(frozen=True)
class SyscallDescriptor:
    """
    One syscall as seen by the generator.

    `string_arg_positions` holds 0-based argument slots, one per
    string argument.
    """
    number: int
    name: str
    available: bool = True
    string_arg_count: int = 0
    string_arg_positions: Tuple[int, ...] = field(default_factory=tuple)
    mask: int = 0

    def __post_init__(self):
        if len(self.string_arg_positions) != self.string_arg_count:
            raise ConfigError(
                f"syscall '{self.name}': {self.string_arg_count} string arguments "
                f"but {len(self.string_arg_positions)} positions"
            )
        if any(not 0 <= slot < len(STR_BITS) for slot in self.string_arg_positions):
            raise ConfigError(
                f"syscall '{self.name}': string positions out of range: {self.string_arg_positions}"
            )

    @classmethod
    def from_mask(cls, number: int, name: str, mask: int = 0,
                  available: bool = True) -> 'SyscallDescriptor':
        """
        Build a descriptor, deriving string arguments from the STR_n bits.

        Args:
            number: Platform syscall number
            name: Syscall name without any prefix (e.g. 'openat')
            mask: Combination of ArgMask bits
            available: Whether the running platform exposes the syscall
        """
        positions = tuple(slot for slot, bit in enumerate(STR_BITS) if mask & bit)
        return cls(
            number=number,
            name=name,
            available=available,
            string_arg_count=len(positions),
            string_arg_positions=positions,
            mask=int(mask),
        )

    def matches(self, mask: int) -> bool:
        """True if no filter is given or the descriptor shares a bit with it."""
        return not mask or bool(self.mask & mask)


class SyscallCatalog:
    """
    Collection of syscall descriptors keyed by number.

    Iterating a catalog always yields descriptors by ascending number.
    """

    def __init__(self, descriptors: Iterable[SyscallDescriptor] = ()):
        self._by_number: Dict[int, SyscallDescriptor] = {}
        for descriptor in descriptors:
            self.add(descriptor)

    def add(self, descriptor: SyscallDescriptor):
        if descriptor.number in self._by_number:
            raise ConfigError(f"duplicate syscall number: {descriptor.number}")
        self._by_number[descriptor.number] = descriptor

    def __iter__(self) -> Iterator[SyscallDescriptor]:
        for number in sorted(self._by_number):
            yield self._by_number[number]

    def __len__(self) -> int:
        return len(self._by_number)

    def __contains__(self, number: int) -> bool:
        return number in self._by_number

    def __getitem__(self, number: int) -> SyscallDescriptor:
        return self._by_number[number]

    def get_by_name(self, name: str) -> Optional[SyscallDescriptor]:
        for descriptor in self._by_number.values():
            if descriptor.name == name:
                return descriptor
        return None

    def select(self, mask: int = 0) -> List[SyscallDescriptor]:
        """
        Available descriptors matching a capability filter.

        Args:
            mask: ArgMask combination, 0 selects everything

        Returns:
            Descriptors by ascending number
        """
        return [d for d in self if d.available and d.matches(mask)]


S1, S2, S3, S4 = ArgMask.STR_1, ArgMask.STR_2, ArgMask.STR_3, ArgMask.STR_4
F1, F2 = ArgMask.FD_1, ArgMask.FD_2

# x86_64 numbers
_X86_64_TABLE = [
    (0, 'read', F1),
    (1, 'write', F1),
    (2, 'open', S1),
    (3, 'close', F1),
    (4, 'stat', S1),
    (5, 'fstat', F1),
    (6, 'lstat', S1),
    (8, 'lseek', F1),
    (9, 'mmap', 0),
    (16, 'ioctl', F1),
    (17, 'pread64', F1),
    (18, 'pwrite64', F1),
    (21, 'access', S1),
    (32, 'dup', F1),
    (33, 'dup2', F1),
    (41, 'socket', 0),
    (42, 'connect', F1),
    (43, 'accept', F1),
    (44, 'sendto', F1),
    (45, 'recvfrom', F1),
    (56, 'clone', 0),
    (57, 'fork', 0),
    (58, 'vfork', 0),
    (59, 'execve', S1),
    (60, 'exit', 0),
    (62, 'kill', 0),
    (72, 'fcntl', F1),
    (74, 'fsync', F1),
    (77, 'ftruncate', F1),
    (78, 'getdents', F1),
    (79, 'getcwd', 0),
    (80, 'chdir', S1),
    (81, 'fchdir', F1),
    (82, 'rename', S1 | S2),
    (83, 'mkdir', S1),
    (84, 'rmdir', S1),
    (85, 'creat', S1),
    (86, 'link', S1 | S2),
    (87, 'unlink', S1),
    (88, 'symlink', S1 | S2),
    (89, 'readlink', S1),
    (90, 'chmod', S1),
    (91, 'fchmod', F1),
    (92, 'chown', S1),
    (94, 'lchown', S1),
    (137, 'statfs', S1),
    (161, 'chroot', S1),
    (165, 'mount', S1 | S2 | S3),
    (166, 'umount2', S1),
    (188, 'setxattr', S1 | S2),
    (191, 'getxattr', S1 | S2),
    (231, 'exit_group', 0),
    (257, 'openat', F1 | S2),
    (258, 'mkdirat', F1 | S2),
    (260, 'fchownat', F1 | S2),
    (262, 'newfstatat', F1 | S2),
    (263, 'unlinkat', F1 | S2),
    (264, 'renameat', F1 | S2 | F2 | S4),
    (265, 'linkat', F1 | S2 | F2 | S4),
    (266, 'symlinkat', S1 | F2 | S3),
    (267, 'readlinkat', F1 | S2),
    (268, 'fchmodat', F1 | S2),
    (269, 'faccessat', F1 | S2),
    (316, 'renameat2', F1 | S2 | F2 | S4),
    (322, 'execveat', F1 | S2),
]


def builtin_catalog() -> SyscallCatalog:
    """
    Catalog of commonly traced x86_64 syscalls.

    Returns:
        A fresh SyscallCatalog
    """
    return SyscallCatalog(
        SyscallDescriptor.from_mask(number, name, mask)
        for number, name, mask in _X86_64_TABLE
    )


def _parse_mask(value) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = [value]

    mask = 0
    for flag_name in value or []:
        try:
            mask |= ArgMask[str(flag_name).upper()]
        except KeyError:
            raise ConfigError(f"unknown argument flag: {flag_name}") from None
    return mask


def load_catalog(catalog_file: str) -> SyscallCatalog:
    """
    Load a catalog from a YAML file.

    The file holds a list of entries such as:

        - number: 257
          name: openat
          mask: [fd_1, str_2]
          available: true

    Explicit `positions` override the positions derived from the mask.

    Args:
        catalog_file: Path to the YAML file

    Returns:
        Loaded SyscallCatalog
    """
    catalog_path = Path(catalog_file)

    try:
        with open(catalog_path, 'r') as f:
            entries = yaml.safe_load(f) or []
    except OSError as e:
        raise ConfigError(f"cannot read catalog {catalog_file}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid catalog {catalog_file}: {e}") from e

    if not isinstance(entries, list):
        raise ConfigError(f"catalog {catalog_file} must contain a list of syscalls")

    catalog = SyscallCatalog()
    for entry in entries:
        try:
            number = int(entry['number'])
            name = str(entry['name'])
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"invalid catalog entry {entry!r}: {e}") from e

        mask = _parse_mask(entry.get('mask', 0))
        available = bool(entry.get('available', True))

        if 'positions' in entry:
            try:
                positions = tuple(int(p) for p in entry['positions'])
            except (TypeError, ValueError) as e:
                raise ConfigError(f"invalid positions for syscall '{name}': {e}") from e
            descriptor = SyscallDescriptor(
                number=number,
                name=name,
                available=available,
                string_arg_count=len(positions),
                string_arg_positions=positions,
                mask=mask,
            )
        else:
            descriptor = SyscallDescriptor.from_mask(number, name, mask, available)

        catalog.add(descriptor)

    logger.info(f"Loaded {len(catalog)} syscalls from {catalog_file}")
    return catalog
