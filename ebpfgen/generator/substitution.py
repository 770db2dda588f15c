# ebpfgen/generator/substitution.py - Placeholder substitution engine
"""
Text buffer holding C source with placeholder tokens, and the
substitution operations applied to it while a program is assembled.

Tokens are literal, case-sensitive substrings. They never occur in
template text except as intentional substitution points.
"""

from typing import List
import logging

from ebpfgen.errors import PlaceholderNotFoundError


logger = logging.getLogger(__name__)


class Token:
    """
    Placeholder vocabulary shared by the templates and the generator.
    """

    SYSCALL_NR = "SYSCALL_NR"
    SYSCALL_NAME = "SYSCALL_NAME_filled_for_replace"
    STR_ARGS = ("STR1", "STR2", "STR3")
    TRACED_PID = "TRACED_PID"
    MY_OWN_PID = "MY_OWN_PID"
    PID_CHECK_HOOK = "PID_CHECK_HOOK"
    TRACE_H_INCLUDE = '#include "trace.h"'
    N_MINUS_2_INTERIM = "READ_AND_SUBMIT_it_will_be_removed_N_MINUS_2_PACKETS"
    N_MINUS_2_PACKETS = "READ_AND_SUBMIT_N_MINUS_2_PACKETS"

    @classmethod
    def all(cls) -> List[str]:
        """Every token the generator knows how to fill."""
        return [
            cls.SYSCALL_NR,
            cls.SYSCALL_NAME,
            *cls.STR_ARGS,
            cls.TRACED_PID,
            cls.MY_OWN_PID,
            cls.PID_CHECK_HOOK,
            cls.TRACE_H_INCLUDE,
            cls.N_MINUS_2_INTERIM,
            cls.N_MINUS_2_PACKETS,
        ]


class TemplateBuffer:
    """
    Mutable text buffer with exact-token substitution.

    Replacements may be longer or shorter than the token they replace;
    the buffer simply grows or shrinks.
    """

    def __init__(self, text: str = "", name: str = "<memory>"):
        """
        Initialize the buffer.

        Args:
            text: Initial C source text
            name: Where the text came from, used in log messages
        """
        self.text = text
        self.name = name

    def __str__(self) -> str:
        return self.text

    def __len__(self) -> int:
        return len(self.text)

    def __contains__(self, token: str) -> bool:
        return token in self.text

    def count(self, token: str) -> int:
        return self.text.count(token)

    def replace_first(self, token: str, replacement: str):
        """
        Replace the first occurrence of a token.

        Args:
            token: Placeholder to look for
            replacement: Text to put in its place

        Raises:
            PlaceholderNotFoundError: If the token is not in the buffer
        """
        index = self._find(token)
        self.text = self.text[:index] + replacement + self.text[index + len(token):]

    def replace_all(self, token: str, replacement: str) -> int:
        """
        Replace every occurrence of a token.

        Zero occurrences is not an error, shared fragments may omit
        optional tokens.

        Returns:
            Number of occurrences replaced
        """
        occurrences = self.text.count(token)
        if occurrences:
            self.text = self.text.replace(token, replacement)
        return occurrences

    def replace_with_repeated_block(self, token: str, block: str, count: int):
        """
        Replace the first occurrence of a marker with `count` copies of a block.

        A count of zero removes the marker and inserts nothing.

        Raises:
            PlaceholderNotFoundError: If the marker is not in the buffer
            ValueError: If count is negative
        """
        if count < 0:
            raise ValueError(f"repeat count must not be negative: {count}")

        self.replace_first(token, block * count)

    def replace_with_char(self, token: str, value):
        """
        Replace the first occurrence of a token with a single character.

        Used to encode a small integer (an argument slot) directly into
        the generated source.

        Args:
            token: Placeholder to look for
            value: A single-character string or an integer 0..9
        """
        if isinstance(value, int):
            if not 0 <= value <= 9:
                raise ValueError(f"value does not fit in one character: {value}")
            value = str(value)

        if len(value) != 1:
            raise ValueError(f"expected a single character, got {value!r}")

        self.replace_first(token, value)

    def _find(self, token: str) -> int:
        index = self.text.find(token)
        if index < 0:
            logger.debug(f"Token {token!r} not found in {self.name}")
            raise PlaceholderNotFoundError(token)
        return index


def find_unresolved(text: str) -> List[str]:
    """
    List the known tokens still present in a piece of generated text.

    Args:
        text: Generated program text

    Returns:
        Tokens found, in vocabulary order
    """
    return [token for token in Token.all() if token in text]
