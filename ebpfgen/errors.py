# ebpfgen/errors.py - Generator exceptions
"""
Exceptions raised while assembling an eBPF program.

Every failure aborts the whole run; nothing here is meant to be retried.
"""

from typing import Iterable, Optional


class GeneratorError(Exception):
    """Base class for all program generation failures."""


class ConfigError(GeneratorError):
    """Invalid configuration value."""


class TemplateNotFoundError(GeneratorError):
    """A template file is missing or unreadable."""

    def __init__(self, path, reason: Optional[str] = None):
        self.path = path
        message = f"cannot load the file: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class TemplateSelectionError(GeneratorError):
    """The template index has no entry for the requested key."""


class PlaceholderNotFoundError(GeneratorError):
    """A required placeholder token is absent from a template."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"placeholder not found: {token!r}")


class UnresolvedPlaceholderError(GeneratorError):
    """Placeholder tokens are still present in the final program."""

    def __init__(self, tokens: Iterable[str]):
        self.tokens = list(tokens)
        super().__init__(f"unresolved placeholders: {', '.join(self.tokens)}")


class UnrecognizedExpressionError(GeneratorError):
    """The trace expression does not name a known syscall set."""

    def __init__(self, expression: str):
        self.expression = expression
        super().__init__(f"unknown option: '{expression}'")


class OutputWriteError(GeneratorError):
    """The output stream did not accept the generated text."""
