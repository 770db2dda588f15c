# ebpfgen/generator/assembler.py - Program assembly
"""
Builds the text of the whole tracing program: the head with the shared
definitions spliced in, one handler per selected syscall and, for the
'all' expression, the shared tracepoint handler.
"""

import io
from dataclasses import dataclass
from typing import Dict, Optional, TextIO
import logging

from ebpfgen.catalog.syscalls import ArgMask, SyscallCatalog
from ebpfgen.errors import GeneratorError, OutputWriteError, UnrecognizedExpressionError
from ebpfgen.generator.selector import TemplateSelector
from ebpfgen.generator.substitution import Token
from ebpfgen.templates.store import TemplateStore
from ebpfgen.utils.config import CaptureMode


logger = logging.getLogger(__name__)


DEFAULT_EXPRESSION = 'all'


@dataclass(frozen=True)
class Selection:
    """
    What a trace expression asks for.

    Attributes:
        mask: Capability filter for the handlers, 0 selects every syscall
        tracepoints: Whether the shared tracepoint handler is appended
    """
    mask: int = 0
    tracepoints: bool = False


EXPRESSIONS: Dict[str, Selection] = {
    'all': Selection(mask=0, tracepoints=True),
    'kp-all': Selection(mask=0),
    'kp-file': Selection(mask=ArgMask.STR_1),
    'kp-desc': Selection(mask=ArgMask.FD_1),
    'kp-fileio': Selection(mask=ArgMask.STR_1 | ArgMask.STR_2 | ArgMask.FD_1),
}


def resolve_expression(expression: Optional[str]) -> Selection:
    """
    Map a trace expression to the syscall selection it names.

    Matching is case-insensitive; no expression means 'all'.

    Raises:
        UnrecognizedExpressionError: For any other value
    """
    if expression is None:
        logger.info(f"defaulting to '{DEFAULT_EXPRESSION}'")
        expression = DEFAULT_EXPRESSION

    try:
        return EXPRESSIONS[expression.lower()]
    except KeyError:
        logger.error(f"unknown option: '{expression}'")
        raise UnrecognizedExpressionError(expression) from None


class ProgramAssembler:
    """
    Assembles the program text from the template fragments.

    Handlers are written to the output one syscall at a time, so only one
    filled template is held in memory at once.
    """

    def __init__(self, store: Optional[TemplateStore] = None,
                 selector: Optional[TemplateSelector] = None):
        """
        Initialize the assembler.

        Args:
            store: Template source (default: packaged templates)
            selector: Handler selector (default: one built on the store)
        """
        self.store = store or TemplateStore()
        self.selector = selector or TemplateSelector(self.store)
        self.logger = logging.getLogger(__name__)

    def assemble(self, catalog: SyscallCatalog, mode: CaptureMode) -> str:
        """
        Build the complete program text.

        Nothing is returned unless every step succeeds.

        Args:
            catalog: Syscalls to choose handlers from
            mode: Settings of the current run

        Returns:
            Program text, still holding the process-attach hook markers
        """
        out = io.StringIO()
        self.assemble_into(out, catalog, mode)
        return out.getvalue()

    def assemble_into(self, out: TextIO, catalog: SyscallCatalog, mode: CaptureMode):
        """
        Write the program text to a stream.

        The expression is resolved before anything is written, an invalid
        one leaves the stream untouched.
        """
        selection = resolve_expression(mode.trace_expression)

        self._write(out, self.build_head(mode))
        count = self.write_handlers(out, catalog, mode, selection.mask)

        if selection.tracepoints:
            self._write(out, self.store.load(self.store.index.tracepoints).text)

        self.logger.info(
            f"Generated handlers for {count} syscalls "
            f"(expression '{mode.trace_expression or DEFAULT_EXPRESSION}')"
        )

    def build_head(self, mode: CaptureMode) -> str:
        """
        Head fragment with the trace definitions spliced in.

        The overflow packet marker is renamed to its final name only when
        strings need more than the two inline packets, otherwise it is
        dropped.
        """
        index = self.store.index
        head = self.store.load_verbatim(index.head)
        trace_h = self.store.load(index.trace_h)

        if mode.uses_overflow_packets:
            trace_h.replace_all(Token.N_MINUS_2_INTERIM, Token.N_MINUS_2_PACKETS)
        else:
            trace_h.replace_all(Token.N_MINUS_2_INTERIM, '')

        head.replace_first(Token.TRACE_H_INCLUDE, trace_h.text)
        return head.text

    def write_handlers(self, out: TextIO, catalog: SyscallCatalog,
                       mode: CaptureMode, mask: int = 0) -> int:
        """
        Write the handler of every available syscall matching the mask.

        Args:
            out: Output stream
            catalog: Syscalls to choose from
            mode: Settings of the current run
            mask: Capability filter, 0 selects everything

        Returns:
            Number of handlers written
        """
        count = 0

        for descriptor in catalog:
            if not descriptor.available:
                continue

            if not descriptor.matches(mask):
                continue

            try:
                text = self.selector.select(descriptor, mode)
            except GeneratorError:
                self.logger.error(f"no template found for syscall: '{descriptor.name}'")
                raise

            self._write(out, text.text)
            count += 1

        return count

    def _write(self, out: TextIO, text: str):
        try:
            out.write(text)
        except OSError as e:
            self.logger.error(f"Failed to write generated code: {e}")
            raise OutputWriteError(f"cannot write generated code: {e}") from e
