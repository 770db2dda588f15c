# ebpfgen/exporters/stdout.py - Console output of generated code
"""
Writes generated programs and generation summaries to the console.
"""

import sys
from typing import Optional, TextIO
from colorama import Fore, Style
import logging

from ebpfgen.errors import OutputWriteError


BEGIN_MARK = "\t>>>>> Generated eBPF code <<<<<\n"
END_MARK = "\t>>>>> EndOf generated eBPF code <<<<<<\n"


def print_with_debug_marks(stream: TextIO, text: Optional[str]):
    """
    Write generated code between debug delimiter lines.

    Args:
        stream: Diagnostic stream
        text: Generated code, may be None
    """
    stream.write(BEGIN_MARK)
    if text:
        stream.write(text)
    stream.write(END_MARK)


class StdoutExporter:
    """
    Writes the generated program to stdout.
    """

    def __init__(self, stream: Optional[TextIO] = None, use_colors: bool = True):
        """
        Initialize the stdout exporter.

        Args:
            stream: Output stream (default: sys.stdout)
            use_colors: Whether to color the summary
        """
        self.stream = stream or sys.stdout
        self.use_colors = use_colors
        self.logger = logging.getLogger(__name__)

    def write_program(self, text: str, debug_marks: bool = False):
        """
        Write a program, optionally wrapped in debug marks.
        """
        try:
            if debug_marks:
                print_with_debug_marks(self.stream, text)
            else:
                self.stream.write(text)
            self.stream.flush()
        except OSError as e:
            self.logger.error(f"Failed to write generated code: {e}")
            raise OutputWriteError(f"cannot write generated code: {e}") from e

    def print_selection(self, descriptors, expression: str):
        """
        Print the syscalls an expression selects.

        Args:
            descriptors: Selected SyscallDescriptor objects
            expression: The trace expression used
        """
        header = f"Syscalls selected by '{expression}': {len(descriptors)}"
        if self.use_colors:
            header = f"{Fore.CYAN}{header}{Style.RESET_ALL}"
        print(header, file=self.stream)

        for descriptor in descriptors:
            strings = ','.join(str(p) for p in descriptor.string_arg_positions) or '-'
            print(f"  {descriptor.number:4}  {descriptor.name:16} strings={strings}", file=self.stream)
