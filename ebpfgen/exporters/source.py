# ebpfgen/exporters/source.py - Generated source file exporter
"""
Saves generated programs as C source files.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional
import logging

from ebpfgen.errors import OutputWriteError
from ebpfgen.utils.helpers import format_bytes


class SourceExporter:
    """
    Writes generated programs to files.
    """

    def __init__(self, output_dir: Optional[str] = None):
        """
        Initialize the source exporter.

        Args:
            output_dir: Directory for relative file names (default: current directory)
        """
        self.output_dir = Path(output_dir) if output_dir else Path('.')
        self.logger = logging.getLogger(__name__)

    def export(self, text: str, filename: str) -> Path:
        """
        Write a program to a file.

        The text goes to a temporary file in the target directory that is
        renamed over the target once complete, so a failed write never
        leaves a partial file behind.

        Args:
            text: Generated program
            filename: Output file name or path

        Returns:
            Path to the output file
        """
        output_path = self.output_dir / filename

        tmp_name = None
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile('w', dir=output_path.parent, prefix='.' + output_path.name,
                                             suffix='.tmp', delete=False) as f:
                tmp_name = f.name
                f.write(text)
            os.replace(tmp_name, output_path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            self.logger.error(f"Failed to write {output_path}: {e}")
            raise OutputWriteError(f"cannot write {output_path}: {e}") from e

        self.logger.info(f"Wrote {format_bytes(len(text))} of eBPF code to {output_path}")
        return output_path
