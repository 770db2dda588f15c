# ebpfgen/utils/helpers.py - Helper functions
"""
General utility and helper functions.
"""

import os
from typing import Optional
import logging


logger = logging.getLogger(__name__)


def validate_pid(pid: int) -> bool:
    """
    Validate that a PID exists and is accessible.

    Args:
        pid: Process ID to validate

    Returns:
        True if PID is valid, False otherwise
    """
    try:
        os.kill(pid, 0)
        return True
    except PermissionError:
        # exists, owned by somebody else
        return True
    except OSError:
        return False


def get_process_name(pid: int) -> Optional[str]:
    """
    Get process name from PID.

    Returns:
        Process name or None if not found
    """
    try:
        with open(f"/proc/{pid}/comm", 'r') as f:
            return f.read().strip()
    except OSError:
        return None


def format_bytes(bytes_count: int) -> str:
    """
    Format bytes into human-readable string.

    Args:
        bytes_count: Number of bytes

    Returns:
        Formatted string (e.g., "1.5 KB")
    """
    for unit in ['B', 'KB', 'MB', 'GB']:
        if bytes_count < 1024.0:
            return f"{bytes_count:.1f} {unit}"
        bytes_count /= 1024.0

    return f"{bytes_count:.1f} TB"
