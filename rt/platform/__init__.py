"""Platform abstraction layer: processes and files."""

from .files import atomic_write_text
from .process import ProcessError, run, run_interactive

__all__ = [
    # files
    "atomic_write_text",
    # process
    "ProcessError",
    "run",
    "run_interactive",
]
