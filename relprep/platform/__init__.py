"""Thin wrappers over the operating system (processes, files)."""

from .files import append_lines, atomic_write_text
from .process import ProcessError, run, run_silent

__all__ = ["ProcessError", "append_lines", "atomic_write_text", "run", "run_silent"]
