"""
This module initializes the console package, exposing command execution, the
per-invocation session, verbose logging toggling, and help output.
"""

from .process import execute_command
from .handler import Session, toggle_verbose_logging, print_help

__all__ = ["execute_command", "Session", "toggle_verbose_logging", "print_help"]
