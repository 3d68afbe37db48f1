"""
Logging module for the application.
This module provides logging setup and the day-bucketed dataserver log files.
"""

from .setup import setup_logging, set_console_level
from .files import resolve_log_path, prune_logs

__all__ = ["setup_logging", "set_console_level", "resolve_log_path", "prune_logs"]
