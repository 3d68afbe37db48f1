"""
The Supervisor package.
Manages the lifecycle of the detached dataserver process.

This package contains the central ProcessManager class and its helper modules,
which together handle the PID record, spawning, health checks and stopping.
"""
from .persistence import PidRegistry
from .supervisor import ProcessManager

__all__ = ['ProcessManager', 'PidRegistry']
