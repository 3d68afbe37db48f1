"""
Entry point scripts for processes launched by the Rubber Duck supervisor.

This package contains minimal entry point scripts that are responsible for
running individual processes like the detached dataserver. These scripts
provide clean separation and avoid circular dependencies.
"""
