"""
Rubber Duck CLI.

Starts, tracks and stops the Rubber Duck dataserver as a detached process and
keeps a small persistent environment store under the Rubber Duck home directory.
"""

__version__ = "0.1.0"
