"""
This is a minimal entry point script for the detached dataserver process.

The supervisor launches it with its own home directory and the host, port
and worker count forwarded verbatim; it runs the same foreground path as
`rd dataserver raw-start`. The parent has already applied the environment
store, and this process inherits that environment.
"""
import sys
import argparse
from typing import List, Optional

from rubberduck import settings
from rubberduck.local.config import MergedSettings
from rubberduck.local.console.handler import add_bind_arguments
from rubberduck.local.home import resolve_home
from rubberduck.local.supervisor import ProcessManager
from rubberduck.log.setup import setup_logging


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    parser = add_bind_arguments(argparse.ArgumentParser(prog="rubberduck-dataserver"))
    parser.add_argument("--home", help="Home directory resolved by the supervising process.")
    opts = parser.parse_args(argv)

    home = resolve_home({settings.HOME_ENV_VAR: opts.home} if opts.home else None)
    manager = ProcessManager(home, MergedSettings())
    manager.raw_start(opts.host, opts.port, opts.workers)
    return 0


if __name__ == "__main__":
    sys.exit(main())
