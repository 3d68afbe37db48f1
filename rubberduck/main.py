import sys
import logging
from typing import List, Optional

# Basic console logger for messages BEFORE full setup is complete.
# This logger will be replaced by the full setup later.
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)-8s - [console] - %(message)s',
    stream=sys.stdout
)
log = logging.getLogger("console")

import rubberduck.local.console as console
from rubberduck.local.config import MergedSettings
from rubberduck.local.environment import EnvironmentStore
from rubberduck.local.errors import RubberDuckError
from rubberduck.local.home import resolve_home
from rubberduck.local.supervisor import ProcessManager
from rubberduck.log.setup import setup_logging


def bootstrap(verbose: bool = False) -> console.Session:
    """
    Resolves the home directory, seeds the process environment from the
    environment store, and builds the settings for this invocation.

    The store is applied exactly once, here, before anything reads settings.

    :raises RubberDuckError: If the home directory or the store is unusable.
    """
    home = resolve_home()
    store = EnvironmentStore(home)
    store.apply_to_process_environment()
    config = MergedSettings()
    manager = ProcessManager(home, config)
    log.debug(f"Using home directory '{home}'.")
    return console.Session(home=home, store=store, config=config, manager=manager, verbose=verbose)


def run_interactive(session: console.Session) -> int:
    """The interactive management console."""
    print("--- Rubber Duck Management Console ---")
    print("Type 'help' for a list of commands.")

    status = "Running" if session.manager.registry.exists() else "Stopped"
    print(f"Dataserver is currently {status}.")
    while True:
        try:
            command_line_str = input("> ")
            if not command_line_str.strip():
                continue
            command_line = command_line_str.strip().split()
            command, args = command_line[0].lower(), command_line[1:]
            log.debug(f"Received command: {command}, args: {args}")

            if command == "exit":
                return 0
            console.execute_command(command, args, session)

        except (KeyboardInterrupt, EOFError):
            log.warning("\nExiting console due to KeyboardInterrupt.")
            return 0
        except Exception as e:
            log.error(f"An unexpected error occurred in the console: {e}", exc_info=True)


def main(argv: Optional[List[str]] = None) -> int:
    """The main entry point for the console application."""
    args = list(sys.argv[1:] if argv is None else argv)
    verbose = "--verbose" in args
    if verbose:
        args.remove("--verbose")

    setup_logging(logging.DEBUG if verbose else logging.INFO)

    try:
        session = bootstrap(verbose)
    except RubberDuckError as e:
        log.error(str(e))
        return 1

    # Non-interactive mode for one-off commands
    if args:
        return console.execute_command(args[0].lower(), args[1:], session)
    return run_interactive(session)


if __name__ == "__main__":
    sys.exit(main())
