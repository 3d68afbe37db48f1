import logging
from typing import List

from rubberduck.local.console.handler import (
    EXIT_FAILURE, Session, handle_dataserver_command, handle_env_command,
    handle_logs_command, print_help, toggle_verbose_logging,
)

log = logging.getLogger(__name__)


def execute_command(command: str, args: List[str], session: Session) -> int:
    """
    Executes a single command from the user.

    :param command: The main command string (e.g., 'dataserver', 'env').
    :param args: A list of arguments for the command.
    :param session: The resolved home, store, settings and process manager.
    :return int: The exit code of the command.
    """
    log.debug(f"Executing command: {command}, args: {args}")
    command_map = {
        "dataserver": lambda: handle_dataserver_command(args, session),
        "env": lambda: handle_env_command(args, session),
        "logs": lambda: handle_logs_command(args, session),
        "verbose": lambda: toggle_verbose_logging(session),
        "help": print_help,
    }

    if command in command_map:
        return command_map[command]()

    log.info(f"Unknown command: '{command}'. Type 'help' for a list of commands.")
    return EXIT_FAILURE
