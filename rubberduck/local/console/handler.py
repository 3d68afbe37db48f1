import logging
import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from rubberduck.local.config import MergedSettings
from rubberduck.local.environment import EnvironmentStore
from rubberduck.local.errors import Advisory, PidPersistFailure, RubberDuckError
from rubberduck.local.supervisor import ProcessManager, shutdown
from rubberduck.log.files import prune_logs, resolve_log_path
from rubberduck.log.setup import set_console_level

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_FATAL = 2


@dataclass
class Session:
    """Everything a console command needs, resolved once per invocation."""
    home: Path
    store: EnvironmentStore
    config: MergedSettings
    manager: ProcessManager
    verbose: bool = False


#* --- Argument Parsing ---
def u16(value: str) -> int:
    """argparse type for 16-bit unsigned integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer")
    if not 0 <= number <= 65535:
        raise argparse.ArgumentTypeError(f"{number} is outside 0-65535")
    return number


def positive_u16(value: str) -> int:
    """argparse type for ports and worker counts, which must be 1-65535."""
    number = u16(value)
    if number == 0:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def add_bind_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Adds the host/port/workers options shared by start, raw-start and the entry script."""
    parser.add_argument("-H", "--host", help="Host on which the server will be exposed.")
    parser.add_argument("-p", "--port", type=positive_u16, help="Port on which the server will be exposed.")
    parser.add_argument("-w", "--workers", type=positive_u16, help="Number of server workers.")
    return parser


def _parse(parser: argparse.ArgumentParser, args: List[str]) -> Optional[argparse.Namespace]:
    """Parses args without letting argparse exit the console."""
    try:
        return parser.parse_args(args)
    except SystemExit:
        return None


def _run_guarded(action: Callable[[], None]) -> int:
    """Runs a command, mapping typed failures to exit codes."""
    try:
        action()
        return EXIT_OK
    except Advisory as e:
        log.warning(str(e))
        return EXIT_OK
    except PidPersistFailure as e:
        if e.is_fatal:
            log.critical(str(e))
            log.critical(str(e.cleanup_error))
            return EXIT_FATAL
        log.error(str(e))
        return EXIT_FAILURE
    except RubberDuckError as e:
        log.error(str(e))
        return EXIT_FAILURE


#* --- Dataserver ---
def _dataserver_start(args: List[str], session: Session) -> int:
    parser = add_bind_arguments(argparse.ArgumentParser(prog="dataserver start", description="Start the dataserver in the background."))
    parser.add_argument("--wait", action="store_true", help="Wait until the health check answers.")
    opts = _parse(parser, args)
    if opts is None:
        return EXIT_FAILURE

    def action() -> None:
        pid = session.manager.start(opts.host, opts.port, opts.workers, wait=opts.wait)
        print(f"Dataserver started with PID {pid}.")

    return _run_guarded(action)


def _dataserver_raw_start(args: List[str], session: Session) -> int:
    parser = add_bind_arguments(argparse.ArgumentParser(prog="dataserver raw-start", description="Run the dataserver in the foreground."))
    opts = _parse(parser, args)
    if opts is None:
        return EXIT_FAILURE
    return _run_guarded(lambda: session.manager.raw_start(opts.host, opts.port, opts.workers))


def _dataserver_stop(args: List[str], session: Session) -> int:
    outcome = []

    def action() -> None:
        outcome.append(session.manager.stop())

    code = _run_guarded(action)
    if not outcome:
        return code
    if outcome[0] == shutdown.KILLED:
        print("Dataserver stopped.")
    elif outcome[0] == shutdown.ALREADY_GONE:
        print("Dataserver process was already gone. PID record removed.")
    else:
        print(f"Dataserver did not exit within {session.config.STOP_TIMEOUT}s after being killed.")
        return EXIT_FAILURE
    return EXIT_OK


def display_status(args: List[str], session: Session) -> int:
    """Checks and displays the state of the tracked dataserver."""
    parser = argparse.ArgumentParser(prog="dataserver status", description="Show the dataserver status.")
    parser.add_argument("-H", "--host", help="Host to run the health check against.")
    parser.add_argument("-p", "--port", type=positive_u16, help="Port to run the health check against.")
    opts = _parse(parser, args)
    if opts is None:
        return EXIT_FAILURE

    info = {}
    code = _run_guarded(lambda: info.update(session.manager.status(opts.host, opts.port)))
    if not info:
        return code

    if info["pid"] is None:
        print("\nDataserver is STOPPED (No PID file found).\n")
        return EXIT_OK

    print("\n--- Dataserver Status ---")
    print(f"  PID file : {info['pid_file']}")
    print(f"  PID      : {info['pid']}")
    print(f"  Process  : {info['process'].upper()}")
    print(f"  Health   : {'OK' if info['healthy'] else 'NOT RESPONDING'}")
    if info["process"] == "stopped":
        print("\nWARNING: The process is gone but a stale PID file exists.")
        print("Run 'dataserver stop' to clean it up before starting again.")
    print("-" * 25 + "\n")
    return EXIT_OK


def handle_dataserver_command(args: List[str], session: Session) -> int:
    """
    Handles the 'dataserver' sub-commands.

    :param args: A list of string arguments following the 'dataserver' command.
    :return: The exit code of the sub-command.
    """
    sub_command = args[0].lower() if args else "status"
    sub_commands = {
        "start": _dataserver_start,
        "raw-start": _dataserver_raw_start,
        "stop": _dataserver_stop,
        "status": display_status,
    }
    if sub_command not in sub_commands:
        print(f"Unknown dataserver sub-command: '{sub_command}'. Type 'help' for available commands.")
        return EXIT_FAILURE
    return sub_commands[sub_command](args[1:], session)


#* --- Environment Store ---
def _env_get(args: List[str], session: Session) -> None:
    records = session.store.get_all()
    keys = [args[0]] if args else sorted(records)
    for key in keys:
        if key in records:
            print(f"{key}={records[key]}")
        else:
            log.warning(f"'{key}' is not set in the environment store.")


def _env_set(key: str, value: str, session: Session) -> None:
    session.store.set(key, value)
    print(f"Set '{key}' in {session.store.path}.")


def _env_remove(args: List[str], session: Session) -> None:
    if session.store.remove(args[0]):
        print(f"Removed '{args[0]}' from {session.store.path}.")
    else:
        log.warning(f"'{args[0]}' is not set in the environment store. Nothing removed.")


def handle_env_command(args: List[str], session: Session) -> int:
    """
    Handles the 'env' sub-commands for the persistent environment store.

    Changes take effect on the next invocation, when the store is applied to
    the process environment at startup.
    """
    sub_command = args[0].lower() if args else "get"
    rest = args[1:]

    if sub_command == "get":
        return _run_guarded(lambda: _env_get(rest, session))
    if sub_command == "set":
        if len(rest) < 1:
            print("Usage: env set <KEY> [VALUE]")
            return EXIT_FAILURE
        key, value = rest[0], " ".join(rest[1:])
        try:
            return _run_guarded(lambda: _env_set(key, value, session))
        except ValueError as e:
            log.error(str(e))
            return EXIT_FAILURE
    if sub_command in ("remove", "rm", "unset"):
        if len(rest) != 1:
            print("Usage: env remove <KEY>")
            return EXIT_FAILURE
        try:
            return _run_guarded(lambda: _env_remove(rest, session))
        except ValueError as e:
            log.error(str(e))
            return EXIT_FAILURE

    print(f"Unknown env sub-command: '{sub_command}'. Type 'help' for available commands.")
    return EXIT_FAILURE


#* --- Logs ---
def handle_logs_command(args: List[str], session: Session) -> int:
    """Handles 'logs path' and 'logs prune [DAYS]'."""
    sub_command = args[0].lower() if args else "path"

    if sub_command == "path":
        return _run_guarded(lambda: print(resolve_log_path(session.home)))

    if sub_command == "prune":
        keep_days = session.config.LOG_RETENTION_DAYS
        if len(args) > 1:
            try:
                keep_days = u16(args[1])
            except argparse.ArgumentTypeError as e:
                print(f"Invalid number of days: {e}")
                return EXIT_FAILURE
        removed = prune_logs(session.home, keep_days)
        print(f"Removed {len(removed)} log file(s); keeping the last {keep_days} day(s).")
        return EXIT_OK

    print(f"Unknown logs sub-command: '{sub_command}'. Type 'help' for available commands.")
    return EXIT_FAILURE


#* --- Console ---
def toggle_verbose_logging(session: Session) -> int:
    """Toggles verbose (DEBUG level) logging for the console handler."""
    session.verbose = not session.verbose
    found_handler = set_console_level(logging.DEBUG if session.verbose else logging.INFO)

    status = "ON" if session.verbose else "OFF"
    if found_handler:
        print(f"Verbose console logging is now {status}.")
        log.debug("Debug logging test: This message should only appear when verbose is ON.")
    else:
        print("Could not find console handler to modify level.")
    return EXIT_OK


def print_help() -> int:
    """Prints the main help text for the console."""
    print("\nAvailable commands:")
    print("  dataserver start [-H HOST] [-p PORT] [-w WORKERS] [--wait]")
    print("                             - Start the dataserver in the background.")
    print("  dataserver raw-start [-H HOST] [-p PORT] [-w WORKERS]")
    print("                             - Run the dataserver in the foreground.")
    print("  dataserver stop            - Kill the tracked dataserver.")
    print("  dataserver status          - Show the tracked dataserver and its health.")
    print("  env get [KEY]              - List variables in the environment store.")
    print("  env set KEY VALUE          - Persist a variable (applied on every startup).")
    print("  env remove KEY             - Remove a persisted variable.")
    print("  logs path                  - Print today's dataserver log file.")
    print("  logs prune [DAYS]          - Delete log files older than DAYS days.")
    print("  verbose                    - Toggle detailed DEBUG log output in the console.")
    print("  exit                       - Exit the management console.")
    print()
    return EXIT_OK
