import logging
import setproctitle
from hypercorn.config import Config
from hypercorn.run import run
from starlette.routing import Route
from starlette.requests import Request
from starlette.middleware import Middleware
from starlette.applications import Starlette
from starlette.responses import PlainTextResponse

from rubberduck import settings
from rubberduck.web.middleware import SecurityHeadersMiddleware

log = logging.getLogger("dataserver")

APPLICATION_PATH = "rubberduck.web.server:app"


async def health_check(request: Request) -> PlainTextResponse:
    """Answers the supervisor's (and any load balancer's) health check."""
    return PlainTextResponse(settings.HEALTH_CHECK_MESSAGE)


def create_app() -> Starlette:
    routes = [
        Route(settings.HEALTH_CHECK_PATH, endpoint=health_check, methods=["GET", "HEAD"]),
    ]
    middleware = [
        Middleware(SecurityHeadersMiddleware),
    ]
    return Starlette(debug=False, routes=routes, middleware=middleware)


# The application object loaded by Hypercorn workers
app = create_app()


def build_config(host: str, port: int, workers: int) -> Config:
    """
    Builds the Hypercorn configuration for the dataserver.

    Access and error logs go to stdout/stderr, which the supervisor has
    redirected to the day's log file when running detached.
    """
    config = Config()
    config.application_path = APPLICATION_PATH
    config.bind = [f"{host}:{port}"]
    config.workers = workers
    config.accesslog = "-"
    config.errorlog = "-"
    config.loglevel = "INFO"
    return config


def serve(host: str, port: int, workers: int) -> int:
    """
    Runs the dataserver in the current process until it exits.

    :return: Hypercorn's exit code.
    """
    setproctitle.setproctitle(settings.DATASERVER_PROCESS_TITLE)
    config = build_config(host, port, workers)
    log.info(f"Dataserver listening on {host}:{port} with {workers} worker(s).")
    return run(config) or 0
