import time
import logging
import requests

log = logging.getLogger(__name__)


def health_url(host: str, port: int, path: str = "/") -> str:
    """Returns the health-check URL, mapping wildcard bind addresses to loopback."""
    if host in ("0.0.0.0", "", "::"):
        host = "127.0.0.1"
    return f"http://{host}:{port}{path}"


def check_health(host: str, port: int, path: str = "/", timeout: float = 2.0) -> bool:
    """Returns True if the dataserver answers its health check with a 2xx."""
    url = health_url(host, port, path)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return True
    except requests.exceptions.RequestException as e:
        log.debug(f"Health check against '{url}' failed: {e}")
        return False


def wait_for_dataserver(host: str, port: int, timeout: float, interval: float = 0.5, path: str = "/") -> bool:
    """
    Waits for the dataserver to answer its health check.

    :return: True if the server is up, False if it times out.
    """
    log.info(f"Waiting for dataserver at {health_url(host, port, path)}...")
    start_time = time.monotonic()
    while time.monotonic() - start_time < timeout:
        if check_health(host, port, path):
            log.info("Dataserver is up and answering health checks.")
            return True
        time.sleep(interval)
    log.warning(f"Dataserver did not answer its health check within {timeout} seconds.")
    return False
