"""
This module contains the default configuration settings for the Rubber Duck CLI.
It defines file names inside the home directory, dataserver defaults, supervisor
timeouts, and log retention. It is used throughout the application to ensure
consistent settings and paths.

Settings listed in MODIFIABLE_SETTINGS can be overridden per machine with an
`RD_<NAME>` variable, usually persisted with `rd env set`.
"""

import os
import sys
import pathlib
import multiprocessing
from dotenv import load_dotenv

# Load credentials for the dataserver layer from a project .env file, if any.
load_dotenv(override=False)

#* --- Core Paths ---
BASE_DIR = pathlib.Path(__file__).resolve().parent.parent  # Project Root

#* --- Home Directory ---
HOME_ENV_VAR = "RD_HOME"
HOME_DIR_NAME = ".rd"

#* --- Files Inside the Home Directory ---
ENV_FILE_NAME = "base.env"
PID_FILE_NAME = "server.pid"
LOGS_DIR_NAME = "logs"
LOG_FILE_TEMPLATE = "output-{day_bucket}.log"
SECONDS_PER_DAY = 86400

#* --- Settings Overrides ---
SETTINGS_ENV_PREFIX = "RD_"

#* --- Python Executable Configuration ---
# Interpreter used to run the detached dataserver child.
PYTHON_EXECUTABLE = os.getenv("PYTHON_EXECUTABLE", sys.executable)

#* --- Dataserver Settings ---
DATASERVER_HOST = "0.0.0.0"
DATASERVER_PORT = 5555
DATASERVER_WORKERS = min(multiprocessing.cpu_count() * 2, 16)
DATASERVER_PROCESS_TITLE = "RubberDuck - Dataserver"
HEALTH_CHECK_PATH = "/"
HEALTH_CHECK_MESSAGE = "Server is alive."

#* --- Supervisor Settings ---
STOP_TIMEOUT = 10.0          # seconds to wait for a killed process to disappear
HEALTH_CHECK_TIMEOUT = 15.0  # seconds `start --wait` polls the health endpoint
HEALTH_CHECK_INTERVAL = 0.5

#* --- Log Maintenance ---
LOG_RETENTION_DAYS = 30

#* --- MODIFIABLE SETTINGS (Changeable per machine via RD_<NAME>) ---
MODIFIABLE_SETTINGS = {
    "DATASERVER_HOST", "DATASERVER_PORT", "DATASERVER_WORKERS",
    "STOP_TIMEOUT", "HEALTH_CHECK_TIMEOUT",
    "LOG_RETENTION_DAYS",
}
