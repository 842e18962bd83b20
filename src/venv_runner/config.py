"""Runner defaults and their environment overrides."""

import os
from pathlib import Path

import appdirs

APP_NAME = "venv-runner"

DEFAULT_COMMAND_TIMEOUT = 2 * 60 * 60  # 2 hours
COMMAND_TIMEOUT_ENV = "VENV_RUNNER_COMMAND_TIMEOUT"
ENVIRONMENTS_DIR_ENV = "VENV_RUNNER_HOME"

DEFAULT_INTERPRETER = "python3"
DEFAULT_INSTALLER = "pip"
LEGACY_TOOL = "virtualenv"
VENV_MODULE_MIN_VERSION = (3, 3)

READ_CHUNK_SIZE = 64 * 1024
STREAM_LINE_LIMIT = 1024 * 1024
STREAM_QUEUE_SIZE = 256


def command_timeout() -> float:
    """Deadline in seconds applied to a whole command invocation."""
    raw = os.environ.get(COMMAND_TIMEOUT_ENV)
    if not raw:
        return float(DEFAULT_COMMAND_TIMEOUT)

    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"{COMMAND_TIMEOUT_ENV} must be a number of seconds, got {raw!r}")

    if timeout <= 0:
        raise ValueError(f"{COMMAND_TIMEOUT_ENV} must be positive, got {raw!r}")
    return timeout


def environments_dir() -> Path:
    """Directory holding environments created by name."""
    override = os.environ.get(ENVIRONMENTS_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path(appdirs.user_cache_dir(APP_NAME)) / "envs"
