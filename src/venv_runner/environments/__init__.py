"""Virtual environment provisioning."""

from venv_runner.environments.provisioner import (
    create_environment,
    detect_python_version,
    ensure_environment,
    select_strategy,
    update_environment,
)

__all__ = [
    "create_environment",
    "detect_python_version",
    "ensure_environment",
    "select_strategy",
    "update_environment",
]
