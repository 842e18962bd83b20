"""Virtual environment provisioning and scoped command execution."""

from venv_runner.types import (
    BufferedExecution,
    CommandResult,
    CommandSpec,
    CreationStrategy,
    EnvironmentDescriptor,
    PythonVersion,
    StreamingExecution,
)
from venv_runner.commands import build_command_env, run_command, run_process
from venv_runner.environments import (
    create_environment,
    detect_python_version,
    ensure_environment,
    select_strategy,
    update_environment,
)
from venv_runner.errors import (
    VenvRunnerError,
    ProvisioningError,
    VersionDetectionError,
    VersionParseError,
    InterpreterNotFoundError,
    CreationFailedError,
    UpdateError,
    CommandError,
    EnvironmentLookupError,
    StartError,
    CommandTimeoutError,
    ExecutionFailedError,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "BufferedExecution",
    "CommandResult",
    "CommandSpec",
    "CreationStrategy",
    "EnvironmentDescriptor",
    "PythonVersion",
    "StreamingExecution",

    # Command execution
    "build_command_env",
    "run_command",
    "run_process",

    # Provisioning
    "create_environment",
    "detect_python_version",
    "ensure_environment",
    "select_strategy",
    "update_environment",

    # Error types
    "VenvRunnerError",
    "ProvisioningError",
    "VersionDetectionError",
    "VersionParseError",
    "InterpreterNotFoundError",
    "CreationFailedError",
    "UpdateError",
    "CommandError",
    "EnvironmentLookupError",
    "StartError",
    "CommandTimeoutError",
    "ExecutionFailedError",
]
