"""Error handling for virtual environment provisioning and command runs."""
import logging
from typing import Any, Dict, Optional

from mcp.types import ErrorData, INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST

logger = logging.getLogger(__name__)


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger(__name__)

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error)
    }
    if context:
        error_info["context"] = context
    if isinstance(error, VenvRunnerError):
        error_data = error.to_error_data()
        error_info["code"] = error_data.code
        error_info["details"] = error_data.data
    if error.__cause__ is not None:
        error_info["cause"] = repr(error.__cause__)

    logger.error("Venv runner error occurred", extra={"data": error_info})


class VenvRunnerError(Exception):
    """Base error class for venv runner."""
    def __init__(
        self,
        message: str,
        code: int = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}
        if cause is not None:
            self.__cause__ = cause

    def to_error_data(self) -> ErrorData:
        """Convert to ErrorData format."""
        return ErrorData(
            code=self.code,
            message=str(self),
            data=self.details
        )


class ProvisioningError(VenvRunnerError):
    """Failure while detecting, creating or updating an environment."""


class VersionDetectionError(ProvisioningError):
    """Interpreter could not be invoked to report its version."""
    def __init__(self, interpreter: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"Unable to determine Python version of {interpreter}",
            code=INVALID_PARAMS,
            details={"interpreter": interpreter},
            cause=cause
        )


class VersionParseError(ProvisioningError):
    """Interpreter version output did not match the expected pattern."""
    def __init__(self, interpreter: str, output: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"Unable to parse Python version from {output.strip()!r}",
            code=INTERNAL_ERROR,
            details={"interpreter": interpreter, "output": output},
            cause=cause
        )


class InterpreterNotFoundError(ProvisioningError):
    """Legacy environment creation tool is not on the search path."""
    def __init__(self, tool: str):
        super().__init__(
            f"{tool} not found in path",
            code=INVALID_REQUEST,
            details={"tool": tool}
        )


class CreationFailedError(ProvisioningError):
    """Environment creation process failed."""
    def __init__(self, path: str, strategy: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"Unable to create virtual environment at {path}",
            code=INTERNAL_ERROR,
            details={"path": path, "strategy": strategy},
            cause=cause
        )


class UpdateError(ProvisioningError):
    """Installing requirements into an environment failed."""
    def __init__(self, path: str, requirements_file: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"Unable to update virtual environment at {path}",
            code=INTERNAL_ERROR,
            details={"path": path, "requirements_file": requirements_file},
            cause=cause
        )


class CommandError(VenvRunnerError):
    """Failure of a single command invocation."""


class EnvironmentLookupError(CommandError):
    """A required variable is missing from the process environment."""
    def __init__(self, variable: str):
        super().__init__(
            f"Unable to lookup the ${variable} env variable",
            code=INTERNAL_ERROR,
            details={"variable": variable}
        )


class StartError(CommandError):
    """Process could not be started."""
    def __init__(self, binary: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"Unable to start command {binary}",
            code=INVALID_REQUEST,
            details={"binary": binary},
            cause=cause
        )


class CommandTimeoutError(CommandError):
    """Process exceeded its deadline and was killed."""
    def __init__(self, binary: str, timeout: float):
        super().__init__(
            f"Execution of {binary} timed out after {timeout}s",
            code=INTERNAL_ERROR,
            details={"binary": binary, "timeout": timeout}
        )


class ExecutionFailedError(CommandError):
    """Process exited with a non-zero status."""
    def __init__(self, binary: str, exit_code: int):
        super().__init__(
            f"Unable to complete command {binary} (exit code {exit_code})",
            code=INTERNAL_ERROR,
            details={"binary": binary, "exit_code": exit_code}
        )
        self.exit_code = exit_code
