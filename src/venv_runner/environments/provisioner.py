"""Virtual environment detection, creation and updates."""

import re
import shutil
from typing import Optional

from venv_runner.commands.runner import run_command, run_process
from venv_runner.config import DEFAULT_INSTALLER, LEGACY_TOOL, VENV_MODULE_MIN_VERSION
from venv_runner.errors import (
    CreationFailedError,
    InterpreterNotFoundError,
    UpdateError,
    VersionDetectionError,
    VersionParseError,
    log_error,
)
from venv_runner.logging import get_logger
from venv_runner.types import (
    CommandResult,
    CommandSpec,
    CreationStrategy,
    EnvironmentDescriptor,
    PythonVersion,
)

logger = get_logger(__name__)

VERSION_PATTERN = re.compile(r"(?P<name>\S+) (?P<major>\w+)\.(?P<minor>\w+)(?:\.\w+)?")


def parse_python_version(interpreter: str, output: str) -> PythonVersion:
    """Parse `<name> <major>.<minor>[.<patch>]` interpreter version output."""

    match = VERSION_PATTERN.search(output)
    if not match:
        raise VersionParseError(interpreter, output)

    try:
        return PythonVersion(int(match["major"]), int(match["minor"]))
    except ValueError as e:
        raise VersionParseError(interpreter, output, cause=e)


async def detect_python_version(interpreter: str) -> PythonVersion:
    """Ask an interpreter for its (major, minor) version."""

    result = await run_process([interpreter, "--version"])
    if result.error:
        error = VersionDetectionError(interpreter, cause=result.error)
        log_error(error, {"operation": "detect_python_version"})
        raise error

    try:
        # Python 2 reports its version on stderr
        version = parse_python_version(interpreter, result.stdout or result.stderr)
    except VersionParseError as e:
        log_error(e, {"operation": "detect_python_version"})
        raise

    logger.debug(
        {"event": "python_version_detected", "interpreter": interpreter, "version": str(version)}
    )
    return version


def select_strategy(version: PythonVersion) -> CreationStrategy:
    """The venv module ships with Python 3.3 and later."""

    if version >= VENV_MODULE_MIN_VERSION:
        return CreationStrategy.MODULE
    return CreationStrategy.LEGACY


async def _create_via_module(descriptor: EnvironmentDescriptor) -> CommandResult:
    logger.debug({"event": "creating_venv_via_module", "path": str(descriptor.root_path)})
    return await run_process(
        [descriptor.interpreter_path, "-m", "venv", str(descriptor.root_path)]
    )


async def _create_via_legacy(descriptor: EnvironmentDescriptor) -> CommandResult:
    tool = shutil.which(LEGACY_TOOL)
    if not tool:
        error = InterpreterNotFoundError(LEGACY_TOOL)
        log_error(error, {"operation": "create_environment", "path": str(descriptor.root_path)})
        raise error

    logger.debug(
        {"event": "creating_venv_via_legacy", "path": str(descriptor.root_path), "tool": tool}
    )
    return await run_process(
        [tool, "--python", descriptor.interpreter_path, str(descriptor.root_path)]
    )


async def create_environment(descriptor: EnvironmentDescriptor) -> CreationStrategy:
    """Create a virtual environment with the strategy the interpreter supports."""

    version = await detect_python_version(descriptor.interpreter_path)
    strategy = select_strategy(version)

    if strategy == CreationStrategy.MODULE:
        result = await _create_via_module(descriptor)
    else:
        result = await _create_via_legacy(descriptor)

    if result.error:
        error = CreationFailedError(
            str(descriptor.root_path), strategy.name.lower(), cause=result.error
        )
        log_error(error, {"operation": "create_environment", "python": str(version)})
        raise error

    logger.info(
        {
            "event": "environment_created",
            "path": str(descriptor.root_path),
            "python": str(version),
            "strategy": strategy.name.lower(),
        }
    )
    return strategy


async def ensure_environment(descriptor: EnvironmentDescriptor) -> Optional[CreationStrategy]:
    """Create the environment unless its root directory already exists.

    Returns the strategy used, or None when nothing had to be created.
    """

    if descriptor.root_path.exists():
        logger.debug({"event": "environment_exists", "path": str(descriptor.root_path)})
        return None

    return await create_environment(descriptor)


async def update_environment(
    descriptor: EnvironmentDescriptor,
    requirements_file: str,
    installer: str = DEFAULT_INSTALLER,
) -> CommandResult:
    """Install a requirements file into the environment."""

    spec = CommandSpec(
        environment=descriptor,
        binary_name=installer,
        arguments=("install", "-r", str(requirements_file)),
    )
    result = await run_command(spec)
    if result.error:
        error = UpdateError(str(descriptor.root_path), str(requirements_file), cause=result.error)
        log_error(error, {"operation": "update_environment", "installer": installer})
        raise error

    logger.info(
        {
            "event": "environment_updated",
            "path": str(descriptor.root_path),
            "requirements": str(requirements_file),
        }
    )
    return result
