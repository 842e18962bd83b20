"""Scoped command execution inside a virtual environment."""

import asyncio
import contextlib
import os
import signal
from typing import Dict, List, Mapping, Optional, Sequence

from venv_runner.config import (
    READ_CHUNK_SIZE,
    STREAM_LINE_LIMIT,
    STREAM_QUEUE_SIZE,
    command_timeout,
)
from venv_runner.errors import (
    CommandError,
    CommandTimeoutError,
    EnvironmentLookupError,
    ExecutionFailedError,
    StartError,
)
from venv_runner.logging import get_logger
from venv_runner.types import (
    BufferedExecution,
    CommandResult,
    CommandSpec,
    ExecutionMode,
    StreamingExecution,
)

logger = get_logger(__name__)


def build_command_env(
    spec: CommandSpec, base_env: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """Build the child environment for a command without touching os.environ."""

    env = dict(os.environ if base_env is None else base_env)

    path = env.get("PATH")
    if path is None:
        raise EnvironmentLookupError("PATH")

    bin_dir = str(spec.environment.bin_dir)
    entries = [p for p in path.split(os.pathsep) if p]
    if os.path.normpath(bin_dir) not in (os.path.normpath(p) for p in entries):
        env["PATH"] = os.pathsep.join([bin_dir, *entries])
        logger.debug({"event": "venv_path_prepended", "bin_dir": bin_dir})

    for entry in spec.extra_environment:
        key, _, value = entry.partition("=")
        env[key] = value

    return env


def log_failed_command(args: Sequence[str], result: CommandResult) -> None:
    """Log a failed command with whatever output it produced."""

    logger.error(
        {
            "event": "venv_cmd_failed",
            "args": list(args),
            "error": str(result.error),
            "exit_code": result.exit_code,
            "stdout": result.stdout,
            "stderr": result.stderr,
        }
    )


def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    # Children run in their own session, so the group id is the child's pid
    with contextlib.suppress(ProcessLookupError):
        os.killpg(process.pid, signal.SIGKILL)


async def _drain(stream: asyncio.StreamReader, buffer: bytearray) -> None:
    while chunk := await stream.read(READ_CHUNK_SIZE):
        buffer.extend(chunk)


async def _read_lines(stream: asyncio.StreamReader, queue: asyncio.Queue) -> None:
    while True:
        try:
            line = await stream.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            if e.partial:
                await queue.put(e.partial)
            break
        except asyncio.LimitOverrunError as e:
            # over-long line: forward it in limit-sized pieces
            line = await stream.read(e.consumed)
        await queue.put(line)
    await queue.put(None)


async def _forward_lines(queue: asyncio.Queue, mode: StreamingExecution, producers: int) -> None:
    finished = 0
    while finished < producers:
        line = await queue.get()
        if line is None:
            finished += 1
            continue
        mode.sink(line.decode(errors="replace").rstrip("\r\n"))


async def _wait_all(tasks: List[asyncio.Task], timeout: float) -> bool:
    """Wait for every task within the deadline; True when the deadline fired."""

    try:
        await asyncio.wait_for(asyncio.gather(*tasks), timeout)
    except asyncio.TimeoutError:
        return True
    return False


async def run_process(
    args: Sequence[str],
    *,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
    mode: Optional[ExecutionMode] = None,
) -> CommandResult:
    """Run a process to completion or deadline and classify the outcome.

    Errors are returned in the result, never raised. In buffered mode the
    output captured so far is kept even when the command fails or times out.
    In streaming mode each line goes to the mode's sink and the result's
    stdout/stderr stay empty.
    """

    mode = mode or BufferedExecution()
    timeout = command_timeout() if timeout is None else timeout
    args = [str(a) for a in args]
    binary = args[0]

    logger.debug(
        {
            "event": "venv_cmd_exec",
            "args": args,
            "cwd": cwd,
            "streaming": isinstance(mode, StreamingExecution),
            "timeout": timeout,
        }
    )

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=cwd,
            env=env,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
            limit=STREAM_LINE_LIMIT,
        )
    except OSError as e:
        result = CommandResult(error=StartError(binary, cause=e))
        log_failed_command(args, result)
        return result

    stdout, stderr = bytearray(), bytearray()
    if isinstance(mode, StreamingExecution):
        queue: asyncio.Queue = asyncio.Queue(maxsize=STREAM_QUEUE_SIZE)
        tasks = [
            asyncio.create_task(_read_lines(process.stdout, queue)),
            asyncio.create_task(_read_lines(process.stderr, queue)),
            asyncio.create_task(_forward_lines(queue, mode, producers=2)),
        ]
    else:
        tasks = [
            asyncio.create_task(_drain(process.stdout, stdout)),
            asyncio.create_task(_drain(process.stderr, stderr)),
        ]
    tasks.append(asyncio.create_task(process.wait()))

    try:
        timed_out = await _wait_all(tasks, timeout)
    except BaseException:
        # cancelled by the caller or a failing sink: don't leave the child behind
        _kill_process_group(process)
        for task in tasks:
            task.cancel()
        # reap the killed child before propagating
        with contextlib.suppress(BaseException):
            await asyncio.shield(process.wait())
        raise

    if timed_out:
        _kill_process_group(process)
        await process.wait()

    returncode = process.returncode
    error: Optional[CommandError] = None
    exit_code = -1
    if timed_out:
        error = CommandTimeoutError(binary, timeout)
    elif returncode != 0:
        exit_code = returncode if returncode > 0 else -1
        error = ExecutionFailedError(binary, exit_code)
    else:
        exit_code = 0

    result = CommandResult(
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
        error=error,
        exit_code=exit_code,
    )

    if error is not None:
        log_failed_command(args, result)
    else:
        logger.debug(
            {"event": "venv_cmd_complete", "args": args, "returncode": returncode}
        )

    return result


async def run_command(spec: CommandSpec, timeout: Optional[float] = None) -> CommandResult:
    """Run a binary from the environment's bin directory."""

    try:
        env = build_command_env(spec)
    except EnvironmentLookupError as e:
        logger.error({"event": "venv_env_lookup_failed", "error": str(e)})
        return CommandResult(error=e)

    return await run_process(
        [str(spec.binary_path), *spec.arguments],
        env=env,
        cwd=spec.working_directory or None,
        timeout=timeout,
        mode=spec.mode,
    )
