"""Core type definitions"""

import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, NamedTuple, Optional, Sequence, Union

from venv_runner.config import DEFAULT_INTERPRETER, environments_dir
from venv_runner.errors import CommandError

CreationStrategy = Enum('CreationStrategy', ['MODULE', 'LEGACY'])


class PythonVersion(NamedTuple):
    major: int
    minor: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


@dataclass(frozen=True)
class EnvironmentDescriptor:
    """One virtual environment on disk and the interpreter that owns it"""
    root_path: Path
    interpreter_path: str = DEFAULT_INTERPRETER

    def __post_init__(self):
        object.__setattr__(self, 'root_path', Path(self.root_path))

    @classmethod
    def for_name(cls, name: str, interpreter_path: str = DEFAULT_INTERPRETER) -> "EnvironmentDescriptor":
        """Descriptor for an environment kept in the shared environments directory."""
        if not name or Path(name).name != name:
            raise ValueError(f"Invalid environment name: {name!r}")
        return cls(root_path=environments_dir() / name, interpreter_path=interpreter_path)

    @property
    def bin_dir(self) -> Path:
        return self.root_path.absolute() / "bin"

    def binary_path(self, binary_name: str) -> Path:
        return self.bin_dir / binary_name


def print_line(line: str) -> None:
    print(line, file=sys.stdout, flush=True)


@dataclass(frozen=True)
class BufferedExecution:
    """Capture stdout/stderr in memory and return them with the result"""


@dataclass(frozen=True)
class StreamingExecution:
    """Forward output line by line as it is produced; nothing is captured"""
    sink: Callable[[str], None] = print_line


ExecutionMode = Union[BufferedExecution, StreamingExecution]


@dataclass(frozen=True)
class CommandSpec:
    """A single invocation of a binary from an environment's bin directory"""
    environment: EnvironmentDescriptor
    binary_name: str
    arguments: Sequence[str] = ()
    working_directory: Optional[str] = None
    extra_environment: Sequence[str] = ()
    mode: ExecutionMode = field(default_factory=BufferedExecution)

    def __post_init__(self):
        if not self.binary_name:
            raise ValueError("binary_name cannot be empty")

        object.__setattr__(self, 'arguments', tuple(str(a) for a in self.arguments))
        object.__setattr__(self, 'extra_environment', tuple(self.extra_environment))

        for entry in self.extra_environment:
            key, sep, _ = entry.partition("=")
            if not sep or not key:
                raise ValueError(f"Environment override must be KEY=VALUE, got {entry!r}")

    @property
    def stream_output(self) -> bool:
        return isinstance(self.mode, StreamingExecution)

    @property
    def binary_path(self) -> Path:
        return self.environment.binary_path(self.binary_name)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command; exit_code -1 means the process never completed"""
    stdout: str = ""
    stderr: str = ""
    error: Optional[CommandError] = None
    exit_code: int = -1

    @property
    def ok(self) -> bool:
        return self.error is None
