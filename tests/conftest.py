import stat
import textwrap
from pathlib import Path

import pytest

from venv_runner.types import EnvironmentDescriptor


def _write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + textwrap.dedent(body).lstrip("\n"))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def write_script():
    """Write an executable shell script"""
    return _write_script


@pytest.fixture
def venv(tmp_path) -> EnvironmentDescriptor:
    """An environment whose bin directory exists but holds nothing yet"""
    root = tmp_path / "venv"
    (root / "bin").mkdir(parents=True)
    return EnvironmentDescriptor(root_path=root, interpreter_path="python3")


@pytest.fixture
def add_binary(venv):
    """Install a fake executable into the environment's bin directory"""
    def _add(name: str, body: str) -> Path:
        return _write_script(venv.bin_dir / name, body)
    return _add


@pytest.fixture
def call_log(tmp_path) -> Path:
    """File fake executables append their arguments to"""
    return tmp_path / "calls.log"


@pytest.fixture
def fake_interpreter(tmp_path, call_log, write_script):
    """Build a fake interpreter reporting the given version.

    `-m venv <path>` creates `<path>/bin` unless `venv_exit` is non-zero.
    """
    def _make(version_line: str, stream: str = "stdout", venv_exit: int = 0) -> str:
        redirect = " >&2" if stream == "stderr" else ""
        path = write_script(
            tmp_path / "interpreters" / "python",
            f"""
            echo "python $@" >> "{call_log}"
            case "$1" in
              --version) echo "{version_line}"{redirect} ;;
              -m)
                if [ {venv_exit} -ne 0 ]; then
                  echo "venv failed" >&2
                  exit {venv_exit}
                fi
                mkdir -p "$3/bin"
                ;;
            esac
            """,
        )
        return str(path)
    return _make
