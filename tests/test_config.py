"""Tests for runner configuration."""
from pathlib import Path

import pytest

from venv_runner.config import DEFAULT_COMMAND_TIMEOUT, command_timeout, environments_dir


def test_command_timeout_default(monkeypatch):
    monkeypatch.delenv("VENV_RUNNER_COMMAND_TIMEOUT", raising=False)

    assert command_timeout() == DEFAULT_COMMAND_TIMEOUT == 7200


def test_command_timeout_override(monkeypatch):
    monkeypatch.setenv("VENV_RUNNER_COMMAND_TIMEOUT", "90")

    assert command_timeout() == 90.0


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_command_timeout_invalid(monkeypatch, value):
    monkeypatch.setenv("VENV_RUNNER_COMMAND_TIMEOUT", value)

    with pytest.raises(ValueError):
        command_timeout()


def test_environments_dir_override(monkeypatch, tmp_path):
    monkeypatch.setenv("VENV_RUNNER_HOME", str(tmp_path))

    assert environments_dir() == tmp_path


def test_environments_dir_default(monkeypatch):
    monkeypatch.delenv("VENV_RUNNER_HOME", raising=False)

    path = environments_dir()

    assert path.name == "envs"
    assert "venv-runner" in path.parts
