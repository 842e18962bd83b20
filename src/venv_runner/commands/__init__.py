"""Command execution inside virtual environments."""

from venv_runner.commands.runner import build_command_env, run_command, run_process

__all__ = ["build_command_env", "run_command", "run_process"]
