"""Tests for the error taxonomy."""
import logging

import pytest
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST

from venv_runner.errors import (
    CommandError,
    CommandTimeoutError,
    CreationFailedError,
    EnvironmentLookupError,
    ExecutionFailedError,
    InterpreterNotFoundError,
    ProvisioningError,
    StartError,
    UpdateError,
    VenvRunnerError,
    VersionDetectionError,
    VersionParseError,
    log_error,
)


@pytest.mark.parametrize(
    "error,base",
    [
        (VersionDetectionError("python"), ProvisioningError),
        (VersionParseError("python", "junk"), ProvisioningError),
        (InterpreterNotFoundError("virtualenv"), ProvisioningError),
        (CreationFailedError("/env", "module"), ProvisioningError),
        (UpdateError("/env", "requirements.txt"), ProvisioningError),
        (EnvironmentLookupError("PATH"), CommandError),
        (StartError("/env/bin/pip"), CommandError),
        (CommandTimeoutError("/env/bin/pip", 1.0), CommandError),
        (ExecutionFailedError("/env/bin/pip", 2), CommandError),
    ],
)
def test_error_hierarchy(error, base):
    assert isinstance(error, base)
    assert isinstance(error, VenvRunnerError)


def test_cause_is_chained():
    cause = FileNotFoundError("missing")
    error = StartError("/env/bin/pip", cause=cause)

    assert error.__cause__ is cause
    assert error.details == {"binary": "/env/bin/pip"}
    assert error.code == INVALID_REQUEST


def test_to_error_data():
    data = ExecutionFailedError("/env/bin/pip", 2).to_error_data()

    assert data.code == INTERNAL_ERROR
    assert "exit code 2" in data.message
    assert data.data == {"binary": "/env/bin/pip", "exit_code": 2}


def test_version_detection_error_code():
    assert VersionDetectionError("python").code == INVALID_PARAMS


def test_environment_lookup_message():
    assert str(EnvironmentLookupError("PATH")) == "Unable to lookup the $PATH env variable"


def test_log_error(caplog):
    error = UpdateError("/env", "requirements.txt", cause=ExecutionFailedError("pip", 1))

    with caplog.at_level(logging.ERROR):
        log_error(error, context={"step": "update"})

    record = caplog.records[-1]
    assert record.data["error_type"] == "UpdateError"
    assert record.data["context"] == {"step": "update"}
    assert record.data["details"]["requirements_file"] == "requirements.txt"
    assert "ExecutionFailedError" in record.data["cause"]
