"""Tests for the error model."""

import pytest
from pydantic import ValidationError

from boldsql.models import Error, ErrorCode


def test_str_with_engine_code():
    error = Error(code=ErrorCode.BIND_FAILED, message="column index out of range", engine_code=25)
    assert str(error) == "bind_failed: column index out of range (engine code 25)"


def test_str_without_engine_code():
    error = Error(code=ErrorCode.STEP_FAILED, message="boom")
    assert str(error) == "step_failed: boom"


def test_code_from_string():
    error = Error(code="prepare_failed", message="x")
    assert error.code is ErrorCode.PREPARE_FAILED


def test_frozen():
    error = Error(code=ErrorCode.STEP_FAILED, message="boom")
    with pytest.raises(ValidationError):
        error.message = "other"


def test_equality():
    assert Error(code=ErrorCode.STEP_FAILED, message="a", engine_code=1) == Error(
        code=ErrorCode.STEP_FAILED, message="a", engine_code=1
    )
