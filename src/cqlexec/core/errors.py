"""
Custom exceptions for cqlexec.
"""

from __future__ import annotations

from typing import Any, Optional


class CqlExecError(Exception):
    """Base exception for all cqlexec errors."""
    pass


class ConfigurationError(CqlExecError):
    """Raised when a call cannot be dispatched with the resolved configuration."""
    pass


class EncodingError(CqlExecError):
    """Raised when a bind value has no supported encoding."""

    def __init__(self, value: Any, message: Optional[str] = None):
        self.value = value
        super().__init__(message or f"No encoder for value of type {type(value).__name__}: {value!r}")


class ExecutionError(CqlExecError):
    """Raised (or delivered) when the driver reports a failed execution."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(f"Execution failed: {message}")


class CallbackError(CqlExecError):
    """Wraps an exception raised by a caller-supplied success/error callback."""

    def __init__(self, callback_name: str, cause: BaseException):
        self.callback_name = callback_name
        self.cause = cause
        super().__init__(f"{callback_name} callback raised {type(cause).__name__}: {cause}")
