"""
Core module - statements, consistency levels, codec and errors.
"""

from __future__ import annotations

from .codec import Codec, ResultRow, decode, default_codec, encode
from .consistency import ConsistencyLevel
from .errors import (
    CallbackError,
    ConfigurationError,
    CqlExecError,
    EncodingError,
    ExecutionError,
)
from .statement import BoundStatement, PreparedStatement, SimpleStatement, Statement

__all__ = [
    # Errors
    "CqlExecError",
    "ConfigurationError",
    "EncodingError",
    "ExecutionError",
    "CallbackError",
    # Statements
    "Statement",
    "SimpleStatement",
    "BoundStatement",
    "PreparedStatement",
    "ConsistencyLevel",
    # Codec
    "Codec",
    "ResultRow",
    "default_codec",
    "encode",
    "decode",
]
