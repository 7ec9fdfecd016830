"""
Statement normalizer - turns query input into a canonical Statement.

Accepted input:
- query text (str)                  -> SimpleStatement
- PreparedStatement + values        -> BoundStatement with encoded values
- an already built Statement        -> returned unchanged
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.codec import Codec, default_codec
from ..core.errors import ConfigurationError
from ..core.statement import BoundStatement, PreparedStatement, SimpleStatement, Statement


def bind(
    prepared: PreparedStatement,
    values: Optional[Sequence[Any]] = None,
    codec: Optional[Codec] = None,
) -> BoundStatement:
    """
    Bind values to a prepared statement.

    Args:
        prepared: Statement returned by ``prepare``
        values: Positional bind values
        codec: Codec used to encode each value (default codec if omitted)

    Raises:
        EncodingError: If a value has no supported encoding
    """
    codec = codec or default_codec
    encoded = codec.encode_all(values or ())
    return BoundStatement(prepared, encoded)


def to_statement(
    query: Any,
    values: Optional[Sequence[Any]] = None,
    codec: Optional[Codec] = None,
) -> Statement:
    """
    Normalize ``query`` into a Statement.

    ``values`` is only used when ``query`` is a PreparedStatement.

    Raises:
        EncodingError: If a bind value cannot be encoded
        ConfigurationError: If ``query`` is none of the accepted shapes
    """
    if isinstance(query, Statement):
        return query
    if isinstance(query, PreparedStatement):
        return bind(query, values, codec=codec)
    if isinstance(query, str):
        return SimpleStatement(query)
    raise ConfigurationError(
        f"Cannot build a statement from {type(query).__name__}; "
        "expected query text, a PreparedStatement or a Statement"
    )
