"""
Value codec.

Encodes Python values into driver bind values and decodes driver result
sets into lists of ``{column: value}`` dicts.

Usage:
    codec = Codec()
    codec.register_encoder(Money, lambda m: str(m.amount))
    codec.encode(Money(10))      # -> "10"
    codec.decode(result_set)     # -> [{"id": 1, "name": "a"}, ...]
"""

from __future__ import annotations

import ipaddress
import uuid
from collections.abc import Mapping, Set
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable, Iterable

from .errors import EncodingError

ResultRow = dict[str, Any]
Encoder = Callable[[Any], Any]


def _identity(value: Any) -> Any:
    return value


_SCALAR_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    Decimal,
    str,
    bytes,
    uuid.UUID,
    datetime,
    date,
    time,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
)


class Codec:
    """
    Encoder registry plus result-set decoding.

    Encoders are looked up along the value's MRO, so an encoder registered
    for a base class applies to its subclasses.
    """

    def __init__(self):
        self._encoders: dict[type, Encoder] = {t: _identity for t in _SCALAR_TYPES}
        self._encoders[bytearray] = bytes
        self._encoders[list] = self._encode_sequence
        self._encoders[tuple] = lambda v: tuple(self._encode_sequence(v))
        self._encoders[set] = lambda v: {self.encode(item) for item in v}
        self._encoders[frozenset] = lambda v: frozenset(self.encode(item) for item in v)
        self._encoders[dict] = lambda v: {self.encode(k): self.encode(i) for k, i in v.items()}

    def register_encoder(self, type_: type, encoder: Encoder) -> None:
        """Register (or replace) the encoder used for ``type_``."""
        self._encoders[type_] = encoder

    def encode(self, value: Any) -> Any:
        """
        Encode a single bind value.

        Raises:
            EncodingError: If no encoder is registered for the value's type
        """
        if value is None:
            return None
        for klass in type(value).__mro__:
            encoder = self._encoders.get(klass)
            if encoder is not None:
                return encoder(value)
        raise EncodingError(value)

    def encode_all(self, values: Iterable[Any]) -> list[Any]:
        return [self.encode(value) for value in values]

    def _encode_sequence(self, values: Iterable[Any]) -> list[Any]:
        return [self.encode(value) for value in values]

    # === Decoding ===

    def decode(self, raw: Any) -> list[ResultRow]:
        """
        Turn a driver result into a list of row dicts, columns in order.

        Accepts None (no rows), iterables of mappings, named tuples,
        SQLAlchemy rows, or plain sequences paired with ``raw.column_names``.
        """
        if raw is None:
            return []
        column_names = getattr(raw, "column_names", None)
        return [self.decode_row(row, column_names) for row in raw]

    def decode_row(self, row: Any, column_names: Any = None) -> ResultRow:
        if isinstance(row, Mapping):
            items = row.items()
        elif hasattr(row, "_asdict"):
            items = row._asdict().items()
        elif hasattr(row, "_mapping"):
            items = row._mapping.items()
        elif column_names:
            items = zip(column_names, row)
        else:
            raise TypeError(f"Cannot decode row of type {type(row).__name__} without column names")
        return {str(name): self.decode_value(value) for name, value in items}

    def decode_value(self, value: Any) -> Any:
        """Convert driver collection types into plain dicts and sets."""
        if isinstance(value, (str, bytes)):
            return value
        if isinstance(value, Mapping):
            return {self.decode_value(k): self.decode_value(v) for k, v in value.items()}
        if isinstance(value, Set) and not isinstance(value, (set, frozenset)):
            return {self.decode_value(item) for item in value}
        if isinstance(value, list):
            return [self.decode_value(item) for item in value]
        return value


default_codec = Codec()


def encode(value: Any) -> Any:
    """Encode with the shared default codec."""
    return default_codec.encode(value)


def decode(raw: Any) -> list[ResultRow]:
    """Decode with the shared default codec."""
    return default_codec.decode(raw)
