"""
Statement types.

A statement is the canonical unit handed to a session: either raw query
text or a prepared template with bound values, plus per-statement options.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from .consistency import ConsistencyLevel


@dataclass
class PreparedStatement:
    """
    Server-side compiled query template returned by ``prepare``.

    ``handle`` is whatever the driver returned for the prepared query and is
    only interpreted by the session that produced it.
    """
    query_string: str
    handle: Any = None

    def bind(self, values: Sequence[Any], codec=None) -> "BoundStatement":
        """Encode ``values`` and return a bound statement."""
        from ..runtime.normalizer import bind

        return bind(self, values, codec=codec)


@dataclass
class Statement(ABC):
    """Options shared by every statement variant."""
    consistency: Optional[ConsistencyLevel] = field(default=None, kw_only=True)
    routing_key: Optional[bytes] = field(default=None, kw_only=True)
    retry_policy: Any = field(default=None, kw_only=True)
    tracing: bool = field(default=False, kw_only=True)

    @property
    @abstractmethod
    def query_string(self) -> str:
        """Query text sent to the server."""

    def enable_tracing(self) -> None:
        self.tracing = True


@dataclass
class SimpleStatement(Statement):
    """Unprepared statement wrapping query text verbatim."""
    text: str

    @property
    def query_string(self) -> str:
        return self.text


@dataclass
class BoundStatement(Statement):
    """Prepared statement with encoded values in positional order."""
    prepared: PreparedStatement
    values: list[Any] = field(default_factory=list)

    @property
    def query_string(self) -> str:
        return self.prepared.query_string
