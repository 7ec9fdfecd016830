"""
Public operations: connect, close, prepare, bind, execute, plus helpers for
the ambient session / consistency / executor.

Usage:
    import cqlexec

    session = cqlexec.connect(cluster, "app")
    cqlexec.set_session(session)

    rows = cqlexec.execute("SELECT * FROM users")
    with cqlexec.with_consistency("quorum"):
        pending = cqlexec.execute("SELECT * FROM users", async_=True)
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Any, Optional, Sequence

from sqlalchemy.engine import Engine

from .core.codec import Codec, ResultRow
from .core.consistency import ConsistencyLevel
from .core.errors import ConfigurationError
from .core.statement import BoundStatement, PreparedStatement
from .runtime import normalizer
from .runtime.bridge import PendingResult
from .runtime.context import ContextKind, get_default_context
from .runtime.engine import get_default_engine
from .runtime.session import Session

logger = logging.getLogger(__name__)


def connect(cluster: Any, keyspace: Optional[str] = None) -> Session:
    """
    Open a session on ``cluster``.

    A SQLAlchemy Engine is wrapped in a SQLAlchemySession. Anything else is
    treated as a driver cluster: ``cluster.connect(keyspace)`` is called and
    the result wrapped in a CassandraSession, unless it already is a Session.
    """
    if isinstance(cluster, Engine):
        from .drivers.sqlalchemy_session import SQLAlchemySession

        if keyspace:
            logger.debug(f"Keyspace {keyspace!r} ignored for SQLAlchemy engine")
        return SQLAlchemySession(cluster)

    if not callable(getattr(cluster, "connect", None)):
        raise ConfigurationError(f"Cannot connect to {type(cluster).__name__}: no connect() method")

    raw = cluster.connect(keyspace) if keyspace else cluster.connect()
    logger.info(f"Connected{f' to keyspace {keyspace}' if keyspace else ''}")
    if isinstance(raw, Session):
        return raw

    from .drivers.cassandra_session import CassandraSession

    return CassandraSession(raw)


def close(target: Any = None) -> None:
    """
    Shut down a session or cluster, releasing its connections.

    Without an argument the current context session is closed.
    """
    if target is None:
        target = current_session()
    if target is None:
        raise ConfigurationError("Nothing to close: no session given or bound")

    for name in ("shutdown", "dispose", "close"):
        method = getattr(target, name, None)
        if callable(method):
            method()
            logger.info(f"Closed {type(target).__name__}")
            return
    raise ConfigurationError(f"Don't know how to close {type(target).__name__}")


def prepare(session_or_query: Any, query: Optional[str] = None) -> PreparedStatement:
    """
    Prepare a query: ``prepare(session, query)`` or ``prepare(query)`` with
    the current context session.
    """
    if query is None:
        session, query = current_session(), session_or_query
    else:
        session = session_or_query
    if session is None:
        raise ConfigurationError("No session available to prepare the statement")
    return session.prepare(query)


def bind(
    prepared: PreparedStatement,
    values: Optional[Sequence[Any]] = None,
    codec: Optional[Codec] = None,
) -> BoundStatement:
    """Encode ``values`` positionally onto ``prepared``."""
    engine = get_default_engine()
    return normalizer.bind(prepared, values, codec=codec or engine.codec)


def execute(*args: Any, **options: Any) -> list[ResultRow] | PendingResult:
    """
    Execute a query against a session.

    Two signatures:
        execute(session, query, **options)
        execute(query, **options)    # session from with_session()/set_session()

    Options: async_, success, error, executor, consistency, routing_key,
    retry_policy, tracing, values.

    Passing ``async_=True`` or a ``success``/``error`` callback makes the
    call asynchronous: a PendingResult is returned immediately and resolved
    (then the callback invoked) on ``executor`` when the driver completes.
    Otherwise the decoded rows are returned.
    """
    return get_default_engine().execute(*args, **options)


# === Ambient configuration ===

def with_session(session: Session):
    """Bind ``session`` as the current session for the enclosed block."""
    return get_default_context().scope(ContextKind.SESSION, session)


def with_consistency(consistency: ConsistencyLevel | str):
    """Bind the consistency level for the enclosed block."""
    return get_default_context().scope(ContextKind.CONSISTENCY, consistency)


def with_executor(executor: Executor):
    """Bind the completion executor for the enclosed block."""
    return get_default_context().scope(ContextKind.EXECUTOR, executor)


def set_session(session: Optional[Session]) -> None:
    """Set the session globally (and in the caller's active scope, if any)."""
    get_default_context().set_global(ContextKind.SESSION, session)


def set_consistency(consistency: ConsistencyLevel | str) -> None:
    """Set the consistency level globally (and in the caller's active scope, if any)."""
    get_default_context().set_global(ContextKind.CONSISTENCY, consistency)


def set_executor(executor: Executor) -> None:
    """Set the completion executor globally (and in the caller's active scope, if any)."""
    get_default_context().set_global(ContextKind.EXECUTOR, executor)


def current_session() -> Optional[Session]:
    return get_default_context().get_current(ContextKind.SESSION)


def current_consistency() -> ConsistencyLevel:
    return get_default_context().get_current(ContextKind.CONSISTENCY)


def current_executor() -> Executor:
    return get_default_context().get_current(ContextKind.EXECUTOR)
