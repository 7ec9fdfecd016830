"""
cqlexec - statement execution layer for distributed database sessions.

Normalizes query input into statements, merges ambient defaults (session,
consistency level, executor) with per-call options, and dispatches either
synchronously (decoded rows) or asynchronously (PendingResult + callbacks).

Usage:
    import cqlexec

    session = cqlexec.connect(cluster, "app")
    rows = cqlexec.execute(session, "SELECT * FROM users", consistency="quorum")

    with cqlexec.with_session(session):
        pending = cqlexec.execute("SELECT * FROM users", success=print)
"""

from __future__ import annotations

__version__ = "0.1.0"

from .api import (
    bind,
    close,
    connect,
    current_consistency,
    current_executor,
    current_session,
    execute,
    prepare,
    set_consistency,
    set_executor,
    set_session,
    with_consistency,
    with_executor,
    with_session,
)
from .config import ClusterConfig, CqlExecConfig, ExecutionConfig, apply_config, load_config
from .core import (
    BoundStatement,
    CallbackError,
    Codec,
    ConfigurationError,
    ConsistencyLevel,
    CqlExecError,
    EncodingError,
    ExecutionError,
    PreparedStatement,
    ResultRow,
    SimpleStatement,
    Statement,
)
from .runtime import (
    CompletionBridge,
    ContextKind,
    ExecuteOptions,
    ExecutionContext,
    ExecutionEngine,
    PendingResult,
    Session,
)

__all__ = [
    # Operations
    "connect",
    "close",
    "prepare",
    "bind",
    "execute",
    # Ambient configuration
    "with_session",
    "with_consistency",
    "with_executor",
    "set_session",
    "set_consistency",
    "set_executor",
    "current_session",
    "current_consistency",
    "current_executor",
    # Config
    "ClusterConfig",
    "ExecutionConfig",
    "CqlExecConfig",
    "load_config",
    "apply_config",
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
    "Codec",
    "ResultRow",
    # Runtime
    "ContextKind",
    "ExecutionContext",
    "ExecuteOptions",
    "ExecutionEngine",
    "PendingResult",
    "CompletionBridge",
    "Session",
]
