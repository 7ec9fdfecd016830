"""
SQLAlchemy-backed session.

Runs canonical statements against any SQLAlchemy Engine. Useful for
relational backends and for exercising the execution engine against SQLite.

Consistency, routing keys and tracing have no SQL equivalent; they are
accepted and ignored.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor
from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..core.errors import ExecutionError
from ..core.statement import BoundStatement, PreparedStatement, Statement
from ..runtime.session import FailureHandler, Session, SuccessHandler

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    """Get database URL from environment."""
    return os.getenv("CQLEXEC_DATABASE_URL", "sqlite://")


class SQLAlchemySession(Session):
    """
    Session over a SQLAlchemy Engine.

    Usage:
        session = SQLAlchemySession(create_engine("sqlite://"))
        raw = session.execute_sync(SimpleStatement("SELECT 1 AS one"))
    """

    def __init__(self, engine: Engine, owns_engine: bool = False):
        """
        Args:
            engine: Engine to run statements on
            owns_engine: Dispose the engine on shutdown
        """
        self.engine = engine
        self.owns_engine = owns_engine

    @classmethod
    def from_url(cls, url: Optional[str] = None, **engine_options: Any) -> "SQLAlchemySession":
        engine = create_engine(
            url or get_database_url(),
            echo=os.getenv("SQL_ECHO", "").lower() == "true",
            **engine_options,
        )
        return cls(engine, owns_engine=True)

    def prepare(self, query: str) -> PreparedStatement:
        # No server-side preparation; the text is sent with each execution.
        return PreparedStatement(query_string=query)

    def execute_sync(self, statement: Statement) -> list[Any]:
        self._log_ignored(statement)
        params = None
        if isinstance(statement, BoundStatement) and statement.values:
            params = tuple(statement.values)
        try:
            with self.engine.begin() as conn:
                result = conn.exec_driver_sql(statement.query_string, params)
                if not result.returns_rows:
                    return []
                return list(result.mappings().all())
        except SQLAlchemyError as e:
            raise ExecutionError(str(e), cause=e) from e

    def execute_async(
        self,
        statement: Statement,
        executor: Executor,
        on_success: SuccessHandler,
        on_failure: FailureHandler,
    ) -> None:
        executor.submit(self._run, statement, on_success, on_failure)

    def _run(self, statement: Statement, on_success: SuccessHandler, on_failure: FailureHandler) -> None:
        try:
            raw = self.execute_sync(statement)
        except Exception as e:
            on_failure(e)
            return
        on_success(raw)

    def shutdown(self) -> None:
        if self.owns_engine:
            self.engine.dispose()
            logger.info("SQLAlchemy engine disposed")

    def _log_ignored(self, statement: Statement) -> None:
        if statement.routing_key is not None or statement.tracing:
            logger.debug("Routing key and tracing are not supported by SQLAlchemySession; ignoring")
