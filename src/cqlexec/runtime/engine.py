"""
Execution engine - merges context defaults with per-call options and
dispatches a statement to its session.

Handles:
- Session / consistency / executor resolution against the ExecutionContext
- Normalizing query input into a Statement
- Sync dispatch (decoded rows returned) or async dispatch (PendingResult)
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..core.codec import Codec, ResultRow, default_codec
from ..core.consistency import ConsistencyLevel
from ..core.errors import ConfigurationError
from ..core.statement import Statement
from .bridge import CompletionBridge, PendingResult
from .context import ContextKind, ExecutionContext, get_default_context
from .normalizer import to_statement
from .session import Session

logger = logging.getLogger(__name__)


class ExecuteOptions(BaseModel):
    """
    Per-call options accepted by ``execute``.

    Any other keyword is rejected.
    """
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    async_: bool = False
    success: Optional[Callable[[Any], Any]] = None
    error: Optional[Callable[[Any], Any]] = None
    executor: Optional[Executor] = None
    consistency: Optional[ConsistencyLevel] = None
    routing_key: Optional[bytes] = None
    retry_policy: Any = None
    tracing: bool = False
    values: Optional[list[Any]] = None

    @field_validator("consistency", mode="before")
    @classmethod
    def _parse_consistency(cls, value: Any) -> Any:
        if value is None:
            return None
        return ConsistencyLevel.parse(value)

    @property
    def is_async(self) -> bool:
        return self.async_ or self.success is not None or self.error is not None


class ExecutionEngine:
    """
    Dispatches statements to sessions.

    Usage:
        engine = ExecutionEngine()
        rows = engine.execute(session, "SELECT * FROM users")
        pending = engine.execute(session, "SELECT * FROM users", async_=True)

        with engine.context.scope(ContextKind.SESSION, session):
            rows = engine.execute("SELECT * FROM users", consistency="quorum")
    """

    def __init__(self, context: Optional[ExecutionContext] = None, codec: Optional[Codec] = None):
        """
        Initialize engine.

        Args:
            context: Context supplying defaults (process default if omitted)
            codec: Codec used to encode bind values and decode results
        """
        self._context = context
        self.codec = codec or default_codec

    @property
    def context(self) -> ExecutionContext:
        return self._context or get_default_context()

    def execute(self, *args: Any, **options: Any) -> list[ResultRow] | PendingResult:
        """
        Execute a query.

        Call as ``execute(query, **options)`` to use the context session, or
        ``execute(session, query, **options)``.

        Args:
            query: Query text, a PreparedStatement (with ``values=``) or a Statement
            **options: See ExecuteOptions

        Returns:
            Decoded rows on the sync path, a PendingResult on the async path

        Raises:
            ConfigurationError: No session resolvable, bad options or query shape
            EncodingError: A bind value cannot be encoded
            ExecutionError: The driver failed (sync path only)
        """
        session, query = self._split_args(args)
        opts = self._parse_options(options)
        context = self.context

        if session is None:
            session = context.get_current(ContextKind.SESSION)
        if session is None:
            raise ConfigurationError(
                "No session available: pass one to execute() or bind one with with_session()/set_session()"
            )

        statement = to_statement(query, opts.values, codec=self.codec)
        self._apply_options(statement, opts, context)

        if opts.is_async:
            executor = opts.executor or context.get_current(ContextKind.EXECUTOR)
            return self._execute_async(session, statement, executor, opts)
        return self._execute_sync(session, statement)

    def _split_args(self, args: tuple[Any, ...]) -> tuple[Optional[Session], Any]:
        if len(args) == 1:
            return None, args[0]
        if len(args) == 2:
            return args[0], args[1]
        raise TypeError(f"execute() takes a query or a session and a query ({len(args)} positional arguments given)")

    def _parse_options(self, options: dict[str, Any]) -> ExecuteOptions:
        try:
            return ExecuteOptions(**options)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid execute options: {e}") from e

    def _apply_options(self, statement: Statement, opts: ExecuteOptions, context: ExecutionContext) -> None:
        consistency = opts.consistency or context.get_current(ContextKind.CONSISTENCY)
        if consistency is None:
            raise ConfigurationError("No consistency level set")
        statement.consistency = consistency

        if opts.routing_key is not None:
            statement.routing_key = opts.routing_key
        if opts.retry_policy is not None:
            statement.retry_policy = opts.retry_policy
        if opts.tracing:
            statement.enable_tracing()

    def _execute_sync(self, session: Session, statement: Statement) -> list[ResultRow]:
        logger.debug(f"Executing {statement.query_string!r} at {statement.consistency.value}")
        raw = session.execute_sync(statement)
        return self.codec.decode(raw)

    def _execute_async(
        self,
        session: Session,
        statement: Statement,
        executor: Executor,
        opts: ExecuteOptions,
    ) -> PendingResult:
        logger.debug(f"Dispatching {statement.query_string!r} at {statement.consistency.value} (async)")
        pending = PendingResult()
        bridge = CompletionBridge(pending, self.codec.decode, success=opts.success, error=opts.error)

        try:
            session.execute_async(statement, executor, bridge.on_success, bridge.on_failure)
        except Exception as exc:
            # Failures to start are still reported through the result, never raised here.
            logger.debug(f"Async dispatch failed to start: {exc!r}")
            try:
                executor.submit(bridge.on_failure, exc)
            except RuntimeError:
                # Executor already shut down.
                bridge.on_failure(exc)

        return pending


_default_engine = ExecutionEngine()


def get_default_engine() -> ExecutionEngine:
    return _default_engine
