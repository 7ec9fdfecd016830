"""
Execution context for statement dispatch.

Holds the ambient configuration used when a call does not pass its own:
the active session, consistency level and executor. Each setting has a
process-wide default and an optional override scoped to the current
thread or asyncio task.

Usage:
    context = ExecutionContext()
    context.set_global(ContextKind.SESSION, session)

    with context.scope(ContextKind.CONSISTENCY, "quorum"):
        context.get_current(ContextKind.CONSISTENCY)  # QUORUM
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from ..core.consistency import ConsistencyLevel

logger = logging.getLogger(__name__)

_UNSET = object()


class ContextKind(str, Enum):
    SESSION = "session"
    CONSISTENCY = "consistency"
    EXECUTOR = "executor"


class ContextSetting:
    """
    One scoped setting: a locked global default plus a ContextVar override.

    Setting the global while an override is active also rewrites the
    override, so the new value is visible inside the scope immediately.
    """

    def __init__(
        self,
        name: str,
        default: Any = None,
        default_factory: Optional[Callable[[], Any]] = None,
        normalize: Optional[Callable[[Any], Any]] = None,
    ):
        self.name = name
        self._default = _UNSET if default_factory is not None else default
        self._default_factory = default_factory
        self._normalize = normalize
        self._lock = threading.Lock()
        self._override: ContextVar[Any] = ContextVar(f"cqlexec_{name}", default=_UNSET)

    def _prepare(self, value: Any) -> Any:
        if self._normalize is not None and value is not None:
            return self._normalize(value)
        return value

    def get(self) -> Any:
        value = self._override.get()
        if value is not _UNSET:
            return value
        return self.get_global()

    def get_global(self) -> Any:
        with self._lock:
            if self._default is _UNSET:
                self._default = self._default_factory()
            return self._default

    def has_override(self) -> bool:
        return self._override.get() is not _UNSET

    def set_global(self, value: Any) -> None:
        value = self._prepare(value)
        with self._lock:
            self._default = value
        if self.has_override():
            self._override.set(value)

    @contextmanager
    def scope(self, value: Any) -> Iterator[Any]:
        value = self._prepare(value)
        token = self._override.set(value)
        try:
            yield value
        finally:
            self._override.reset(token)


def _default_executor() -> Executor:
    logger.debug("Creating default completion executor")
    return ThreadPoolExecutor(thread_name_prefix="cqlexec")


class ExecutionContext:
    """
    Ambient session / consistency / executor configuration.

    Overrides are stored in ContextVars, so they are local to the thread or
    asyncio task that installed them and need no locking.
    """

    def __init__(
        self,
        session: Any = None,
        consistency: ConsistencyLevel | str = ConsistencyLevel.ONE,
        executor: Optional[Executor] = None,
    ):
        self._settings: dict[ContextKind, ContextSetting] = {
            ContextKind.SESSION: ContextSetting("session", default=session),
            ContextKind.CONSISTENCY: ContextSetting(
                "consistency",
                default=ConsistencyLevel.parse(consistency),
                normalize=ConsistencyLevel.parse,
            ),
            ContextKind.EXECUTOR: ContextSetting(
                "executor",
                default=executor,
                default_factory=None if executor is not None else _default_executor,
            ),
        }

    def _setting(self, kind: ContextKind | str) -> ContextSetting:
        return self._settings[ContextKind(kind)]

    def get_current(self, kind: ContextKind | str) -> Any:
        """Return the scoped override for ``kind`` if present, else the global default."""
        return self._setting(kind).get()

    def get_global(self, kind: ContextKind | str) -> Any:
        return self._setting(kind).get_global()

    def set_global(self, kind: ContextKind | str, value: Any) -> None:
        """
        Set the process-wide default for ``kind``.

        If the caller is inside a ``scope`` for the same kind, that scope's
        value is replaced as well.
        """
        self._setting(kind).set_global(value)

    def scope(self, kind: ContextKind | str, value: Any):
        """Context manager overriding ``kind`` for the enclosed block only."""
        return self._setting(kind).scope(value)

    @property
    def session(self) -> Any:
        return self.get_current(ContextKind.SESSION)

    @property
    def consistency(self) -> ConsistencyLevel:
        return self.get_current(ContextKind.CONSISTENCY)

    @property
    def executor(self) -> Executor:
        return self.get_current(ContextKind.EXECUTOR)


_default_context: Optional[ExecutionContext] = None
_default_context_lock = threading.Lock()


def get_default_context() -> ExecutionContext:
    """Get or create the process-wide execution context."""
    global _default_context
    with _default_context_lock:
        if _default_context is None:
            _default_context = ExecutionContext()
        return _default_context
