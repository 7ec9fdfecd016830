"""
Session contract consumed by the execution engine.

A Session wraps a live, externally owned driver session. Implementations
live in ``cqlexec.drivers``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from concurrent.futures import Executor
from typing import Any, Callable

from ..core.statement import PreparedStatement, Statement

SuccessHandler = Callable[[Any], None]
FailureHandler = Callable[[BaseException], None]


class Session(ABC):
    """Adapter between canonical statements and a concrete driver."""

    @abstractmethod
    def prepare(self, query: str) -> PreparedStatement:
        """Prepare ``query`` on the server and return its handle."""

    @abstractmethod
    def execute_sync(self, statement: Statement) -> Any:
        """
        Execute and block until the driver answers.

        Returns the raw driver result, to be decoded by the codec.

        Raises:
            ExecutionError: If the driver reports a failure
        """

    @abstractmethod
    def execute_async(
        self,
        statement: Statement,
        executor: Executor,
        on_success: SuccessHandler,
        on_failure: FailureHandler,
    ) -> None:
        """
        Start a non-blocking execution.

        Exactly one of ``on_success(raw_result)`` / ``on_failure(error)``
        must later be called, on ``executor``.
        """

    @abstractmethod
    def shutdown(self) -> None:
        """Release the underlying driver session."""
