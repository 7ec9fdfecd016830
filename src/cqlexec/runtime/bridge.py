"""
Async completion bridge.

Turns the driver's success/failure notification into exactly one
resolution of a PendingResult, followed by the caller's optional callback.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional

from ..core.errors import CallbackError

logger = logging.getLogger(__name__)


class PendingResult(Future):
    """
    Single-value future for an in-flight asynchronous execution.

    Resolves exactly once, either to the decoded rows or to the error value.
    A failed execution does not raise from ``result()``: the error instance
    is returned as the value, and ``failed()`` tells the two apart.

    It can also be awaited from asyncio code:
        rows = await execute(session, "SELECT ...", async_=True)
    """

    def __init__(self):
        super().__init__()
        self._resolve_lock = threading.Lock()
        self._failed = False

    def resolve(self, value: Any, failed: bool = False) -> bool:
        """Resolve with ``value``. Returns False if already resolved."""
        with self._resolve_lock:
            if self.done():
                return False
            self._failed = failed
            self.set_result(value)
            return True

    def cancel(self) -> bool:
        # Cancellation belongs to the driver; the result always resolves.
        return False

    def failed(self) -> bool:
        return self.done() and self._failed

    def succeeded(self) -> bool:
        return self.done() and not self._failed

    def __await__(self):
        return asyncio.wrap_future(self).__await__()

    def __repr__(self) -> str:
        if not self.done():
            state = "pending"
        else:
            state = "failed" if self._failed else "succeeded"
        return f"<PendingResult {state}>"


class CompletionBridge:
    """
    Receives the driver's completion notification for one statement.

    Usage:
        pending = PendingResult()
        bridge = CompletionBridge(pending, codec.decode, success=on_rows)
        session.execute_async(statement, executor, bridge.on_success, bridge.on_failure)
        return pending
    """

    def __init__(
        self,
        pending: PendingResult,
        decode: Callable[[Any], list[dict[str, Any]]],
        success: Optional[Callable[[list[dict[str, Any]]], Any]] = None,
        error: Optional[Callable[[BaseException], Any]] = None,
    ):
        self.pending = pending
        self.decode = decode
        self.success = success
        self.error = error
        self._lock = threading.Lock()
        self._completed = False

    def _claim(self) -> bool:
        with self._lock:
            if self._completed:
                return False
            self._completed = True
            return True

    def on_success(self, raw: Any) -> None:
        if not self._claim():
            logger.debug("Ignoring success notification for an already completed statement")
            return

        try:
            rows = self.decode(raw)
        except Exception as exc:
            logger.debug(f"Decoding async result failed: {exc!r}")
            self._fail(exc)
            return

        self.pending.resolve(rows)
        if self.success is not None:
            self._invoke("success", self.success, rows)

    def on_failure(self, exc: BaseException) -> None:
        if not self._claim():
            logger.debug("Ignoring failure notification for an already completed statement")
            return
        self._fail(exc)

    def _fail(self, exc: BaseException) -> None:
        self.pending.resolve(exc, failed=True)
        if self.error is not None:
            self._invoke("error", self.error, exc)

    def _invoke(self, name: str, callback: Callable[[Any], Any], arg: Any) -> None:
        """Run a caller callback; its failure is logged and never touches the result."""
        try:
            callback(arg)
        except Exception as exc:
            err = CallbackError(name, exc)
            logger.exception(str(err))
