"""
Tests for PendingResult and CompletionBridge.
"""

import asyncio
import logging
import threading

import pytest

from cqlexec.core.codec import Codec
from cqlexec.core.errors import ExecutionError
from cqlexec.runtime.bridge import CompletionBridge, PendingResult


@pytest.fixture
def pending() -> PendingResult:
    return PendingResult()


def make_bridge(pending, success=None, error=None):
    return CompletionBridge(pending, Codec().decode, success=success, error=error)


# -----------------------------
# PendingResult
# -----------------------------


class TestPendingResult:

    def test_resolves_once(self, pending: PendingResult) -> None:
        assert pending.resolve([{"a": 1}]) is True
        assert pending.resolve([{"a": 2}]) is False
        assert pending.result() == [{"a": 1}]

    def test_error_value_does_not_raise(self, pending: PendingResult) -> None:
        error = ExecutionError("boom")
        pending.resolve(error, failed=True)
        assert pending.result() is error
        assert pending.failed()
        assert not pending.succeeded()

    def test_cannot_be_cancelled(self, pending: PendingResult) -> None:
        assert pending.cancel() is False
        assert not pending.cancelled()
        pending.resolve([])
        assert pending.succeeded()

    def test_repr_reflects_state(self, pending: PendingResult) -> None:
        assert repr(pending) == "<PendingResult pending>"
        pending.resolve(ValueError("x"), failed=True)
        assert repr(pending) == "<PendingResult failed>"

    def test_awaitable(self, pending: PendingResult) -> None:
        async def main():
            loop = asyncio.get_running_loop()
            loop.call_later(0.01, pending.resolve, [{"id": 1}])
            return await pending

        assert asyncio.run(main()) == [{"id": 1}]

    def test_result_blocks_until_resolved(self, pending: PendingResult) -> None:
        timer = threading.Timer(0.01, pending.resolve, args=([{"id": 2}],))
        timer.start()
        assert pending.result(timeout=5) == [{"id": 2}]


# -----------------------------
# CompletionBridge
# -----------------------------


class TestCompletionBridge:

    def test_success_decodes_then_notifies(self, pending: PendingResult) -> None:
        order = []

        def on_success(rows):
            order.append(("callback", pending.done(), rows))

        bridge = make_bridge(pending, success=on_success)
        bridge.on_success([{"id": 1}])

        assert pending.result() == [{"id": 1}]
        assert order == [("callback", True, [{"id": 1}])]

    def test_failure_resolves_then_notifies(self, pending: PendingResult) -> None:
        seen = []
        error = ExecutionError("unavailable")
        bridge = make_bridge(pending, error=lambda e: seen.append((pending.done(), e)))

        bridge.on_failure(error)

        assert pending.result() is error
        assert seen == [(True, error)]

    def test_second_notification_ignored(self, pending: PendingResult) -> None:
        successes, errors = [], []
        bridge = make_bridge(pending, success=successes.append, error=errors.append)

        bridge.on_failure(ExecutionError("first"))
        bridge.on_success([{"id": 1}])
        bridge.on_failure(ExecutionError("second"))

        assert pending.failed()
        assert str(pending.result()) == "Execution failed: first"
        assert successes == []
        assert len(errors) == 1

    def test_concurrent_notifications_resolve_once(self, pending: PendingResult) -> None:
        successes, errors = [], []
        bridge = make_bridge(pending, success=successes.append, error=errors.append)
        start = threading.Barrier(8)

        def notify(i):
            start.wait(timeout=5)
            if i % 2:
                bridge.on_success([{"i": i}])
            else:
                bridge.on_failure(ExecutionError(str(i)))

        threads = [threading.Thread(target=notify, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert pending.done()
        assert len(successes) + len(errors) == 1

    def test_decode_failure_takes_failure_path(self, pending: PendingResult) -> None:
        errors = []
        bridge = make_bridge(pending, error=errors.append)

        bridge.on_success([object()])

        assert pending.failed()
        assert isinstance(pending.result(), TypeError)
        assert errors == [pending.result()]

    def test_failing_callback_is_logged_and_result_kept(self, pending: PendingResult, caplog) -> None:
        def on_success(rows):
            raise RuntimeError("callback bug")

        bridge = make_bridge(pending, success=on_success)
        with caplog.at_level(logging.ERROR, logger="cqlexec.runtime.bridge"):
            bridge.on_success([{"id": 1}])

        assert pending.succeeded()
        assert pending.result() == [{"id": 1}]
        assert any("success callback raised RuntimeError" in r.getMessage() for r in caplog.records)

    def test_failing_error_callback_does_not_mask_error(self, pending: PendingResult) -> None:
        error = ExecutionError("timeout")

        def on_error(exc):
            raise ValueError("handler bug")

        bridge = make_bridge(pending, error=on_error)
        bridge.on_failure(error)

        assert pending.result() is error
