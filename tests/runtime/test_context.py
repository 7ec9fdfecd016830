"""
Tests for ExecutionContext.

Covers global defaults, scoped overrides and the rule that a global write
also rewrites an active override.
"""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from cqlexec.core.consistency import ConsistencyLevel
from cqlexec.core.errors import ConfigurationError
from cqlexec.runtime.context import ContextKind, ExecutionContext


# -----------------------------
# Defaults
# -----------------------------


class TestDefaults:
    """Values seen when nothing is overridden."""

    def test_initial_values(self, context: ExecutionContext, inline_executor) -> None:
        """No session, consistency ONE, the configured executor."""
        assert context.get_current(ContextKind.SESSION) is None
        assert context.get_current(ContextKind.CONSISTENCY) is ConsistencyLevel.ONE
        assert context.get_current(ContextKind.EXECUTOR) is inline_executor

    def test_kind_accepts_string(self, context: ExecutionContext) -> None:
        assert context.get_current("consistency") is ConsistencyLevel.ONE

    def test_default_executor_created_lazily_once(self) -> None:
        """Without an explicit executor a shared thread pool is created on first use."""
        ctx = ExecutionContext()
        first = ctx.get_current(ContextKind.EXECUTOR)
        try:
            assert isinstance(first, ThreadPoolExecutor)
            assert ctx.get_current(ContextKind.EXECUTOR) is first
        finally:
            first.shutdown(wait=False)

    def test_set_global(self, context: ExecutionContext) -> None:
        context.set_global(ContextKind.CONSISTENCY, "quorum")
        assert context.get_current(ContextKind.CONSISTENCY) is ConsistencyLevel.QUORUM
        assert context.get_global(ContextKind.CONSISTENCY) is ConsistencyLevel.QUORUM

    def test_consistency_names_are_normalized(self, context: ExecutionContext) -> None:
        context.set_global(ContextKind.CONSISTENCY, "LOCAL-QUORUM")
        assert context.consistency is ConsistencyLevel.LOCAL_QUORUM

    def test_unknown_consistency_rejected(self, context: ExecutionContext) -> None:
        with pytest.raises(ConfigurationError):
            context.set_global(ContextKind.CONSISTENCY, "most")


# -----------------------------
# Scoped overrides
# -----------------------------


class TestScope:
    """Overrides installed with ``scope``."""

    def test_override_visible_inside_block_only(self, context: ExecutionContext) -> None:
        with context.scope(ContextKind.CONSISTENCY, "quorum") as value:
            assert value is ConsistencyLevel.QUORUM
            assert context.get_current(ContextKind.CONSISTENCY) is ConsistencyLevel.QUORUM
            assert context.get_global(ContextKind.CONSISTENCY) is ConsistencyLevel.ONE
        assert context.get_current(ContextKind.CONSISTENCY) is ConsistencyLevel.ONE

    def test_restored_on_error(self, context: ExecutionContext) -> None:
        """The prior value comes back even when the block raises."""
        session = object()
        with pytest.raises(RuntimeError):
            with context.scope(ContextKind.SESSION, session):
                assert context.session is session
                raise RuntimeError("boom")
        assert context.session is None

    def test_nested_scopes_restore_enclosing_override(self, context: ExecutionContext) -> None:
        with context.scope(ContextKind.CONSISTENCY, "two"):
            with context.scope(ContextKind.CONSISTENCY, "all"):
                assert context.consistency is ConsistencyLevel.ALL
            assert context.consistency is ConsistencyLevel.TWO
        assert context.consistency is ConsistencyLevel.ONE

    def test_kinds_are_independent(self, context: ExecutionContext) -> None:
        session = object()
        with context.scope(ContextKind.SESSION, session):
            assert context.consistency is ConsistencyLevel.ONE
            with context.scope(ContextKind.CONSISTENCY, "quorum"):
                assert context.session is session
            assert context.session is session

    def test_other_thread_sees_global_default(self, context: ExecutionContext) -> None:
        """A concurrent thread without an override is unaffected by ours."""
        entered = threading.Event()
        seen = []

        def reader():
            entered.wait(timeout=5)
            seen.append(context.get_current(ContextKind.CONSISTENCY))

        thread = threading.Thread(target=reader)
        thread.start()
        with context.scope(ContextKind.CONSISTENCY, "quorum"):
            entered.set()
            thread.join(timeout=5)
            assert context.consistency is ConsistencyLevel.QUORUM

        assert seen == [ConsistencyLevel.ONE]

    def test_asyncio_tasks_have_separate_overrides(self, context: ExecutionContext) -> None:
        async def worker(level: str, gate: asyncio.Event) -> ConsistencyLevel:
            with context.scope(ContextKind.CONSISTENCY, level):
                await gate.wait()
                return context.consistency

        async def main():
            gate = asyncio.Event()
            tasks = [
                asyncio.create_task(worker("quorum", gate)),
                asyncio.create_task(worker("all", gate)),
            ]
            await asyncio.sleep(0)
            gate.set()
            return await asyncio.gather(*tasks)

        assert asyncio.run(main()) == [ConsistencyLevel.QUORUM, ConsistencyLevel.ALL]
        assert context.consistency is ConsistencyLevel.ONE


# -----------------------------
# Global writes inside a scope
# -----------------------------


class TestGlobalWriteInsideScope:
    """set_global while the caller holds an override."""

    def test_global_write_updates_active_override(self, context: ExecutionContext) -> None:
        with context.scope(ContextKind.CONSISTENCY, "two"):
            context.set_global(ContextKind.CONSISTENCY, "quorum")
            assert context.get_current(ContextKind.CONSISTENCY) is ConsistencyLevel.QUORUM
        assert context.get_current(ContextKind.CONSISTENCY) is ConsistencyLevel.QUORUM

    def test_global_write_in_nested_scope_restores_outer_override(self, context: ExecutionContext) -> None:
        with context.scope(ContextKind.CONSISTENCY, "two"):
            with context.scope(ContextKind.CONSISTENCY, "three"):
                context.set_global(ContextKind.CONSISTENCY, "quorum")
                assert context.consistency is ConsistencyLevel.QUORUM
            assert context.consistency is ConsistencyLevel.TWO
        assert context.consistency is ConsistencyLevel.QUORUM

    def test_global_write_from_other_thread_does_not_touch_override(self, context: ExecutionContext) -> None:
        with context.scope(ContextKind.CONSISTENCY, "two"):
            thread = threading.Thread(target=context.set_global, args=(ContextKind.CONSISTENCY, "all"))
            thread.start()
            thread.join(timeout=5)
            assert context.consistency is ConsistencyLevel.TWO
        assert context.consistency is ConsistencyLevel.ALL
