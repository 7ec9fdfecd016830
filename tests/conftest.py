"""
Shared fixtures: stub session, inline executor and isolated contexts.
"""

from concurrent.futures import Executor, Future

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from cqlexec.core.statement import PreparedStatement
from cqlexec.runtime import context as context_module
from cqlexec.runtime.context import ExecutionContext
from cqlexec.runtime.engine import ExecutionEngine
from cqlexec.runtime.session import Session


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, /, *args, **kwargs):
        self.submitted += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class StubSession(Session):
    """
    Session double.

    Sync calls return ``rows`` (or raise ``error``). Async calls are parked
    until the test calls ``complete_success`` / ``complete_failure``.
    """

    def __init__(self, rows=None, error=None):
        self.rows = rows if rows is not None else []
        self.error = error
        self.executed = []
        self.pending = []
        self.closed = False

    def prepare(self, query):
        return PreparedStatement(query_string=query, handle=f"prepared:{query}")

    def execute_sync(self, statement):
        self.executed.append(statement)
        if self.error is not None:
            raise self.error
        return self.rows

    def execute_async(self, statement, executor, on_success, on_failure):
        self.executed.append(statement)
        self.pending.append((executor, on_success, on_failure))

    def complete_success(self, raw=None, index=-1):
        executor, on_success, _ = self.pending[index]
        executor.submit(on_success, self.rows if raw is None else raw)

    def complete_failure(self, error, index=-1):
        executor, _, on_failure = self.pending[index]
        executor.submit(on_failure, error)

    def shutdown(self):
        self.closed = True

    @property
    def last(self):
        return self.executed[-1]


@pytest.fixture
def inline_executor():
    return InlineExecutor()


@pytest.fixture
def context(inline_executor):
    """Fresh context, isolated from the process default."""
    return ExecutionContext(executor=inline_executor)


@pytest.fixture
def engine(context):
    return ExecutionEngine(context=context)


@pytest.fixture
def make_session():
    """StubSession class, for tests that need their own rows or errors."""
    return StubSession


@pytest.fixture
def session():
    return StubSession(rows=[{"id": 1, "name": "alice"}, {"id": 2, "name": "bob"}])


@pytest.fixture(autouse=True)
def default_context(monkeypatch, inline_executor):
    """Replace the process-wide context so module-level helpers start clean."""
    ctx = ExecutionContext(executor=inline_executor)
    monkeypatch.setattr(context_module, "_default_context", ctx)
    return ctx


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    with engine.begin() as conn:
        conn.exec_driver_sql("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
        conn.exec_driver_sql("INSERT INTO users (id, name) VALUES (1, 'alice'), (2, 'bob')")
    yield engine
    engine.dispose()
