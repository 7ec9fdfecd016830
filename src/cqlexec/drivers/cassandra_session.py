"""
Cassandra / ScyllaDB session adapter over the DataStax python driver.

Converts canonical statements into ``cassandra.query`` statements and
bridges ``ResponseFuture`` callbacks onto the completion executor.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Any, Optional

import cassandra
from cassandra import query as cql

from ..config import ClusterConfig
from ..core.consistency import ConsistencyLevel
from ..core.errors import ExecutionError
from ..core.statement import BoundStatement, PreparedStatement, Statement
from ..runtime.session import FailureHandler, Session, SuccessHandler

logger = logging.getLogger(__name__)


def driver_consistency(level: ConsistencyLevel) -> int:
    """Map a ConsistencyLevel onto the driver's numeric code."""
    return getattr(cassandra.ConsistencyLevel, level.name)


def build_cluster(config: Optional[ClusterConfig] = None, **options: Any):
    """
    Build a ``cassandra.cluster.Cluster`` from configuration.

    Extra keyword options are passed to the Cluster constructor unchanged.
    """
    # Imported lazily: loading cassandra.cluster selects an event loop reactor.
    from cassandra.auth import PlainTextAuthProvider
    from cassandra.cluster import Cluster

    config = config or ClusterConfig()
    kwargs: dict[str, Any] = {
        "contact_points": list(config.contact_points),
        "port": config.port,
    }
    if config.protocol_version is not None:
        kwargs["protocol_version"] = config.protocol_version
    if config.username:
        kwargs["auth_provider"] = PlainTextAuthProvider(username=config.username, password=config.password)
    kwargs.update(options)

    logger.info(f"Building cluster for {', '.join(config.contact_points)}:{config.port}")
    return Cluster(**kwargs)


class CassandraSession(Session):
    """
    Session over a ``cassandra.cluster.Session``.

    Usage:
        cluster = build_cluster(ClusterConfig(contact_points=["scylla"]))
        session = CassandraSession(cluster.connect("app"))
    """

    def __init__(self, session: Any):
        self._session = session

    @property
    def driver_session(self) -> Any:
        return self._session

    def prepare(self, query: str) -> PreparedStatement:
        try:
            handle = self._session.prepare(query)
        except Exception as e:
            raise ExecutionError(str(e), cause=e) from e
        return PreparedStatement(query_string=query, handle=handle)

    def to_driver_statement(self, statement: Statement) -> Any:
        """Build the driver statement carrying consistency, routing key and retry policy."""
        options: dict[str, Any] = {"retry_policy": statement.retry_policy}
        if statement.consistency is not None:
            options["consistency_level"] = driver_consistency(statement.consistency)

        if isinstance(statement, BoundStatement):
            if statement.routing_key is not None:
                logger.debug("Bound statements compute their routing key from partition key values; ignoring override")
            bound = cql.BoundStatement(statement.prepared.handle, **options)
            return bound.bind(statement.values)

        if statement.routing_key is not None:
            options["routing_key"] = statement.routing_key
        return cql.SimpleStatement(statement.query_string, **options)

    def execute_sync(self, statement: Statement) -> Any:
        try:
            driver_statement = self.to_driver_statement(statement)
            return self._session.execute(driver_statement, trace=statement.tracing)
        except Exception as e:
            raise ExecutionError(str(e), cause=e) from e

    def execute_async(
        self,
        statement: Statement,
        executor: Executor,
        on_success: SuccessHandler,
        on_failure: FailureHandler,
    ) -> None:
        try:
            driver_statement = self.to_driver_statement(statement)
            future = self._session.execute_async(driver_statement, trace=statement.tracing)
        except Exception as e:
            raise ExecutionError(str(e), cause=e) from e

        # Driver callbacks run on its event loop thread; hand off to the executor.
        # They fire again for every page fetched later, so only the first is kept.
        def callback(_rows):
            future.clear_callbacks()
            executor.submit(self._deliver, future, on_success, on_failure)

        def errback(error):
            future.clear_callbacks()
            executor.submit(on_failure, ExecutionError(str(error), cause=error))

        future.add_callbacks(callback, errback)

    def _deliver(self, future: Any, on_success: SuccessHandler, on_failure: FailureHandler) -> None:
        # result() returns the paging ResultSet rather than the first page only.
        try:
            result = future.result()
        except Exception as e:
            on_failure(ExecutionError(str(e), cause=e))
            return
        on_success(result)

    def shutdown(self) -> None:
        self._session.shutdown()
        logger.info("Cassandra session shut down")
