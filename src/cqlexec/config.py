"""
Configuration loading for cqlexec.

Reads ``cqlexec.yaml`` and applies environment overrides:
    CQLEXEC_CONTACT_POINTS   comma separated hosts
    CQLEXEC_PORT
    CQLEXEC_KEYSPACE
    CQLEXEC_CONSISTENCY
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .core.consistency import ConsistencyLevel
from .runtime.context import ContextKind, ExecutionContext, get_default_context

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "cqlexec.yaml"


@dataclass
class ClusterConfig:
    """Connection settings for the driver cluster."""
    contact_points: list[str] = field(default_factory=lambda: ["127.0.0.1"])
    port: int = 9042
    keyspace: Optional[str] = None
    protocol_version: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None


@dataclass
class ExecutionConfig:
    """Defaults applied to the execution context."""
    consistency: str = ConsistencyLevel.ONE.value
    executor_workers: Optional[int] = None


@dataclass
class CqlExecConfig:
    """Main cqlexec configuration."""
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CqlExecConfig":
        """Create config from dictionary."""
        cluster_data = data.get("cluster") or {}
        contact_points = cluster_data.get("contact_points", ["127.0.0.1"])
        if isinstance(contact_points, str):
            contact_points = [contact_points]

        cluster = ClusterConfig(
            contact_points=list(contact_points),
            port=int(cluster_data.get("port", 9042)),
            keyspace=cluster_data.get("keyspace"),
            protocol_version=cluster_data.get("protocol_version"),
            username=cluster_data.get("username"),
            password=cluster_data.get("password"),
        )

        execution_data = data.get("execution") or {}
        execution = ExecutionConfig(
            consistency=ConsistencyLevel.parse(execution_data.get("consistency", "one")).value,
            executor_workers=execution_data.get("executor_workers"),
        )

        return cls(cluster=cluster, execution=execution)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return {
            "cluster": {
                "contact_points": list(self.cluster.contact_points),
                "port": self.cluster.port,
                "keyspace": self.cluster.keyspace,
                "protocol_version": self.cluster.protocol_version,
                "username": self.cluster.username,
                "password": self.cluster.password,
            },
            "execution": {
                "consistency": self.execution.consistency,
                "executor_workers": self.execution.executor_workers,
            },
        }

    def save(self, path: Path | str = DEFAULT_CONFIG_PATH) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        content = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        path.write_text(content)

    @property
    def consistency(self) -> ConsistencyLevel:
        return ConsistencyLevel.parse(self.execution.consistency)


def _apply_env(config: CqlExecConfig) -> CqlExecConfig:
    contact_points = os.getenv("CQLEXEC_CONTACT_POINTS")
    if contact_points:
        config.cluster.contact_points = [host.strip() for host in contact_points.split(",") if host.strip()]

    port = os.getenv("CQLEXEC_PORT")
    if port:
        config.cluster.port = int(port)

    keyspace = os.getenv("CQLEXEC_KEYSPACE")
    if keyspace:
        config.cluster.keyspace = keyspace

    consistency = os.getenv("CQLEXEC_CONSISTENCY")
    if consistency:
        config.execution.consistency = ConsistencyLevel.parse(consistency).value

    return config


def load_config(path: Path | str = DEFAULT_CONFIG_PATH) -> CqlExecConfig:
    """
    Load configuration from YAML file.

    A missing file yields the defaults. Environment overrides are applied last.
    """
    path = Path(path)
    if path.exists():
        data = yaml.safe_load(path.read_text()) or {}
        config = CqlExecConfig.from_dict(data)
    else:
        logger.debug(f"No config file at {path}, using defaults")
        config = CqlExecConfig()
    return _apply_env(config)


def apply_config(config: CqlExecConfig, context: Optional[ExecutionContext] = None) -> None:
    """Install the configured defaults as the context's global values."""
    context = context or get_default_context()
    context.set_global(ContextKind.CONSISTENCY, config.consistency)
    if config.execution.executor_workers:
        context.set_global(
            ContextKind.EXECUTOR,
            ThreadPoolExecutor(max_workers=config.execution.executor_workers, thread_name_prefix="cqlexec"),
        )
