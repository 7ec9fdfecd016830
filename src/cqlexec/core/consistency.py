"""
Consistency levels.

Names follow the CQL levels; the mapping onto a driver's own codes is done
by the driver adapter.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from .errors import ConfigurationError


class ConsistencyLevel(str, Enum):
    """Replication acknowledgment required for a single statement."""

    ANY = "any"
    ONE = "one"
    TWO = "two"
    THREE = "three"
    QUORUM = "quorum"
    ALL = "all"
    LOCAL_QUORUM = "local_quorum"
    EACH_QUORUM = "each_quorum"
    SERIAL = "serial"
    LOCAL_SERIAL = "local_serial"
    LOCAL_ONE = "local_one"

    @classmethod
    def parse(cls, value: Union[str, "ConsistencyLevel"]) -> "ConsistencyLevel":
        """
        Resolve a level from an enum member or a name.

        "quorum", "QUORUM", "local-quorum" and "LOCAL_QUORUM" are all accepted.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().lower().replace("-", "_")
            try:
                return cls(name)
            except ValueError:
                pass
        raise ConfigurationError(f"Unknown consistency level: {value!r}")
