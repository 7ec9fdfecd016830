"""
Runtime module - context, normalization, dispatch and async completion.
"""

from __future__ import annotations

from .bridge import CompletionBridge, PendingResult
from .context import ContextKind, ExecutionContext, get_default_context
from .engine import ExecuteOptions, ExecutionEngine, get_default_engine
from .normalizer import bind, to_statement
from .session import Session

__all__ = [
    "ContextKind",
    "ExecutionContext",
    "get_default_context",
    "to_statement",
    "bind",
    "ExecuteOptions",
    "ExecutionEngine",
    "get_default_engine",
    "PendingResult",
    "CompletionBridge",
    "Session",
]
