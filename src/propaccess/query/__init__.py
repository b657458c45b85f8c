"""Operations over ordered result sets."""

from __future__ import annotations

from .context import Query, QueryContext
from .operations import (
    LastOperation,
    Operation,
    OperationRegistry,
    UnknownOperationError,
    default_registry,
)

__all__ = [
    "LastOperation",
    "Operation",
    "OperationRegistry",
    "Query",
    "QueryContext",
    "UnknownOperationError",
    "default_registry",
]
