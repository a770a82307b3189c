"""
Warehouse storage: connection pool, target stores and the unit of work.
"""

from .store import (
    CONFORMED_TARGETS,
    DIMENSIONAL_TARGETS,
    TARGETS,
    InMemoryTargetStore,
    PostgresTargetStore,
    TargetStore,
    load_scope,
    targets_for,
)
from .unit_of_work import UnitOfWork

__all__ = [
    "TargetStore",
    "InMemoryTargetStore",
    "PostgresTargetStore",
    "UnitOfWork",
    "TARGETS",
    "CONFORMED_TARGETS",
    "DIMENSIONAL_TARGETS",
    "load_scope",
    "targets_for",
]
