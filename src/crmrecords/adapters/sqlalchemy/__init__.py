"""SQLAlchemy adapter package."""

from __future__ import annotations

from .mappings import (
    TABLE_BY_CLASS,
    mapper_registry,
    start_mappers,
)
from .repositories import SqlAlchemyRecordFinder, SqlAlchemyRecordStore
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "TABLE_BY_CLASS",
    "SqlAlchemyRecordFinder",
    "SqlAlchemyRecordStore",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
