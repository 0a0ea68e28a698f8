"""Domain ports."""

from __future__ import annotations

from .persistence import SYSTEM_KEY, Criteria, RecordFinder, RecordStore
from .unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "SYSTEM_KEY",
    "Criteria",
    "RecordFinder",
    "RecordStore",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
