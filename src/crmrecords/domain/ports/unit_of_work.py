"""Unit-of-work abstraction wrapping one reconciler operation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from crmrecords.domain.ports.persistence import RecordFinder, RecordStore


@runtime_checkable
class UnitOfWork(Protocol):
    """Transaction boundary exposing the finder and store bound to it."""

    @property
    def finder(self) -> RecordFinder: ...

    @property
    def store(self) -> RecordStore: ...

    def __enter__(self) -> UnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


type UnitOfWorkFactory = Callable[[], UnitOfWork]
