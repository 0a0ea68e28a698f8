"""Ports for finding and persisting CRM records."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from crmrecords.domain.model import Record

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from crmrecords.domain.outcomes import BatchResult

SYSTEM_KEY: tuple[str, ...] = ("id",)


@dataclass(frozen=True, slots=True)
class Criteria:
    """Filter predicate: every ``equals`` pair must match and every ``any_of``
    field must hold one of the listed values."""

    equals: Mapping[str, object] = field(default_factory=dict[str, object])
    any_of: Mapping[str, Collection[object]] = field(
        default_factory=dict[str, Collection[object]]
    )

    @classmethod
    def where(cls, **equals: object) -> Criteria:
        return cls(equals=equals)

    def including(self, **any_of: Collection[object]) -> Criteria:
        return Criteria(equals=self.equals, any_of={**self.any_of, **any_of})

    def fields(self) -> set[str]:
        return set(self.equals) | set(self.any_of)

    def matches(self, record: Record) -> bool:
        if any(getattr(record, name) != value for name, value in self.equals.items()):
            return False
        return all(getattr(record, name) in values for name, values in self.any_of.items())


@runtime_checkable
class RecordFinder(Protocol):
    """Query contract: record retrieval by filter."""

    def find[TRecord: Record](
        self,
        record_type: type[TRecord],
        criteria: Criteria | None = None,
        *,
        limit: int | None = None,
    ) -> list[TRecord]: ...

    def get[TRecord: Record](self, record_type: type[TRecord], record_id: UUID) -> TRecord:
        """Return the record with ``record_id`` or raise ``RecordNotFoundError``."""
        ...


@runtime_checkable
class RecordStore(Protocol):
    """Persistence contract; each call is one round trip with per-record outcomes."""

    def create[TRecord: Record](
        self, records: Sequence[TRecord], *, all_or_none: bool = False
    ) -> BatchResult[TRecord]: ...

    def update[TRecord: Record](
        self, records: Sequence[TRecord], *, all_or_none: bool = False
    ) -> BatchResult[TRecord]: ...

    def upsert[TRecord: Record](
        self,
        records: Sequence[TRecord],
        *,
        match_key: Sequence[str] = SYSTEM_KEY,
        all_or_none: bool = False,
    ) -> BatchResult[TRecord]: ...

    def delete[TRecord: Record](
        self, records: Sequence[TRecord], *, all_or_none: bool = False
    ) -> BatchResult[TRecord]: ...
