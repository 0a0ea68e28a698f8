"""In-memory fakes for the unit of work, finder and store ports."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Literal

from crmrecords.domain.errors import RecordNotFoundError
from crmrecords.domain.outcomes import BatchResult
from crmrecords.domain.ports.persistence import SYSTEM_KEY, Criteria
from crmrecords.domain.validation import validate_record

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    from crmrecords.domain.model import Record


@dataclass(slots=True)
class StoreCall:
    operation: str
    record_type: str
    size: int


@dataclass
class InMemoryDatabase:
    """Shared state behind every fake unit of work created by a factory."""

    rows: dict[type[Record], dict[uuid.UUID, Record]] = field(default_factory=dict)
    calls: list[StoreCall] = field(default_factory=list["StoreCall"])
    finds: list[str] = field(default_factory=list[str])
    commits: int = 0
    rollbacks: int = 0

    def table[TRecord: Record](self, record_type: type[TRecord]) -> dict[uuid.UUID, TRecord]:
        return self.rows.setdefault(record_type, {})  # type: ignore[return-value]

    def all[TRecord: Record](self, record_type: type[TRecord]) -> list[TRecord]:
        return list(self.table(record_type).values())

    def calls_for(self, operation: str) -> list[StoreCall]:
        return [call for call in self.calls if call.operation == operation]


class FakeRecordFinder:
    def __init__(self, database: InMemoryDatabase) -> None:
        self.database = database

    def find[TRecord: Record](
        self,
        record_type: type[TRecord],
        criteria: Criteria | None = None,
        *,
        limit: int | None = None,
    ) -> list[TRecord]:
        self.database.finds.append(record_type.RECORD_TYPE)
        effective = criteria or Criteria()
        matches = [row for row in self.database.all(record_type) if effective.matches(row)]
        return matches if limit is None else matches[:limit]

    def get[TRecord: Record](self, record_type: type[TRecord], record_id: uuid.UUID) -> TRecord:
        record = self.database.table(record_type).get(record_id)
        if record is None:
            raise RecordNotFoundError(record_type.RECORD_TYPE, record_id)
        return record


class FakeRecordStore:
    def __init__(self, database: InMemoryDatabase) -> None:
        self.database = database

    def create[TRecord: Record](
        self, records: Sequence[TRecord], *, all_or_none: bool = False
    ) -> BatchResult[TRecord]:
        def apply(record: TRecord) -> list[str]:
            if record.id is not None:
                return ["cannot specify id in a create call"]
            self._insert(record)
            return []

        return self._run("create", records, apply, all_or_none=all_or_none)

    def update[TRecord: Record](
        self, records: Sequence[TRecord], *, all_or_none: bool = False
    ) -> BatchResult[TRecord]:
        return self._run("update", records, self._replace, all_or_none=all_or_none)

    def upsert[TRecord: Record](
        self,
        records: Sequence[TRecord],
        *,
        match_key: Sequence[str] = SYSTEM_KEY,
        all_or_none: bool = False,
    ) -> BatchResult[TRecord]:
        key = tuple(match_key)

        def apply(record: TRecord) -> list[str]:
            if record.id is not None:
                return self._replace(record)
            if key != SYSTEM_KEY:
                criteria = Criteria(equals={name: getattr(record, name) for name in key})
                matches = [row for row in self.database.all(type(record)) if criteria.matches(row)]
                if len(matches) > 1:
                    return ["duplicate value found"]
                if matches:
                    record.id = matches[0].id
                    return self._replace(record)
            self._insert(record)
            return []

        return self._run("upsert", records, apply, all_or_none=all_or_none)

    def delete[TRecord: Record](
        self, records: Sequence[TRecord], *, all_or_none: bool = False
    ) -> BatchResult[TRecord]:
        def apply(record: TRecord) -> list[str]:
            table = self.database.table(type(record))
            if record.id is None or record.id not in table:
                return [f"entity is deleted or does not exist: {record.id}"]
            del table[record.id]
            return []

        result = BatchResult[TRecord](operation="delete")
        self.database.calls.append(StoreCall("delete", _type_name(records), len(records)))
        for index, record in enumerate(records):
            errors = apply(record)
            if errors:
                result.record_failure(index, record, *errors)
            else:
                result.record_success(index, record)
        return result.raise_for_failures() if all_or_none else result

    def _run[TRecord: Record](
        self,
        operation: str,
        records: Sequence[TRecord],
        apply: Callable[[TRecord], list[str]],
        *,
        all_or_none: bool,
    ) -> BatchResult[TRecord]:
        self.database.calls.append(StoreCall(operation, _type_name(records), len(records)))
        result = BatchResult[TRecord](operation=operation)
        for index, record in enumerate(records):
            errors = validate_record(record) or apply(record)
            if errors:
                result.record_failure(index, record, *errors)
            else:
                result.record_success(index, record)
        return result.raise_for_failures() if all_or_none else result

    def _insert(self, record: Record) -> None:
        record.id = uuid.uuid4()
        self.database.table(type(record))[record.id] = record

    def _replace(self, record: Record) -> list[str]:
        table = self.database.table(type(record))
        if record.id is None or record.id not in table:
            return [f"entity is deleted or does not exist: {record.id}"]
        stored = table[record.id]
        if stored is not record:
            for item in fields(record):
                value = getattr(record, item.name)
                if item.name != "id" and value is not None:
                    setattr(stored, item.name, value)
        return []


def _type_name(records: Sequence[Record]) -> str:
    return records[0].RECORD_TYPE if records else "-"


class FakeUnitOfWork:
    def __init__(self, database: InMemoryDatabase) -> None:
        self.database = database
        self.finder = FakeRecordFinder(database)
        self.store = FakeRecordStore(database)

    def __enter__(self) -> FakeUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.database.commits += 1

    def rollback(self) -> None:
        self.database.rollbacks += 1
