"""Finder and store implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from sqlalchemy import select

from crmrecords.adapters.sqlalchemy.mappings import TABLE_BY_CLASS
from crmrecords.domain.errors import RecordNotFoundError
from crmrecords.domain.outcomes import BatchResult
from crmrecords.domain.ports.persistence import SYSTEM_KEY, Criteria
from crmrecords.domain.validation import validate_record

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.orm import Session

    from crmrecords.domain.model import Record

log = logging.getLogger(__name__)


def _filtered[TRecord: Record](
    record_type: type[TRecord], criteria: Criteria
) -> Select[tuple[TRecord]]:
    table = TABLE_BY_CLASS[record_type]
    unknown = criteria.fields() - set(table.c.keys())
    if unknown:
        raise ValueError(
            f"Unknown {record_type.RECORD_TYPE} field(s) in filter: {', '.join(sorted(unknown))}"
        )
    conditions: list[ColumnElement[bool]] = [
        table.c[name] == value for name, value in criteria.equals.items()
    ]
    conditions.extend(table.c[name].in_(list(values)) for name, values in criteria.any_of.items())
    return select(record_type).where(*conditions)


class SqlAlchemyRecordFinder:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find[TRecord: Record](
        self,
        record_type: type[TRecord],
        criteria: Criteria | None = None,
        *,
        limit: int | None = None,
    ) -> list[TRecord]:
        stmt = _filtered(record_type, criteria or Criteria())
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def get[TRecord: Record](self, record_type: type[TRecord], record_id: UUID) -> TRecord:
        record = self.session.get(record_type, record_id)
        if record is None:
            raise RecordNotFoundError(record_type.RECORD_TYPE, record_id)
        return record


class SqlAlchemyRecordStore:
    """Batch persistence with per-record outcomes.

    Records are validated up front. With ``all_or_none`` any failure raises before the
    session is touched; otherwise valid records are written and invalid ones reported.
    Writes are flushed once per call; the unit of work owns commit and rollback.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create[TRecord: Record](
        self, records: Sequence[TRecord], *, all_or_none: bool = False
    ) -> BatchResult[TRecord]:
        def check(record: TRecord) -> list[str]:
            if not record.is_new:
                return ["cannot specify id in a create call", *validate_record(record)]
            return validate_record(record)

        def apply(record: TRecord) -> str | None:
            self.session.add(record)
            return None

        return self._process("create", records, check, apply, all_or_none=all_or_none)

    def update[TRecord: Record](
        self, records: Sequence[TRecord], *, all_or_none: bool = False
    ) -> BatchResult[TRecord]:
        def check(record: TRecord) -> list[str]:
            if record.is_new:
                return ["id not specified in an update call", *validate_record(record)]
            return validate_record(record)

        return self._process("update", records, check, self._merge_by_id, all_or_none=all_or_none)

    def upsert[TRecord: Record](
        self,
        records: Sequence[TRecord],
        *,
        match_key: Sequence[str] = SYSTEM_KEY,
        all_or_none: bool = False,
    ) -> BatchResult[TRecord]:
        key = tuple(match_key)

        def apply(record: TRecord) -> str | None:
            if not record.is_new:
                return self._merge_by_id(record)
            if key == SYSTEM_KEY:
                self.session.add(record)
                return None
            return self._merge_by_natural_key(record, key)

        return self._process("upsert", records, validate_record, apply, all_or_none=all_or_none)

    def delete[TRecord: Record](
        self, records: Sequence[TRecord], *, all_or_none: bool = False
    ) -> BatchResult[TRecord]:
        def check(record: TRecord) -> list[str]:
            return ["id not specified in a delete call"] if record.is_new else []

        def apply(record: TRecord) -> str | None:
            existing = self.session.get(type(record), record.id)
            if existing is None:
                return f"entity is deleted or does not exist: {record.id}"
            self.session.delete(existing)
            return None

        return self._process("delete", records, check, apply, all_or_none=all_or_none)

    def _process[TRecord: Record](
        self,
        operation: str,
        records: Sequence[TRecord],
        check: Callable[[TRecord], list[str]],
        apply: Callable[[TRecord], str | None],
        *,
        all_or_none: bool,
    ) -> BatchResult[TRecord]:
        result = BatchResult[TRecord](operation=operation)
        errors_by_index = {index: check(record) for index, record in enumerate(records)}
        if all_or_none and any(errors_by_index.values()):
            for index, record in enumerate(records):
                result.record_failure(index, record, *(errors_by_index[index] or ["not processed"]))
            result.raise_for_failures()

        for index, record in enumerate(records):
            errors = errors_by_index[index]
            if not errors:
                error = apply(record)
                errors = [error] if error else []
            if errors:
                result.record_failure(index, record, *errors)
            else:
                result.record_success(index, record)

        self.session.flush()
        log.debug(
            "%s: %s succeeded, %s failed", operation, len(result.succeeded), len(result.failures)
        )
        if all_or_none:
            result.raise_for_failures()
        return result

    def _merge_by_id(self, record: Record) -> str | None:
        existing = self.session.get(type(record), record.id)
        if existing is None:
            return f"entity is deleted or does not exist: {record.id}"
        if existing is not record:
            _copy_set_fields(record, existing)
        return None

    def _merge_by_natural_key(self, record: Record, key: tuple[str, ...]) -> str | None:
        criteria = Criteria(equals={name: getattr(record, name) for name in key})
        stmt = _filtered(type(record), criteria).limit(2)
        matches = cast("list[Record]", list(self.session.execute(stmt).scalars().all()))
        if len(matches) > 1:
            return f"duplicate value found: {', '.join(key)} matches more than one record"
        if not matches:
            self.session.add(record)
            return None
        record.id = matches[0].id
        _copy_set_fields(record, matches[0])
        return None


def _copy_set_fields(source: Record, target: Record) -> None:
    # None means "not supplied"; stored values the caller left out are kept
    for name in TABLE_BY_CLASS[type(source)].c.keys():
        value = getattr(source, name)
        if name != "id" and value is not None:
            setattr(target, name, value)


if TYPE_CHECKING:
    from crmrecords.domain.ports.persistence import RecordFinder, RecordStore

    _session_stub = cast("Session", object())
    _finder_check: RecordFinder = SqlAlchemyRecordFinder(_session_stub)
    _store_check: RecordStore = SqlAlchemyRecordStore(_session_stub)
