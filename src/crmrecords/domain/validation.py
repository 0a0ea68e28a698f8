"""Required-field checks the store applies before accepting a record."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Final

from crmrecords.domain.model import (
    Account,
    Case,
    CaseStatus,
    Contact,
    Lead,
    Opportunity,
    OpportunityStage,
    Record,
)

if TYPE_CHECKING:
    from collections.abc import Callable

REQUIRED_FIELDS: Final[dict[type[Record], tuple[str, ...]]] = {
    Account: ("name",),
    Contact: ("last_name",),
    Opportunity: ("name", "stage", "close_date"),
    Lead: ("last_name", "company"),
    Case: ("status",),
}


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_opportunity(record: Opportunity) -> list[str]:
    errors: list[str] = []
    if record.stage is not None and record.stage not in set(OpportunityStage):
        errors.append(f"stage: bad value for restricted picklist field: {record.stage}")
    if record.amount is not None and Decimal(record.amount) < 0:
        errors.append("amount: must not be negative")
    return errors


def _check_case(record: Case) -> list[str]:
    if record.status is not None and record.status not in set(CaseStatus):
        return [f"status: bad value for restricted picklist field: {record.status}"]
    return []


def _check_account(record: Account) -> list[str]:
    if record.employee_count is not None and record.employee_count < 0:
        return ["employee_count: must not be negative"]
    return []


_EXTRA_CHECKS: Final[dict[type[Record], Callable[..., list[str]]]] = {
    Account: _check_account,
    Opportunity: _check_opportunity,
    Case: _check_case,
}


def validate_record(record: Record) -> list[str]:
    """Return the reasons ``record`` cannot be persisted (empty when it can)."""

    record_cls = type(record)
    errors = [
        f"Required fields are missing: [{name}]"
        for name in REQUIRED_FIELDS.get(record_cls, ())
        if _is_blank(getattr(record, name))
    ]
    check = _EXTRA_CHECKS.get(record_cls)
    if check is not None:
        errors.extend(check(record))
    return errors
