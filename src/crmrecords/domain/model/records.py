"""CRM record types.

Required fields are typed as optional on purpose: records are built up in memory
and only the store decides whether one is complete enough to persist.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from crmrecords.domain.model.base import Record
from crmrecords.domain.model.enums import (
    CaseOrigin,
    CaseStatus,
    LeadStatus,
    OpportunityStage,
    RecordType,
)

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Account(Record):
    RECORD_TYPE: ClassVar[RecordType] = RecordType.ACCOUNT

    name: str | None = None
    industry: str | None = None
    description: str | None = None
    employee_count: int | None = None


@dataclass(eq=False, kw_only=True)
class Contact(Record):
    RECORD_TYPE: ClassVar[RecordType] = RecordType.CONTACT

    first_name: str | None = None
    last_name: str | None = None
    # weak reference; a contact does not own its account
    account_id: UUID | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


@dataclass(eq=False, kw_only=True)
class Opportunity(Record):
    RECORD_TYPE: ClassVar[RecordType] = RecordType.OPPORTUNITY

    name: str | None = None
    stage: OpportunityStage | None = None
    close_date: date | None = None
    amount: Decimal | None = None
    account_id: UUID | None = None

    def advance_to(self, stage: OpportunityStage | str, *, close_date: date | None = None) -> None:
        self.stage = OpportunityStage(stage)
        if close_date is not None:
            self.close_date = close_date


@dataclass(eq=False, kw_only=True)
class Lead(Record):
    RECORD_TYPE: ClassVar[RecordType] = RecordType.LEAD

    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    status: LeadStatus = LeadStatus.OPEN


@dataclass(eq=False, kw_only=True)
class Case(Record):
    RECORD_TYPE: ClassVar[RecordType] = RecordType.CASE

    subject: str | None = None
    status: CaseStatus | None = CaseStatus.NEW
    origin: CaseOrigin | None = None
    account_id: UUID | None = None
