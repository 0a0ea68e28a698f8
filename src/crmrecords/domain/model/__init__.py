"""Public domain model surface."""

from __future__ import annotations

from crmrecords.domain.model.base import Record
from crmrecords.domain.model.enums import (
    CaseOrigin,
    CaseStatus,
    LeadStatus,
    OpportunityStage,
    RecordType,
)
from crmrecords.domain.model.records import Account, Case, Contact, Lead, Opportunity

__all__ = [  # noqa: RUF022
    # base
    "Record",
    # records
    "Account",
    "Contact",
    "Opportunity",
    "Lead",
    "Case",
    # enums
    "CaseOrigin",
    "CaseStatus",
    "LeadStatus",
    "OpportunityStage",
    "RecordType",
]
