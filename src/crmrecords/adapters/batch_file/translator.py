"""Translate batch file payloads into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from crmrecords.domain.model import Contact, Opportunity

if TYPE_CHECKING:
    from .schema import ContactPayload, OpportunityPayload


def translate_contact(payload: ContactPayload) -> Contact:
    return Contact(id=payload.id, first_name=payload.first_name, last_name=payload.last_name)


def translate_opportunity(payload: OpportunityPayload) -> Opportunity:
    return Opportunity(
        id=payload.id,
        name=payload.name,
        stage=payload.stage,
        close_date=payload.close_date,
        amount=payload.amount,
        account_id=payload.account_id,
    )
