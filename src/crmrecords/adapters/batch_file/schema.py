"""Pydantic models for JSON batch input files."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from decimal import Decimal  # noqa: TC003
from uuid import UUID  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field

from crmrecords.domain.model import OpportunityStage  # noqa: TC001


class BatchFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class ContactPayload(BatchFileModel):
    id: UUID | None = None
    first_name: str | None = None
    last_name: str = Field(min_length=1)


class OpportunityPayload(BatchFileModel):
    id: UUID | None = None
    name: str | None = None
    stage: OpportunityStage | None = None
    close_date: date | None = None
    amount: Decimal | None = None
    account_id: UUID | None = None


class ContactBatch(BatchFileModel):
    contacts: list[ContactPayload] = Field(default_factory=list["ContactPayload"])


class OpportunityBatch(BatchFileModel):
    opportunities: list[OpportunityPayload] = Field(default_factory=list["OpportunityPayload"])
