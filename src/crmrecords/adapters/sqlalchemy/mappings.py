"""SQLAlchemy mapping metadata for the CRM record model."""

from __future__ import annotations

import logging
import uuid
from functools import cache
from typing import Final

from sqlalchemy import (
    Column,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from crmrecords.domain.model import (
    Account,
    Case,
    CaseOrigin,
    CaseStatus,
    Contact,
    Lead,
    LeadStatus,
    Opportunity,
    OpportunityStage,
    Record,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]

mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

account_table = Table(
    "account",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String(255), nullable=False),
    Column("industry", String(80), nullable=True),
    Column("description", Text, nullable=True),
    Column("employee_count", Integer, nullable=True),
    Index("ix_account_name", "name"),
)

contact_table = Table(
    "contact",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("first_name", String(40), nullable=True),
    Column("last_name", String(80), nullable=False),
    Column(
        "account_id", UUIDColumnType, ForeignKey("account.id", ondelete="SET NULL"), nullable=True
    ),
)

opportunity_table = Table(
    "opportunity",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String(120), nullable=False),
    Column("stage", Enum(OpportunityStage, native_enum=False), nullable=False),
    Column("close_date", Date, nullable=False),
    Column("amount", Numeric(16, 2), nullable=True),
    Column(
        "account_id", UUIDColumnType, ForeignKey("account.id", ondelete="SET NULL"), nullable=True
    ),
    Index("ix_opportunity_account_name", "account_id", "name"),
)

lead_table = Table(
    "lead",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("first_name", String(40), nullable=True),
    Column("last_name", String(80), nullable=False),
    Column("company", String(255), nullable=False),
    Column("status", Enum(LeadStatus, native_enum=False), nullable=False),
)

case_table = Table(
    "case",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("subject", String(255), nullable=True),
    Column("status", Enum(CaseStatus, native_enum=False), nullable=False),
    Column("origin", Enum(CaseOrigin, native_enum=False), nullable=True),
    Column(
        "account_id", UUIDColumnType, ForeignKey("account.id", ondelete="SET NULL"), nullable=True
    ),
)

TABLE_BY_CLASS: Final[dict[type[Record], Table]] = {
    Account: account_table,
    Contact: contact_table,
    Opportunity: opportunity_table,
    Lead: lead_table,
    Case: case_table,
}


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the record model."""

    log.info("Starting SQLAlchemy mappers")

    for record_cls, table in TABLE_BY_CLASS.items():
        mapper_registry.map_imperatively(record_cls, table)

    configure_mappers()
    return mapper_registry
