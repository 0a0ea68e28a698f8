"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from crmrecords.adapters.batch_file import load_contacts, load_opportunities
from crmrecords.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from crmrecords.config import get_reconciler_config
from crmrecords.domain.reconciler import RecordReconciler

if TYPE_CHECKING:
    from pathlib import Path

    from crmrecords.config import ReconcilerConfig
    from crmrecords.domain.model import Contact, Opportunity
    from crmrecords.domain.outcomes import BatchResult
    from crmrecords.domain.ports.unit_of_work import UnitOfWorkFactory


log = getLogger(__name__)


def initialise_database(*, database_uri: str | None = None) -> None:
    """Create or migrate the configured database."""

    startup(database_uri=database_uri, force=True)
    log.info("Database schema is up to date")


def build_reconciler(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ReconcilerConfig | None = None,
) -> RecordReconciler:
    """Return a reconciler wired to the SQLAlchemy adapter unless told otherwise."""

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyUnitOfWork
    return RecordReconciler(unit_of_work_factory, config=config or get_reconciler_config())


def link_contacts_from_file(
    path: Path, *, reconciler: RecordReconciler | None = None
) -> list[Contact]:
    """Load contacts from ``path`` and link each to the account named after it."""

    contacts = load_contacts(path)
    log.info("Linking %s contacts from %s", len(contacts), path)
    return (reconciler or build_reconciler()).upsert_accounts_with_contacts(contacts)


def normalize_opportunities_from_file(
    path: Path, *, reconciler: RecordReconciler | None = None
) -> BatchResult[Opportunity]:
    """Load opportunities from ``path`` and normalise their stage, close date and amount."""

    opportunities = load_opportunities(path)
    log.info("Normalising %s opportunities from %s", len(opportunities), path)
    result = (reconciler or build_reconciler()).normalize_opportunities(opportunities)
    log.info(
        "Finished normalising: succeeded=%s, failed=%s",
        len(result.succeeded),
        len(result.failures),
    )
    return result
