"""Ensure-exists-and-in-state operations over the record store.

Every public method opens its own unit of work, commits when the operation finished
and leaves rollback to the unit of work when anything raised. Failures reported by the
store abort the operation, except in :meth:`RecordReconciler.normalize_opportunities`
which hands the per-record outcome back to the caller instead.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta

from crmrecords.config.reconciler import ReconcilerConfig
from crmrecords.domain.errors import RecordValidationError
from crmrecords.domain.model import (
    Account,
    Case,
    CaseOrigin,
    CaseStatus,
    Contact,
    Lead,
    Opportunity,
    OpportunityStage,
    RecordType,
)
from crmrecords.domain.outcomes import LifecycleReport
from crmrecords.domain.ports.persistence import Criteria

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from uuid import UUID

    from crmrecords.domain.outcomes import BatchResult
    from crmrecords.domain.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

log = logging.getLogger(__name__)

OPPORTUNITY_NATURAL_KEY: tuple[str, ...] = ("account_id", "name")


class RecordReconciler:
    """Create, update, upsert and delete CRM records through a unit of work."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        *,
        config: ReconcilerConfig | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self.config = config or ReconcilerConfig()
        self._today = today

    # ------------------------------------------------------------------
    # Find-or-create and link
    # ------------------------------------------------------------------

    def upsert_account(self, name: str) -> Account:
        """Update the first Account named ``name`` or create it; one store write."""

        with self._unit_of_work_factory() as uow:
            matches = uow.finder.find(Account, Criteria.where(name=name), limit=1)
            if matches:
                account = matches[0]
                account.description = self.config.updated_description
                uow.store.update([account], all_or_none=True)
                log.info("Updated account %r (%s)", name, account.id)
            else:
                account = Account(name=name, description=self.config.created_description)
                uow.store.create([account], all_or_none=True)
                log.info("Created account %r (%s)", name, account.id)
            uow.commit()
        return account

    def upsert_accounts_with_contacts(self, contacts: Sequence[Contact]) -> list[Contact]:
        """Link each contact to the account named after its last name, then upsert them.

        Accounts are resolved up front: one lookup for all distinct names, one update
        batch for the ones that exist and one create batch for the rest. The contacts
        follow in a single upsert.
        """

        last_names = [(contact.last_name or "").strip() for contact in contacts]
        for index, last_name in enumerate(last_names):
            if not last_name:
                raise RecordValidationError(
                    f"Contact #{index} has no last name to derive an account name from"
                )
        for contact, last_name in zip(contacts, last_names, strict=True):
            contact.last_name = last_name
        names = list(dict.fromkeys(last_names))

        with self._unit_of_work_factory() as uow:
            accounts = self._resolve_accounts(uow, names)
            for contact in contacts:
                contact.account_id = accounts[contact.last_name or ""].id
            if contacts:
                uow.store.upsert(contacts, all_or_none=True)
            uow.commit()

        log.info("Linked %s contacts to %s accounts", len(contacts), len(names))
        return list(contacts)

    def upsert_opportunities(
        self, account_name: str, opportunity_names: Iterable[str]
    ) -> list[Opportunity]:
        """Close existing opportunities as won and open the missing ones.

        Returns one opportunity per distinct requested name. Repeated names collapse
        onto the same entry, the last occurrence winning.
        """

        requested = list(opportunity_names)
        today = self._today()
        prospect_close = today + relativedelta(months=self.config.prospect_close_months)

        with self._unit_of_work_factory() as uow:
            account = self._find_or_create_account(uow, account_name)
            existing = uow.finder.find(
                Opportunity,
                Criteria.where(account_id=account.id).including(name=set(requested)),
            )
            existing_by_name = {opportunity.name: opportunity for opportunity in existing}

            reconciled: dict[str, Opportunity] = {}
            for name in requested:
                opportunity = existing_by_name.get(name)
                if opportunity is not None:
                    opportunity.advance_to(self.config.won_stage, close_date=today)
                else:
                    opportunity = Opportunity(
                        name=name,
                        stage=self.config.prospect_stage,
                        close_date=prospect_close,
                        account_id=account.id,
                    )
                reconciled[name] = opportunity

            if reconciled:
                uow.store.upsert(
                    list(reconciled.values()),
                    match_key=OPPORTUNITY_NATURAL_KEY,
                    all_or_none=True,
                )
            uow.commit()

        log.info(
            "Reconciled %s opportunities for %r (%s existing)",
            len(reconciled),
            account_name,
            len(existing_by_name),
        )
        return list(reconciled.values())

    def normalize_opportunities(
        self, opportunities: Sequence[Opportunity]
    ) -> BatchResult[Opportunity]:
        """Force stage, close date and amount on every opportunity and upsert them.

        The batch is not atomic: valid records are written even when others fail.
        Failures are logged with their input index and returned in the result.
        """

        close_date = self._today() + relativedelta(months=self.config.normalized_close_months)
        for opportunity in opportunities:
            opportunity.stage = self.config.normalized_stage
            opportunity.close_date = close_date
            opportunity.amount = self.config.normalized_amount

        with self._unit_of_work_factory() as uow:
            result = uow.store.upsert(opportunities)
            for failure in result.failures:
                log.warning(
                    "Opportunity upsert failed at index %s: %s", failure.index, failure.message
                )
            uow.commit()
        return result

    # ------------------------------------------------------------------
    # Field mutators
    # ------------------------------------------------------------------

    def update_contact_last_name(self, contact_id: UUID, last_name: str) -> Contact:
        with self._unit_of_work_factory() as uow:
            contact = uow.finder.get(Contact, contact_id)
            contact.last_name = last_name
            uow.store.update([contact], all_or_none=True)
            uow.commit()
        return contact

    def update_opportunity_stage(
        self, opportunity_id: UUID, stage: OpportunityStage | str
    ) -> Opportunity:
        with self._unit_of_work_factory() as uow:
            opportunity = uow.finder.get(Opportunity, opportunity_id)
            try:
                opportunity.advance_to(stage)
            except ValueError as exc:
                raise RecordValidationError(f"Unknown opportunity stage: {stage!r}") from exc
            uow.store.update([opportunity], all_or_none=True)
            uow.commit()
        return opportunity

    def update_account(
        self, account_id: UUID, *, name: str, industry: str | None = None
    ) -> Account:
        with self._unit_of_work_factory() as uow:
            account = uow.finder.get(Account, account_id)
            account.name = name
            account.industry = industry
            uow.store.update([account], all_or_none=True)
            uow.commit()
        return account

    # ------------------------------------------------------------------
    # Single-record creates
    # ------------------------------------------------------------------

    def create_account(
        self,
        name: str,
        *,
        industry: str | None = None,
        description: str | None = None,
        employee_count: int | None = None,
    ) -> Account:
        account = Account(
            name=name,
            industry=industry,
            description=description,
            employee_count=employee_count,
        )
        with self._unit_of_work_factory() as uow:
            uow.store.create([account], all_or_none=True)
            uow.commit()
        return account

    def create_contact(
        self, *, first_name: str | None, last_name: str, account_id: UUID
    ) -> Contact:
        """Create a contact under an account that must already be persisted."""

        with self._unit_of_work_factory() as uow:
            account = uow.finder.get(Account, account_id)
            contact = Contact(first_name=first_name, last_name=last_name, account_id=account.id)
            uow.store.create([contact], all_or_none=True)
            uow.commit()
        return contact

    # ------------------------------------------------------------------
    # Create-then-delete demos
    # ------------------------------------------------------------------

    def create_and_delete_leads(self, count: int) -> LifecycleReport:
        leads = [
            Lead(first_name="Test", last_name=f"Lead {number}", company="Test Company")
            for number in range(1, _checked_count(count) + 1)
        ]
        return self._create_and_delete(RecordType.LEAD, leads)

    def create_and_delete_cases(
        self, count: int, *, account_id: UUID | None = None
    ) -> LifecycleReport:
        cases = [
            Case(
                subject=f"Test Case {number}",
                status=CaseStatus.NEW,
                origin=CaseOrigin.WEB,
                account_id=account_id,
            )
            for number in range(1, _checked_count(count) + 1)
        ]
        return self._create_and_delete(RecordType.CASE, cases, account_id=account_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find_or_create_account(self, uow: UnitOfWork, name: str) -> Account:
        matches = uow.finder.find(
            Account, Criteria.where(name=name), limit=self.config.account_lookup_limit
        )
        if matches:
            return matches[0]
        account = Account(name=name)
        uow.store.create([account], all_or_none=True)
        log.debug("Created account %r while reconciling opportunities", name)
        return account

    def _resolve_accounts(self, uow: UnitOfWork, names: list[str]) -> dict[str, Account]:
        if not names:
            return {}
        resolved: dict[str, Account] = {}
        for account in uow.finder.find(Account, Criteria().including(name=names)):
            if account.name is not None:
                resolved.setdefault(account.name, account)

        existing = list(resolved.values())
        for account in existing:
            account.description = self.config.updated_description
        created = [
            Account(name=name, description=self.config.created_description)
            for name in names
            if name not in resolved
        ]
        if existing:
            uow.store.update(existing, all_or_none=True)
        if created:
            uow.store.create(created, all_or_none=True)
            resolved.update({account.name or "": account for account in created})
        log.debug("Resolved %s existing and %s new accounts", len(existing), len(created))
        return resolved

    def _create_and_delete[TRecord: (Lead, Case)](
        self,
        record_type: RecordType,
        records: list[TRecord],
        *,
        account_id: UUID | None = None,
    ) -> LifecycleReport:
        with self._unit_of_work_factory() as uow:
            if account_id is not None:
                uow.finder.get(Account, account_id)
            created_ids: tuple[UUID, ...] = ()
            deleted = 0
            if records:
                uow.store.create(records, all_or_none=True)
                created_ids = tuple(record.id for record in records if record.id is not None)
                deleted = len(uow.store.delete(records, all_or_none=True).succeeded)
            uow.commit()
        log.info("Created and deleted %s %s records", deleted, record_type)
        return LifecycleReport(record_type=record_type, created_ids=created_ids, deleted=deleted)


def _checked_count(count: int) -> int:
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    return count
