from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from crmrecords.app import (
    build_reconciler,
    initialise_database,
    link_contacts_from_file,
    normalize_opportunities_from_file,
)
from crmrecords.config import configure_logging
from crmrecords.domain.model import OpportunityStage

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from types import FrameType

    from crmrecords.domain.model import Account, Contact, Opportunity
    from crmrecords.domain.outcomes import LifecycleReport

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage CRM records")
    subparsers = parser.add_subparsers(dest="command", required=True)

    db = subparsers.add_parser("db", help="Database commands")
    db_sub = db.add_subparsers(dest="db_command", required=True)
    db_init = db_sub.add_parser("init", help="Create or migrate the database schema")
    db_init.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (defaults to $DATABASE_URI or the data dir)",
    )

    account = subparsers.add_parser("account", help="Account commands")
    account_sub = account.add_subparsers(dest="account_command", required=True)
    account_upsert = account_sub.add_parser(
        "upsert", help="Update the account with this name or create it"
    )
    account_upsert.add_argument("name", type=str)
    account_create = account_sub.add_parser("create", help="Create an account")
    account_create.add_argument("name", type=str)
    account_create.add_argument("--industry", type=str)
    account_create.add_argument("--description", type=str)
    account_create.add_argument("--employee-count", type=int)
    account_update = account_sub.add_parser("update", help="Rename an account and set its industry")
    account_update.add_argument("account_id", type=str)
    account_update.add_argument("--name", type=str, required=True)
    account_update.add_argument("--industry", type=str)

    contact = subparsers.add_parser("contact", help="Contact commands")
    contact_sub = contact.add_subparsers(dest="contact_command", required=True)
    contact_create = contact_sub.add_parser("create", help="Create a contact under an account")
    contact_create.add_argument("--account-id", type=str, required=True)
    contact_create.add_argument("--last-name", type=str, required=True)
    contact_create.add_argument("--first-name", type=str)
    contact_rename = contact_sub.add_parser("rename", help="Change a contact's last name")
    contact_rename.add_argument("contact_id", type=str)
    contact_rename.add_argument("last_name", type=str)
    contact_link = contact_sub.add_parser(
        "link", help="Link contacts from a JSON file to accounts named after them"
    )
    contact_link.add_argument("path", type=Path)

    opportunity = subparsers.add_parser("opportunity", help="Opportunity commands")
    opportunity_sub = opportunity.add_subparsers(dest="opportunity_command", required=True)
    opportunity_upsert = opportunity_sub.add_parser(
        "upsert", help="Close existing opportunities as won and open missing ones"
    )
    opportunity_upsert.add_argument("account_name", type=str)
    opportunity_upsert.add_argument("names", nargs="+", type=str)
    opportunity_normalize = opportunity_sub.add_parser(
        "normalize", help="Normalise stage, close date and amount for a JSON batch"
    )
    opportunity_normalize.add_argument("path", type=Path)
    opportunity_stage = opportunity_sub.add_parser("stage", help="Move an opportunity to a stage")
    opportunity_stage.add_argument("opportunity_id", type=str)
    opportunity_stage.add_argument("stage", type=str)

    for name, help_text in (("leads", "Lead commands"), ("cases", "Case commands")):
        group = subparsers.add_parser(name, help=help_text)
        group_sub = group.add_subparsers(dest=f"{name}_command", required=True)
        demo = group_sub.add_parser("demo", help=f"Create {name} and delete them again")
        demo.add_argument(
            "--count",
            type=int,
            default=5,
            help="Number of records to create (default: %(default)s)",
        )
        if name == "cases":
            demo.add_argument("--account-id", type=str)

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _parse_stage(value: str) -> OpportunityStage:
    try:
        return OpportunityStage(value)
    except ValueError as exc:
        choices = ", ".join(stage.value for stage in OpportunityStage)
        raise ValueError(f"Invalid stage {value!r}; expected one of: {choices}") from exc


def _validate(args: argparse.Namespace) -> None:
    for attribute in ("account_id", "contact_id", "opportunity_id"):
        value = getattr(args, attribute, None)
        if value is not None:
            setattr(args, attribute, _parse_uuid(value))
    if args.command == "opportunity" and args.opportunity_command == "stage":
        args.stage = _parse_stage(args.stage)
    count = getattr(args, "count", None)
    if count is not None and count < 0:
        raise ValueError("--count must be non-negative")


def _init_database(args: argparse.Namespace) -> int:
    initialise_database(database_uri=args.database_uri)
    return 0


def _log_account(account: Account) -> int:
    log.info("Account %s: %s (%s)", account.id, account.name, account.description or "")
    return 0


def _log_contact(contact: Contact) -> int:
    log.info("Contact %s: %s", contact.id, contact.full_name)
    return 0


def _log_opportunities(opportunities: Iterable[Opportunity]) -> int:
    for opportunity in opportunities:
        log.info(
            "Opportunity %s: %s [%s, closes %s]",
            opportunity.id,
            opportunity.name,
            opportunity.stage,
            opportunity.close_date,
        )
    return 0


def _log_lifecycle(report: LifecycleReport) -> int:
    log.info(
        "%s records created=%s deleted=%s remaining=%s",
        report.record_type,
        report.created,
        report.deleted,
        report.remaining,
    )
    return 0 if report.remaining == 0 else 1


def _upsert_account(args: argparse.Namespace) -> int:
    return _log_account(build_reconciler().upsert_account(args.name))


def _create_account(args: argparse.Namespace) -> int:
    account = build_reconciler().create_account(
        args.name,
        industry=args.industry,
        description=args.description,
        employee_count=args.employee_count,
    )
    return _log_account(account)


def _update_account(args: argparse.Namespace) -> int:
    account = build_reconciler().update_account(
        args.account_id, name=args.name, industry=args.industry
    )
    return _log_account(account)


def _create_contact(args: argparse.Namespace) -> int:
    contact = build_reconciler().create_contact(
        first_name=args.first_name,
        last_name=args.last_name,
        account_id=args.account_id,
    )
    return _log_contact(contact)


def _rename_contact(args: argparse.Namespace) -> int:
    return _log_contact(
        build_reconciler().update_contact_last_name(args.contact_id, args.last_name)
    )


def _link_contacts(args: argparse.Namespace) -> int:
    for contact in link_contacts_from_file(args.path):
        log.info("Contact %s -> account %s", contact.full_name, contact.account_id)
    return 0


def _upsert_opportunities(args: argparse.Namespace) -> int:
    return _log_opportunities(
        build_reconciler().upsert_opportunities(args.account_name, args.names)
    )


def _normalize_opportunities(args: argparse.Namespace) -> int:
    result = normalize_opportunities_from_file(args.path)
    return 0 if result.all_succeeded else 1


def _stage_opportunity(args: argparse.Namespace) -> int:
    opportunity = build_reconciler().update_opportunity_stage(args.opportunity_id, args.stage)
    return _log_opportunities([opportunity])


def _leads_demo(args: argparse.Namespace) -> int:
    return _log_lifecycle(build_reconciler().create_and_delete_leads(args.count))


def _cases_demo(args: argparse.Namespace) -> int:
    return _log_lifecycle(
        build_reconciler().create_and_delete_cases(args.count, account_id=args.account_id)
    )


_COMMANDS: dict[tuple[str, str], Callable[[argparse.Namespace], int]] = {
    ("db", "init"): _init_database,
    ("account", "upsert"): _upsert_account,
    ("account", "create"): _create_account,
    ("account", "update"): _update_account,
    ("contact", "create"): _create_contact,
    ("contact", "rename"): _rename_contact,
    ("contact", "link"): _link_contacts,
    ("opportunity", "upsert"): _upsert_opportunities,
    ("opportunity", "normalize"): _normalize_opportunities,
    ("opportunity", "stage"): _stage_opportunity,
    ("leads", "demo"): _leads_demo,
    ("cases", "demo"): _cases_demo,
}


def _run(args: argparse.Namespace) -> int:
    subcommand = getattr(args, f"{args.command}_command")
    handler = _COMMANDS.get((args.command, subcommand))
    if handler is None:
        raise ValueError(f"Unsupported command: {args.command} {subcommand}")
    return handler(args)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        exit_code = _run(parsed_args)
    except Exception:
        log.exception("Command %s failed", parsed_args.command)
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
