"""Read contact and opportunity batches from JSON files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from crmrecords.domain.errors import CrmRecordsError

from .schema import ContactBatch, OpportunityBatch
from .translator import translate_contact, translate_opportunity

if TYPE_CHECKING:
    from pathlib import Path

    from crmrecords.domain.model import Contact, Opportunity


class BatchFileError(CrmRecordsError, ValueError):
    """Raised when a batch file cannot be read or does not match its schema."""


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise BatchFileError(f"Cannot read batch file {path}: {exc}") from exc


def load_contacts(path: Path) -> list[Contact]:
    """Load ``{"contacts": [...]}`` from ``path``."""

    try:
        batch = ContactBatch.model_validate_json(_read(path))
    except ValidationError as exc:
        raise BatchFileError(f"Invalid contact batch file {path}: {exc}") from exc
    return [translate_contact(payload) for payload in batch.contacts]


def load_opportunities(path: Path) -> list[Opportunity]:
    """Load ``{"opportunities": [...]}`` from ``path``."""

    try:
        batch = OpportunityBatch.model_validate_json(_read(path))
    except ValidationError as exc:
        raise BatchFileError(f"Invalid opportunity batch file {path}: {exc}") from exc
    return [translate_opportunity(payload) for payload in batch.opportunities]


__all__ = [
    "BatchFileError",
    "ContactBatch",
    "OpportunityBatch",
    "load_contacts",
    "load_opportunities",
]
