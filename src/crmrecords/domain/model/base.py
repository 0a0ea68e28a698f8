"""
Base building blocks:
identity and the record type discriminator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from uuid import UUID

    from crmrecords.domain.model.enums import RecordType


@dataclass(eq=False, kw_only=True)
class Record:
    """A CRM record. Identity is assigned by the store on first persist."""

    id: UUID | None = None

    # class-level discriminator; subclasses must override
    RECORD_TYPE: ClassVar[RecordType]

    @property
    def is_new(self) -> bool:
        """A record without an identifier has never been persisted."""
        return self.id is None
