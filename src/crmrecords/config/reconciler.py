"""Tunables for the record reconciler."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from crmrecords.domain.model import OpportunityStage

from .env import optional_int_env

DEFAULT_ACCOUNT_LOOKUP_LIMIT: Final[int] = 10
DEFAULT_NORMALIZED_AMOUNT: Final[int] = 50_000
CREATED_DESCRIPTION: Final[str] = "Created Account"
UPDATED_DESCRIPTION: Final[str] = "Updated Account"


@dataclass(frozen=True, slots=True)
class ReconcilerConfig:
    """Fixed values the reconciler writes onto records."""

    account_lookup_limit: int = DEFAULT_ACCOUNT_LOOKUP_LIMIT
    created_description: str = CREATED_DESCRIPTION
    updated_description: str = UPDATED_DESCRIPTION
    prospect_stage: OpportunityStage = OpportunityStage.PROSPECTING
    prospect_close_months: int = 2
    won_stage: OpportunityStage = OpportunityStage.CLOSED_WON
    normalized_stage: OpportunityStage = OpportunityStage.QUALIFICATION
    normalized_close_months: int = 3
    normalized_amount: Decimal = Decimal(DEFAULT_NORMALIZED_AMOUNT)


def get_reconciler_config() -> ReconcilerConfig:
    """Build the reconciler config, honouring environment overrides."""

    return ReconcilerConfig(
        account_lookup_limit=optional_int_env(
            "CRMRECORDS_ACCOUNT_LOOKUP_LIMIT", DEFAULT_ACCOUNT_LOOKUP_LIMIT, minimum=1
        ),
        normalized_amount=Decimal(
            optional_int_env("CRMRECORDS_NORMALIZED_AMOUNT", DEFAULT_NORMALIZED_AMOUNT)
        ),
    )
