"""Security classes and stakeholders.

A security class defines the rights attached to a block of shares (common,
Series A preferred, ...). Classes are immutable once ledger entries reference
them: a changed preference means a new class, not an edited one.
"""

from typing import Optional, Literal
from decimal import Decimal
from pydantic import Field

from .base import (
    DomainModel,
    Multiple,
    SecurityClassId,
    StakeholderId,
    SECURITY_CLASS_DEFAULTS,
)


# =============================================================================
# Security Class
# =============================================================================

class SecurityClass(DomainModel):
    """A class of shares with economic and voting rights.

    Examples:
        - Common Stock: tier 0, 1x preference irrelevant, 1 vote per share
        - Series A Preferred: tier 1, 1x non-participating, converts 1:1
        - Founder Preferred: 10x voting rights, otherwise same as common

    Seniority:
        Higher tiers are paid first in a liquidation. The engine only carries
        the tier; exit waterfalls are computed elsewhere.
    """

    id: SecurityClassId
    name: str = Field(min_length=1, description="Human-readable name (e.g., 'Series A Preferred')")

    seniority_tier: int = Field(
        default=SECURITY_CLASS_DEFAULTS["seniority_tier"],
        ge=0,
        description="Liquidation priority tier (higher = more senior)"
    )

    liquidation_preference_multiple: Multiple = Field(
        default=SECURITY_CLASS_DEFAULTS["liquidation_preference_multiple"],
        description="Liquidation preference multiple (1.0 = 1x)"
    )

    participating: bool = Field(
        default=SECURITY_CLASS_DEFAULTS["participating"],
        description="Participates pro rata after receiving its preference"
    )

    convert_to_common_ratio: Decimal = Field(
        default=SECURITY_CLASS_DEFAULTS["convert_to_common_ratio"],
        gt=0,
        description="1 share of this class converts into N common shares"
    )

    voting_rights: Multiple = Field(
        default=SECURITY_CLASS_DEFAULTS["voting_rights"],
        description="Votes per share"
    )


# =============================================================================
# Stakeholder
# =============================================================================

class Stakeholder(DomainModel):
    """A person or entity that can hold shares, awards or instruments."""

    id: StakeholderId
    name: str = Field(min_length=1)
    email: Optional[str] = None
    stakeholder_type: Literal["individual", "entity"] = "individual"


class NewStakeholder(DomainModel):
    """Data for a stakeholder created as part of a secondary transfer.

    ``name`` is optional at the schema level so that the transfer can report
    a missing name with its own error code.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    stakeholder_type: Literal["individual", "entity"] = "individual"
