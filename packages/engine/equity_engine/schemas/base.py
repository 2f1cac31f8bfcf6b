"""Base classes and type system for equity engine models.

This module provides the foundational types and base classes used throughout
the schema system, plus the per-entity default tables.
"""

from decimal import Decimal
from typing import Annotated
from pydantic import BaseModel, Field, ConfigDict

# =============================================================================
# Base Model
# =============================================================================

class DomainModel(BaseModel):
    """Base class for all domain models.

    Ledger-side records (entries, awards, instruments, rounds) are created once
    and never mutated in place: corrections are new offsetting records. The
    base model is therefore frozen; derive a changed copy with
    ``model.model_copy(update={...})``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",  # Fields of one variant are rejected on another (e.g. RSU strike price)
        use_enum_values=True,  # Use enum values in JSON
        arbitrary_types_allowed=True,  # Allow Decimal, date, etc.
    )


class ResultModel(BaseModel):
    """Base class for derived, never-persisted outputs (cap table rows, conversion results)."""

    model_config = ConfigDict(
        frozen=True,
        use_enum_values=True,
    )


# =============================================================================
# Type Aliases - Numeric
# =============================================================================

ShareCount = Annotated[
    Decimal,
    Field(ge=0, description="Number of shares (non-negative, up to 6 decimals)")
]

Quantity = Annotated[
    int,
    Field(ge=0, description="Whole number of shares or units (non-negative)")
]

SignedQuantity = Annotated[
    int,
    Field(description="Signed whole number of shares (positive = inbound, negative = outbound)")
]

MoneyAmount = Annotated[
    Decimal,
    Field(ge=0, description="Currency amount (non-negative)")
]

Price = Annotated[
    Decimal,
    Field(gt=0, description="Price per share (strictly positive)")
]

Rate = Annotated[
    Decimal,
    Field(ge=0, lt=1, description="Rate as decimal fraction (0.20 = 20%)")
]

Multiple = Annotated[
    Decimal,
    Field(ge=0, description="Multiplier value (e.g., 2x = 2.0)")
]


# =============================================================================
# ID Conventions
# =============================================================================

StakeholderId = Annotated[
    str,
    Field(min_length=1, description="Stakeholder identifier (UUID or user-defined)")
]

SecurityClassId = Annotated[
    str,
    Field(min_length=1, description="Security class identifier")
]

EntityId = Annotated[
    str,
    Field(min_length=1, description="Identifier for ledger entries, awards, instruments and rounds")
]


# =============================================================================
# Default Tables
# =============================================================================
#
# One table per entity. Model fields take their defaults from these tables so
# that an omitted optional field means the same thing at every construction
# site.

SECURITY_CLASS_DEFAULTS = {
    "seniority_tier": 0,
    "liquidation_preference_multiple": Decimal("1.0"),
    "participating": False,
    "convert_to_common_ratio": Decimal("1.0"),
    "voting_rights": Decimal("1.0"),
}

LEDGER_ENTRY_DEFAULTS = {
    "entry_type": "issuance",
}

AWARD_DEFAULTS = {
    "quantity_exercised": 0,
    "quantity_canceled": 0,
    "cliff_months": 12,
    "total_months": 48,
    "cadence": "monthly",
    "option_kind": "NSO",
}

CONVERTIBLE_DEFAULTS = {
    "post_money": False,
}
