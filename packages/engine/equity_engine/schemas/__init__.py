"""Equity engine schemas.

This package contains all Pydantic models of the engine:
- Base types, conventions and default tables
- Security classes and stakeholders
- Share ledger entries
- Equity awards (options, RSUs)
- Convertible instruments (SAFEs, notes)
- Rounds and option plans
- Calculator results
- Company datasets and cap table results
- Secondary transfers

Usage:
    from equity_engine.schemas import (
        CompanyDataset, ShareLedgerEntry, OptionAward, SafeInstrument,
        CapTableView, RsuPolicy, TransferRequest
    )
"""

# Base types
from .base import (
    DomainModel,
    ResultModel,
    ShareCount,
    Quantity,
    SignedQuantity,
    MoneyAmount,
    Price,
    Rate,
    Multiple,
    StakeholderId,
    SecurityClassId,
    EntityId,
    SECURITY_CLASS_DEFAULTS,
    LEDGER_ENTRY_DEFAULTS,
    AWARD_DEFAULTS,
    CONVERTIBLE_DEFAULTS,
)

# Security classes and stakeholders
from .share_classes import SecurityClass, Stakeholder, NewStakeholder

# Ledger
from .ledger import ShareLedgerEntry, LedgerEntryType, OUTBOUND_ENTRY_TYPES

# Awards
from .awards import (
    EquityAward,
    OptionAward,
    RsuAward,
    VestingCadence,
    CADENCE_MONTHS,
)

# Convertibles
from .instruments import ConvertibleInstrument, SafeInstrument, ConvertibleNote

# Rounds
from .rounds import Round, OptionPlan, ConversionTerms, PoolTopUp

# Results
from .results import (
    PriceSource,
    PriceReconciliation,
    RoundPricing,
    SafeConversionResult,
    NoteConversionResult,
    NoteTrigger,
    NoteTriggerState,
    PlanAccounting,
    AntiDilutionMethod,
    AntiDilutionAdjustment,
)

# Cap table
from .cap_table import (
    CapTableView,
    RsuPolicy,
    CompanyDataset,
    CapTableRow,
    CapTableTotals,
    CapTableMeta,
    CapTableResult,
    UNALLOCATED_POOL_ID,
)

# Transfers
from .transfers import TransferRequest, TransferResult, NEW_STAKEHOLDER

__all__ = [
    # Base types
    "DomainModel",
    "ResultModel",
    "ShareCount",
    "Quantity",
    "SignedQuantity",
    "MoneyAmount",
    "Price",
    "Rate",
    "Multiple",
    "StakeholderId",
    "SecurityClassId",
    "EntityId",
    "SECURITY_CLASS_DEFAULTS",
    "LEDGER_ENTRY_DEFAULTS",
    "AWARD_DEFAULTS",
    "CONVERTIBLE_DEFAULTS",
    # Security classes and stakeholders
    "SecurityClass",
    "Stakeholder",
    "NewStakeholder",
    # Ledger
    "ShareLedgerEntry",
    "LedgerEntryType",
    "OUTBOUND_ENTRY_TYPES",
    # Awards
    "EquityAward",
    "OptionAward",
    "RsuAward",
    "VestingCadence",
    "CADENCE_MONTHS",
    # Convertibles
    "ConvertibleInstrument",
    "SafeInstrument",
    "ConvertibleNote",
    # Rounds
    "Round",
    "OptionPlan",
    "ConversionTerms",
    "PoolTopUp",
    # Results
    "PriceSource",
    "PriceReconciliation",
    "RoundPricing",
    "SafeConversionResult",
    "NoteConversionResult",
    "NoteTrigger",
    "NoteTriggerState",
    "PlanAccounting",
    "AntiDilutionMethod",
    "AntiDilutionAdjustment",
    # Cap table
    "CapTableView",
    "RsuPolicy",
    "CompanyDataset",
    "CapTableRow",
    "CapTableTotals",
    "CapTableMeta",
    "CapTableResult",
    "UNALLOCATED_POOL_ID",
    # Transfers
    "TransferRequest",
    "TransferResult",
    "NEW_STAKEHOLDER",
]
