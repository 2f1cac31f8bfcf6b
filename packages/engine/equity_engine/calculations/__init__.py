"""Pure calculation functions.

Every function here is deterministic and side-effect free: inputs in, Decimal
or result model out. Nothing reads the clock or storage.
"""

from .rounding import (
    round_shares,
    round_money,
    round_price,
    round_percentage,
    calculate_percentage,
    to_minor_units,
    from_minor_units,
)
from .pricing import (
    derive_from_valuation,
    derive_from_consideration,
    reconcile,
    reconcile_round,
    reference_round,
    price_round,
)
from .vesting import (
    VestingTranche,
    months_elapsed,
    vested_quantity,
    vested_for_award,
    unvested_for_award,
    vesting_schedule,
)
from .safe import convert_safe, select_conversion_price
from .notes import accrue_interest, convert_note, evaluate_trigger
from .balances import ledger_balances, balance_of, available_balance, cost_basis
from .splits import split_ratio, split_adjustment_entries, split_adjusted_award
from .option_plans import plan_accounting, allocate_grant, validate_grant
from .anti_dilution import adjust_conversion_price

__all__ = [
    "round_shares",
    "round_money",
    "round_price",
    "round_percentage",
    "calculate_percentage",
    "to_minor_units",
    "from_minor_units",
    "derive_from_valuation",
    "derive_from_consideration",
    "reconcile",
    "reconcile_round",
    "reference_round",
    "price_round",
    "VestingTranche",
    "months_elapsed",
    "vested_quantity",
    "vested_for_award",
    "unvested_for_award",
    "vesting_schedule",
    "convert_safe",
    "select_conversion_price",
    "accrue_interest",
    "convert_note",
    "evaluate_trigger",
    "ledger_balances",
    "balance_of",
    "available_balance",
    "cost_basis",
    "split_ratio",
    "split_adjustment_entries",
    "split_adjusted_award",
    "plan_accounting",
    "allocate_grant",
    "validate_grant",
    "adjust_conversion_price",
]
