"""Equity Engine - deterministic cap table computation.

This package turns a company's raw instrument ledger into ownership tables:
- Share ledger balances and secondary transfers
- Options and RSUs with cliff/cadence vesting
- SAFEs and convertible notes, converted as-if at the reference round
- Price derivation and reconciliation across rounds

The engine is designed to be:
- Framework-agnostic (no web, no ORM; persistence sits behind protocols)
- Deterministic (same records + same as-of date = same cap table)
- Testable (pure functions over frozen Pydantic models)
"""

from .schemas import *  # noqa: F403, F401
from .errors import (  # noqa: F401
    EquityEngineError,
    ValidationError,
    SelfTransferNotAllowedError,
    MissingBuyerNameError,
    NotFoundError,
    SecurityClassNotFoundError,
    BuyerNotFoundError,
    InsufficientBalanceError,
    InsufficientSharesError,
    InsufficientPoolError,
    ConfigurationError,
)

__version__ = "0.1.0"
