"""Typed errors raised by the equity engine.

The engine distinguishes between "no answer" (returned as ``None``, e.g. no
priced round means no price per share) and caller mistakes, which raise one of
the errors below. Every error carries a stable ``code`` and a ``details`` dict
so that an API layer can render a precise message without parsing strings.

Taxonomy:
    EquityEngineError
    ├── ValidationError            missing/malformed input, non-positive quantity
    │   ├── SelfTransferNotAllowedError
    │   └── MissingBuyerNameError
    ├── NotFoundError              referenced stakeholder/class/instrument missing
    │   ├── SecurityClassNotFoundError
    │   └── BuyerNotFoundError
    ├── InsufficientBalanceError   a (holder, class) balance would go negative
    │   ├── InsufficientSharesError
    │   └── InsufficientPoolError      grant exceeds the unallocated option pool
    └── ConfigurationError         contradictory or insufficient conversion inputs
"""

from typing import Any, Dict, Optional


class EquityEngineError(Exception):
    """Base class for all engine errors."""

    code: str = "EQUITY_ENGINE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Structured payload for API layers."""
        payload: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = dict(self.details)
        return payload


# =============================================================================
# Validation
# =============================================================================

class ValidationError(EquityEngineError):
    """Missing or malformed required input."""

    code = "VALIDATION_ERROR"


class SelfTransferNotAllowedError(ValidationError):
    """Seller and buyer of a secondary transfer are the same stakeholder."""

    code = "SELF_TRANSFER"

    def __init__(self, stakeholder_id: str):
        super().__init__(
            "Seller and buyer must be different stakeholders",
            {"stakeholderId": stakeholder_id},
        )


class MissingBuyerNameError(ValidationError):
    """A new buyer was requested without a name."""

    code = "MISSING_BUYER_NAME"

    def __init__(self):
        super().__init__("New buyer name is required when creating a new stakeholder")


# =============================================================================
# Not found
# =============================================================================

class NotFoundError(EquityEngineError):
    """A referenced entity does not exist."""

    code = "NOT_FOUND"

    def __init__(self, message: str, entity: str = "", entity_id: str = ""):
        details = {"entity": entity, "id": entity_id} if entity else None
        super().__init__(message, details)


class SecurityClassNotFoundError(NotFoundError):
    code = "SECURITY_CLASS_NOT_FOUND"

    def __init__(self, class_id: str):
        super().__init__("Security class not found", "security_class", class_id)


class BuyerNotFoundError(NotFoundError):
    code = "BUYER_NOT_FOUND"

    def __init__(self, buyer_id: str):
        super().__init__("Buyer stakeholder not found", "stakeholder", buyer_id)


# =============================================================================
# Balances
# =============================================================================

class InsufficientBalanceError(EquityEngineError):
    """A mutation would drive a (holder, class) balance negative."""

    code = "INSUFFICIENT_BALANCE"

    def __init__(self, message: str, requested: int, available: int):
        super().__init__(message, {"requested": requested, "available": available})
        self.requested = requested
        self.available = available


class InsufficientSharesError(InsufficientBalanceError):
    code = "INSUFFICIENT_SHARES"

    def __init__(self, requested: int, available: int):
        super().__init__("Insufficient shares for transfer", requested, available)


class InsufficientPoolError(InsufficientBalanceError):
    """A grant asks for more shares than the option plans have available."""

    code = "INSUFFICIENT_POOL"

    def __init__(self, requested: int, available: int):
        super().__init__("Insufficient shares available in option plan", requested, available)


# =============================================================================
# Configuration
# =============================================================================

class ConfigurationError(EquityEngineError):
    """A conversion was requested with contradictory or insufficient inputs."""

    code = "CONFIGURATION_ERROR"
