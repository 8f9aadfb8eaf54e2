"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and translate them into
user-facing messages and status codes.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class VariantNotFoundError(EntityNotFoundError):
    """A product exists but the requested variant does not."""


class InsufficientStockError(DomainException):
    """The requested quantity exceeds the stock available at its location."""

    def __init__(self, message: str, product_id: str, variant_id: str | None = None) -> None:
        super().__init__(message)
        self.product_id = product_id
        self.variant_id = variant_id


class CouponInvalidError(DomainException):
    """A coupon was rejected; the message is the evaluator's reason."""


class UnauthorizedError(DomainException):
    """The acting user's role or ownership does not permit the operation."""


class ConflictError(DomainException):
    """A guarded update lost against a concurrent mutation."""
