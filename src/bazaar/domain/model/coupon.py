"""Coupon aggregate.

Created by an admin; only order placement mutates its usage counters.
Usage consumed by an order is never handed back when the order is
cancelled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.value_objects import Money


REVISABLE_FIELDS = {
    "description",
    "discount_value",
    "max_discount_amount",
    "min_purchase_amount",
    "start_date",
    "end_date",
    "usage_limit",
    "per_user_limit",
    "is_active",
}


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass
class CouponUsage:
    used_count: int = 0
    last_used: datetime | None = None


@dataclass
class Coupon:
    """Invariants:

    - ``used_count`` never exceeds ``usage_limit`` (when one is set)
    - no user's ``used_count`` exceeds ``per_user_limit``
    """

    code: str
    discount_type: DiscountType
    discount_value: Decimal
    start_date: datetime
    end_date: datetime
    description: str = ""
    max_discount_amount: Money | None = None
    min_purchase_amount: Money = field(default_factory=Money.zero)
    usage_limit: int | None = None
    used_count: int = 0
    per_user_limit: int = 1
    used_by: dict[str, CouponUsage] = field(default_factory=dict)
    is_active: bool = True

    def __post_init__(self) -> None:
        self.code = normalize_code(self.code)
        # Naive dates are taken as UTC so they compare against aware "now".
        self.start_date = _as_utc(self.start_date)
        self.end_date = _as_utc(self.end_date)
        if self.discount_value < 0:
            raise ValidationError("Discount value cannot be negative")

    # --- Factory (used for NEW coupons only) ----------------------------------

    @staticmethod
    def create(
        code: str,
        discount_type: DiscountType,
        discount_value: Decimal,
        start_date: datetime,
        end_date: datetime,
        **options,
    ) -> Coupon:
        if not code or not code.strip():
            raise ValidationError("Coupon code is required")
        start_date, end_date = _as_utc(start_date), _as_utc(end_date)
        if end_date <= start_date:
            raise ValidationError("Coupon end date must be after its start date")
        if discount_type == DiscountType.PERCENTAGE and discount_value > 100:
            raise ValidationError("Percentage discount cannot exceed 100")
        if options.get("per_user_limit", 1) < 1:
            raise ValidationError("Per-user limit must be at least 1")
        usage_limit = options.get("usage_limit")
        if usage_limit is not None and usage_limit < 1:
            raise ValidationError("Usage limit must be at least 1")
        return Coupon(
            code=code,
            discount_type=discount_type,
            discount_value=discount_value,
            start_date=start_date,
            end_date=end_date,
            **options,
        )

    # --- Administration -------------------------------------------------------

    def revise(self, **changes) -> None:
        """Apply an admin edit of the coupon terms.

        The code is the coupon's identity and cannot change; usage
        counters are only moved by order placement.
        """
        unknown = set(changes) - REVISABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot change coupon field(s): {', '.join(sorted(unknown))}")

        start = _as_utc(changes.get("start_date", self.start_date))
        end = _as_utc(changes.get("end_date", self.end_date))
        if end <= start:
            raise ValidationError("Coupon end date must be after its start date")
        value = changes.get("discount_value", self.discount_value)
        if value < 0:
            raise ValidationError("Discount value cannot be negative")
        if self.discount_type == DiscountType.PERCENTAGE and value > 100:
            raise ValidationError("Percentage discount cannot exceed 100")
        if changes.get("per_user_limit", self.per_user_limit) < 1:
            raise ValidationError("Per-user limit must be at least 1")
        usage_limit = changes.get("usage_limit", self.usage_limit)
        if usage_limit is not None and usage_limit < max(1, self.used_count):
            raise ValidationError(
                f"Usage limit cannot be below the {self.used_count} redemption(s) already made"
            )

        for name, new_value in changes.items():
            setattr(self, name, new_value)
        self.start_date, self.end_date = start, end

    def is_available(self, now: datetime | None = None) -> bool:
        """Active, within its validity window and not used up."""
        now = now or datetime.now(timezone.utc)
        return self.is_active and self.start_date <= now <= self.end_date and not self.limit_reached

    # --- Usage ----------------------------------------------------------------

    def usage_for(self, user_id: str) -> int:
        usage = self.used_by.get(user_id)
        return usage.used_count if usage else 0

    @property
    def limit_reached(self) -> bool:
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    def user_limit_reached(self, user_id: str) -> bool:
        return self.usage_for(user_id) >= self.per_user_limit

    def record_usage(self, user_id: str, now: datetime | None = None) -> None:
        """Count one redemption globally and for ``user_id``.

        Refuses to break either usage bound; callers validate first, so a
        refusal here means another order consumed the last redemption.
        """
        if self.limit_reached:
            raise ValidationError("Coupon usage limit reached")
        if self.user_limit_reached(user_id):
            raise ValidationError("You have already used this coupon")
        now = now or datetime.now(timezone.utc)
        usage = self.used_by.setdefault(user_id, CouponUsage())
        usage.used_count += 1
        usage.last_used = now
        self.used_count += 1

    def revoke_usage(self, user_id: str) -> None:
        """Undo a redemption whose order was never committed."""
        usage = self.used_by.get(user_id)
        if usage is None or usage.used_count == 0:
            raise ValidationError(f"User {user_id} has no usage of {self.code} to revoke")
        usage.used_count -= 1
        self.used_count -= 1


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
