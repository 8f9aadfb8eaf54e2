"""JSON-file-backed implementation of CouponRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Callable, TypeVar

from bazaar.domain.exceptions import EntityNotFoundError, ValidationError
from bazaar.domain.model.coupon import Coupon, CouponUsage, DiscountType, normalize_code
from bazaar.domain.repository.coupon_repository import CouponRepository
from bazaar.infrastructure.persistence.json_file import (
    JsonFileStore,
    money_from_raw,
    money_to_raw,
    time_from_raw,
    time_to_raw,
)

T = TypeVar("T")


class JsonCouponRepository(CouponRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonFileStore(file_path)

    # --- CouponRepository interface -------------------------------------------

    def get_by_code(self, code: str) -> Coupon | None:
        wanted = normalize_code(code)
        for raw in self._store.load_raw():
            if raw["code"] == wanted:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Coupon]:
        return [self._to_domain(raw) for raw in self._store.load_raw()]

    def add(self, coupon: Coupon) -> None:
        with self._store.lock:
            coupons = self._store.load_raw()
            if any(raw["code"] == coupon.code for raw in coupons):
                raise ValidationError(f"Coupon code '{coupon.code}' already exists")
            coupons.append(self._to_raw(coupon))
            self._store.persist_raw(coupons)

    def update(self, code: str, mutation: Callable[[Coupon], T]) -> T:
        wanted = normalize_code(code)
        with self._store.lock:
            coupons = self._store.load_raw()
            for i, raw in enumerate(coupons):
                if raw["code"] == wanted:
                    break
            else:
                raise EntityNotFoundError(f"Coupon {wanted} not found")

            coupon = self._to_domain(raw)
            result = mutation(coupon)
            coupons[i] = self._to_raw(coupon)
            self._store.persist_raw(coupons)
            return result

    def delete(self, code: str) -> None:
        wanted = normalize_code(code)
        with self._store.lock:
            coupons = self._store.load_raw()
            remaining = [raw for raw in coupons if raw["code"] != wanted]
            if len(remaining) == len(coupons):
                raise EntityNotFoundError(f"Coupon {wanted} not found")
            self._store.persist_raw(remaining)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(coupon: Coupon) -> dict:
        return {
            "code": coupon.code,
            "description": coupon.description,
            "discount_type": coupon.discount_type.value,
            "discount_value": str(coupon.discount_value),
            "max_discount_amount": money_to_raw(coupon.max_discount_amount),
            "min_purchase_amount": money_to_raw(coupon.min_purchase_amount),
            "start_date": time_to_raw(coupon.start_date),
            "end_date": time_to_raw(coupon.end_date),
            "usage_limit": coupon.usage_limit,
            "used_count": coupon.used_count,
            "per_user_limit": coupon.per_user_limit,
            "used_by": {
                user_id: {"used_count": usage.used_count, "last_used": time_to_raw(usage.last_used)}
                for user_id, usage in coupon.used_by.items()
            },
            "is_active": coupon.is_active,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Coupon:
        return Coupon(
            code=raw["code"],
            description=raw.get("description", ""),
            discount_type=DiscountType(raw["discount_type"]),
            discount_value=Decimal(raw["discount_value"]),
            max_discount_amount=money_from_raw(raw.get("max_discount_amount")),
            min_purchase_amount=money_from_raw(raw["min_purchase_amount"]),
            start_date=time_from_raw(raw["start_date"]),
            end_date=time_from_raw(raw["end_date"]),
            usage_limit=raw.get("usage_limit"),
            used_count=raw.get("used_count", 0),
            per_user_limit=raw.get("per_user_limit", 1),
            used_by={
                user_id: CouponUsage(
                    used_count=usage["used_count"],
                    last_used=time_from_raw(usage.get("last_used")),
                )
                for user_id, usage in raw.get("used_by", {}).items()
            },
            is_active=raw.get("is_active", True),
        )
