"""Abstract repository for Coupon aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, TypeVar

from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.coupon import Coupon

T = TypeVar("T")


class CouponRepository(ABC):
    """Codes are looked up case-insensitively (stored uppercase).

    Usage counters are contended like stock, so they change only through
    ``update``, which must be atomic per coupon.
    """

    @abstractmethod
    def get_by_code(self, code: str) -> Coupon | None:
        """Return the coupon with this code, or None."""

    @abstractmethod
    def list_all(self) -> list[Coupon]:
        """Return every coupon."""

    @abstractmethod
    def add(self, coupon: Coupon) -> None:
        """Insert a new coupon; a taken code raises ValidationError.

        The uniqueness check and the insert happen under one lock.
        """

    @abstractmethod
    def delete(self, code: str) -> None:
        """Remove the coupon; raise EntityNotFoundError if absent."""

    @abstractmethod
    def update(self, code: str, mutation: Callable[[Coupon], T]) -> T:
        """Atomically apply ``mutation`` to the stored coupon and persist it."""

    def claim_usage(self, code: str, user_id: str, now: datetime | None = None) -> bool:
        """Record one redemption unless a limit would be exceeded."""

        def claim(coupon: Coupon) -> bool:
            try:
                coupon.record_usage(user_id, now)
            except ValidationError:
                return False
            return True

        return self.update(code, claim)

    def release_usage(self, code: str, user_id: str) -> None:
        self.update(code, lambda c: c.revoke_usage(user_id))
