"""Review aggregate: one customer's rating of one product."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from bazaar.domain.exceptions import ValidationError

MIN_RATING = 1
MAX_RATING = 5


def _check_rating(rating: int) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be a whole number")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


@dataclass
class Review:
    id: int | None
    product_id: str
    user_id: str
    rating: int
    comment: str = ""
    is_verified: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime | None = None

    @staticmethod
    def create(product_id: str, user_id: str, rating: int, comment: str = "") -> Review:
        _check_rating(rating)
        # Reviews are only accepted after a paid purchase.
        return Review(
            id=None,
            product_id=product_id,
            user_id=user_id,
            rating=rating,
            comment=comment.strip(),
            is_verified=True,
        )

    def edit(self, rating: int | None = None, comment: str | None = None) -> None:
        if rating is not None:
            _check_rating(rating)
            self.rating = rating
        if comment is not None:
            self.comment = comment.strip()
        self.updated_at = datetime.now(timezone.utc)
