"""Domain service: product rating rollup.

Always a full recompute from the stored reviews; review volume per
product is small enough that incremental bookkeeping isn't worth its
drift.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.product import Ratings
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.repository.review_repository import ReviewRepository


def summarize(ratings: list[int]) -> Ratings:
    """Count and mean of ``ratings``, the mean rounded half-up to one place."""
    if not ratings:
        return Ratings(average=0.0, count=0)
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return Ratings(
        average=float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)),
        count=len(ratings),
    )


class RatingAggregator:

    def __init__(
        self,
        product_repo: ProductRepository,
        review_repo: ReviewRepository,
    ) -> None:
        self._product_repo = product_repo
        self._review_repo = review_repo

    def recompute(self, product_id: str) -> Ratings:
        if self._product_repo.get_by_id(product_id) is None:
            raise EntityNotFoundError(f"Product not found: '{product_id}'")
        ratings = summarize(
            [review.rating for review in self._review_repo.list_for_product(product_id)]
        )
        self._product_repo.set_ratings(product_id, ratings)
        return ratings
