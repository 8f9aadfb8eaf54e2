"""Application service: Remove Review use case."""

from __future__ import annotations

import structlog

from bazaar.application.side_effects import PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import EntityNotFoundError, UnauthorizedError
from bazaar.domain.model.value_objects import Actor
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.repository.review_repository import ReviewRepository
from bazaar.domain.service.rating_aggregator import RatingAggregator

logger = structlog.get_logger(__name__)


class RemoveReviewHandler:

    def __init__(
        self,
        review_repo: ReviewRepository,
        product_repo: ProductRepository,
        side_effects: SideEffects | None = None,
    ) -> None:
        self._review_repo = review_repo
        self._product_repo = product_repo
        self._side_effects = side_effects or SideEffects()

    def handle(self, actor: Actor, review_id: int) -> None:
        review = self._review_repo.get_by_id(review_id)
        if review is None:
            raise EntityNotFoundError(f"Review #{review_id} not found")
        if not actor.is_admin and review.user_id != actor.user_id:
            raise UnauthorizedError("Not authorized to remove this review")

        self._review_repo.delete(review_id)
        ratings = RatingAggregator(self._product_repo, self._review_repo).recompute(review.product_id)
        logger.info(
            "Review removed",
            review_id=review_id,
            product_id=review.product_id,
            removed_by=actor.user_id,
            average=ratings.average,
        )
        self._side_effects.invalidate(PRODUCTS_CACHE)
        self._side_effects.publish(
            "review_removed",
            {
                "review_id": review_id,
                "product_id": review.product_id,
                "average": ratings.average,
                "count": ratings.count,
            },
        )
