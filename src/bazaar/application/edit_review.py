"""Application service: Edit Review use case."""

from __future__ import annotations

import structlog

from bazaar.application.dto import ReviewDTO, review_to_dto
from bazaar.application.side_effects import PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import EntityNotFoundError, UnauthorizedError
from bazaar.domain.model.value_objects import Actor
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.repository.review_repository import ReviewRepository
from bazaar.domain.service.rating_aggregator import RatingAggregator

logger = structlog.get_logger(__name__)


class EditReviewHandler:

    def __init__(
        self,
        review_repo: ReviewRepository,
        product_repo: ProductRepository,
        side_effects: SideEffects | None = None,
    ) -> None:
        self._review_repo = review_repo
        self._product_repo = product_repo
        self._side_effects = side_effects or SideEffects()

    def handle(
        self,
        actor: Actor,
        review_id: int,
        rating: int | None = None,
        comment: str | None = None,
    ) -> ReviewDTO:
        review = self._review_repo.get_by_id(review_id)
        if review is None:
            raise EntityNotFoundError(f"Review #{review_id} not found")
        if review.user_id != actor.user_id:
            raise UnauthorizedError("Only the author can edit this review")

        review.edit(rating=rating, comment=comment)
        self._review_repo.save(review)
        payload = {"review_id": review.id, "product_id": review.product_id, "rating": review.rating}
        if rating is not None:
            ratings = RatingAggregator(self._product_repo, self._review_repo).recompute(review.product_id)
            self._side_effects.invalidate(PRODUCTS_CACHE)
            payload.update(average=ratings.average, count=ratings.count)

        logger.info("Review updated", review_id=review.id, product_id=review.product_id, rating=review.rating)
        self._side_effects.publish("review_updated", payload)
        return review_to_dto(review)
