"""Application service: Submit Review use case.

Only customers with a paid order containing the product may review it,
once per product. The product's rating summary is recomputed from all
stored reviews afterwards.
"""

from __future__ import annotations

import structlog

from bazaar.application.authorization import require_role
from bazaar.application.dto import ReviewDTO, review_to_dto
from bazaar.application.side_effects import PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import EntityNotFoundError, UnauthorizedError, ValidationError
from bazaar.domain.model.review import Review
from bazaar.domain.model.value_objects import Actor, Role
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.repository.review_repository import ReviewRepository
from bazaar.domain.service.rating_aggregator import RatingAggregator

logger = structlog.get_logger(__name__)


class SubmitReviewHandler:

    def __init__(
        self,
        review_repo: ReviewRepository,
        product_repo: ProductRepository,
        order_repo: OrderRepository,
        side_effects: SideEffects | None = None,
    ) -> None:
        self._review_repo = review_repo
        self._product_repo = product_repo
        self._order_repo = order_repo
        self._side_effects = side_effects or SideEffects()

    def handle(self, actor: Actor, product_id: str, rating: int, comment: str = "") -> ReviewDTO:
        require_role(actor, Role.CUSTOMER)
        if self._product_repo.get_by_id(product_id) is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        if not self._order_repo.has_paid_order(actor.user_id, product_id):
            raise UnauthorizedError("You can only review products you have purchased")
        if self._review_repo.find_by_author(product_id, actor.user_id) is not None:
            raise ValidationError("You have already reviewed this product")

        review = Review.create(product_id, actor.user_id, rating, comment)
        self._review_repo.save(review)
        ratings = RatingAggregator(self._product_repo, self._review_repo).recompute(product_id)

        logger.info(
            "Review submitted",
            review_id=review.id,
            product_id=product_id,
            rating=rating,
            average=ratings.average,
        )
        self._side_effects.invalidate(PRODUCTS_CACHE)
        self._side_effects.publish(
            "review_added",
            {
                "review_id": review.id,
                "product_id": product_id,
                "rating": rating,
                "average": ratings.average,
                "count": ratings.count,
            },
        )
        return review_to_dto(review)
