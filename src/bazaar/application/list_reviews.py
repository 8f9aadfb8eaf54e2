"""Application service: List Reviews use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from bazaar.application.dto import ReviewDTO, review_to_dto
from bazaar.application.list_orders import MAX_PAGE_SIZE
from bazaar.domain.exceptions import EntityNotFoundError, ValidationError
from bazaar.domain.model.review import MAX_RATING, MIN_RATING
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.repository.review_repository import ReviewRepository


@dataclass(frozen=True)
class ReviewPage:
    reviews: list[ReviewDTO]
    total: int
    page: int
    total_pages: int


class ListReviewsHandler:

    def __init__(
        self,
        review_repo: ReviewRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._review_repo = review_repo
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        rating: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> ReviewPage:
        """Reviews of one product, newest first, optionally of one rating."""
        if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Page must be >= 1 and limit within 1-{MAX_PAGE_SIZE}")
        if rating is not None and not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        if self._product_repo.get_by_id(product_id) is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        reviews = [
            r for r in self._review_repo.list_for_product(product_id)
            if rating is None or r.rating == rating
        ]
        reviews.sort(key=lambda r: (r.created_at, r.id or 0), reverse=True)

        start = (page - 1) * limit
        return ReviewPage(
            reviews=[review_to_dto(r) for r in reviews[start:start + limit]],
            total=len(reviews),
            page=page,
            total_pages=-(-len(reviews) // limit),
        )
