"""Abstract repository for Review aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bazaar.domain.model.review import Review


class ReviewRepository(ABC):

    @abstractmethod
    def get_by_id(self, review_id: int) -> Review | None:
        """Return a review by its ID, or None if not found."""

    @abstractmethod
    def list_for_product(self, product_id: str) -> list[Review]:
        """Return every review of a product."""

    @abstractmethod
    def save(self, review: Review) -> None:
        """Persist a new or updated review (assigns ``id`` on insert)."""

    @abstractmethod
    def delete(self, review_id: int) -> None:
        """Remove a review."""

    def find_by_author(self, product_id: str, user_id: str) -> Review | None:
        for review in self.list_for_product(product_id):
            if review.user_id == user_id:
                return review
        return None
