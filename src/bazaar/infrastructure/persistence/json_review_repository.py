"""JSON-file-backed implementation of ReviewRepository."""

from __future__ import annotations

from pathlib import Path

from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.review import Review
from bazaar.domain.repository.review_repository import ReviewRepository
from bazaar.infrastructure.persistence.json_file import (
    JsonFileStore,
    time_from_raw,
    time_to_raw,
)


class JsonReviewRepository(ReviewRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonFileStore(file_path)

    def get_by_id(self, review_id: int) -> Review | None:
        for raw in self._store.load_raw():
            if raw["id"] == review_id:
                return self._to_domain(raw)
        return None

    def list_for_product(self, product_id: str) -> list[Review]:
        return [
            self._to_domain(raw)
            for raw in self._store.load_raw()
            if raw["product_id"] == product_id
        ]

    def save(self, review: Review) -> None:
        with self._store.lock:
            reviews = self._store.load_raw()
            if review.id is None:
                review.id = max((r["id"] for r in reviews), default=0) + 1
                reviews.append(self._to_raw(review))
            else:
                for i, raw in enumerate(reviews):
                    if raw["id"] == review.id:
                        reviews[i] = self._to_raw(review)
                        break
                else:
                    reviews.append(self._to_raw(review))
            self._store.persist_raw(reviews)

    def delete(self, review_id: int) -> None:
        with self._store.lock:
            reviews = self._store.load_raw()
            remaining = [r for r in reviews if r["id"] != review_id]
            if len(remaining) == len(reviews):
                raise EntityNotFoundError(f"Review #{review_id} not found")
            self._store.persist_raw(remaining)

    @staticmethod
    def _to_raw(review: Review) -> dict:
        return {
            "id": review.id,
            "product_id": review.product_id,
            "user_id": review.user_id,
            "rating": review.rating,
            "comment": review.comment,
            "is_verified": review.is_verified,
            "created_at": time_to_raw(review.created_at),
            "updated_at": time_to_raw(review.updated_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Review:
        return Review(
            id=raw["id"],
            product_id=raw["product_id"],
            user_id=raw["user_id"],
            rating=raw["rating"],
            comment=raw.get("comment", ""),
            is_verified=raw.get("is_verified", False),
            created_at=time_from_raw(raw["created_at"]),
            updated_at=time_from_raw(raw.get("updated_at")),
        )
