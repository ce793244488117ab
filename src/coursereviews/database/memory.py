import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..errors import DuplicateReviewError, ReviewNotFoundError, ReviewPermissionError
from ..models import Review, ReviewCreate, ReviewUpdate
from .base import ReviewStore

logger = logging.getLogger(__name__)


class InMemoryReviewStore(ReviewStore):
    """Review store backed by a dict, for tests and runs without a database."""

    def __init__(self):
        self._reviews: Dict[str, Review] = {}
        self._lock = asyncio.Lock()

    async def find_by_course_and_user(self, course_id: str, user_id: str) -> Optional[Review]:
        for review in self._reviews.values():
            if review.course_id == course_id and review.user_id == user_id:
                return review.model_copy()
        return None

    async def get(self, review_id: str) -> Optional[Review]:
        review = self._reviews.get(review_id)
        return review.model_copy() if review else None

    async def insert(self, review: ReviewCreate) -> Review:
        async with self._lock:
            if await self.find_by_course_and_user(review.course_id, review.user_id):
                raise DuplicateReviewError(review.course_id, review.user_id)

            stored = Review(
                id=str(uuid.uuid4()),
                course_id=review.course_id,
                user_id=review.user_id,
                user_name=review.user_name,
                rating=review.rating,
                review=review.review,
                created_at=datetime.now(timezone.utc),
            )
            self._reviews[stored.id] = stored
            return stored.model_copy()

    def _get_owned(self, review_id: str, caller_user_id: str, action: str) -> Review:
        review = self._reviews.get(review_id)
        if review is None:
            raise ReviewNotFoundError(review_id)
        if review.user_id != caller_user_id:
            raise ReviewPermissionError(action)
        return review

    async def update(self, review_id: str, caller_user_id: str, patch: ReviewUpdate) -> Review:
        async with self._lock:
            review = self._get_owned(review_id, caller_user_id, "update")
            changes = patch.model_dump(exclude_unset=True)
            changes["updated_at"] = datetime.now(timezone.utc)
            updated = review.model_copy(update=changes)
            self._reviews[review_id] = updated
            return updated.model_copy()

    async def remove(self, review_id: str, caller_user_id: str) -> None:
        async with self._lock:
            self._get_owned(review_id, caller_user_id, "delete")
            del self._reviews[review_id]

    async def list_by_course(self, course_id: str) -> List[Review]:
        return [r.model_copy() for r in self._reviews.values() if r.course_id == course_id]

    async def list_by_user(self, user_id: str) -> List[Review]:
        return [r.model_copy() for r in self._reviews.values() if r.user_id == user_id]

    async def list_recent(self, limit: int) -> List[Review]:
        reviews = sorted(self._reviews.values(), key=lambda r: r.created_at, reverse=True)
        return [r.model_copy() for r in reviews[:limit]]
