from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Review, ReviewCreate, ReviewUpdate


class ReviewStore(ABC):
    """
    Persistence interface for course reviews.

    Implementations own the one-review-per-user-per-course invariant:
    ``insert`` must run its duplicate check and the write as a single
    critical section.
    """

    @abstractmethod
    async def find_by_course_and_user(self, course_id: str, user_id: str) -> Optional[Review]:
        """Get a user's review for a specific course."""

    @abstractmethod
    async def get(self, review_id: str) -> Optional[Review]:
        """Get a review by its ID."""

    @abstractmethod
    async def insert(self, review: ReviewCreate) -> Review:
        """Store a new review. Raises DuplicateReviewError if the user already reviewed the course."""

    @abstractmethod
    async def update(self, review_id: str, caller_user_id: str, patch: ReviewUpdate) -> Review:
        """Apply the set fields of ``patch``. Raises ReviewNotFoundError or ReviewPermissionError."""

    @abstractmethod
    async def remove(self, review_id: str, caller_user_id: str) -> None:
        """Delete a review. Raises ReviewNotFoundError or ReviewPermissionError."""

    @abstractmethod
    async def list_by_course(self, course_id: str) -> List[Review]:
        """All reviews for a course in insertion order."""

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[Review]:
        """All reviews written by a user in insertion order."""

    @abstractmethod
    async def list_recent(self, limit: int) -> List[Review]:
        """The most recently created reviews across all courses, newest first."""

    async def close(self) -> None:
        """Release any resources held by the store."""
