import logging
from datetime import datetime, timezone
from typing import Optional, List

from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError

from ..errors import DuplicateReviewError, ReviewNotFoundError, ReviewPermissionError
from ..models import Review, ReviewCreate, ReviewUpdate
from .base import ReviewStore
from .connection import DatabaseManager
from .models import CourseReview

logger = logging.getLogger(__name__)


class ReviewRepository(ReviewStore):
    """Relational review store using SQLAlchemy ORM."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def find_by_course_and_user(self, course_id: str, user_id: str) -> Optional[Review]:
        async with self.db_manager.get_session() as session:
            review = await self._find_by_course_and_user(session, course_id, user_id)
            return Review.model_validate(review) if review else None

    async def _find_by_course_and_user(self, session, course_id: str, user_id: str) -> Optional[CourseReview]:
        result = await session.execute(
            select(CourseReview).where(
                and_(CourseReview.course_id == course_id, CourseReview.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    async def get(self, review_id: str) -> Optional[Review]:
        async with self.db_manager.get_session() as session:
            result = await session.execute(
                select(CourseReview).where(CourseReview.id == review_id)
            )
            review = result.scalar_one_or_none()
            return Review.model_validate(review) if review else None

    async def insert(self, review: ReviewCreate) -> Review:
        async with self.db_manager.get_session() as session:
            if await self._find_by_course_and_user(session, review.course_id, review.user_id):
                raise DuplicateReviewError(review.course_id, review.user_id)

            db_review = CourseReview(
                course_id=review.course_id,
                user_id=review.user_id,
                user_name=review.user_name,
                rating=review.rating,
                review=review.review
            )

            # The unique constraint catches a concurrent insert that passed the check above
            try:
                session.add(db_review)
                await session.flush()
            except IntegrityError as e:
                if "UNIQUE constraint failed" in str(e) or "unique_user_course_review" in str(e):
                    raise DuplicateReviewError(review.course_id, review.user_id) from e
                raise
            await session.refresh(db_review)
            return Review.model_validate(db_review)

    async def _get_owned(self, session, review_id: str, caller_user_id: str, action: str) -> CourseReview:
        result = await session.execute(
            select(CourseReview).where(CourseReview.id == review_id)
        )
        review = result.scalar_one_or_none()
        if not review:
            raise ReviewNotFoundError(review_id)
        if review.user_id != caller_user_id:
            raise ReviewPermissionError(action)
        return review

    async def update(self, review_id: str, caller_user_id: str, patch: ReviewUpdate) -> Review:
        async with self.db_manager.get_session() as session:
            review = await self._get_owned(session, review_id, caller_user_id, "update")

            # Update fields if provided
            for field, value in patch.model_dump(exclude_unset=True).items():
                setattr(review, field, value)
            review.updated_at = datetime.now(timezone.utc)

            await session.flush()
            await session.refresh(review)
            return Review.model_validate(review)

    async def remove(self, review_id: str, caller_user_id: str) -> None:
        async with self.db_manager.get_session() as session:
            review = await self._get_owned(session, review_id, caller_user_id, "delete")
            await session.delete(review)

    async def list_by_course(self, course_id: str) -> List[Review]:
        async with self.db_manager.get_session() as session:
            result = await session.execute(
                select(CourseReview)
                .where(CourseReview.course_id == course_id)
                .order_by(CourseReview.seq)
            )
            return [Review.model_validate(review) for review in result.scalars().all()]

    async def list_by_user(self, user_id: str) -> List[Review]:
        async with self.db_manager.get_session() as session:
            result = await session.execute(
                select(CourseReview)
                .where(CourseReview.user_id == user_id)
                .order_by(CourseReview.seq)
            )
            return [Review.model_validate(review) for review in result.scalars().all()]

    async def list_recent(self, limit: int) -> List[Review]:
        async with self.db_manager.get_session() as session:
            result = await session.execute(
                select(CourseReview)
                .order_by(CourseReview.created_at.desc(), CourseReview.seq.desc())
                .limit(limit)
            )
            return [Review.model_validate(review) for review in result.scalars().all()]

    async def close(self) -> None:
        await self.db_manager.close()
