import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from .aggregator import compute_rating_stats
from .database.base import ReviewStore
from .errors import DuplicateReviewError, ReviewNotFoundError, ReviewPermissionError, ReviewValidationError
from .models import MAX_RATING, MIN_RATING, RatingStats, Review, ReviewCreate, ReviewPage, ReviewSort, ReviewUpdate

logger = logging.getLogger(__name__)

ALL_RATINGS = "all"
MAX_PAGE_SIZE = 100
STAR_VALUES = {str(value): value for value in range(MIN_RATING, MAX_RATING + 1)}


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "input"
    return f"{field}: {first['msg']}"


def _parse_sort(sort: Union[str, ReviewSort, None]) -> ReviewSort:
    if sort is None:
        return ReviewSort.NEWEST
    try:
        return ReviewSort(sort)
    except ValueError:
        options = ", ".join(option.value for option in ReviewSort)
        raise ReviewValidationError(f"Invalid sort option '{sort}'. Expected one of: {options}")


def _parse_rating_filter(rating_filter: Union[int, str, None]) -> Optional[int]:
    if rating_filter is None or rating_filter == ALL_RATINGS:
        return None
    if isinstance(rating_filter, str):
        rating_filter = STAR_VALUES.get(rating_filter.strip())
    if isinstance(rating_filter, bool) or not isinstance(rating_filter, int) \
            or not MIN_RATING <= rating_filter <= MAX_RATING:
        raise ReviewValidationError("Rating filter must be 'all' or an integer between 1 and 5")
    return rating_filter


def _check_page(limit: Optional[int], offset: int) -> None:
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int)
                              or not 1 <= limit <= MAX_PAGE_SIZE):
        raise ReviewValidationError(f"Limit must be an integer between 1 and {MAX_PAGE_SIZE}")
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise ReviewValidationError("Offset must be a non-negative integer")


def sort_reviews(reviews: List[Review], sort: ReviewSort) -> List[Review]:
    """Order reviews for display. Ties keep their incoming order."""
    if sort is ReviewSort.OLDEST:
        return sorted(reviews, key=lambda r: r.created_at)
    if sort is ReviewSort.HIGHEST:
        return sorted(reviews, key=lambda r: r.rating, reverse=True)
    if sort is ReviewSort.LOWEST:
        return sorted(reviews, key=lambda r: r.rating)
    return sorted(reviews, key=lambda r: r.created_at, reverse=True)


class ReviewService:
    """
    Review lifecycle API consumed by the course pages.

    Validates caller input, enforces authorship through the store and
    derives rating statistics on demand. Stats are never cached, so callers
    re-fetch them after any mutation.
    """

    def __init__(self, store: ReviewStore):
        self.store = store

    async def submit_review(
        self,
        course_id: str,
        user_id: str,
        user_name: str,
        rating: int,
        review: Optional[str] = None,
    ) -> Review:
        """
        Submit a new review for a course.

        Raises:
            ReviewValidationError: rating is not an integer 1-5 or input is malformed
            DuplicateReviewError: the user already reviewed this course
        """
        try:
            data = ReviewCreate(
                course_id=course_id,
                user_id=user_id,
                user_name=user_name or "",
                rating=rating,
                review=review,
            )
        except ValidationError as e:
            raise ReviewValidationError(_validation_message(e)) from e

        try:
            created = await self.store.insert(data)
        except DuplicateReviewError:
            logger.warning(f"User {user_id} already reviewed course {course_id}")
            raise

        logger.info(f"Review {created.id} submitted for course {course_id} by user {user_id} (rating={created.rating})")
        return created

    async def update_review(
        self,
        review_id: str,
        caller_user_id: str,
        patch: Union[ReviewUpdate, Dict[str, Any]],
    ) -> Review:
        """Edit the rating and/or text of the caller's own review."""
        if not isinstance(patch, ReviewUpdate):
            try:
                patch = ReviewUpdate(**patch)
            except ValidationError as e:
                raise ReviewValidationError(_validation_message(e)) from e

        try:
            updated = await self.store.update(review_id, caller_user_id, patch)
        except (ReviewNotFoundError, ReviewPermissionError) as e:
            logger.warning(f"Update of review {review_id} by user {caller_user_id} rejected: {e}")
            raise

        logger.info(f"Review {review_id} updated by user {caller_user_id}")
        return updated

    async def delete_review(self, review_id: str, caller_user_id: str) -> None:
        """Delete the caller's own review."""
        try:
            await self.store.remove(review_id, caller_user_id)
        except (ReviewNotFoundError, ReviewPermissionError) as e:
            logger.warning(f"Delete of review {review_id} by user {caller_user_id} rejected: {e}")
            raise

        logger.info(f"Review {review_id} deleted by user {caller_user_id}")

    async def get_course_reviews(
        self,
        course_id: str,
        sort: Union[str, ReviewSort, None] = ReviewSort.NEWEST,
        rating_filter: Union[int, str, None] = ALL_RATINGS,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Review]:
        """
        Get the reviews for a course, filtered to one star value and sorted for display.

        Args:
            course_id: Course to list
            sort: newest, oldest, highest or lowest
            rating_filter: a star value 1-5, or "all"
            limit: page size (1-100), or None for every matching review
            offset: number of matching reviews to skip
        """
        page = await self.get_course_review_page(course_id, sort, rating_filter, limit, offset)
        return page.reviews

    async def get_course_review_page(
        self,
        course_id: str,
        sort: Union[str, ReviewSort, None] = ReviewSort.NEWEST,
        rating_filter: Union[int, str, None] = ALL_RATINGS,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> ReviewPage:
        """Same listing as get_course_reviews, with the number of matching reviews before paging."""
        order = _parse_sort(sort)
        stars = _parse_rating_filter(rating_filter)
        _check_page(limit, offset)

        reviews = await self.store.list_by_course(course_id)
        if stars is not None:
            reviews = [r for r in reviews if r.rating == stars]

        reviews = sort_reviews(reviews, order)
        end = None if limit is None else offset + limit
        return ReviewPage(reviews=reviews[offset:end], total=len(reviews), limit=limit, offset=offset)

    async def get_course_rating_stats(self, course_id: str) -> RatingStats:
        reviews = await self.store.list_by_course(course_id)
        return compute_rating_stats(course_id, reviews)

    async def get_user_course_review(self, course_id: str, user_id: str) -> Optional[Review]:
        return await self.store.find_by_course_and_user(course_id, user_id)

    async def get_user_reviews(self, user_id: str) -> List[Review]:
        """All reviews written by a user, newest first."""
        reviews = await self.store.list_by_user(user_id)
        return sort_reviews(reviews, ReviewSort.NEWEST)

    async def get_recent_reviews(self, limit: int = 10) -> List[Review]:
        """Most recent reviews across all courses, for the admin dashboard."""
        if limit is None:
            raise ReviewValidationError(f"Limit must be an integer between 1 and {MAX_PAGE_SIZE}")
        _check_page(limit, 0)
        return await self.store.list_recent(limit)
