from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from .models import MAX_RATING, MIN_RATING, RatingStats, Review


def empty_distribution():
    return {star: 0 for star in range(MIN_RATING, MAX_RATING + 1)}


def round_rating(value: float) -> float:
    """Round an average rating to one decimal place, half away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_rating_stats(course_id: str, reviews: Iterable[Review]) -> RatingStats:
    """
    Compute rating statistics for a course from its current reviews.

    Reviews belonging to other courses are ignored. Nothing is cached:
    callers recompute after every mutation.
    """
    ratings = [review.rating for review in reviews if review.course_id == course_id]
    distribution = empty_distribution()

    if not ratings:
        return RatingStats(
            course_id=course_id,
            average_rating=0,
            total_ratings=0,
            rating_distribution=distribution,
        )

    for rating in ratings:
        distribution[rating] += 1

    return RatingStats(
        course_id=course_id,
        average_rating=round_rating(sum(ratings) / len(ratings)),
        total_ratings=len(ratings),
        rating_distribution=distribution,
    )
