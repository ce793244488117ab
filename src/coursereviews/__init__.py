"""GrowNet course reviews: review lifecycle and rating statistics."""

from .errors import (
    ReviewServiceError,
    ReviewValidationError,
    DuplicateReviewError,
    ReviewNotFoundError,
    ReviewPermissionError,
)
from .models import Review, ReviewCreate, ReviewPage, ReviewUpdate, ReviewSort, RatingStats
from .service import ReviewService

__version__ = "1.0.0"

__all__ = [
    "ReviewService",
    "Review",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewSort",
    "RatingStats",
    "ReviewPage",
    "ReviewServiceError",
    "ReviewValidationError",
    "DuplicateReviewError",
    "ReviewNotFoundError",
    "ReviewPermissionError",
]
