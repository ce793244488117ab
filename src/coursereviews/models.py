from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_RATING = 1
MAX_RATING = 5
MAX_REVIEW_LENGTH = 1000


def _clean_review_text(value):
    # Blank text is stored as "no review text".
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class ReviewSort(str, Enum):
    """Display orderings for a course's reviews."""
    NEWEST = "newest"
    OLDEST = "oldest"
    HIGHEST = "highest"
    LOWEST = "lowest"


class ReviewCreate(BaseModel):
    """Model for submitting a new review."""
    course_id: str = Field(..., min_length=1, description="Course being reviewed")
    user_id: str = Field(..., min_length=1, description="User who wrote the review")
    user_name: str = Field("", max_length=255, description="Author display name at submission time")
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING, strict=True, description="Rating from 1 to 5")
    review: Optional[str] = Field(None, max_length=MAX_REVIEW_LENGTH, description="Optional review text")

    @field_validator("review", mode="before")
    @classmethod
    def clean_review(cls, value):
        return _clean_review_text(value)


class ReviewUpdate(BaseModel):
    """Model for editing an existing review. Only fields that are set are applied."""
    rating: Optional[int] = Field(None, ge=MIN_RATING, le=MAX_RATING, strict=True, description="Rating from 1 to 5")
    review: Optional[str] = Field(None, max_length=MAX_REVIEW_LENGTH, description="Optional review text")

    @field_validator("review", mode="before")
    @classmethod
    def clean_review(cls, value):
        return _clean_review_text(value)

    @field_validator("rating")
    @classmethod
    def rating_not_null(cls, value):
        if value is None:
            raise ValueError("rating cannot be null")
        return value


class Review(BaseModel):
    """A stored course review."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    user_id: str
    user_name: str
    rating: int
    review: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class RatingStats(BaseModel):
    """Rating statistics for a course, derived from its current reviews."""
    course_id: str
    average_rating: float
    total_ratings: int
    rating_distribution: Dict[int, int] = Field(description="Count of reviews per rating (1-5)")


class ReviewPage(BaseModel):
    """One page of a course listing. `total` counts every review that matched the filter."""
    reviews: List[Review]
    total: int
    limit: Optional[int] = None
    offset: int = 0


class SubmitReviewRequest(BaseModel):
    """Body of POST /courses/{course_id}/reviews."""
    rating: int = Field(..., strict=True)
    review: Optional[str] = None


class HealthResponse(BaseModel):
    """Model for health check response."""
    status: str
    service: str
