import pytest
from pydantic import ValidationError
from datetime import datetime, timezone

from coursereviews.models import ReviewCreate, ReviewUpdate, Review, RatingStats


class TestReviewCreate:
    """Test ReviewCreate model validation."""

    def test_valid_review_create(self):
        """Test creating a valid review."""
        review = ReviewCreate(
            course_id="course1",
            user_id="user123",
            user_name="Jane Smith",
            rating=5,
            review="Excellent course!"
        )
        assert review.course_id == "course1"
        assert review.user_id == "user123"
        assert review.user_name == "Jane Smith"
        assert review.rating == 5
        assert review.review == "Excellent course!"

    def test_review_create_without_text(self):
        """Test creating a review without optional text."""
        review = ReviewCreate(course_id="course1", user_id="user123", rating=4)
        assert review.review is None
        assert review.user_name == ""

    def test_review_text_is_trimmed(self):
        review = ReviewCreate(course_id="course1", user_id="user123", rating=4, review="  Good pace.  ")
        assert review.review == "Good pace."

    def test_blank_review_text_becomes_none(self):
        review = ReviewCreate(course_id="course1", user_id="user123", rating=4, review="   ")
        assert review.review is None

    def test_review_text_too_long(self):
        with pytest.raises(ValidationError):
            ReviewCreate(course_id="course1", user_id="user123", rating=4, review="x" * 1001)

    def test_invalid_rating_high(self):
        """Test validation fails for rating > 5."""
        with pytest.raises(ValidationError) as exc_info:
            ReviewCreate(course_id="course1", user_id="user123", rating=6)
        assert "Input should be less than or equal to 5" in str(exc_info.value)

    def test_invalid_rating_low(self):
        """Test validation fails for rating < 1."""
        with pytest.raises(ValidationError) as exc_info:
            ReviewCreate(course_id="course1", user_id="user123", rating=0)
        assert "Input should be greater than or equal to 1" in str(exc_info.value)

    @pytest.mark.parametrize("rating", [4.5, "4", True])
    def test_non_integer_rating_rejected(self, rating):
        with pytest.raises(ValidationError):
            ReviewCreate(course_id="course1", user_id="user123", rating=rating)

    def test_missing_required_fields(self):
        """Test validation fails for missing required fields."""
        with pytest.raises(ValidationError) as exc_info:
            ReviewCreate(rating=5)

        errors = exc_info.value.errors()
        missing_fields = {error['loc'][0] for error in errors}
        assert 'user_id' in missing_fields
        assert 'course_id' in missing_fields

    def test_empty_ids_rejected(self):
        with pytest.raises(ValidationError):
            ReviewCreate(course_id="", user_id="user123", rating=3)


class TestReviewUpdate:
    """Test ReviewUpdate model validation."""

    def test_valid_review_update_partial(self):
        """Test updating only rating."""
        update = ReviewUpdate(rating=4)
        assert update.rating == 4
        assert update.model_dump(exclude_unset=True) == {"rating": 4}

    def test_clearing_review_text(self):
        update = ReviewUpdate(review="")
        assert update.model_dump(exclude_unset=True) == {"review": None}

    def test_empty_update(self):
        """Test update with no fields."""
        update = ReviewUpdate()
        assert update.model_dump(exclude_unset=True) == {}

    def test_invalid_rating_update(self):
        """Test validation fails for invalid rating in update."""
        with pytest.raises(ValidationError):
            ReviewUpdate(rating=10)

    def test_null_rating_rejected(self):
        with pytest.raises(ValidationError):
            ReviewUpdate(rating=None)


class TestReview:
    """Test Review model."""

    def test_review_creation(self):
        now = datetime.now(timezone.utc)
        review = Review(
            id="r1",
            course_id="course1",
            user_id="user123",
            user_name="Jane Smith",
            rating=5,
            review="Great!",
            created_at=now
        )
        assert review.id == "r1"
        assert review.rating == 5
        assert review.updated_at is None


class TestRatingStats:
    """Test RatingStats model."""

    def test_stats_creation(self):
        stats = RatingStats(
            course_id="course1",
            total_ratings=10,
            average_rating=4.2,
            rating_distribution={1: 0, 2: 1, 3: 2, 4: 3, 5: 4}
        )
        assert stats.course_id == "course1"
        assert stats.total_ratings == 10
        assert stats.average_rating == 4.2
        assert stats.rating_distribution[5] == 4
