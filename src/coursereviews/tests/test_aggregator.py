from datetime import datetime, timezone
import uuid

import pytest

from coursereviews.aggregator import compute_rating_stats, round_rating
from coursereviews.models import Review


def make_review(rating, course_id="C1", user_id=None):
    return Review(
        id=str(uuid.uuid4()),
        course_id=course_id,
        user_id=user_id or f"user-{rating}",
        user_name="Reviewer",
        rating=rating,
        created_at=datetime.now(timezone.utc),
    )


class TestComputeRatingStats:

    def test_no_reviews(self):
        stats = compute_rating_stats("C1", [])
        assert stats.course_id == "C1"
        assert stats.average_rating == 0
        assert stats.total_ratings == 0
        assert stats.rating_distribution == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}

    def test_two_reviews(self):
        stats = compute_rating_stats("C1", [make_review(5), make_review(4)])
        assert stats.average_rating == 4.5
        assert stats.total_ratings == 2
        assert stats.rating_distribution == {1: 0, 2: 0, 3: 0, 4: 1, 5: 1}

    def test_average_is_rounded_to_one_decimal(self):
        ratings = [5, 4, 4, 3, 3, 3, 2, 1]
        stats = compute_rating_stats("C1", [make_review(r, user_id=f"u{i}") for i, r in enumerate(ratings)])
        # 25 / 8 = 3.125
        assert stats.average_rating == 3.1
        assert stats.total_ratings == 8
        assert stats.rating_distribution == {1: 1, 2: 1, 3: 3, 4: 2, 5: 1}

    def test_other_courses_are_ignored(self):
        reviews = [make_review(5), make_review(1, course_id="C2")]
        stats = compute_rating_stats("C1", reviews)
        assert stats.total_ratings == 1
        assert stats.average_rating == 5.0
        assert stats.rating_distribution[1] == 0

    @pytest.mark.parametrize("ratings", [
        [1],
        [5, 5, 5],
        [1, 2, 3, 4, 5],
        [2, 2, 3],
        [4, 5, 5, 5, 3, 1, 2],
    ])
    def test_distribution_sums_to_total_and_average_in_range(self, ratings):
        reviews = [make_review(r, user_id=f"u{i}") for i, r in enumerate(ratings)]
        stats = compute_rating_stats("C1", reviews)
        assert sum(stats.rating_distribution.values()) == stats.total_ratings
        assert 1.0 <= stats.average_rating <= 5.0
        assert stats.average_rating == round_rating(sum(ratings) / len(ratings))

    def test_is_pure(self):
        reviews = [make_review(3), make_review(4, user_id="other")]
        assert compute_rating_stats("C1", reviews) == compute_rating_stats("C1", reviews)


class TestRoundRating:

    @pytest.mark.parametrize("value, expected", [
        (4.5, 4.5),
        (3.25, 3.3),
        (3.125, 3.1),
        (2.0 / 3.0, 0.7),
        (4.95, 5.0),
    ])
    def test_round_half_away_from_zero(self, value, expected):
        assert round_rating(value) == expected
