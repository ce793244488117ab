"""Business-rule errors raised by the review store and lifecycle API."""


class ReviewServiceError(Exception):
    """Base class for all review errors surfaced to callers."""

    status_code = 500
    title = "Review Service Error"


class ReviewValidationError(ReviewServiceError, ValueError):
    """Rating out of range or otherwise malformed input."""

    status_code = 400
    title = "Validation Error"


class DuplicateReviewError(ReviewServiceError):
    """The user has already reviewed this course."""

    status_code = 409
    title = "Review Already Exists"

    def __init__(self, course_id: str, user_id: str):
        self.course_id = course_id
        self.user_id = user_id
        super().__init__(
            "You have already reviewed this course. "
            "Update your existing review instead."
        )


class ReviewNotFoundError(ReviewServiceError, LookupError):
    """The referenced review does not exist."""

    status_code = 404
    title = "Review Not Found"

    def __init__(self, review_id: str):
        self.review_id = review_id
        super().__init__(f"Review {review_id} does not exist")


class ReviewPermissionError(ReviewServiceError, PermissionError):
    """The caller is not the author of the review."""

    status_code = 403
    title = "Insufficient Permissions"

    def __init__(self, action: str = "modify"):
        self.action = action
        super().__init__(f"You can only {action} your own reviews")
