from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response

from ..models import RatingStats, Review, ReviewPage, ReviewSort, ReviewUpdate, SubmitReviewRequest
from ..service import ReviewService

# Global variable to hold the review service instance
review_service: ReviewService = None


def set_review_service(service: ReviewService):
    """Set the review service instance."""
    global review_service
    review_service = service


def get_review_service() -> ReviewService:
    if not review_service:
        raise HTTPException(status_code=500, detail="Review service not initialized")
    return review_service


class Caller:
    """Identity of the authenticated caller, as forwarded by the gateway."""

    def __init__(self, user_id: str, user_name: str):
        self.user_id = user_id
        self.user_name = user_name


def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
) -> Caller:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Please authenticate to access your reviews")
    return Caller(user_id=x_user_id, user_name=x_user_name or "")


# Create router
router = APIRouter(tags=["reviews"])


# Endpoints
@router.get("/courses/{course_id}/reviews", response_model=ReviewPage)
async def get_course_reviews(
    course_id: str,
    sort: ReviewSort = ReviewSort.NEWEST,
    rating: str = Query("all", description="Star value 1-5, or 'all'"),
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: ReviewService = Depends(get_review_service),
):
    """Get one page of reviews for a course, sorted and filtered for display."""
    return await service.get_course_review_page(course_id, sort=sort, rating_filter=rating, limit=limit, offset=offset)


@router.get("/courses/{course_id}/rating-stats", response_model=RatingStats)
async def get_course_rating_stats(course_id: str, service: ReviewService = Depends(get_review_service)):
    """Get rating statistics for a course."""
    return await service.get_course_rating_stats(course_id)


@router.post("/courses/{course_id}/reviews", response_model=Review, status_code=201)
async def submit_review(
    course_id: str,
    request: SubmitReviewRequest,
    caller: Caller = Depends(get_caller),
    service: ReviewService = Depends(get_review_service),
):
    """Submit a new review as the calling user."""
    return await service.submit_review(
        course_id=course_id,
        user_id=caller.user_id,
        user_name=caller.user_name,
        rating=request.rating,
        review=request.review,
    )


@router.put("/reviews/{review_id}", response_model=Review)
async def update_review(
    review_id: str,
    request: ReviewUpdate,
    caller: Caller = Depends(get_caller),
    service: ReviewService = Depends(get_review_service),
):
    """Update the caller's own review."""
    return await service.update_review(review_id, caller.user_id, request)


@router.delete("/reviews/{review_id}", status_code=204)
async def delete_review(
    review_id: str,
    caller: Caller = Depends(get_caller),
    service: ReviewService = Depends(get_review_service),
):
    """Delete the caller's own review."""
    await service.delete_review(review_id, caller.user_id)
    return Response(status_code=204)


@router.get("/courses/{course_id}/my-review", response_model=Review)
async def get_my_course_review(
    course_id: str,
    caller: Caller = Depends(get_caller),
    service: ReviewService = Depends(get_review_service),
):
    """Get the caller's review for a course."""
    review = await service.get_user_course_review(course_id, caller.user_id)
    if not review:
        raise HTTPException(status_code=404, detail="You have not reviewed this course yet")
    return review


@router.get("/my-reviews", response_model=List[Review])
async def get_my_reviews(
    caller: Caller = Depends(get_caller),
    service: ReviewService = Depends(get_review_service),
):
    """Get all reviews written by the caller."""
    return await service.get_user_reviews(caller.user_id)


@router.get("/users/{user_id}/reviews", response_model=List[Review])
async def get_user_reviews(user_id: str, service: ReviewService = Depends(get_review_service)):
    """Get all reviews written by a user."""
    return await service.get_user_reviews(user_id)


@router.get("/reviews/recent", response_model=List[Review])
async def get_recent_reviews(
    limit: int = Query(10, ge=1, le=100),
    service: ReviewService = Depends(get_review_service),
):
    """Get the most recent reviews across all courses."""
    return await service.get_recent_reviews(limit)
