import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, CheckConstraint, Index, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


class CourseReview(Base):
    """SQLAlchemy model for course reviews."""
    __tablename__ = 'course_reviews'

    # Surrogate key; doubles as insertion order for deterministic listings
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4()))
    course_id = Column(String(255), nullable=False)
    user_id = Column(String(255), nullable=False)
    user_name = Column(String(255), nullable=False, default="")
    rating = Column(Integer, nullable=False)
    review = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    # Constraints
    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='check_rating_range'),
        UniqueConstraint('course_id', 'user_id', name='unique_user_course_review'),
        Index('idx_course_reviews_course_id', 'course_id'),
        Index('idx_course_reviews_user_id', 'user_id'),
        Index('idx_course_reviews_created_at', 'created_at'),
    )
