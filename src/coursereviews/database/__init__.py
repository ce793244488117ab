from .base import ReviewStore
from .connection import DatabaseManager
from .memory import InMemoryReviewStore
from .repository import ReviewRepository
from .models import Base, CourseReview

__all__ = ["ReviewStore", "DatabaseManager", "InMemoryReviewStore", "ReviewRepository", "Base", "CourseReview"]
