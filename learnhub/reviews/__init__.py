"""Course reviews and ratings."""

from .models import REVIEWS_TABLES_CQL, Review
from .service import AlreadyReviewedError, ReviewService


__all__ = [
    "REVIEWS_TABLES_CQL",
    "AlreadyReviewedError",
    "Review",
    "ReviewService",
]
