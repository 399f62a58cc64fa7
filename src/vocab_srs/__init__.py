"""Spaced-repetition review scheduler for the vocabulary-learning platform."""

from .errors import InvalidArgumentError, NotFoundError, SRSError
from .models.review import Flashcard, ReviewEvent, ReviewStats
from .srs import (
    ReviewItem,
    ReviewLog,
    ReviewQuality,
    ReviewSchedule,
    Scheduler,
    calculate_next_review,
)
from .store import InMemoryReviewStore, SQLiteReviewStore, create_review_store

__all__ = [
    "Flashcard",
    "InMemoryReviewStore",
    "InvalidArgumentError",
    "NotFoundError",
    "ReviewEvent",
    "ReviewItem",
    "ReviewLog",
    "ReviewQuality",
    "ReviewSchedule",
    "ReviewStats",
    "SQLiteReviewStore",
    "SRSError",
    "Scheduler",
    "calculate_next_review",
    "create_review_store",
]
