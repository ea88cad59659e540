"""
Service interfaces and implementations for the confidence-routed classifier.
"""

from .interfaces import (
    GenerationBackend,
    EmbeddingService,
    ReviewQueue,
    ClassifierInterface
)
from .review_queue import InMemoryReviewQueue

__all__ = [
    "GenerationBackend",
    "EmbeddingService",
    "ReviewQueue",
    "ClassifierInterface",
    "InMemoryReviewQueue"
]
