"""
Turns routing decisions into the action a caller should take.
"""

import logging
from typing import Optional

from .models.data_models import (
    ClassificationResult,
    FallbackAction,
    HandledClassification,
    ReviewItem,
    RouteDecision
)
from .services.interfaces import ReviewQueue
from .exceptions import ClassifierError, ConfigError, ProviderError


logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_CATEGORY = "uncategorized"


class FallbackHandler:
    """
    Applies, queues or replaces a classification according to its route.

    Review requests are sent to the review queue collaborator. Submission is
    at-least-once from this side; deduplication belongs to the queue.
    """

    def __init__(self, review_queue: ReviewQueue, fallback_category: str = DEFAULT_FALLBACK_CATEGORY):
        if not isinstance(fallback_category, str) or not fallback_category.strip():
            raise ConfigError("Fallback category cannot be empty")
        self.review_queue = review_queue
        self.fallback_category = fallback_category

    def handle(self, text: str, result: ClassificationResult, route: RouteDecision) -> HandledClassification:
        """
        Produce the action for a routed classification.

        Args:
            text: Classified text, forwarded to the review queue
            result: Classification result
            route: Decision from the confidence router

        Returns:
            HandledClassification describing what to do

        Raises:
            ProviderError: If the review queue fails or returns an empty id
        """
        if route == RouteDecision.AUTO:
            return HandledClassification(
                action=FallbackAction.APPLY,
                category=result.category,
                result=result,
                route=route
            )

        if route == RouteDecision.REVIEW:
            review_id = self._submit_review(text, result)
            return HandledClassification(
                action=FallbackAction.QUEUED_FOR_REVIEW,
                category=result.category,
                result=result,
                route=route,
                review_id=review_id,
                note="Awaiting human review; category not applied"
            )

        if route == RouteDecision.REJECT:
            note = (
                f"Confidence {result.confidence:.3f} for '{result.category}' is below the "
                f"review threshold; assigned fallback category '{self.fallback_category}'"
            )
            logger.info(note)
            return HandledClassification(
                action=FallbackAction.FALLBACK,
                category=self.fallback_category,
                result=result,
                route=route,
                note=note
            )

        raise ValueError(f"Unknown route: {route!r}")

    def _submit_review(self, text: str, result: ClassificationResult) -> str:
        item = ReviewItem(
            text=text,
            predicted_category=result.category,
            confidence=result.confidence,
            secondary_category=result.secondary_category
        )
        try:
            review_id: Optional[str] = self.review_queue.submit(item)
        except ClassifierError:
            raise
        except Exception as e:
            raise ProviderError(f"Review queue submission failed: {e}")

        if not isinstance(review_id, str) or not review_id:
            raise ProviderError("Review queue returned an empty review id")
        return review_id
