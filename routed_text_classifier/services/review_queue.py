"""
In-process review queue used for local runs and tests.

Durable storage of review items lives outside this library; production
deployments pass their own ReviewQueue implementation to the pipeline.
"""

import logging
import threading
import uuid
from typing import Dict, List, Optional

from .interfaces import ReviewQueue
from ..models import ReviewItem


logger = logging.getLogger(__name__)


class InMemoryReviewQueue(ReviewQueue):
    """Thread-safe dictionary of pending review items keyed by a uuid."""

    def __init__(self):
        self._items: Dict[str, ReviewItem] = {}
        self._lock = threading.Lock()

    def submit(self, item: ReviewItem) -> str:
        review_id = uuid.uuid4().hex
        with self._lock:
            self._items[review_id] = item
        logger.info(f"Queued review {review_id} for category '{item.predicted_category}'")
        return review_id

    def get(self, review_id: str) -> Optional[ReviewItem]:
        with self._lock:
            return self._items.get(review_id)

    def pending(self) -> List[ReviewItem]:
        with self._lock:
            return list(self._items.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
