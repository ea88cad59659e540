"""
Threshold-based routing of classification results.
"""

from typing import Optional

from .models.data_models import ClassificationResult, RouteDecision
from .config import RoutingConfig
from .exceptions import ConfigError


class ConfidenceRouter:
    """
    Maps a classification confidence onto auto, review or reject.

    ``confidence >= high`` routes auto, ``low <= confidence < high`` routes
    review and anything below ``low`` is rejected. A value exactly on a
    threshold belongs to the upper bucket. The router holds no mutable
    state and can be shared across threads.
    """

    def __init__(self, high: float, low: float):
        for name, value in (("high", high), ("low", low)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"Threshold '{name}' must be a number")
        if not (0.0 <= low <= high <= 1.0):
            raise ConfigError(
                f"Thresholds must satisfy 0 <= low <= high <= 1, got low={low}, high={high}"
            )
        self._high = high
        self._low = low

    @classmethod
    def from_config(cls, routing: Optional[RoutingConfig] = None) -> 'ConfidenceRouter':
        """Build a router from the routing configuration."""
        from .config import config

        if routing is None:
            routing = config.routing
        return cls(high=routing.high_threshold, low=routing.low_threshold)

    @property
    def high(self) -> float:
        return self._high

    @property
    def low(self) -> float:
        return self._low

    def route_confidence(self, confidence: float) -> RouteDecision:
        if confidence >= self._high:
            return RouteDecision.AUTO
        if confidence >= self._low:
            return RouteDecision.REVIEW
        return RouteDecision.REJECT

    def route(self, result: ClassificationResult) -> RouteDecision:
        """Route a classification result by its confidence."""
        return self.route_confidence(result.confidence)
