"""
Data models for the confidence-routed text classifier.
"""

from .data_models import (
    CategoryDefinition,
    ClassificationResult,
    RouteDecision,
    FallbackAction,
    ReviewItem,
    HandledClassification,
    BatchItemResult,
    TrainingExample,
    TrainingDataset,
    CategoryMetrics,
    ClassifierEvaluation
)

__all__ = [
    "CategoryDefinition",
    "ClassificationResult",
    "RouteDecision",
    "FallbackAction",
    "ReviewItem",
    "HandledClassification",
    "BatchItemResult",
    "TrainingExample",
    "TrainingDataset",
    "CategoryMetrics",
    "ClassifierEvaluation"
]
