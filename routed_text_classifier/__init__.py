"""
Confidence-routed text classification with prompt and embedding strategies.
"""

from .models import (
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
from .category_registry import CategoryRegistry, load_categories
from .prompt_classifier import PromptClassifier, parse_classification_reply
from .embedding_classifier import EmbeddingClassifier
from .confidence_router import ConfidenceRouter
from .fallback_handler import FallbackHandler
from .evaluator import Evaluator, save_report
from .dataset_loader import load_training_data, save_training_data
from .pipeline import ClassificationPipeline, build_pipeline
from .exceptions import (
    ClassifierError,
    InvalidInputError,
    ConfigError,
    NotReadyError,
    ParseError,
    ProviderError,
    ProviderTimeout,
    ShapeError,
    DatasetLoadingError
)

__version__ = "0.1.0"
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
    "ClassifierEvaluation",
    "CategoryRegistry",
    "load_categories",
    "PromptClassifier",
    "parse_classification_reply",
    "EmbeddingClassifier",
    "ConfidenceRouter",
    "FallbackHandler",
    "Evaluator",
    "save_report",
    "load_training_data",
    "save_training_data",
    "ClassificationPipeline",
    "build_pipeline",
    "ClassifierError",
    "InvalidInputError",
    "ConfigError",
    "NotReadyError",
    "ParseError",
    "ProviderError",
    "ProviderTimeout",
    "ShapeError",
    "DatasetLoadingError"
]
