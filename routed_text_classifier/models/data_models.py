"""
Core data models for the confidence-routed text classifier.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any, Tuple, FrozenSet


@dataclass(frozen=True)
class CategoryDefinition:
    """A category of the taxonomy with its exemplars and optional parent."""
    name: str
    label: str
    description: str
    examples: Tuple[str, ...] = ()
    keywords: FrozenSet[str] = frozenset()
    parent: Optional[str] = None

    def __post_init__(self):
        """Validate and normalise the category definition."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Category name cannot be empty")
        if isinstance(self.examples, str):
            raise ValueError("Category examples must be a collection of strings, not a string")
        if isinstance(self.keywords, str):
            raise ValueError("Category keywords must be a collection of strings, not a string")
        # Accept lists/sets from JSON and keep the record hashable
        object.__setattr__(self, "examples", tuple(self.examples))
        object.__setattr__(self, "keywords", frozenset(self.keywords))
        if self.parent is not None and not str(self.parent).strip():
            object.__setattr__(self, "parent", None)

    def to_summary(self) -> Dict[str, str]:
        """Public view used by the categories endpoint."""
        return {
            "name": self.name,
            "label": self.label,
            "description": self.description,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of a single classification call."""
    category: str
    confidence: float
    reasoning: str = ""
    secondary_category: Optional[str] = None
    secondary_confidence: Optional[float] = None

    def __post_init__(self):
        """Validate the result after initialization."""
        if not self.category or not self.category.strip():
            raise ValueError("Category cannot be empty")
        if isinstance(self.confidence, bool) or not isinstance(self.confidence, (int, float)):
            raise ValueError("Confidence must be a number")
        if (self.secondary_category is None) != (self.secondary_confidence is None):
            raise ValueError("secondary_category and secondary_confidence must be given together")

    @property
    def has_secondary(self) -> bool:
        return self.secondary_category is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result to a dictionary."""
        result_dict = {
            "category": self.category,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }
        if self.has_secondary:
            result_dict["secondary_category"] = self.secondary_category
            result_dict["secondary_confidence"] = self.secondary_confidence
        return result_dict


class RouteDecision(str, Enum):
    """Where a classification goes next."""
    AUTO = "auto"
    REVIEW = "review"
    REJECT = "reject"


class FallbackAction(str, Enum):
    """Concrete action the caller should take for a routed classification."""
    APPLY = "apply"
    QUEUED_FOR_REVIEW = "queued_for_review"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ReviewItem:
    """Request for a human to confirm a classification."""
    text: str
    predicted_category: str
    confidence: float
    secondary_category: Optional[str] = None


@dataclass(frozen=True)
class HandledClassification:
    """A classification after routing and fallback handling."""
    action: FallbackAction
    category: str
    result: ClassificationResult
    route: RouteDecision
    review_id: Optional[str] = None
    note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Response shape of the single classification endpoint."""
        response = {
            "category": self.category,
            "confidence": self.result.confidence,
            "reasoning": self.result.reasoning,
            "action": self.action.value,
        }
        if self.action == FallbackAction.QUEUED_FOR_REVIEW:
            response["review_id"] = self.review_id
        return response


@dataclass
class BatchItemResult:
    """Per-item outcome of a best-effort batch classification."""
    index: int
    text: str
    result: Optional[ClassificationResult] = None
    error: Optional[Exception] = None

    def __post_init__(self):
        if (self.result is None) == (self.error is None):
            raise ValueError("Exactly one of result or error must be set")

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {
                "category": self.result.category,
                "confidence": self.result.confidence,
                "reasoning": self.result.reasoning,
            }
        return {
            "error": str(self.error),
            "error_type": type(self.error).__name__,
        }


@dataclass(frozen=True)
class TrainingExample:
    """A labeled text; confidence below 1.0 marks a machine-generated label."""
    text: str
    category: str
    confidence: float = 1.0

    def __post_init__(self):
        if not self.text or not self.text.strip():
            raise ValueError("Training text cannot be empty")
        if not self.category or not self.category.strip():
            raise ValueError("Training category cannot be empty")
        if (
            isinstance(self.confidence, bool)
            or not isinstance(self.confidence, (int, float))
            or not (0.0 <= self.confidence <= 1.0)
        ):
            raise ValueError("Confidence must be a number between 0.0 and 1.0")

    @property
    def is_silver(self) -> bool:
        """True for machine-assigned labels."""
        return self.confidence < 1.0


@dataclass
class TrainingDataset:
    """Labeled examples plus dataset-level metadata."""
    examples: List[TrainingExample]
    categories: List[str] = field(default_factory=list)
    version: str = "1"
    label_source: str = "human"

    def __post_init__(self):
        # Derive the category list in first-seen order when not supplied
        if not self.categories:
            seen: Dict[str, None] = {}
            for example in self.examples:
                seen.setdefault(example.category, None)
            self.categories = list(seen)

    def __len__(self) -> int:
        return len(self.examples)

    @property
    def texts(self) -> List[str]:
        return [example.text for example in self.examples]

    @property
    def labels(self) -> List[str]:
        return [example.category for example in self.examples]

    def silver_examples(self) -> List[TrainingExample]:
        return [example for example in self.examples if example.is_silver]


@dataclass(frozen=True)
class CategoryMetrics:
    """Precision, recall and F1 of one category."""
    precision: float
    recall: float
    f1: float
    support: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
            "support": self.support,
        }


@dataclass(frozen=True)
class ClassifierEvaluation:
    """Aggregate evaluation of predictions against ground truth."""
    accuracy: float
    macro_precision: float
    macro_recall: float
    macro_f1: float
    weighted_precision: float
    weighted_recall: float
    weighted_f1: float
    per_category: Dict[str, CategoryMetrics]
    confusion_matrix: List[List[int]]
    misclassified_examples: List[Dict[str, Any]]
    categories: List[str]
    total: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert the evaluation to a JSON-serialisable dictionary."""
        return {
            "accuracy": self.accuracy,
            "macro_avg": {
                "precision": self.macro_precision,
                "recall": self.macro_recall,
                "f1": self.macro_f1,
            },
            "weighted_avg": {
                "precision": self.weighted_precision,
                "recall": self.weighted_recall,
                "f1": self.weighted_f1,
            },
            "per_category": {
                name: metrics.to_dict() for name, metrics in self.per_category.items()
            },
            "confusion_matrix": self.confusion_matrix,
            "misclassified_examples": self.misclassified_examples,
            "categories": self.categories,
            "total": self.total,
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def format_report(self) -> str:
        """
        Format the evaluation as a human-readable string.

        Returns:
            Multi-line report with aggregates and per-category rows
        """
        lines = []
        lines.append("Classifier Evaluation")
        lines.append("=" * 50)
        lines.append(f"Samples: {self.total}")
        lines.append(f"Accuracy: {self.accuracy:.1%}")
        lines.append(
            f"Macro P/R/F1: {self.macro_precision:.3f} / {self.macro_recall:.3f} / {self.macro_f1:.3f}"
        )
        lines.append(
            f"Weighted P/R/F1: {self.weighted_precision:.3f} / {self.weighted_recall:.3f} / {self.weighted_f1:.3f}"
        )
        lines.append("")
        lines.append(f"{'category':<24} {'prec':>6} {'rec':>6} {'f1':>6} {'support':>8}")
        for name, metrics in self.per_category.items():
            lines.append(
                f"{name:<24} {metrics.precision:>6.3f} {metrics.recall:>6.3f} "
                f"{metrics.f1:>6.3f} {metrics.support:>8d}"
            )
        if self.misclassified_examples:
            lines.append(f"\nFirst {len(self.misclassified_examples)} misclassified:")
            for item in self.misclassified_examples:
                lines.append(
                    f"   predicted={item['predicted']} actual={item['actual']} "
                    f"confidence={item['confidence']:.3f}"
                )
        return "\n".join(lines)
