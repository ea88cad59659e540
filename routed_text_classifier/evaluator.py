"""
Offline evaluation of classifier output against labeled ground truth.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np

from .models.data_models import (
    CategoryMetrics,
    ClassificationResult,
    ClassifierEvaluation,
    TrainingDataset
)
from .services.interfaces import ClassifierInterface
from .exceptions import ShapeError, DatasetLoadingError


logger = logging.getLogger(__name__)


def _safe_divide(numerator: float, denominator: float) -> float:
    return float(numerator / denominator) if denominator else 0.0


class Evaluator:
    """
    Computes accuracy, per-category metrics and a confusion matrix.

    The confusion matrix is indexed ``[predicted][actual]``: row i counts
    the samples predicted as categories[i], split by their actual category.
    Both axes follow the order of the ``categories`` argument, so reports
    from different runs can be diffed.
    """

    def __init__(self, max_misclassified: Optional[int] = None):
        from .config import config

        if max_misclassified is None:
            max_misclassified = config.evaluation.max_misclassified
        if max_misclassified < 0:
            raise ValueError("max_misclassified cannot be negative")
        self.max_misclassified = max_misclassified

    def evaluate(
        self,
        predictions: Sequence[ClassificationResult],
        ground_truth: Sequence[str],
        categories: Sequence[str]
    ) -> ClassifierEvaluation:
        """
        Score predictions against ground truth labels.

        Args:
            predictions: Classifier output, one per sample
            ground_truth: Actual category name per sample
            categories: Canonical category order for the matrix and per-category breakdown

        Returns:
            ClassifierEvaluation

        Raises:
            ShapeError: On mismatched lengths, an empty category list or a
                label that is not among ``categories``
        """
        predictions = list(predictions)
        ground_truth = list(ground_truth)
        categories = list(categories)

        if len(predictions) != len(ground_truth):
            raise ShapeError(
                f"Got {len(predictions)} predictions for {len(ground_truth)} ground truth labels"
            )
        if not categories:
            raise ShapeError("Category list cannot be empty")
        if len(set(categories)) != len(categories):
            raise ShapeError("Category list contains duplicates")

        positions = {name: i for i, name in enumerate(categories)}
        size = len(categories)
        matrix = np.zeros((size, size), dtype=int)
        misclassified: List[Dict] = []

        for prediction, actual in zip(predictions, ground_truth):
            predicted = prediction.category
            if actual not in positions:
                raise ShapeError(f"Ground truth label '{actual}' is not in the category list")
            if predicted not in positions:
                raise ShapeError(f"Predicted label '{predicted}' is not in the category list")

            matrix[positions[predicted], positions[actual]] += 1

            if predicted != actual and len(misclassified) < self.max_misclassified:
                misclassified.append({
                    "predicted": predicted,
                    "actual": actual,
                    "confidence": prediction.confidence,
                    "reasoning": prediction.reasoning,
                })

        total = len(predictions)
        correct = int(np.trace(matrix))
        true_positives = np.diag(matrix)
        predicted_totals = matrix.sum(axis=1)
        supports = matrix.sum(axis=0)

        per_category: Dict[str, CategoryMetrics] = {}
        for i, name in enumerate(categories):
            precision = _safe_divide(true_positives[i], predicted_totals[i])
            recall = _safe_divide(true_positives[i], supports[i])
            f1 = _safe_divide(2 * precision * recall, precision + recall)
            per_category[name] = CategoryMetrics(
                precision=precision,
                recall=recall,
                f1=f1,
                support=int(supports[i])
            )

        precisions = np.array([m.precision for m in per_category.values()])
        recalls = np.array([m.recall for m in per_category.values()])
        f1s = np.array([m.f1 for m in per_category.values()])
        support_total = int(supports.sum())

        def weighted(values: np.ndarray) -> float:
            return _safe_divide(float(np.dot(values, supports)), support_total)

        evaluation = ClassifierEvaluation(
            accuracy=_safe_divide(correct, total),
            macro_precision=float(precisions.mean()),
            macro_recall=float(recalls.mean()),
            macro_f1=float(f1s.mean()),
            weighted_precision=weighted(precisions),
            weighted_recall=weighted(recalls),
            weighted_f1=weighted(f1s),
            per_category=per_category,
            confusion_matrix=matrix.tolist(),
            misclassified_examples=misclassified,
            categories=categories,
            total=total
        )

        logger.info(
            f"Evaluated {total} predictions: accuracy {evaluation.accuracy:.3f}, "
            f"macro F1 {evaluation.macro_f1:.3f}"
        )
        return evaluation

    def evaluate_dataset(
        self,
        classifier: ClassifierInterface,
        dataset: TrainingDataset,
        categories: Optional[Sequence[str]] = None
    ) -> ClassifierEvaluation:
        """
        Classify a labeled dataset and evaluate the output.

        Items whose classification fails are logged and left out of the
        evaluation.

        Args:
            classifier: Classifier to run
            dataset: Labeled examples
            categories: Category order (defaults to the classifier's registry order)

        Returns:
            ClassifierEvaluation over the successfully classified items
        """
        items = classifier.classify_batch(dataset.texts, fail_fast=False)

        predictions: List[ClassificationResult] = []
        ground_truth: List[str] = []
        failed = 0
        for item, example in zip(items, dataset.examples):
            if item.ok:
                predictions.append(item.result)
                ground_truth.append(example.category)
            else:
                failed += 1

        if failed:
            logger.warning(f"{failed}/{len(dataset)} dataset items failed to classify and were skipped")

        if categories is None:
            categories = classifier.category_names()
        return self.evaluate(predictions, ground_truth, categories)


def save_report(evaluation: ClassifierEvaluation, filepath: str, indent: Optional[int] = None) -> None:
    """
    Write an evaluation report as a single JSON document.

    Raises:
        DatasetLoadingError: If the file cannot be written
    """
    from .config import config

    if indent is None:
        indent = config.evaluation.json_indent

    try:
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(evaluation.to_dict(), f, indent=indent)
    except OSError as e:
        raise DatasetLoadingError(f"Failed to write evaluation report: {str(e)}")

    logger.info(f"Saved evaluation report to {filepath}")
