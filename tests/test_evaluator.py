"""
Tests for classifier evaluation.
"""

import json
import pytest
from unittest.mock import Mock

from routed_text_classifier.evaluator import Evaluator, save_report
from routed_text_classifier.models.data_models import (
    BatchItemResult,
    ClassificationResult,
    TrainingDataset,
    TrainingExample
)
from routed_text_classifier.services.interfaces import ClassifierInterface
from routed_text_classifier.exceptions import ParseError, ShapeError


def predicted(*categories):
    return [ClassificationResult(category=c, confidence=0.9, reasoning="r") for c in categories]


class TestEvaluator:
    """Test cases for Evaluator."""

    def setup_method(self):
        """Set up test fixtures."""
        self.evaluator = Evaluator()

    def test_small_example(self):
        """Test accuracy, matrix and misclassified list for a three-sample run."""
        evaluation = self.evaluator.evaluate(predicted("A", "A", "B"), ["A", "B", "B"], ["A", "B"])

        assert evaluation.accuracy == pytest.approx(2 / 3)
        assert evaluation.confusion_matrix == [[1, 1], [0, 1]]
        assert evaluation.misclassified_examples == [
            {"predicted": "A", "actual": "B", "confidence": 0.9, "reasoning": "r"}
        ]
        assert evaluation.total == 3

    def test_per_category_metrics(self):
        """Test precision, recall, F1 and support per category."""
        evaluation = self.evaluator.evaluate(predicted("A", "A", "B"), ["A", "B", "B"], ["A", "B"])

        a = evaluation.per_category["A"]
        b = evaluation.per_category["B"]
        assert (a.precision, a.recall, a.support) == (0.5, 1.0, 1)
        assert (b.precision, b.recall, b.support) == (1.0, 0.5, 2)
        assert a.f1 == pytest.approx(2 / 3)
        assert b.f1 == pytest.approx(2 / 3)

    def test_macro_and_weighted_averages(self):
        """Test macro averages are unweighted and weighted averages use support."""
        evaluation = self.evaluator.evaluate(predicted("A", "A", "B"), ["A", "B", "B"], ["A", "B"])

        assert evaluation.macro_precision == pytest.approx(0.75)
        assert evaluation.macro_recall == pytest.approx(0.75)
        assert evaluation.weighted_precision == pytest.approx((0.5 * 1 + 1.0 * 2) / 3)
        assert evaluation.weighted_recall == pytest.approx((1.0 * 1 + 0.5 * 2) / 3)

    def test_matrix_follows_category_order(self):
        """Test the matrix axes follow the categories argument."""
        evaluation = self.evaluator.evaluate(predicted("A", "A", "B"), ["A", "B", "B"], ["B", "A"])

        assert evaluation.confusion_matrix == [[1, 0], [1, 1]]
        assert list(evaluation.per_category) == ["B", "A"]

    def test_category_without_samples(self):
        """Test a category that is never predicted or seen scores zero without dividing by zero."""
        evaluation = self.evaluator.evaluate(predicted("A"), ["A"], ["A", "C"])

        c = evaluation.per_category["C"]
        assert (c.precision, c.recall, c.f1, c.support) == (0.0, 0.0, 0.0, 0)
        assert evaluation.confusion_matrix == [[1, 0], [0, 0]]

    def test_perfect_predictions(self):
        """Test a perfect run has accuracy 1 and no misclassified examples."""
        evaluation = self.evaluator.evaluate(predicted("A", "B"), ["A", "B"], ["A", "B"])

        assert evaluation.accuracy == 1.0
        assert evaluation.macro_f1 == 1.0
        assert evaluation.misclassified_examples == []

    def test_length_mismatch(self):
        """Test mismatched prediction and label counts raise ShapeError."""
        with pytest.raises(ShapeError):
            self.evaluator.evaluate(predicted("A", "B"), ["A"], ["A", "B"])

    def test_unknown_label(self):
        """Test a label outside the category list raises ShapeError."""
        with pytest.raises(ShapeError, match="'Z'"):
            self.evaluator.evaluate(predicted("A"), ["Z"], ["A", "B"])
        with pytest.raises(ShapeError, match="'Z'"):
            self.evaluator.evaluate(predicted("Z"), ["A"], ["A", "B"])

    def test_invalid_category_list(self):
        """Test empty or duplicated category lists raise ShapeError."""
        with pytest.raises(ShapeError):
            self.evaluator.evaluate([], [], [])
        with pytest.raises(ShapeError):
            self.evaluator.evaluate(predicted("A"), ["A"], ["A", "A"])

    def test_misclassified_list_is_capped(self):
        """Test at most 20 misclassified examples are kept, in input order."""
        predictions = predicted(*(["A"] * 30))
        ground_truth = ["B"] * 30

        evaluation = self.evaluator.evaluate(predictions, ground_truth, ["A", "B"])

        assert len(evaluation.misclassified_examples) == 20
        assert evaluation.confusion_matrix == [[0, 30], [0, 0]]

    def test_custom_misclassified_cap(self):
        """Test the misclassified cap is configurable."""
        evaluator = Evaluator(max_misclassified=2)

        evaluation = evaluator.evaluate(predicted("A", "A", "A"), ["B", "B", "B"], ["A", "B"])

        assert len(evaluation.misclassified_examples) == 2

    def test_format_report(self):
        """Test the text report lists accuracy and each category."""
        evaluation = self.evaluator.evaluate(predicted("A", "A", "B"), ["A", "B", "B"], ["A", "B"])

        report = evaluation.format_report()

        assert "Accuracy: 66.7%" in report
        assert "predicted=A actual=B" in report

    def test_evaluate_dataset_skips_failures(self):
        """Test dataset evaluation drops items that failed to classify."""
        dataset = TrainingDataset(examples=[
            TrainingExample(text="one", category="A"),
            TrainingExample(text="two", category="B"),
            TrainingExample(text="three", category="B"),
        ])
        classifier = Mock(spec=ClassifierInterface)
        classifier.classify_batch.return_value = [
            BatchItemResult(index=0, text="one", result=predicted("A")[0]),
            BatchItemResult(index=1, text="two", error=ParseError("bad reply")),
            BatchItemResult(index=2, text="three", result=predicted("A")[0]),
        ]
        classifier.category_names.return_value = ["A", "B"]

        evaluation = self.evaluator.evaluate_dataset(classifier, dataset)

        classifier.classify_batch.assert_called_once_with(["one", "two", "three"], fail_fast=False)
        assert evaluation.total == 2
        assert evaluation.accuracy == 0.5
        assert evaluation.categories == ["A", "B"]

    def test_evaluate_dataset_defaults_to_registry_order(self):
        """Test a predicted category absent from the labels is scored, in registry order."""
        dataset = TrainingDataset(examples=[
            TrainingExample(text="one", category="B"),
            TrainingExample(text="two", category="A"),
        ])
        classifier = Mock(spec=ClassifierInterface)
        classifier.classify_batch.return_value = [
            BatchItemResult(index=0, text="one", result=predicted("B")[0]),
            BatchItemResult(index=1, text="two", result=predicted("C")[0]),
        ]
        classifier.category_names.return_value = ["A", "B", "C"]

        evaluation = self.evaluator.evaluate_dataset(classifier, dataset)

        assert evaluation.categories == ["A", "B", "C"]
        assert evaluation.accuracy == 0.5
        assert evaluation.confusion_matrix == [[0, 0, 0], [0, 1, 0], [1, 0, 0]]
        assert evaluation.per_category["C"].support == 0
        assert evaluation.misclassified_examples[0]["predicted"] == "C"

    def test_explicit_categories_override_registry_order(self):
        """Test an explicit category order is used as given."""
        dataset = TrainingDataset(examples=[TrainingExample(text="one", category="A")])
        classifier = Mock(spec=ClassifierInterface)
        classifier.classify_batch.return_value = [
            BatchItemResult(index=0, text="one", result=predicted("A")[0]),
        ]

        evaluation = self.evaluator.evaluate_dataset(classifier, dataset, categories=["B", "A"])

        assert evaluation.categories == ["B", "A"]
        classifier.category_names.assert_not_called()


class TestSaveReport:
    """Test cases for writing evaluation reports."""

    def test_save_report_writes_single_json_document(self, tmp_path):
        """Test the saved report is one JSON document with nested averages."""
        evaluation = Evaluator().evaluate(predicted("A", "A", "B"), ["A", "B", "B"], ["A", "B"])
        path = tmp_path / "reports" / "evaluation.json"

        save_report(evaluation, str(path))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["confusion_matrix"] == [[1, 1], [0, 1]]
        assert data["macro_avg"]["precision"] == pytest.approx(0.75)
        assert data["per_category"]["B"]["support"] == 2
        assert data["categories"] == ["A", "B"]
