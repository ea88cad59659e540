"""
Loader and writer for line-delimited training data.

Each line is one JSON object ``{"text": ..., "category": ...}`` with an
optional ``"confidence"`` (1.0 for human labels, below 1.0 for silver
labels). Line order carries no meaning.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from .models.data_models import TrainingDataset, TrainingExample
from .category_registry import CategoryRegistry
from .exceptions import DatasetLoadingError


logger = logging.getLogger(__name__)


def _example_from_line(line_number: int, line: str) -> TrainingExample:
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise DatasetLoadingError(f"Invalid JSON on line {line_number}: {str(e)}")

    if not isinstance(data, dict):
        raise DatasetLoadingError(f"Line {line_number} must be a JSON object")

    for required in ("text", "category"):
        if required not in data:
            raise DatasetLoadingError(f"Line {line_number} missing required '{required}' field")
        if not isinstance(data[required], str):
            raise DatasetLoadingError(f"Line {line_number} '{required}' must be a string")

    try:
        return TrainingExample(
            text=data["text"],
            category=data["category"],
            confidence=data.get("confidence", 1.0)
        )
    except ValueError as e:
        raise DatasetLoadingError(f"Invalid example on line {line_number}: {str(e)}")


def load_training_data(
    filepath: str,
    registry: Optional[CategoryRegistry] = None,
    version: str = "1",
    label_source: str = "human"
) -> TrainingDataset:
    """
    Load a JSONL training data file.

    Args:
        filepath: Path to the .jsonl file
        registry: When given, every label must be a registered category and the
            dataset's category order follows the registry
        version: Dataset version recorded on the result
        label_source: Origin of the labels, e.g. "human" or "silver"

    Returns:
        TrainingDataset

    Raises:
        DatasetLoadingError: If the file is missing or any line is malformed
    """
    path = Path(filepath)
    if not path.exists():
        raise DatasetLoadingError(f"Training data file not found: {filepath}")
    if not path.is_file():
        raise DatasetLoadingError(f"Path is not a file: {filepath}")

    examples: List[TrainingExample] = []
    try:
        with open(path, 'r', encoding='utf-8') as f:
            for line_number, line in enumerate(f, 1):
                if not line.strip():
                    continue
                examples.append(_example_from_line(line_number, line))
    except OSError as e:
        raise DatasetLoadingError(f"Failed to read training data file: {str(e)}")

    categories: List[str] = []
    if registry is not None:
        unknown = sorted({e.category for e in examples if e.category not in registry})
        if unknown:
            raise DatasetLoadingError(f"Training data uses unregistered categories: {unknown}")
        categories = registry.names()

    dataset = TrainingDataset(
        examples=examples,
        categories=categories,
        version=version,
        label_source=label_source
    )
    logger.info(
        f"Loaded {len(dataset)} training examples from {filepath} "
        f"({len(dataset.silver_examples())} silver)"
    )
    return dataset


def save_training_data(examples: Iterable[TrainingExample], filepath: str) -> int:
    """
    Write examples as JSONL; confidence is only written for silver labels.

    Returns:
        Number of lines written

    Raises:
        DatasetLoadingError: If the file cannot be written
    """
    count = 0
    try:
        with open(filepath, 'w', encoding='utf-8') as f:
            for example in examples:
                record = {"text": example.text, "category": example.category}
                if example.is_silver:
                    record["confidence"] = example.confidence
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
                count += 1
    except OSError as e:
        raise DatasetLoadingError(f"Failed to write training data: {str(e)}")
    return count
