"""
Prompt-driven classification with a text-generation model.

The few-shot system prompt is built once from the registry; each call sends
the input text and validates the JSON reply strictly against the registry.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Union

from .category_registry import CategoryRegistry
from .batch import run_batch
from .models.data_models import ClassificationResult, BatchItemResult
from .prompts import ClassificationPrompts
from .services.interfaces import ClassifierInterface, GenerationBackend
from .exceptions import (
    ClassifierError,
    InvalidInputError,
    ParseError,
    ProviderError,
    ProviderTimeout
)


logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r'```(?:json)?\s*(\{.*?\})\s*```', re.DOTALL)
_BARE_JSON = re.compile(r'\{.*\}', re.DOTALL)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _extract_json_object(reply: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model reply.

    Raises:
        ParseError: If no JSON object can be decoded
    """
    if not isinstance(reply, str) or not reply.strip():
        raise ParseError("Empty model reply")

    match = _FENCED_JSON.search(reply) or _BARE_JSON.search(reply)
    if not match:
        raise ParseError("No JSON found in model reply")

    json_str = match.group(1) if match.re is _FENCED_JSON else match.group(0)
    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse JSON from model reply: {e}")

    if not isinstance(parsed, dict):
        raise ParseError("Model reply JSON must be an object")
    return parsed


def parse_classification_reply(reply: str, registry: CategoryRegistry) -> ClassificationResult:
    """
    Validate a model reply and turn it into a ClassificationResult.

    The primary fields are strict: a missing field, a wrong type, a
    confidence outside [0, 1] or an unregistered category all fail. The
    secondary pair is an annotation and is dropped when invalid.

    Args:
        reply: Raw model reply
        registry: Registry the category must belong to

    Returns:
        Validated ClassificationResult

    Raises:
        ParseError: If the reply does not describe a valid classification
    """
    data = _extract_json_object(reply)

    for required in ("category", "confidence", "reasoning"):
        if required not in data:
            raise ParseError(f"Missing '{required}' in model reply")

    category = data["category"]
    confidence = data["confidence"]
    reasoning = data["reasoning"]

    if not isinstance(category, str):
        raise ParseError("'category' must be a string")
    category = category.strip()
    if category not in registry:
        raise ParseError(f"Model predicted unregistered category: '{category}'")

    if not _is_number(confidence):
        raise ParseError("'confidence' must be a number")
    if not (0.0 <= confidence <= 1.0):
        raise ParseError(f"'confidence' must be between 0.0 and 1.0, got {confidence}")

    if not isinstance(reasoning, str):
        raise ParseError("'reasoning' must be a string")

    secondary_category = data.get("secondary_category")
    secondary_confidence = data.get("secondary_confidence")
    if secondary_category is not None or secondary_confidence is not None:
        if (
            isinstance(secondary_category, str)
            and secondary_category.strip() in registry
            and secondary_category.strip() != category
            and _is_number(secondary_confidence)
            and 0.0 <= secondary_confidence <= 1.0
        ):
            secondary_category = secondary_category.strip()
            secondary_confidence = float(secondary_confidence)
        else:
            logger.debug(
                f"Dropping invalid secondary annotation: "
                f"{secondary_category!r} / {secondary_confidence!r}"
            )
            secondary_category = None
            secondary_confidence = None

    return ClassificationResult(
        category=category,
        confidence=float(confidence),
        reasoning=reasoning,
        secondary_category=secondary_category,
        secondary_confidence=secondary_confidence
    )


class PromptClassifier(ClassifierInterface):
    """Few-shot classifier backed by a text-generation model."""

    def __init__(
        self,
        registry: CategoryRegistry,
        backend: GenerationBackend,
        max_examples: Optional[int] = None,
        max_workers: Optional[int] = None
    ):
        """
        Build the static system prompt from the registry.

        Args:
            registry: Category taxonomy
            backend: Text-generation collaborator
            max_examples: Examples per category shown to the model (default from config)
            max_workers: Concurrency bound for batch classification (default from config)
        """
        from .config import config

        self.registry = registry
        self.backend = backend
        self.max_examples = max_examples if max_examples is not None else config.prompt.max_examples_per_category
        self.max_workers = max_workers
        self.system_prompt = ClassificationPrompts.system_prompt(registry.all(), self.max_examples)

        logger.info(f"Initialized PromptClassifier with {len(registry)} categories")

    def classify(self, text: str) -> ClassificationResult:
        """
        Classify a single text.

        Raises:
            InvalidInputError: If text is empty
            ParseError: If the model reply is invalid
            ProviderTimeout: If the model call times out
            ProviderError: If the model call fails
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Input text cannot be empty")

        prompt = ClassificationPrompts.classification_prompt(text)
        try:
            reply = self.backend.generate(self.system_prompt, prompt)
        except ClassifierError:
            raise
        except TimeoutError as e:
            raise ProviderTimeout(f"Model call timed out: {e}")
        except Exception as e:
            raise ProviderError(f"Model call failed: {e}")

        return parse_classification_reply(reply, self.registry)

    def classify_batch(
        self,
        texts: Sequence[str],
        fail_fast: Optional[bool] = None
    ) -> Union[List[ClassificationResult], List[BatchItemResult]]:
        return run_batch(self.classify, texts, max_workers=self.max_workers, fail_fast=fail_fast)

    def category_names(self) -> List[str]:
        return self.registry.names()
