"""
Core interfaces for the classifier's external collaborators.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union
from ..models import ClassificationResult, BatchItemResult, ReviewItem


class GenerationBackend(ABC):
    """Interface for a text-generation model."""

    @abstractmethod
    def generate(self, system_prompt: str, prompt: str) -> str:
        """
        Send one request to the model and return its text reply.

        Args:
            system_prompt: Static instructions for the model
            prompt: Per-request user message

        Returns:
            Raw reply text

        Raises:
            ProviderTimeout: If the model does not answer in time
            ProviderError: If the call fails for any other reason
        """
        pass


class EmbeddingService(ABC):
    """Interface for an embedding model."""

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        """
        Embed a single text.

        Args:
            text: Input text to embed

        Returns:
            Embedding vector as list of floats

        Raises:
            ProviderTimeout: If the service does not answer in time
            ProviderError: If the call fails for any other reason
        """
        pass


class ReviewQueue(ABC):
    """Interface for the store that receives human-review requests."""

    @abstractmethod
    def submit(self, item: ReviewItem) -> str:
        """
        Create a review item.

        Args:
            item: Classification awaiting human confirmation

        Returns:
            Opaque, non-empty identifier of the stored item
        """
        pass


class ClassifierInterface(ABC):
    """Capability shared by all classification strategies."""

    @abstractmethod
    def classify(self, text: str) -> ClassificationResult:
        """Classify a single text."""
        pass

    @abstractmethod
    def classify_batch(
        self,
        texts: Sequence[str],
        fail_fast: Optional[bool] = None
    ) -> Union[List[ClassificationResult], List[BatchItemResult]]:
        """
        Classify many texts concurrently, preserving input order.

        Args:
            texts: Input texts
            fail_fast: Abort on the first failure instead of collecting
                per-item errors (defaults to the batch configuration)

        Returns:
            Results in fail-fast mode, per-item outcomes in best-effort mode
        """
        pass

    @abstractmethod
    def category_names(self) -> List[str]:
        """Registered category names in canonical registry order."""
        pass
