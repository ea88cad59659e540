"""
Nearest-centroid classification over category exemplar embeddings.

Every exemplar of every category is embedded once by ``build_index``. At
classification time the input is embedded, its cosine similarity to each
exemplar is averaged per category, and the category with the highest mean
wins. Equal means go to the category registered first.

Caveat: the confidence of an embedding classification is the raw mean
cosine similarity, nominally in [-1, 1]. It is not clamped; values below 0
mean "no positive evidence" and route to the reject path through the normal
thresholds.
"""

import gzip
import logging
import pickle
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from .category_registry import CategoryRegistry
from .batch import run_batch
from .models.data_models import ClassificationResult, BatchItemResult
from .services.interfaces import ClassifierInterface, EmbeddingService
from .exceptions import (
    ClassifierError,
    ConfigError,
    DatasetLoadingError,
    InvalidInputError,
    NotReadyError,
    ProviderError,
    ProviderTimeout
)


logger = logging.getLogger(__name__)


class EmbeddingClassifier(ClassifierInterface):
    """
    Classifies text by mean cosine similarity to category exemplars.

    The exemplar index is immutable once built, so concurrent ``classify``
    calls share it without locking.
    """

    def __init__(
        self,
        registry: CategoryRegistry,
        embedding_service: EmbeddingService,
        max_workers: Optional[int] = None
    ):
        """
        Args:
            registry: Category taxonomy
            embedding_service: Embedding collaborator
            max_workers: Concurrency bound for batch classification (default from config)
        """
        from .config import config

        self.registry = registry
        self.embedding_service = embedding_service
        self.max_workers = max_workers
        self._epsilon = config.embedding.zero_norm_epsilon

        self._vectors: Optional[Dict[str, np.ndarray]] = None
        self._norms: Optional[Dict[str, np.ndarray]] = None
        self._dimension: Optional[int] = None

    def is_ready(self) -> bool:
        """True once the exemplar index is available."""
        return self._vectors is not None

    @property
    def dimension(self) -> Optional[int]:
        """Embedding dimension of the index, or None before it is built."""
        return self._dimension

    def _embed(self, text: str) -> np.ndarray:
        try:
            vector = self.embedding_service.embed(text)
        except ClassifierError:
            raise
        except TimeoutError as e:
            raise ProviderTimeout(f"Embedding call timed out: {e}")
        except Exception as e:
            raise ProviderError(f"Embedding call failed: {e}")
        return np.asarray(vector, dtype=float)

    def build_index(self) -> None:
        """
        Embed every exemplar of every registered category.

        Raises:
            ConfigError: If the service returns vectors of inconsistent dimensions
            ProviderError: If an embedding call fails
        """
        vectors: Dict[str, List[np.ndarray]] = {}
        for category in self.registry.all():
            vectors[category.name] = [self._embed(example) for example in category.examples]

        self._install_index(vectors)
        logger.info(
            f"Built embedding index for {len(self.registry)} categories "
            f"(dimension {self._dimension})"
        )

    def _install_index(self, vectors: Dict[str, Sequence[Sequence[float]]]) -> None:
        """Validate dimensions and pre-compute norms, then publish the index."""
        matrices: Dict[str, np.ndarray] = {}
        norms: Dict[str, np.ndarray] = {}
        dimension: Optional[int] = None

        for category in self.registry.all():
            if category.name not in vectors:
                raise ConfigError(f"No exemplar vectors for category '{category.name}'")
            matrix = np.asarray(vectors[category.name], dtype=float)
            if matrix.ndim != 2 or matrix.shape[0] == 0:
                raise ConfigError(f"Exemplar vectors for '{category.name}' must be a non-empty 2-D array")
            if dimension is None:
                dimension = matrix.shape[1]
            elif matrix.shape[1] != dimension:
                raise ConfigError(
                    f"Inconsistent embedding dimensions: expected {dimension}, "
                    f"got {matrix.shape[1]} for category '{category.name}'"
                )

            category_norms = np.linalg.norm(matrix, axis=1)
            # Handle zero norms to avoid division by zero
            norms[category.name] = np.where(category_norms == 0, self._epsilon, category_norms)
            matrices[category.name] = matrix

        # Publish only fully built structures
        self._norms = norms
        self._dimension = dimension
        self._vectors = matrices

    def mean_similarities(self, text: str) -> Dict[str, float]:
        """
        Mean cosine similarity of the text to each category's exemplars.

        Returns:
            Category name to mean similarity, in registry order

        Raises:
            NotReadyError: If the index has not been built
        """
        if not self.is_ready():
            raise NotReadyError("Embedding index not built. Call build_index() first.")
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Input text cannot be empty")

        query = self._embed(text)
        if query.ndim != 1 or query.shape[0] != self._dimension:
            raise ProviderError(
                f"Text embedding dimension {query.shape[-1] if query.ndim else 0} doesn't match "
                f"index dimension {self._dimension}"
            )

        query_norm = np.linalg.norm(query)
        if query_norm == 0:
            query_norm = self._epsilon

        scores: Dict[str, float] = {}
        for category in self.registry.all():
            matrix = self._vectors[category.name]
            cosine = np.dot(matrix, query) / (self._norms[category.name] * query_norm)
            scores[category.name] = float(np.mean(cosine))
        return scores

    def classify(self, text: str) -> ClassificationResult:
        """
        Classify text by highest mean exemplar similarity.

        Raises:
            NotReadyError: If the index has not been built
            ProviderError: If embedding the text fails
        """
        scores = self.mean_similarities(text)

        # Strict comparison in registry order: the earliest category wins ties
        best_name = None
        runner_up = None
        for name, score in scores.items():
            if best_name is None or score > scores[best_name]:
                runner_up = best_name
                best_name = name
            elif runner_up is None or score > scores[runner_up]:
                runner_up = name

        best_score = scores[best_name]
        secondary_category = None
        secondary_confidence = None
        if runner_up is not None and 0.0 <= scores[runner_up] <= 1.0:
            secondary_category = runner_up
            secondary_confidence = scores[runner_up]

        label = self.registry.lookup(best_name).label
        reasoning = (
            f"Highest mean cosine similarity to '{best_name}' ({label}) "
            f"exemplars: {best_score:.4f}"
        )
        if best_score < 0:
            reasoning += "; no category shows positive similarity"

        return ClassificationResult(
            category=best_name,
            confidence=best_score,
            reasoning=reasoning,
            secondary_category=secondary_category,
            secondary_confidence=secondary_confidence
        )

    def classify_batch(
        self,
        texts: Sequence[str],
        fail_fast: Optional[bool] = None
    ) -> Union[List[ClassificationResult], List[BatchItemResult]]:
        if not self.is_ready():
            raise NotReadyError("Embedding index not built. Call build_index() first.")
        return run_batch(self.classify, texts, max_workers=self.max_workers, fail_fast=fail_fast)

    def category_names(self) -> List[str]:
        return self.registry.names()

    def save_index(self, filepath: str) -> None:
        """
        Save exemplar vectors to a gzip-compressed pickle.

        Raises:
            NotReadyError: If the index has not been built
            DatasetLoadingError: If writing fails
        """
        if not self.is_ready():
            raise NotReadyError("Embedding index not built. Call build_index() first.")

        save_data = {
            "categories": self.registry.names(),
            "dimension": self._dimension,
            "vectors": {name: matrix.tolist() for name, matrix in self._vectors.items()},
        }
        try:
            with gzip.open(filepath, 'wb') as f:
                pickle.dump(save_data, f, protocol=pickle.HIGHEST_PROTOCOL)
        except OSError as e:
            raise DatasetLoadingError(f"Failed to save embedding index: {str(e)}")

        logger.info(f"Saved embedding index to {filepath}")

    def load_index(self, filepath: str) -> None:
        """
        Load exemplar vectors previously written by ``save_index``.

        Raises:
            DatasetLoadingError: If the file is missing or malformed
            ConfigError: If the stored categories do not match the registry
        """
        path = Path(filepath)
        if not path.exists():
            raise DatasetLoadingError(f"Embedding index file not found: {filepath}")
        if not path.is_file():
            raise DatasetLoadingError(f"Path is not a file: {filepath}")

        try:
            with gzip.open(filepath, 'rb') as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            raise DatasetLoadingError(f"Failed to load embedding index: {str(e)}")

        if not isinstance(data, dict) or "vectors" not in data:
            raise DatasetLoadingError("Invalid embedding index file format")

        stored = data.get("categories", [])
        if list(stored) != self.registry.names():
            raise ConfigError(
                "Embedding index categories do not match the registry; rebuild the index"
            )

        self._install_index(data["vectors"])
        logger.info(f"Loaded embedding index from {filepath}")
