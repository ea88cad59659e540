"""
Classification pipeline: classifier, confidence router and fallback handler.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .category_registry import CategoryRegistry, load_categories
from .confidence_router import ConfidenceRouter
from .fallback_handler import FallbackHandler
from .models.data_models import BatchItemResult, CategoryDefinition, HandledClassification
from .services.interfaces import ClassifierInterface, ReviewQueue
from .services.review_queue import InMemoryReviewQueue
from .exceptions import ConfigError


logger = logging.getLogger(__name__)

STRATEGIES = ("prompt", "embedding")


class ClassificationPipeline:
    """Classifies text, routes it by confidence and resolves the action."""

    def __init__(
        self,
        registry: CategoryRegistry,
        classifier: ClassifierInterface,
        router: ConfidenceRouter,
        handler: FallbackHandler,
        strategy: str = "custom"
    ):
        self.registry = registry
        self.classifier = classifier
        self.router = router
        self.handler = handler
        self.strategy = strategy

    def classify(self, text: str) -> HandledClassification:
        """Classify one text and turn the result into an action."""
        result = self.classifier.classify(text)
        route = self.router.route(result)
        logger.debug(f"Routed '{result.category}' ({result.confidence:.3f}) to {route.value}")
        return self.handler.handle(text, result, route)

    def classify_batch(self, texts: Sequence[str]) -> List[BatchItemResult]:
        """Best-effort batch classification without routing."""
        return self.classifier.classify_batch(texts, fail_fast=False)

    def categories(self) -> List[CategoryDefinition]:
        return list(self.registry.all())


def build_pipeline(
    classifier_config=None,
    registry: Optional[CategoryRegistry] = None,
    review_queue: Optional[ReviewQueue] = None,
    generation_backend=None,
    embedding_service=None
) -> ClassificationPipeline:
    """
    Assemble a pipeline from configuration.

    The strategy is chosen once here. For the embedding strategy the
    exemplar index is loaded from ``pipeline.embeddings_path`` when that file
    exists, and built (and saved there, if a path is set) otherwise.

    Args:
        classifier_config: ClassifierConfig (defaults to the global config)
        registry: Taxonomy (defaults to loading ``pipeline.categories_path``)
        review_queue: Review queue collaborator (defaults to in-memory)
        generation_backend: Overrides the Bedrock generation backend
        embedding_service: Overrides the Bedrock embedding service

    Raises:
        ConfigError: On an unknown strategy, invalid thresholds or taxonomy
    """
    from .config import config as global_config
    from .prompt_classifier import PromptClassifier
    from .embedding_classifier import EmbeddingClassifier

    cfg = classifier_config if classifier_config is not None else global_config
    strategy = cfg.pipeline.strategy
    if strategy not in STRATEGIES:
        raise ConfigError(f"Strategy must be one of {STRATEGIES}, got '{strategy}'")

    if registry is None:
        registry = load_categories(cfg.pipeline.categories_path)
    if review_queue is None:
        review_queue = InMemoryReviewQueue()
    router = ConfidenceRouter.from_config(cfg.routing)
    handler = FallbackHandler(
        review_queue,
        fallback_category=cfg.routing.fallback_category
    )

    if strategy == "prompt":
        if generation_backend is None:
            from .services.bedrock import StrandsGenerationBackend
            generation_backend = StrandsGenerationBackend(cfg.aws, cfg.prompt, cfg.retry)
        classifier = PromptClassifier(
            registry,
            generation_backend,
            max_examples=cfg.prompt.max_examples_per_category,
            max_workers=cfg.batch.max_workers
        )
    else:
        if embedding_service is None:
            from .services.bedrock import BedrockEmbeddingService
            embedding_service = BedrockEmbeddingService(cfg.aws, cfg.retry)
        classifier = EmbeddingClassifier(registry, embedding_service, max_workers=cfg.batch.max_workers)

        embeddings_path = cfg.pipeline.embeddings_path
        if embeddings_path and Path(embeddings_path).is_file():
            classifier.load_index(embeddings_path)
        else:
            classifier.build_index()
            if embeddings_path:
                classifier.save_index(embeddings_path)

    logger.info(f"Pipeline ready: strategy={strategy}, categories={len(registry)}")
    return ClassificationPipeline(registry, classifier, router, handler, strategy=strategy)
