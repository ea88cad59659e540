"""
Configuration for the confidence-routed text classifier library.
Independent of UI backend configuration.
"""

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_CATEGORIES_PATH = str(
    Path(__file__).resolve().parent.parent / "examples" / "datasets" / "support_tickets.json"
)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AWSConfig:
    """AWS-related configuration settings."""
    bedrock_region: str = "us-west-2"

    # Model configurations
    generation_model_id: str = "us.amazon.nova-lite-v1:0"
    embedding_model_id: str = "amazon.titan-embed-text-v2:0"

    @classmethod
    def from_env(cls) -> 'AWSConfig':
        """Create AWS config from environment variables."""
        return cls(
            bedrock_region=os.getenv('AWS_BEDROCK_REGION', cls.bedrock_region),
            generation_model_id=os.getenv('CLASSIFIER_GENERATION_MODEL', cls.generation_model_id),
            embedding_model_id=os.getenv('CLASSIFIER_EMBEDDING_MODEL', cls.embedding_model_id),
        )


@dataclass
class RetryConfig:
    """Retry and timeout configuration for AWS clients."""
    max_attempts: int = 3
    mode: str = "standard"
    read_timeout: int = 30
    connect_timeout: int = 10
    max_pool_connections: int = 10

    @classmethod
    def from_env(cls) -> 'RetryConfig':
        """Create retry config from environment variables."""
        return cls(
            max_attempts=int(os.getenv('AWS_RETRY_MAX_ATTEMPTS', cls.max_attempts)),
            mode=os.getenv('AWS_RETRY_MODE', cls.mode),
            read_timeout=int(os.getenv('AWS_READ_TIMEOUT', cls.read_timeout)),
            connect_timeout=int(os.getenv('AWS_CONNECT_TIMEOUT', cls.connect_timeout)),
            max_pool_connections=int(os.getenv('AWS_MAX_POOL_CONNECTIONS', cls.max_pool_connections)),
        )


@dataclass
class PromptConfig:
    """Configuration for prompt-based classification."""
    temperature: float = 0.1
    max_tokens: int = 512
    top_p: float = 0.9

    # Few-shot examples shown per category in the system prompt
    max_examples_per_category: int = 3

    @classmethod
    def from_env(cls) -> 'PromptConfig':
        """Create prompt config from environment variables."""
        return cls(
            temperature=float(os.getenv('PROMPT_TEMPERATURE', cls.temperature)),
            max_tokens=int(os.getenv('PROMPT_MAX_TOKENS', cls.max_tokens)),
            top_p=float(os.getenv('PROMPT_TOP_P', cls.top_p)),
            max_examples_per_category=int(os.getenv('PROMPT_MAX_EXAMPLES', cls.max_examples_per_category)),
        )


@dataclass
class EmbeddingConfig:
    """Configuration for embedding similarity classification."""
    # Numerical stability
    zero_norm_epsilon: float = 1e-8

    @classmethod
    def from_env(cls) -> 'EmbeddingConfig':
        """Create embedding config from environment variables."""
        return cls(
            zero_norm_epsilon=float(os.getenv('EMBEDDING_ZERO_NORM_EPSILON', cls.zero_norm_epsilon)),
        )


@dataclass
class RoutingConfig:
    """Thresholds and fallback used to route classifications."""
    high_threshold: float = 0.85
    low_threshold: float = 0.5
    fallback_category: str = "uncategorized"

    @classmethod
    def from_env(cls) -> 'RoutingConfig':
        """Create routing config from environment variables."""
        return cls(
            high_threshold=float(os.getenv('ROUTING_HIGH_THRESHOLD', cls.high_threshold)),
            low_threshold=float(os.getenv('ROUTING_LOW_THRESHOLD', cls.low_threshold)),
            fallback_category=os.getenv('ROUTING_FALLBACK_CATEGORY', cls.fallback_category),
        )


@dataclass
class BatchConfig:
    """Configuration for batch classification."""
    max_workers: int = 8
    fail_fast: bool = False

    @classmethod
    def from_env(cls) -> 'BatchConfig':
        """Create batch config from environment variables."""
        return cls(
            max_workers=int(os.getenv('BATCH_MAX_WORKERS', cls.max_workers)),
            fail_fast=_env_bool('BATCH_FAIL_FAST', cls.fail_fast),
        )


@dataclass
class EvaluationConfig:
    """Configuration for offline evaluation."""
    max_misclassified: int = 20
    json_indent: int = 2

    @classmethod
    def from_env(cls) -> 'EvaluationConfig':
        """Create evaluation config from environment variables."""
        return cls(
            max_misclassified=int(os.getenv('EVALUATION_MAX_MISCLASSIFIED', cls.max_misclassified)),
            json_indent=int(os.getenv('EVALUATION_JSON_INDENT', cls.json_indent)),
        )


@dataclass
class PipelineConfig:
    """Selects the classification strategy and taxonomy file."""
    strategy: str = "prompt"
    categories_path: str = DEFAULT_CATEGORIES_PATH
    embeddings_path: str = ""

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Create pipeline config from environment variables."""
        return cls(
            strategy=os.getenv('CLASSIFIER_STRATEGY', cls.strategy),
            categories_path=os.getenv('CLASSIFIER_CATEGORIES_PATH', cls.categories_path),
            embeddings_path=os.getenv('CLASSIFIER_EMBEDDINGS_PATH', cls.embeddings_path),
        )


@dataclass
class ClassifierConfig:
    """Configuration for the text classifier library."""
    aws: AWSConfig
    retry: RetryConfig
    prompt: PromptConfig
    embedding: EmbeddingConfig
    routing: RoutingConfig
    batch: BatchConfig
    evaluation: EvaluationConfig
    pipeline: PipelineConfig

    @classmethod
    def from_env(cls) -> 'ClassifierConfig':
        """Create classifier config from environment variables."""
        return cls(
            aws=AWSConfig.from_env(),
            retry=RetryConfig.from_env(),
            prompt=PromptConfig.from_env(),
            embedding=EmbeddingConfig.from_env(),
            routing=RoutingConfig.from_env(),
            batch=BatchConfig.from_env(),
            evaluation=EvaluationConfig.from_env(),
            pipeline=PipelineConfig.from_env(),
        )


# Global configuration instance
config = ClassifierConfig.from_env()
