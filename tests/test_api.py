"""
Tests for the FastAPI transport.
"""

import json
import logging
import pytest
from unittest.mock import Mock
from fastapi.testclient import TestClient

from routed_text_classifier.api import create_app, handle_api_error
from routed_text_classifier.pipeline import build_pipeline
from routed_text_classifier.services.interfaces import GenerationBackend
from routed_text_classifier.services.review_queue import InMemoryReviewQueue
from routed_text_classifier.config import (
    AWSConfig,
    BatchConfig,
    ClassifierConfig,
    EmbeddingConfig,
    EvaluationConfig,
    PipelineConfig,
    PromptConfig,
    RetryConfig,
    RoutingConfig
)
from routed_text_classifier.exceptions import (
    InvalidInputError,
    NotReadyError,
    ProviderError,
    ProviderTimeout
)


class TextKeyedBackend(GenerationBackend):
    """Replies according to the text being classified."""

    def __init__(self, replies):
        self.replies = replies

    def generate(self, system_prompt, prompt):
        text = prompt.split("\n", 1)[1]
        outcome = self.replies[text]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def model_reply(category, confidence):
    return json.dumps({"category": category, "confidence": confidence, "reasoning": "because"})


@pytest.fixture
def queue():
    return InMemoryReviewQueue()


@pytest.fixture
def client(queue):
    backend = TextKeyedBackend({
        "charged twice": model_reply("billing", 0.95),
        "maybe a bug": model_reply("technical_issue", 0.6),
        "hmm": model_reply("feature_request", 0.1),
        "garbled": "I am not JSON",
        "slow": ProviderTimeout("read timed out"),
        "down": ProviderError("throttled"),
    })
    cfg = ClassifierConfig(
        aws=AWSConfig(),
        retry=RetryConfig(),
        prompt=PromptConfig(),
        embedding=EmbeddingConfig(),
        routing=RoutingConfig(),
        batch=BatchConfig(max_workers=2),
        evaluation=EvaluationConfig(),
        pipeline=PipelineConfig()
    )
    pipeline = build_pipeline(cfg, review_queue=queue, generation_backend=backend)
    return TestClient(create_app(pipeline))


class TestClassifyEndpoint:
    """Test cases for POST /classify."""

    def test_auto_apply(self, client):
        """Test a confident classification is applied without review_id."""
        response = client.post("/classify", json={"text": "charged twice"})

        assert response.status_code == 200
        assert response.json() == {
            "category": "billing",
            "confidence": 0.95,
            "reasoning": "because",
            "action": "apply"
        }

    def test_review_includes_review_id(self, client, queue):
        """Test a queued classification carries the review id."""
        response = client.post("/classify", json={"text": "maybe a bug"})

        data = response.json()
        assert response.status_code == 200
        assert data["action"] == "queued_for_review"
        assert data["category"] == "technical_issue"
        assert queue.get(data["review_id"]).text == "maybe a bug"

    def test_fallback(self, client):
        """Test a low-confidence classification returns the fallback category."""
        data = client.post("/classify", json={"text": "hmm"}).json()

        assert data["action"] == "fallback"
        assert data["category"] == "uncategorized"
        assert "review_id" not in data

    def test_empty_text(self, client):
        """Test empty text returns a 400 validation error."""
        response = client.post("/classify", json={"text": "  "})

        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"

    def test_parse_error(self, client):
        """Test an unparseable model reply maps to 502 parse_error."""
        response = client.post("/classify", json={"text": "garbled"})

        assert response.status_code == 502
        assert response.json()["type"] == "parse_error"
        assert response.json()["details"] == "ParseError"

    def test_provider_timeout(self, client):
        """Test a provider timeout maps to 504."""
        response = client.post("/classify", json={"text": "slow"})

        assert response.status_code == 504
        assert response.json()["type"] == "provider_timeout"

    def test_provider_error(self, client):
        """Test a provider failure maps to 502 provider_error."""
        response = client.post("/classify", json={"text": "down"})

        assert response.status_code == 502
        assert response.json()["type"] == "provider_error"


class TestBatchEndpoint:
    """Test cases for POST /classify/batch."""

    def test_batch_results_in_order_with_errors(self, client):
        """Test batch entries follow input order and failures carry an error."""
        response = client.post("/classify/batch", json={"texts": ["hmm", "garbled", "charged twice"]})

        results = response.json()["results"]
        assert response.status_code == 200
        assert results[0] == {"category": "feature_request", "confidence": 0.1, "reasoning": "because"}
        assert results[1]["error_type"] == "ParseError"
        assert results[2]["category"] == "billing"

    def test_empty_batch(self, client):
        """Test an empty batch returns no results."""
        response = client.post("/classify/batch", json={"texts": []})

        assert response.status_code == 200
        assert response.json() == {"results": []}


class TestMetadataEndpoints:
    """Test cases for GET /categories and GET /health."""

    def test_categories_in_registry_order(self, client):
        """Test categories are listed in registry order."""
        response = client.get("/categories")

        names = [c["name"] for c in response.json()]
        assert response.status_code == 200
        assert names == [
            "billing", "billing_refund", "technical_issue", "account_access", "feature_request"
        ]
        assert set(response.json()[0]) == {"name", "label", "description"}

    def test_health(self, client):
        """Test the health endpoint reports strategy and category count."""
        data = client.get("/health").json()

        assert data == {"status": "healthy", "strategy": "prompt", "categories": 5}

    def test_not_ready_maps_to_503(self):
        """Test NotReadyError from the pipeline maps to 503."""
        pipeline = Mock()
        pipeline.classify.side_effect = NotReadyError("index not built")
        client = TestClient(create_app(pipeline))

        response = client.post("/classify", json={"text": "anything"})

        assert response.status_code == 503
        assert response.json()["type"] == "not_ready"


class TestHandleApiError:
    """Test cases for error logging levels."""

    def test_client_error_logged_as_warning(self, caplog):
        """Test validation errors are logged below error level."""
        with caplog.at_level(logging.WARNING, logger="routed_text_classifier.api"):
            response = handle_api_error(InvalidInputError("Input text cannot be empty"))

        assert response.status_code == 400
        assert [r.levelno for r in caplog.records] == [logging.WARNING]

    def test_provider_error_logged_as_error(self, caplog):
        """Test server-side failures are logged at error level."""
        with caplog.at_level(logging.WARNING, logger="routed_text_classifier.api"):
            response = handle_api_error(ProviderError("throttled"))

        assert response.status_code == 502
        assert [r.levelno for r in caplog.records] == [logging.ERROR]
