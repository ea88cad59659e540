"""
Amazon Bedrock implementations of the generation and embedding services.
"""

import json
import logging
from typing import List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError
)
from strands import Agent
from strands.models import BedrockModel

from .interfaces import GenerationBackend, EmbeddingService
from ..config import AWSConfig, PromptConfig, RetryConfig
from ..exceptions import ProviderError, ProviderTimeout


logger = logging.getLogger(__name__)


def build_client_config(aws: AWSConfig, retry: RetryConfig) -> Config:
    """botocore client configuration carrying the per-call timeouts."""
    return Config(
        region_name=aws.bedrock_region,
        retries={
            'max_attempts': retry.max_attempts,
            'mode': retry.mode
        },
        read_timeout=retry.read_timeout,
        connect_timeout=retry.connect_timeout,
        max_pool_connections=retry.max_pool_connections
    )


def translate_provider_error(e: Exception, service: str) -> ProviderError:
    """Map botocore failures onto the classifier's provider errors."""
    if isinstance(e, (ReadTimeoutError, ConnectTimeoutError, TimeoutError)):
        return ProviderTimeout(f"{service} timed out: {e}")
    if isinstance(e, ClientError):
        error_code = e.response.get('Error', {}).get('Code', '')
        return ProviderError(f"{service} client error ({error_code}): {e}")
    if isinstance(e, BotoCoreError):
        return ProviderError(f"{service} connection error: {e}")
    return ProviderError(f"{service} call failed: {e}")


class StrandsGenerationBackend(GenerationBackend):
    """Generation backend running a Strands agent on a Bedrock model."""

    def __init__(
        self,
        aws: Optional[AWSConfig] = None,
        prompt: Optional[PromptConfig] = None,
        retry: Optional[RetryConfig] = None
    ):
        from ..config import config

        self.aws = aws if aws is not None else config.aws
        self.prompt_config = prompt if prompt is not None else config.prompt
        self.retry = retry if retry is not None else config.retry

        # The model and its boto3 client are shared; agents are not
        self.model = BedrockModel(
            model_id=self.aws.generation_model_id,
            boto_client_config=build_client_config(self.aws, self.retry),
            temperature=self.prompt_config.temperature,
            max_tokens=self.prompt_config.max_tokens,
            top_p=self.prompt_config.top_p
        )

        logger.info(f"Initialized Bedrock generation model: {self.aws.generation_model_id}")

    def generate(self, system_prompt: str, prompt: str) -> str:
        # A fresh agent per call keeps concurrent requests from sharing history
        agent = Agent(
            model=self.model,
            system_prompt=system_prompt,
            callback_handler=None
        )

        try:
            response = agent(prompt)
        except Exception as e:
            raise translate_provider_error(e, "Bedrock generation")

        try:
            response_text = response.message['content'][0]['text']
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected Bedrock response structure: {e}")

        logger.debug(f"Model response: {response_text}")
        return response_text


class BedrockEmbeddingService(EmbeddingService):
    """Embedding service backed by Amazon Titan text embeddings."""

    def __init__(
        self,
        aws: Optional[AWSConfig] = None,
        retry: Optional[RetryConfig] = None,
        client=None
    ):
        from ..config import config

        self.aws = aws if aws is not None else config.aws
        self.retry = retry if retry is not None else config.retry
        if client is None:
            client = boto3.client(
                "bedrock-runtime",
                config=build_client_config(self.aws, self.retry)
            )
        self.client = client

    def embed(self, text: str) -> List[float]:
        # Create request payload
        native_request = {"inputText": text.strip()}
        request = json.dumps(native_request).encode("utf-8")

        try:
            response = self.client.invoke_model(modelId=self.aws.embedding_model_id, body=request)
            model_response = json.loads(response["body"].read())
        except Exception as e:
            raise translate_provider_error(e, "Bedrock embedding")

        embedding_vector = model_response.get('embedding')
        if not isinstance(embedding_vector, list) or not embedding_vector:
            raise ProviderError("Bedrock embedding response missing 'embedding' vector")

        return embedding_vector
