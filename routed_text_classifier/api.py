"""
FastAPI transport for the classification pipeline.

The app is a thin wrapper: request models in, pipeline call, response
models out. Classifier exceptions are mapped to JSON error responses.
"""

import logging
from typing import List, Optional, Union

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .pipeline import ClassificationPipeline
from .exceptions import (
    ClassifierError,
    ConfigError,
    InvalidInputError,
    NotReadyError,
    ParseError,
    ProviderError,
    ProviderTimeout
)


logger = logging.getLogger(__name__)


# Pydantic models for API requests/responses
class ClassifyRequestModel(BaseModel):
    """API model for a single classification request."""
    text: str = Field(..., description="Text to classify")


class ClassifyResponseModel(BaseModel):
    """API model for a routed classification."""
    category: str = Field(..., description="Applied, predicted or fallback category")
    confidence: float = Field(..., description="Classifier confidence")
    reasoning: str = Field(..., description="Classifier explanation")
    action: str = Field(..., description="apply, queued_for_review or fallback")
    review_id: Optional[str] = Field(default=None, description="Review item id when queued for review")


class BatchRequestModel(BaseModel):
    """API model for a batch classification request."""
    texts: List[str] = Field(..., description="Texts to classify")


class BatchResultModel(BaseModel):
    """API model for one successful batch item."""
    category: str
    confidence: float
    reasoning: str


class BatchErrorModel(BaseModel):
    """API model for one failed batch item."""
    error: str
    error_type: str


class BatchResponseModel(BaseModel):
    """API model for batch results, in input order."""
    results: List[Union[BatchResultModel, BatchErrorModel]]


class CategoryModel(BaseModel):
    """API model for a registered category."""
    name: str
    label: str
    description: str


class ErrorResponse(BaseModel):
    """API model for error responses."""
    error: str = Field(..., description="Error message")
    details: Optional[str] = Field(default=None, description="Error details")
    type: str = Field(default="error", description="Error type")


_ERROR_STATUS = [
    (InvalidInputError, 400, "validation_error"),
    (ValueError, 400, "validation_error"),
    (NotReadyError, 503, "not_ready"),
    (ProviderTimeout, 504, "provider_timeout"),
    (ProviderError, 502, "provider_error"),
    (ParseError, 502, "parse_error"),
    (ConfigError, 500, "configuration_error"),
    (ClassifierError, 500, "processing_error"),
]


def handle_api_error(e: Exception) -> JSONResponse:
    """Handle API errors and return appropriate JSON response."""
    for error_type, status_code, label in _ERROR_STATUS:
        if isinstance(e, error_type):
            if status_code < 500:
                logger.warning(f"{label}: {e}")
            else:
                logger.error(f"{label}: {e}")
            return JSONResponse(
                status_code=status_code,
                content=ErrorResponse(error=str(e), details=type(e).__name__, type=label).model_dump()
            )

    logger.exception(f"Unhandled error: {e}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Internal server error", details=str(e), type="internal_error").model_dump()
    )


def create_app(pipeline: ClassificationPipeline, cors_origins: Optional[List[str]] = None) -> FastAPI:
    """
    Build the FastAPI app serving a pipeline.

    Args:
        pipeline: Ready-to-use classification pipeline
        cors_origins: Allowed CORS origins, none when omitted
    """
    app = FastAPI(
        title="Confidence-Routed Text Classifier API",
        description="Classify text and route it by confidence",
        version="0.1.0"
    )

    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health")
    def health():
        """Liveness and configuration summary."""
        return {
            "status": "healthy",
            "strategy": pipeline.strategy,
            "categories": len(pipeline.registry),
        }

    @app.get("/categories", response_model=List[CategoryModel])
    def list_categories():
        """Registered taxonomy in registry order."""
        return [category.to_summary() for category in pipeline.categories()]

    @app.post(
        "/classify",
        response_model=ClassifyResponseModel,
        response_model_exclude_none=True
    )
    def classify(request: ClassifyRequestModel):
        """Classify one text and report the routed action."""
        try:
            return pipeline.classify(request.text).to_dict()
        except Exception as e:
            return handle_api_error(e)

    @app.post("/classify/batch", response_model=BatchResponseModel)
    def classify_batch(request: BatchRequestModel):
        """Classify many texts; failed items carry an error instead of a result."""
        try:
            items = pipeline.classify_batch(request.texts)
            return {"results": [item.to_dict() for item in items]}
        except Exception as e:
            return handle_api_error(e)

    return app
