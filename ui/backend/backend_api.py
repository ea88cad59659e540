"""
FastAPI backend server for the confidence-routed text classifier.

Builds the classification pipeline from environment configuration and
serves it over HTTP. Run from this directory: ``python backend_api.py``.
"""

import sys
import logging
from pathlib import Path

# Configure logging for the backend
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

# Set specific loggers to appropriate levels
logging.getLogger("botocore").setLevel(logging.WARNING)  # Reduce boto3 noise
logging.getLogger("urllib3").setLevel(logging.WARNING)  # Reduce HTTP noise

logger = logging.getLogger(__name__)

# Import configuration
from config import config

# Add the root directory to Python path to import the classification library
root_dir = Path(__file__).parent.parent.parent
sys.path.insert(0, str(root_dir))

from routed_text_classifier import build_pipeline
from routed_text_classifier.api import create_app

pipeline = build_pipeline()
app = create_app(pipeline, cors_origins=config.api.cors_origins)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting classifier API on {config.api.host}:{config.api.port} (strategy={pipeline.strategy})")

    uvicorn.run(
        "backend_api:app",
        host=config.api.host,
        port=config.api.port,
        reload=config.api.reload,
        log_level=config.api.log_level
    )
