"""
System configuration for the classifier HTTP backend.
Contains server and CORS settings; classification settings live in
routed_text_classifier.config.
"""

import os
from dataclasses import dataclass, field


@dataclass
class APIConfig:
    """API-related configuration settings."""
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False
    log_level: str = "info"
    cors_origins: list = field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])

    @classmethod
    def from_env(cls) -> 'APIConfig':
        """Create API config from environment variables."""
        cors_origins = os.getenv('API_CORS_ORIGINS', ','.join(cls().cors_origins)).split(',')
        return cls(
            host=os.getenv('API_HOST', cls.host),
            port=int(os.getenv('API_PORT', cls.port)),
            reload=os.getenv('API_RELOAD', 'false').lower() == 'true',
            log_level=os.getenv('API_LOG_LEVEL', cls.log_level),
            cors_origins=[origin.strip() for origin in cors_origins if origin.strip()],
        )


@dataclass
class SystemConfig:
    """Main system configuration container."""
    api: APIConfig = field(default_factory=APIConfig)

    @classmethod
    def from_env(cls) -> 'SystemConfig':
        """Create system config from environment variables."""
        return cls(
            api=APIConfig.from_env(),
        )


# Global configuration instance
config = SystemConfig.from_env()
