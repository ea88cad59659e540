"""
Configuration package for the classifier HTTP backend.
"""

from .system_config import config, SystemConfig, APIConfig

__all__ = [
    'config',
    'SystemConfig',
    'APIConfig'
]
