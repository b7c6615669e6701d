"""
Configuration loading for the YOP Python SDK
"""

from .yop_config import (
    YopConfig,
    load_config,
    read_public_key_file,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
)

__all__ = [
    'YopConfig',
    'load_config',
    'read_public_key_file',
    'DEFAULT_BASE_URL',
    'DEFAULT_TIMEOUT',
]
