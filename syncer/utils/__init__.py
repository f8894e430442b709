"""Utility modules for Syncer.

Sub-packages:
- aws/: boto3 session and S3 client creation
"""

from .config_loader import ConfigLoader, SyncConfig, DEFAULT_CONFIG, handle_config_update
from .keys import normalize_key, normalize_prefix, join_path, key_from_path, join_object_key, key_from_object_key
from .logger import get_logger, setup_logging
from .retry import call_with_retries

__all__ = [
    'ConfigLoader',
    'SyncConfig',
    'DEFAULT_CONFIG',
    'handle_config_update',
    'normalize_key',
    'normalize_prefix',
    'join_path',
    'key_from_path',
    'join_object_key',
    'key_from_object_key',
    'get_logger',
    'setup_logging',
    'call_with_retries',
]
