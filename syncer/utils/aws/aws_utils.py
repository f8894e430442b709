"""AWS utilities for session and client creation.

Credential discovery is left entirely to boto3: an explicit profile from
the config, otherwise the default chain (environment, shared files,
instance metadata).
"""
from typing import Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError

from ...exceptions import ConfigurationError


def create_boto3_session(profile_name: Optional[str] = None, region_name: Optional[str] = None):
    """Create a boto3 session.

    Args:
        profile_name: AWS profile name, or empty/None for the default chain
        region_name: Optional AWS region

    Returns:
        boto3.Session object

    Raises:
        ConfigurationError: If the named profile does not exist
    """
    try:
        return boto3.Session(profile_name=profile_name or None, region_name=region_name or None)
    except BotoCoreError as e:
        raise ConfigurationError(f"Could not create AWS session: {e}") from e


def create_s3_client(config):
    """Create an S3 client for the settings in *config*.

    Transport-level retries are delegated to botocore; the engine's own
    ``retries`` setting wraps whole put/delete operations on top of this.

    Args:
        config: :class:`~syncer.utils.config_loader.SyncConfig`

    Returns:
        botocore S3 client

    Example:
        >>> s3 = create_s3_client(SyncConfig(aws_profile='backup'))
        >>> s3.list_objects_v2(Bucket='my-bucket', MaxKeys=1)
    """
    session = create_boto3_session(config.aws_profile, config.aws_region)
    boto_config = BotoConfig(retries={"max_attempts": 3, "mode": "standard"})
    return session.client('s3', endpoint_url=config.endpoint_url or None, config=boto_config)
