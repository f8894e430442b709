"""
Location argument parsing and validation.

Turns the ``SOURCE``/``DESTINATION`` command-line arguments into
:class:`~syncer.services.locations.Location` objects.
"""
import os
import sys
from urllib.parse import urlparse

from ..exceptions import ConfigurationError
from ..services.locations import FilesystemLocation, LocationRole, S3Location
from .aws.aws_utils import create_s3_client


def is_interactive() -> bool:
    """Return True when stdin is attached to a terminal."""
    return sys.stdin is not None and sys.stdin.isatty()


def parse_location(param: str):
    """Split a location argument into ``(scheme, bucket_or_path, prefix)``.

    Args:
        param: Local path or ``s3://bucket/prefix`` URI

    Returns:
        Tuple ``('file', path, '')`` or ``('s3', bucket, prefix)``

    Raises:
        ConfigurationError: For unsupported schemes or a missing bucket

    Example:
        >>> parse_location('s3://backups/photos/2024')
        ('s3', 'backups', 'photos/2024')
        >>> parse_location('/tmp/photos')
        ('file', '/tmp/photos', '')
    """
    if not param:
        raise ConfigurationError("Empty location")

    parsed = urlparse(param)
    # One-letter schemes are Windows drive letters, not URIs
    if not parsed.scheme or len(parsed.scheme) == 1:
        return 'file', param, ''
    if parsed.scheme == 'file':
        return 'file', parsed.path, ''
    if parsed.scheme == 's3':
        if not parsed.netloc:
            raise ConfigurationError(f"Missing bucket name in location {param}")
        return 's3', parsed.netloc, parsed.path.strip('/')
    raise ConfigurationError(f'Unsupported location type "{parsed.scheme}" for location {param}')


def resolve_location(param, role, config, s3_client_factory=create_s3_client):
    """Build the :class:`Location` for one command-line argument.

    Args:
        param: Local path or ``s3://bucket/prefix`` URI
        role: :class:`LocationRole`
        config: :class:`SyncConfig`
        s3_client_factory: Callable taking *config* and returning an S3 client

    Raises:
        ConfigurationError: If the location is unsupported or a local
            directory does not exist
    """
    scheme, target, prefix = parse_location(param)
    if scheme == 'file':
        if not os.path.isdir(target):
            raise ConfigurationError(f"{role.value} directory does not exist: {target}")
        return FilesystemLocation(target, role, config)
    return S3Location(s3_client_factory(config), target, prefix, role, config)


def resolve_pair(source_param, destination_param, config, s3_client_factory=create_s3_client):
    """Resolve the source and destination of a sync run and pair them.

    Returns:
        Tuple of (source Location, destination Location)
    """
    source = resolve_location(source_param, LocationRole.SOURCE, config, s3_client_factory)
    destination = resolve_location(destination_param, LocationRole.DESTINATION, config, s3_client_factory)
    source.pair_with(destination)
    return source, destination
