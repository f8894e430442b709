"""
Sync endpoint package.

- :mod:`base`: abstract :class:`Location`, roles and kinds
- :mod:`filesystem`: local directory tree
- :mod:`s3`: S3 bucket and prefix
"""
from .base import Location, LocationKind, LocationRole, BACKEND_ERRORS
from .filesystem import FilesystemLocation
from .s3 import S3Location

__all__ = [
    'Location',
    'LocationKind',
    'LocationRole',
    'BACKEND_ERRORS',
    'FilesystemLocation',
    'S3Location',
]
