"""
Data models for Syncer
"""

from .descriptor import ObjectDescriptor, FileHandle, S3ObjectHandle
from .manifest import Manifest

__all__ = ['ObjectDescriptor', 'FileHandle', 'S3ObjectHandle', 'Manifest']
