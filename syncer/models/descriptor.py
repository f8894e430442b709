"""
Object descriptor model: the backend-neutral view of one stored object.
"""
import os
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, BinaryIO, ContextManager

from ..utils.keys import normalize_key


@dataclass(frozen=True)
class FileHandle:
    """Reference to a file on local disk."""

    path: str

    def open(self) -> ContextManager[BinaryIO]:
        return open(self.path, 'rb')


@dataclass(frozen=True)
class S3ObjectHandle:
    """Reference to an object in an S3 bucket.

    Opening issues a ``get_object`` call and yields the streaming body.
    """

    client: Any
    bucket: str
    object_key: str

    def open(self) -> ContextManager[BinaryIO]:
        response = self.client.get_object(Bucket=self.bucket, Key=self.object_key)
        return closing(response['Body'])


@dataclass(frozen=True)
class ObjectDescriptor:
    """
    Metadata for one logical object in a manifest.

    Descriptors are immutable; a manifest update always swaps in a new one.

    Attributes:
        key: Canonical key relative to the owning location's root
        size: Size in bytes
        last_modified: Backend timestamp (filesystem mtime or S3 LastModified);
            only ever compared between locations of the same kind
        handle: :class:`FileHandle` or :class:`S3ObjectHandle` used to read
            the object's bytes
    """

    key: str
    size: int
    last_modified: datetime
    handle: Any

    def __post_init__(self):
        if self.size < 0:
            raise ValueError(f"Negative size for {self.key}: {self.size}")

    def open(self) -> ContextManager[BinaryIO]:
        """Open a readable byte stream for this object's content."""
        return self.handle.open()

    @classmethod
    def from_path(cls, key, path):
        """Describe a file on disk from its current ``stat``.

        Args:
            key: Relative key the file is known by
            path: Absolute path of the file

        Raises:
            OSError: If the file cannot be stat'ed
        """
        st = os.stat(path)
        return cls(
            key=normalize_key(key),
            size=st.st_size,
            last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            handle=FileHandle(path),
        )

    @classmethod
    def from_s3_object(cls, key, obj, client, bucket):
        """Describe an entry from a ``list_objects_v2`` page.

        Args:
            key: Relative key derived from ``obj['Key']``
            obj: One element of the page's ``Contents`` list
            client: S3 client used later to fetch the body
            bucket: Bucket holding the object
        """
        return cls(
            key=normalize_key(key),
            size=int(obj['Size']),
            last_modified=obj['LastModified'],
            handle=S3ObjectHandle(client, bucket, obj['Key']),
        )

    def to_dict(self):
        """Serialize to dictionary (for display)"""
        return {
            "key": self.key,
            "size": self.size,
            "last_modified": self.last_modified.isoformat(),
        }
