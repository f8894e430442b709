"""
S3 location: a bucket plus an optional key prefix.

S3 has no directories and no move; every object is a flat name made of
the prefix and the relative key.
"""
from datetime import datetime, timezone

from ...models import ObjectDescriptor, S3ObjectHandle
from ...utils.keys import join_object_key, key_from_object_key, normalize_prefix
from ...utils.logger import get_logger
from .base import Location, LocationKind

log = get_logger(__name__)


class S3Location(Location):
    """Bucket and prefix in an S3-compatible object store.

    Args:
        client: boto3 S3 client
        bucket: Bucket name
        prefix: Key prefix acting as the root ('' for the whole bucket)
        role: :class:`LocationRole`
        config: :class:`SyncConfig`
    """

    kind = LocationKind.OBJECT_STORE

    def __init__(self, client, bucket, prefix, role, config):
        super().__init__(role, config)
        self.s3_client = client
        self.bucket_name = bucket
        self.prefix = normalize_prefix(prefix)

    def describe(self):
        if self.prefix:
            return f"s3://{self.bucket_name}/{self.prefix}/"
        return f"s3://{self.bucket_name}/"

    def object_key_for(self, key):
        """Full S3 object name of *key*."""
        return join_object_key(self.prefix, key)

    def list_objects(self):
        paginator = self.s3_client.get_paginator('list_objects_v2')
        list_prefix = f"{self.prefix}/" if self.prefix else ""
        pages = paginator.paginate(Bucket=self.bucket_name, Prefix=list_prefix)

        for page in pages:
            for obj in page.get('Contents', []):
                s3_key = obj['Key']

                # Skip if it's just the directory marker
                if s3_key.endswith('/'):
                    continue

                try:
                    key = key_from_object_key(self.prefix, s3_key)
                except ValueError as e:
                    log.warning("Skipping %s: %s", s3_key, e)
                    continue

                yield ObjectDescriptor.from_s3_object(key, obj, self.s3_client, self.bucket_name)

    def _write(self, key, descriptor):
        object_key = self.object_key_for(key)
        with descriptor.open() as stream:
            self.s3_client.upload_fileobj(stream, self.bucket_name, object_key)

        return ObjectDescriptor(
            key=key,
            size=descriptor.size,
            last_modified=datetime.now(timezone.utc),
            handle=S3ObjectHandle(self.s3_client, self.bucket_name, object_key),
        )

    def _remove(self, key):
        self.s3_client.delete_object(Bucket=self.bucket_name, Key=self.object_key_for(key))
