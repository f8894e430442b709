"""Shared fixtures: temp trees, a fake S3 client, recording locations."""

from __future__ import annotations

import io
import os
from datetime import datetime, timedelta, timezone

import pytest
from botocore.exceptions import ClientError

from syncer.models import ObjectDescriptor
from syncer.services.locations import Location, LocationKind, LocationRole
from syncer.services.watcher import WatchSubscription
from syncer.utils.config_loader import SyncConfig

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temp path so tests never touch ~/.syncer."""
    path = tmp_path / "syncer-config.json"
    monkeypatch.setenv("SYNCER_CONFIG", str(path))
    return path


def make_tree(root, files: dict[str, bytes | str]) -> None:
    for rel, content in files.items():
        path = os.path.join(root, *rel.split("/"))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        mode = "wb" if isinstance(content, bytes) else "w"
        with open(path, mode) as f:
            f.write(content)


def read_tree(root) -> dict[str, bytes]:
    result = {}
    for dirpath, _, filenames in os.walk(root):
        for name in filenames:
            path = os.path.join(dirpath, name)
            rel = os.path.relpath(path, root).replace(os.sep, "/")
            with open(path, "rb") as f:
                result[rel] = f.read()
    return result


# ---------------------------------------------------------------------------
# Fake S3
# ---------------------------------------------------------------------------


class FakePaginator:
    def __init__(self, client):
        self.client = client

    def paginate(self, Bucket, Prefix=""):
        self.client.calls.append(("list", Bucket, Prefix))
        if "list" in self.client.fail_ops:
            raise ClientError({"Error": {"Code": "NoSuchBucket", "Message": "gone"}}, "ListObjectsV2")
        names = sorted(k for (b, k) in self.client.objects if b == Bucket and k.startswith(Prefix))
        size = self.client.page_size
        if not names:
            yield {"KeyCount": 0}
            return
        for start in range(0, len(names), size):
            chunk = names[start:start + size]
            yield {
                "Contents": [
                    {
                        "Key": name,
                        "Size": len(self.client.objects[(Bucket, name)][0]),
                        "LastModified": self.client.objects[(Bucket, name)][1],
                    }
                    for name in chunk
                ]
            }


class FakeS3Client:
    """In-memory stand-in for the handful of S3 calls the locations make."""

    def __init__(self, page_size=2):
        self.objects: dict[tuple[str, str], tuple[bytes, datetime]] = {}
        self.calls: list[tuple] = []
        self.page_size = page_size
        self.fail_ops: set[str] = set()
        self.fail_keys: set[str] = set()

    def add(self, bucket, key, data: bytes, when=EPOCH):
        self.objects[(bucket, key)] = (data, when)

    def _check(self, op, key, operation_name):
        if op in self.fail_ops or key in self.fail_keys:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, operation_name)

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        return FakePaginator(self)

    def upload_fileobj(self, stream, bucket, key):
        self._check("put", key, "PutObject")
        self.calls.append(("put", bucket, key))
        self.objects[(bucket, key)] = (stream.read(), EPOCH + timedelta(days=1))

    def get_object(self, Bucket, Key):
        self.calls.append(("get", Bucket, Key))
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)][0])}

    def delete_object(self, Bucket, Key):
        self._check("delete", Key, "DeleteObject")
        self.calls.append(("delete", Bucket, Key))
        self.objects.pop((Bucket, Key), None)
        return {}


@pytest.fixture
def s3_client():
    return FakeS3Client()


# ---------------------------------------------------------------------------
# Recording location and watch subscription
# ---------------------------------------------------------------------------


class MemoryHandle:
    def __init__(self, data: bytes):
        self.data = data

    def open(self):
        return io.BytesIO(self.data)


def descriptor(key, size, when=EPOCH):
    return ObjectDescriptor(key=key, size=size, last_modified=when, handle=MemoryHandle(b"x" * size))


class RecordingLocation(Location):
    """Location backed by a dict that records every backend call."""

    def __init__(self, role, config, objects=None, kind=LocationKind.OBJECT_STORE, name="mem"):
        super().__init__(role, config)
        self.kind = kind
        self.name = name
        self.store = {d.key: d for d in (objects or [])}
        self.ops: list[tuple[str, str]] = []
        self.fail_keys: set[str] = set()

    def describe(self):
        return f"mem://{self.name}"

    def list_objects(self):
        return iter(list(self.store.values()))

    def _write(self, key, descriptor):
        if key in self.fail_keys:
            raise OSError(f"cannot write {key}")
        self.ops.append(("put", key))
        written = ObjectDescriptor(key, descriptor.size, descriptor.last_modified, descriptor.handle)
        self.store[key] = written
        return written

    def _remove(self, key):
        if key in self.fail_keys:
            raise OSError(f"cannot delete {key}")
        self.ops.append(("delete", key))
        self.store.pop(key, None)


def memory_pair(source_sizes, dest_sizes, config=None):
    """Build a built, paired source/destination from ``{key: size}`` dicts."""
    config = config or SyncConfig()
    source = RecordingLocation(
        LocationRole.SOURCE, config, [descriptor(k, s) for k, s in source_sizes.items()], name="src"
    )
    destination = RecordingLocation(
        LocationRole.DESTINATION, config, [descriptor(k, s) for k, s in dest_sizes.items()], name="dst"
    )
    source.pair_with(destination)
    source.build_manifest()
    destination.build_manifest()
    return source, destination


class FakeSubscription(WatchSubscription):
    """Scripted subscription: replays a fixed list of events."""

    def __init__(self, events=()):
        self.scripted = list(events)
        self.added: list[str] = []
        self.removed: list[str] = []
        self.closed = False

    def add(self, path):
        self.added.append(os.path.abspath(path))

    def remove(self, path):
        self.removed.append(os.path.abspath(path))

    def events(self):
        yield from self.scripted

    def close(self):
        self.closed = True
