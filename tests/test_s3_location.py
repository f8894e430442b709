"""Tests for the S3 bucket/prefix location."""

from __future__ import annotations

import pytest

from syncer.exceptions import BackendError
from syncer.services.locations import FilesystemLocation, LocationRole, S3Location
from syncer.services.reconcile import ReconcileEngine
from syncer.utils.config_loader import SyncConfig
from tests.conftest import EPOCH, RecordingLocation, descriptor, make_tree, read_tree


def _location(client, prefix="mirror", role=LocationRole.DESTINATION, **config) -> S3Location:
    return S3Location(client, "bkt", prefix, role, SyncConfig(**config))


class TestBuildManifest:
    def test_drains_every_page(self, s3_client) -> None:
        for i in range(5):
            s3_client.add("bkt", f"mirror/f{i}.txt", b"x" * i)

        manifest = _location(s3_client).build_manifest()

        assert sorted(manifest) == [f"f{i}.txt" for i in range(5)]
        assert manifest["f3.txt"].size == 3
        assert manifest["f3.txt"].last_modified == EPOCH

    def test_lists_with_trailing_slash_prefix(self, s3_client) -> None:
        s3_client.add("bkt", "mirror/a", b"1")
        s3_client.add("bkt", "mirror2/b", b"2")

        manifest = _location(s3_client).build_manifest()

        assert sorted(manifest) == ["a"]
        assert ("list", "bkt", "mirror/") in s3_client.calls

    def test_whole_bucket(self, s3_client) -> None:
        s3_client.add("bkt", "a/b.txt", b"1")

        manifest = _location(s3_client, prefix="").build_manifest()

        assert sorted(manifest) == ["a/b.txt"]
        assert ("list", "bkt", "") in s3_client.calls

    def test_directory_markers_skipped(self, s3_client) -> None:
        s3_client.add("bkt", "mirror/dir/", b"")
        s3_client.add("bkt", "mirror/dir/file", b"abc")

        assert sorted(_location(s3_client).build_manifest()) == ["dir/file"]

    def test_empty_prefix_listing(self, s3_client) -> None:
        assert len(_location(s3_client).build_manifest()) == 0

    def test_unreachable_bucket_is_fatal(self, s3_client) -> None:
        s3_client.fail_ops.add("list")
        with pytest.raises(BackendError) as exc:
            _location(s3_client).build_manifest()
        assert exc.value.operation == "list"


class TestPutAndDelete:
    def test_put_uses_prefixed_key(self, s3_client) -> None:
        location = _location(s3_client)

        written = location.put("a/b.txt", descriptor("a/b.txt", 3))

        assert s3_client.objects[("bkt", "mirror/a/b.txt")][0] == b"xxx"
        assert written.size == 3
        assert location.manifest["a/b.txt"] is written

    def test_put_failure_wrapped(self, s3_client) -> None:
        s3_client.fail_keys.add("mirror/a")
        location = _location(s3_client)

        with pytest.raises(BackendError) as exc:
            location.put("a", descriptor("a", 1))

        assert exc.value.key == "a"
        assert "AccessDenied" in str(exc.value)
        assert "a" not in location.manifest

    def test_delete_missing_key_succeeds(self, s3_client) -> None:
        location = _location(s3_client)
        location.delete("ghost")
        assert ("delete", "bkt", "mirror/ghost") in s3_client.calls

    def test_delete_removes_object_and_entry(self, s3_client) -> None:
        s3_client.add("bkt", "mirror/a", b"1")
        location = _location(s3_client)
        location.build_manifest()

        location.delete("a")

        assert ("bkt", "mirror/a") not in s3_client.objects
        assert "a" not in location.manifest

    def test_noop_makes_no_calls(self, s3_client) -> None:
        location = _location(s3_client, noop=True)
        location.put("a", descriptor("a", 1))
        location.delete("b")
        assert s3_client.calls == []

    def test_describe(self, s3_client) -> None:
        assert _location(s3_client).describe() == "s3://bkt/mirror/"
        assert _location(s3_client, prefix="").describe() == "s3://bkt/"


class TestCrossBackend:
    def test_filesystem_to_s3(self, s3_client, tmp_path) -> None:
        make_tree(tmp_path, {"docs/readme.md": "# hi"})
        source = FilesystemLocation(str(tmp_path), LocationRole.SOURCE, SyncConfig())
        source.build_manifest()

        _location(s3_client).put("docs/readme.md", source.manifest["docs/readme.md"])

        assert s3_client.objects[("bkt", "mirror/docs/readme.md")][0] == b"# hi"

    def test_s3_to_filesystem(self, s3_client, tmp_path) -> None:
        s3_client.add("bkt", "mirror/x/y.bin", b"\x01\x02\x03")
        source = _location(s3_client, role=LocationRole.SOURCE)
        source.build_manifest()
        destination = FilesystemLocation(str(tmp_path), LocationRole.DESTINATION, SyncConfig())

        destination.put("x/y.bin", source.manifest["x/y.bin"])

        assert read_tree(tmp_path) == {"x/y.bin": b"\x01\x02\x03"}
        assert ("get", "bkt", "mirror/x/y.bin") in s3_client.calls


class TestObjectNames:
    def test_backslash_object_kept_verbatim(self, s3_client) -> None:
        s3_client.add("bkt", "mirror/stale\\obj", b"1")

        manifest = _location(s3_client).build_manifest()

        assert sorted(manifest) == ["stale\\obj"]

    def test_delete_mode_removes_backslash_object(self, s3_client) -> None:
        s3_client.add("bkt", "mirror/stale\\obj", b"1")
        config = SyncConfig(delete=True)
        source = RecordingLocation(LocationRole.SOURCE, config)
        destination = S3Location(s3_client, "bkt", "mirror", LocationRole.DESTINATION, config)
        source.pair_with(destination)
        source.build_manifest()
        destination.build_manifest()

        ReconcileEngine(source, destination, config).run()

        assert ("delete", "bkt", "mirror/stale\\obj") in s3_client.calls
        assert s3_client.objects == {}
        assert len(destination.manifest) == 0
