import os
import threading

import pytest

from src.domain.errors import ImageNotFoundError, StorageIOError
from src.infrastructure.storage.atomic import atomic_write_bytes


def test_original_roundtrip(blob_store):
    blob_store.write_original("abc", ".png", b"raw-bytes")
    assert blob_store.has_original("abc", ".png")
    assert blob_store.read_original("abc", ".png") == b"raw-bytes"
    assert blob_store.original_path("abc", ".png").name == "abc.png"


def test_read_missing_original_is_not_found(blob_store):
    with pytest.raises(ImageNotFoundError) as exc_info:
        blob_store.read_original("nope", ".png")
    assert exc_info.value.reason == ImageNotFoundError.ORIGINAL_MISSING


def test_variant_slot_naming(blob_store):
    assert not blob_store.has_variant("abc", 100, 50)
    blob_store.write_variant("abc", 100, 50, b"webp")
    assert blob_store.has_variant("abc", 100, 50)
    assert blob_store.read_variant("abc", 100, 50) == b"webp"
    assert blob_store.variant_path("abc", 100, 50).name == "abc_100x50.webp"
    with pytest.raises(ImageNotFoundError):
        blob_store.read_variant("abc", 50, 100)


def test_delete_all_variants_only_touches_that_identity(blob_store):
    blob_store.write_variant("abc", 10, 10, b"1")
    blob_store.write_variant("abc", 20, 30, b"2")
    blob_store.write_variant("abcd", 10, 10, b"3")
    blob_store.write_variant("other", 10, 10, b"4")
    # stale temp file from an interrupted write
    (blob_store.cache_dir / ".abc_40x40.webp.x1y2.tmp").write_bytes(b"partial")

    assert blob_store.delete_all_variants("abc") == []

    remaining = sorted(p.name for p in blob_store.cache_dir.iterdir())
    assert remaining == ["abcd_10x10.webp", "other_10x10.webp"]


def test_delete_is_best_effort_when_absent(blob_store):
    assert blob_store.delete_original("ghost", ".jpg") == []
    assert blob_store.delete_all_variants("ghost") == []


def test_delete_reports_undeletable_files(blob_store, monkeypatch):
    blob_store.write_variant("abc", 10, 10, b"1")
    blob_store.write_variant("abc", 20, 20, b"2")
    stuck = blob_store.variant_path("abc", 10, 10)
    real_unlink = type(stuck).unlink

    def flaky_unlink(self, *args, **kwargs):
        if self == stuck:
            raise PermissionError("read-only")
        return real_unlink(self, *args, **kwargs)

    monkeypatch.setattr(type(stuck), "unlink", flaky_unlink)
    failed = blob_store.delete_all_variants("abc")

    assert failed == [stuck]
    assert not blob_store.has_variant("abc", 20, 20)


def test_write_failure_surfaces_storage_error(blob_store, monkeypatch):
    def boom(*args, **kwargs):
        raise OSError("no space left on device")

    monkeypatch.setattr("src.infrastructure.storage.local_storage.atomic_write_bytes", boom)
    with pytest.raises(StorageIOError):
        blob_store.write_variant("abc", 10, 10, b"data")
    with pytest.raises(StorageIOError):
        blob_store.write_original("abc", ".png", b"data")


def test_atomic_write_cleans_temp_on_failure(tmp_path, monkeypatch):
    target = tmp_path / "file.bin"

    def fail_replace(src, dst):
        raise OSError("rename failed")

    monkeypatch.setattr(os, "replace", fail_replace)
    with pytest.raises(OSError):
        atomic_write_bytes(target, b"x" * 100)
    assert list(tmp_path.iterdir()) == []


def test_concurrent_variant_writes_leave_one_complete_file(blob_store):
    payload = os.urandom(256 * 1024)

    def writer():
        blob_store.write_variant("abc", 64, 64, payload)

    threads = [threading.Thread(target=writer) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert [p.name for p in blob_store.cache_dir.iterdir()] == ["abc_64x64.webp"]
    assert blob_store.read_variant("abc", 64, 64) == payload
