"""Unit tests for the local cache storage service."""
import pytest
import json
import os
import tempfile
from unittest.mock import patch

from src.services.storage_service import (
    CACHE_KEY,
    PENDING_DELETES_KEY,
    load_entries,
    load_list,
    lock_cache,
    read_entries,
    store_entries,
)
from src.utils.exceptions import LocalStorageError


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp_path = tempfile.mkdtemp()
    yield temp_path

    import shutil
    if os.path.exists(temp_path):
        shutil.rmtree(temp_path)


@pytest.fixture
def cache_file(temp_dir):
    return os.path.join(temp_dir, "registrations.json")


def _write_raw(path, content):
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


class TestLoadEntries:
    """Test load_entries function."""

    def test_missing_file_returns_empty(self, cache_file):
        """A cache that was never written reads as empty."""
        assert load_entries(cache_file) == []

    def test_load_valid_entries(self, cache_file):
        entries = [{"employeeId": "1001", "name": "张三"}]
        _write_raw(cache_file, json.dumps({CACHE_KEY: entries}, ensure_ascii=False))

        assert load_entries(cache_file) == entries

    def test_malformed_json_returns_empty(self, cache_file):
        """Corrupt cache degrades to empty instead of raising."""
        _write_raw(cache_file, "{invalid json")

        assert load_entries(cache_file) == []

    def test_empty_file_returns_empty(self, cache_file):
        _write_raw(cache_file, "")

        assert load_entries(cache_file) == []

    def test_non_object_document_returns_empty(self, cache_file):
        _write_raw(cache_file, json.dumps([1, 2, 3]))

        assert load_entries(cache_file) == []

    def test_wrong_shape_under_key_returns_empty(self, cache_file):
        _write_raw(cache_file, json.dumps({CACHE_KEY: "not a list"}))

        assert load_entries(cache_file) == []

    def test_non_object_entries_are_dropped(self, cache_file):
        _write_raw(cache_file, json.dumps({CACHE_KEY: [{"employeeId": "1001"}, "junk", 7]}))

        assert load_entries(cache_file) == [{"employeeId": "1001"}]

    def test_permission_error_returns_empty(self, cache_file):
        _write_raw(cache_file, json.dumps({CACHE_KEY: []}))

        with patch("builtins.open", side_effect=PermissionError("denied")):
            assert load_entries(cache_file) == []


class TestReadEntries:
    """Test read_entries function."""

    def test_missing_file_returns_empty(self, cache_file):
        assert read_entries(cache_file) == []

    def test_reads_valid_entries(self, cache_file):
        _write_raw(cache_file, json.dumps({CACHE_KEY: [{"employeeId": "1001"}, "junk"]}))

        assert read_entries(cache_file) == [{"employeeId": "1001"}]

    def test_malformed_json_raises(self, cache_file):
        _write_raw(cache_file, "{invalid json")

        with pytest.raises(LocalStorageError):
            read_entries(cache_file)

    def test_wrong_shape_under_key_raises(self, cache_file):
        _write_raw(cache_file, json.dumps({CACHE_KEY: "not a list"}))

        with pytest.raises(LocalStorageError):
            read_entries(cache_file)


class TestStoreEntries:
    """Test store_entries function."""

    def test_store_and_load(self, cache_file):
        entries = [{"employeeId": "1001", "name": "张三"}]

        store_entries(cache_file, entries)

        assert load_entries(cache_file) == entries

    def test_store_keeps_utf8_readable(self, cache_file):
        store_entries(cache_file, [{"employeeId": "1001", "name": "张三"}])

        with open(cache_file, "r", encoding="utf-8") as f:
            assert "张三" in f.read()

    def test_store_creates_directory(self, temp_dir):
        file_path = os.path.join(temp_dir, "subdir", "cache.json")

        store_entries(file_path, [])

        assert os.path.exists(file_path)

    def test_store_preserves_other_keys(self, cache_file):
        store_entries(cache_file, ["1001"], PENDING_DELETES_KEY)
        store_entries(cache_file, [{"employeeId": "1002"}])

        assert load_list(cache_file, PENDING_DELETES_KEY) == ["1001"]
        assert load_entries(cache_file) == [{"employeeId": "1002"}]

    def test_store_refuses_to_overwrite_corrupt_document(self, cache_file):
        """A truncated cache is left on disk for recovery instead of being replaced."""
        _write_raw(cache_file, '{"' + CACHE_KEY + '": [{"employeeId": "1001"')

        with pytest.raises(LocalStorageError, match="refusing to overwrite"):
            store_entries(cache_file, [{"employeeId": "2002"}])

        with open(cache_file, "r", encoding="utf-8") as f:
            assert "1001" in f.read()

    def test_store_refuses_non_object_document(self, cache_file):
        _write_raw(cache_file, json.dumps([1, 2, 3]))

        with pytest.raises(LocalStorageError):
            store_entries(cache_file, [], PENDING_DELETES_KEY)

    def test_store_leaves_no_temp_files(self, temp_dir, cache_file):
        store_entries(cache_file, [{"employeeId": "1001"}])

        assert [f for f in os.listdir(temp_dir) if f.startswith(".tmp_")] == []

    def test_write_failure_raises_local_storage_error(self, cache_file):
        """Quota or permission failures surface as LocalStorageError."""
        with patch("src.services.storage_service.os.replace", side_effect=OSError("No space left on device")):
            with pytest.raises(LocalStorageError, match="Failed to write cache file"):
                store_entries(cache_file, [{"employeeId": "1001"}])

    def test_unserializable_entries_raise_local_storage_error(self, cache_file):
        with pytest.raises(LocalStorageError):
            store_entries(cache_file, [{"employeeId": object()}])


class TestLockCache:
    """Test lock_cache context manager."""

    def test_lock_allows_read_modify_write(self, cache_file):
        with lock_cache(cache_file):
            entries = load_entries(cache_file)
            entries.append({"employeeId": "1001"})
            store_entries(cache_file, entries)

        assert load_entries(cache_file) == [{"employeeId": "1001"}]

    def test_lock_works_before_cache_exists(self, cache_file):
        with lock_cache(cache_file):
            pass

        assert not os.path.exists(cache_file)

    def test_lock_releases_after_exception(self, cache_file):
        with pytest.raises(RuntimeError):
            with lock_cache(cache_file):
                raise RuntimeError("boom")

        with lock_cache(cache_file, timeout=0.2):
            pass
