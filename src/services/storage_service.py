"""Local durable cache: a JSON file holding registrations under one fixed key."""
import json
import logging
import os
import tempfile
import time
from contextlib import contextmanager
from typing import Any, Dict, List
import sys

from src.utils.exceptions import LocalStorageError

if sys.platform != "win32":
    import fcntl

logger = logging.getLogger(__name__)

CACHE_KEY = "annual_meeting_registrations_2026_fallback"
PENDING_DELETES_KEY = "annual_meeting_registrations_2026_pending_deletes"


def _read_document(file_path: str, retry_count: int = 3, retry_delay: float = 0.1) -> Dict[str, Any]:
    """Read the whole cache document, retrying transient permission errors."""
    last_error = None
    for attempt in range(retry_count):
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = f.read()
            if not content.strip():
                return {}
            data = json.loads(content)
            if not isinstance(data, dict):
                raise ValueError(f"Cache document is not an object: {type(data).__name__}")
            return data
        except PermissionError as e:
            last_error = e
            if attempt < retry_count - 1:
                time.sleep(retry_delay)
                continue

    raise last_error


def load_list(file_path: str, key: str) -> List[Any]:
    """
    Load the list stored under ``key``.

    Args:
        file_path: Path to the cache file
        key: Document key

    Returns:
        list: Stored values; empty if the file is missing, unreadable or corrupt

    Never raises.
    """
    if not os.path.exists(file_path):
        return []

    try:
        data = _read_document(file_path)
    except (OSError, ValueError) as e:
        logger.warning(f"Local cache {file_path} unreadable, treating as empty: {e}")
        return []

    entries = data.get(key, [])
    if not isinstance(entries, list):
        logger.warning(f"Local cache key {key} holds {type(entries).__name__}, treating as empty")
        return []

    return entries


def load_entries(file_path: str, key: str = CACHE_KEY) -> List[Dict[str, Any]]:
    """Load the serialized registrations, dropping anything that is not an object."""
    return [entry for entry in load_list(file_path, key) if isinstance(entry, dict)]


def _read_document_for_write(file_path: str) -> Dict[str, Any]:
    if not os.path.exists(file_path):
        return {}

    try:
        return _read_document(file_path)
    except (OSError, ValueError) as e:
        raise LocalStorageError(f"Local cache {file_path} is unreadable, refusing to overwrite it: {e}") from e


def read_entries(file_path: str, key: str = CACHE_KEY) -> List[Dict[str, Any]]:
    """
    Strict counterpart of load_entries for read-modify-write cycles.

    Raises:
        LocalStorageError: If the cache exists but is corrupt or unreadable
    """
    entries = _read_document_for_write(file_path).get(key, [])
    if not isinstance(entries, list):
        raise LocalStorageError(
            f"Local cache key {key} holds {type(entries).__name__}, refusing to overwrite it"
        )
    return [entry for entry in entries if isinstance(entry, dict)]


def store_entries(file_path: str, entries: List[Any], key: str = CACHE_KEY) -> None:
    """
    Overwrite the list stored under ``key`` atomically.

    Other keys in the document are preserved.

    Raises:
        LocalStorageError: If the existing document is corrupt or the file
            cannot be written
    """
    dir_path = os.path.dirname(file_path)

    document = _read_document_for_write(file_path)
    document[key] = entries

    try:
        if dir_path and not os.path.exists(dir_path):
            os.makedirs(dir_path, exist_ok=True)

        temp_fd, temp_path = tempfile.mkstemp(
            dir=dir_path if dir_path else ".",
            prefix=".tmp_",
            suffix=".json"
        )
    except OSError as e:
        raise LocalStorageError(f"Cannot prepare cache file {file_path}: {e}") from e

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(document, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, file_path)
    except (OSError, TypeError, ValueError) as e:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                pass
        raise LocalStorageError(f"Failed to write cache file {file_path}: {e}") from e


@contextmanager
def lock_cache(file_path: str, timeout: float = 5.0):
    """
    Hold an exclusive lock on ``file_path`` for a read-modify-write cycle.

    The lock is taken on a sibling ``.lock`` file, so the cache itself may be
    replaced while locked.

    Usage:
        with lock_cache(path):
            entries = load_entries(path)
            entries.append(entry)
            store_entries(path, entries)

    Raises:
        LocalStorageError: If the lock cannot be acquired within timeout
    """
    lock_path = f"{file_path}.lock"
    dir_path = os.path.dirname(file_path)

    try:
        if dir_path and not os.path.exists(dir_path):
            os.makedirs(dir_path, exist_ok=True)
    except OSError as e:
        raise LocalStorageError(f"Cannot create cache directory {dir_path}: {e}") from e

    start_time = time.time()

    if sys.platform == "win32":
        lock_fd = None
        while True:
            try:
                lock_fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_RDWR)
                break
            except FileExistsError:
                if time.time() - start_time > timeout:
                    raise LocalStorageError(f"Could not lock {file_path} within {timeout}s")
                time.sleep(0.05)
            except OSError as e:
                raise LocalStorageError(f"Cannot create lock file {lock_path}: {e}") from e

        try:
            yield
        finally:
            os.close(lock_fd)
            try:
                os.remove(lock_path)
            except OSError:
                pass
    else:
        try:
            lock_handle = open(lock_path, "a+")
        except OSError as e:
            raise LocalStorageError(f"Cannot open lock file {lock_path}: {e}") from e

        try:
            while True:
                try:
                    fcntl.flock(lock_handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except OSError:
                    if time.time() - start_time > timeout:
                        raise LocalStorageError(f"Could not lock {file_path} within {timeout}s")
                    time.sleep(0.05)

            try:
                yield
            finally:
                fcntl.flock(lock_handle.fileno(), fcntl.LOCK_UN)
        finally:
            lock_handle.close()
