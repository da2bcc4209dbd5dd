"""Registration store: local JSON cache first, hosted table best effort."""
import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from src.models.registration import RegistrationRecord
from src.models.save_result import (
    SaveResult,
    TIER_LOCAL,
    TIER_REMOTE,
    UNCONFIGURED,
)
from src.services.config_service import (
    RemoteConfig,
    STATUS_READY,
    get_cache_file,
    get_remote_config,
    resolve_remote_status,
)
from src.services.remote_store import KEY_COLUMN, SupabaseTable
from src.services.storage_service import (
    CACHE_KEY,
    PENDING_DELETES_KEY,
    load_entries,
    lock_cache,
    read_entries,
    store_entries,
)
from src.utils.error_classifier import classify_remote_error
from src.utils.exceptions import LocalStorageError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"


def reconcile(
    remote: Iterable[RegistrationRecord],
    local: Iterable[RegistrationRecord],
) -> List[RegistrationRecord]:
    """
    Merge remote and local records into one list keyed by employee ID.

    Remote wins on conflict. Local records the remote side does not have are
    appended after the remote ones. A key repeated on the remote side keeps
    its last occurrence.
    """
    merged: Dict[str, RegistrationRecord] = {}

    for record in remote:
        merged[record.employee_id] = record

    for record in local:
        if record.employee_id not in merged:
            merged[record.employee_id] = record

    return list(merged.values())


def _entry_key(entry: Dict[str, Any]) -> str:
    return str(entry.get("employeeId") or "").strip()


def _parse_entries(entries: Iterable[Dict[str, Any]], parse: Callable[[Dict[str, Any]], RegistrationRecord],
                   source: str) -> List[RegistrationRecord]:
    records = []
    for entry in entries:
        try:
            records.append(parse(entry))
        except ValueError as e:
            logger.warning(f"Skipping malformed {source} entry {entry!r}: {e}")
    return records


class RegistrationStore:
    """
    Canonical list of gala registrations.

    Every write lands in the local cache first, then is pushed to the remote
    table when one is configured. Reads reconcile both tiers.

    Args:
        cache_file: Path of the local JSON cache
        remote_config: Remote table settings, or None for local-only mode
        remote: Pre-built remote client (anything with select_all / upsert_by_key /
            delete_by_key); overrides remote_config when given
        clock: Callable returning the current datetime
    """

    def __init__(
        self,
        cache_file: str,
        remote_config: Optional[RemoteConfig] = None,
        remote: Optional[Any] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.cache_file = cache_file
        self.clock = clock

        if remote is not None:
            self.remote_status = STATUS_READY
            self.remote = remote
        else:
            self.remote_status = resolve_remote_status(remote_config)
            self.remote = SupabaseTable(remote_config) if self.remote_status == STATUS_READY else None

        logger.info(f"Registration store using {cache_file}, remote status: {self.remote_status}")

    @property
    def remote_ready(self) -> bool:
        return self.remote is not None

    def _load_local(self) -> List[RegistrationRecord]:
        return _parse_entries(
            load_entries(self.cache_file, CACHE_KEY),
            RegistrationRecord.from_cache_dict,
            "local",
        )

    def _load_remote(self) -> List[RegistrationRecord]:
        return _parse_entries(self.remote.select_all(), RegistrationRecord.from_row, "remote")

    def _pending_deletes(self) -> Dict[str, str]:
        """Employee IDs whose remote deletion failed, mapped to when it was attempted."""
        return {
            _entry_key(entry): str(entry.get("deletedAt") or "")
            for entry in load_entries(self.cache_file, PENDING_DELETES_KEY)
            if _entry_key(entry)
        }

    def _update_pending_deletes(self, employee_ids: Iterable[str], deleted_at: Optional[str] = None) -> None:
        """
        Drop the markers for ``employee_ids``, or replace them when ``deleted_at`` is given.

        Caller holds the lock.
        """
        employee_ids = set(employee_ids)
        current = read_entries(self.cache_file, PENDING_DELETES_KEY)
        updated = [entry for entry in current if _entry_key(entry) not in employee_ids]
        if deleted_at is not None:
            updated.extend({"employeeId": i, "deletedAt": deleted_at} for i in sorted(employee_ids))
        if updated != current:
            store_entries(self.cache_file, updated, PENDING_DELETES_KEY)

    def _hide_pending_deletes(self, remote_records: List[RegistrationRecord]) -> List[RegistrationRecord]:
        """
        Filter out remote rows this device deleted locally but could not delete remotely.

        A marker stops applying once the remote row is gone, or once the row
        carries a timestamp newer than the deletion (someone registered again).
        """
        pending = self._pending_deletes()
        if not pending:
            return remote_records

        remote_ids = {r.employee_id for r in remote_records}
        obsolete = [employee_id for employee_id in pending if employee_id not in remote_ids]
        visible = []
        for record in remote_records:
            deleted_at = pending.get(record.employee_id)
            if deleted_at is None:
                visible.append(record)
            elif record.timestamp > deleted_at:
                visible.append(record)
                obsolete.append(record.employee_id)

        if obsolete:
            try:
                with lock_cache(self.cache_file):
                    self._update_pending_deletes(obsolete)
            except LocalStorageError as e:
                logger.warning(f"Could not clear pending deletions {obsolete}: {e}")

        return visible

    def list_all(self) -> List[RegistrationRecord]:
        """
        All registrations, remote first then local-only ones.

        Returns:
            List of records; local cache only if the remote is unavailable,
            empty if nothing is readable. Never raises.
        """
        local_records = self._load_local()

        if not self.remote_ready:
            return local_records

        try:
            remote_records = self._load_remote()
        except Exception as e:
            logger.warning(
                f"Remote fetch failed ({classify_remote_error(e)}), using local cache: {e}"
            )
            return local_records

        return reconcile(self._hide_pending_deletes(remote_records), local_records)

    def get_by_employee_id(self, employee_id: str) -> Optional[RegistrationRecord]:
        """Look up one registration after a fresh reconciliation."""
        employee_id = (employee_id or "").strip()
        for record in self.list_all():
            if record.employee_id == employee_id:
                return record
        return None

    def save(self, record: RegistrationRecord) -> SaveResult:
        """
        Persist a registration, overwriting any previous one for the same employee.

        Args:
            record: Registration to store; its timestamp is replaced

        Returns:
            SaveResult with tier "remote" when synced, "local" otherwise

        Raises:
            LocalStorageError: If the local cache cannot be written
        """
        record = replace(record, timestamp=self.clock().strftime(TIMESTAMP_FORMAT))

        with lock_cache(self.cache_file):
            entries = [e for e in read_entries(self.cache_file, CACHE_KEY) if _entry_key(e) != record.employee_id]
            entries.append(record.to_cache_dict())
            store_entries(self.cache_file, entries, CACHE_KEY)
            self._update_pending_deletes([record.employee_id])

        if not self.remote_ready:
            return SaveResult(persisted=True, tier=TIER_LOCAL, record=record, failure_reason=UNCONFIGURED)

        try:
            self.remote.upsert_by_key(KEY_COLUMN, record.to_row())
        except Exception as e:
            reason = classify_remote_error(e)
            logger.error(f"Remote save failed for {record.employee_id} ({reason}), kept in local cache: {e}")
            return SaveResult(persisted=True, tier=TIER_LOCAL, record=record, failure_reason=reason)

        logger.info(f"Registration {record.employee_id} synced to remote")
        return SaveResult(persisted=True, tier=TIER_REMOTE, record=record)

    def delete(self, employee_id: str) -> bool:
        """
        Remove a registration from both tiers.

        Returns:
            True if the remote deletion succeeded; False if it failed or no
            remote is configured. The local entry is removed either way. A failed
            remote deletion keeps the remote copy hidden from list_all until the
            row disappears or is saved again with a newer timestamp.

        Raises:
            LocalStorageError: If the local cache cannot be written
        """
        employee_id = (employee_id or "").strip()

        with lock_cache(self.cache_file):
            entries = read_entries(self.cache_file, CACHE_KEY)
            remaining = [e for e in entries if _entry_key(e) != employee_id]
            if len(remaining) != len(entries):
                store_entries(self.cache_file, remaining, CACHE_KEY)

        if not self.remote_ready:
            return False

        try:
            self.remote.delete_by_key(KEY_COLUMN, employee_id)
        except Exception as e:
            logger.error(f"Remote delete failed for {employee_id} ({classify_remote_error(e)}): {e}")
            deleted = False
        else:
            deleted = True

        with lock_cache(self.cache_file):
            if deleted:
                self._update_pending_deletes([employee_id])
            else:
                self._update_pending_deletes([employee_id], self.clock().strftime(TIMESTAMP_FORMAT))

        return deleted


def build_registration_store() -> RegistrationStore:
    """Create a store from environment configuration."""
    return RegistrationStore(cache_file=get_cache_file(), remote_config=get_remote_config())
