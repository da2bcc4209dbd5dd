"""Client for the hosted registration table (Supabase REST / PostgREST)."""
import logging
from typing import Any, Dict, List, Optional

import requests

from src.services.config_service import RemoteConfig
from src.utils.exceptions import RemoteStoreError

logger = logging.getLogger(__name__)

KEY_COLUMN = "employee_id"


class SupabaseTable:
    """Select / upsert / delete on one table. One attempt per call, no retry."""

    def __init__(self, config: RemoteConfig, session: Optional[requests.Session] = None):
        self.table = config.table
        self.timeout = config.timeout
        self.base_url = f"{config.endpoint_url.rstrip('/')}/rest/v1/{config.table}"
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": config.access_key,
            "Authorization": f"Bearer {config.access_key}",
            "Content-Type": "application/json",
        })

    def _check(self, response: requests.Response, action: str) -> None:
        if response.status_code < 400:
            return

        code = None
        message = response.text
        try:
            body = response.json()
            if isinstance(body, dict):
                code = body.get("code")
                message = body.get("message") or message
        except ValueError:
            pass

        logger.debug(f"Supabase {action} rejected: status={response.status_code} code={code}")
        raise RemoteStoreError(
            f"{action} on {self.table} failed ({response.status_code}): {message}",
            status=response.status_code,
            code=code,
        )

    def select_all(self) -> List[Dict[str, Any]]:
        """
        Fetch every row of the table.

        Raises:
            RemoteStoreError: On HTTP rejection or a non-list body
            requests.RequestException: On transport failure
        """
        response = self.session.get(self.base_url, params={"select": "*"}, timeout=self.timeout)
        self._check(response, "select")

        try:
            rows = response.json()
        except ValueError as e:
            raise RemoteStoreError(f"Malformed response from {self.table}: {e}", code="malformed_response") from e

        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise RemoteStoreError(
                f"Malformed response from {self.table}: expected a list of rows",
                code="malformed_response",
            )
        return rows

    def upsert_by_key(self, key: str, row: Dict[str, Any]) -> None:
        """Insert ``row``, or update the existing row with the same ``key`` value."""
        response = self.session.post(
            self.base_url,
            params={"on_conflict": key},
            json=row,
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            timeout=self.timeout,
        )
        self._check(response, "upsert")

    def delete_by_key(self, key: str, value: str) -> None:
        """Delete the rows whose ``key`` column equals ``value``."""
        response = self.session.delete(
            self.base_url,
            params={key: f"eq.{value}"},
            timeout=self.timeout,
        )
        self._check(response, "delete")
