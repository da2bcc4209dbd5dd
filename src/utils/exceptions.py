"""Custom exception classes."""
from typing import Optional


class LocalStorageError(Exception):
    """Raised when the local registration cache cannot be written."""
    pass


class RemoteStoreError(Exception):
    """Raised when the remote table rejects a request or answers garbage."""

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.code = code
