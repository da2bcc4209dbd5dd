"""Map errors raised by the remote table client to failure kinds."""
import errno
from typing import Optional

import requests

from src.models.save_result import DATABASE_ERROR, NETWORK_ERROR, UNCONFIGURED
from src.utils.exceptions import RemoteStoreError

TRANSPORT_ERRNOS = {
    errno.ECONNREFUSED,
    errno.ECONNRESET,
    errno.ECONNABORTED,
    errno.EHOSTUNREACH,
    errno.ENETUNREACH,
    errno.ENETDOWN,
    errno.ETIMEDOUT,
}

TRANSPORT_SIGNATURES = (
    "failed to fetch",
    "network",
    "timed out",
    "timeout",
    "connection",
    "cors",
    "name or service not known",
    "temporary failure in name resolution",
)


def classify_remote_error(error: Optional[BaseException]) -> str:
    """
    Classify a remote failure.

    Args:
        error: Exception raised by the remote client, or None if no call was made

    Returns:
        "unconfigured", "network_error" or "database_error"
    """
    if error is None:
        return UNCONFIGURED

    # The table answered, so transport worked
    if isinstance(error, RemoteStoreError):
        return DATABASE_ERROR

    if isinstance(error, (requests.ConnectionError, requests.Timeout, ConnectionError, TimeoutError)):
        return NETWORK_ERROR

    if isinstance(error, OSError) and error.errno in TRANSPORT_ERRNOS:
        return NETWORK_ERROR

    message = str(error).lower()
    if any(signature in message for signature in TRANSPORT_SIGNATURES):
        return NETWORK_ERROR

    return DATABASE_ERROR
