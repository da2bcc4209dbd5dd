"""Runtime configuration from environment variables and an optional .env file."""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Optional

logger = logging.getLogger(__name__)

STATUS_UNCONFIGURED = "unconfigured"
STATUS_PLACEHOLDER = "placeholder"
STATUS_READY = "ready"

DEFAULT_TABLE = "annual_party_list"
DEFAULT_TIMEOUT = 10.0
DEFAULT_CACHE_FILE = "data/registrations.json"

ENV_KEYS = {
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_TABLE",
    "SUPABASE_TIMEOUT",
    "REGISTRATION_CACHE_FILE",
    "ADMIN_PASSWORD",
    "LOG_LEVEL",
}

# Template values shipped in sample configs
PLACEHOLDER_MARKERS = ("你的项目ID", "你的匿名Key", "YOUR_", "your-project", "<", ">", "xxx")

_ENV_LOADED = False
_ENV_LOCK = Lock()


@dataclass(frozen=True)
class RemoteConfig:
    """Connection settings for the hosted registration table."""

    endpoint_url: str = ""
    access_key: str = ""
    table: str = DEFAULT_TABLE
    timeout: float = DEFAULT_TIMEOUT


def load_env(env_path: Path = Path(".env")) -> None:
    """Load recognized keys from .env once; real environment variables win."""
    global _ENV_LOADED

    if _ENV_LOADED:
        return

    with _ENV_LOCK:
        if _ENV_LOADED:
            return

        if env_path.exists():
            for raw_line in env_path.read_text(encoding="utf-8").splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"\'')

                if key in ENV_KEYS and key not in os.environ:
                    os.environ[key] = value

        _ENV_LOADED = True


def get_remote_config() -> Optional[RemoteConfig]:
    """
    Read remote settings from the environment.

    Returns:
        RemoteConfig, or None when neither URL nor key is set
    """
    load_env()

    endpoint_url = os.getenv("SUPABASE_URL", "").strip()
    access_key = os.getenv("SUPABASE_ANON_KEY", "").strip()
    if not endpoint_url and not access_key:
        return None

    raw_timeout = os.getenv("SUPABASE_TIMEOUT", "")
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError:
        logger.warning(f"Invalid SUPABASE_TIMEOUT {raw_timeout!r}, using {DEFAULT_TIMEOUT}")
        timeout = DEFAULT_TIMEOUT

    return RemoteConfig(
        endpoint_url=endpoint_url,
        access_key=access_key,
        table=os.getenv("SUPABASE_TABLE", "").strip() or DEFAULT_TABLE,
        timeout=timeout,
    )


def get_cache_file() -> str:
    load_env()
    return os.getenv("REGISTRATION_CACHE_FILE", "").strip() or DEFAULT_CACHE_FILE


def _is_placeholder(value: str) -> bool:
    return any(marker in value for marker in PLACEHOLDER_MARKERS)


def resolve_remote_status(config: Optional[RemoteConfig]) -> str:
    """
    Decide whether the remote table may be contacted.

    Args:
        config: Remote settings, or None when nothing is configured

    Returns:
        "unconfigured", "placeholder" or "ready"
    """
    if config is None or (not config.endpoint_url and not config.access_key):
        return STATUS_UNCONFIGURED

    if not config.endpoint_url or not config.access_key:
        return STATUS_PLACEHOLDER

    if not config.endpoint_url.startswith(("http://", "https://")):
        return STATUS_PLACEHOLDER

    if _is_placeholder(config.endpoint_url) or _is_placeholder(config.access_key):
        return STATUS_PLACEHOLDER

    return STATUS_READY
