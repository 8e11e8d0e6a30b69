import logging
import os
from dataclasses import dataclass

from .remote_client import DEFAULT_REMOTE_URL, DEFAULT_TIMEOUT
from .storage import DEFAULT_STORAGE_PATH
from .sync_agent import DEFAULT_MAX_RECORDS, DEFAULT_SYNC_INTERVAL


def _env_truthy(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_number(name: str, default: float, cast=float):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        logging.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default
    if value <= 0:
        logging.warning("Ignoring non-positive %s=%r, using %s", name, raw, default)
        return default
    return value


@dataclass
class Settings:
    data_path: str = DEFAULT_STORAGE_PATH
    remote_url: str = DEFAULT_REMOTE_URL
    sync_interval: float = DEFAULT_SYNC_INTERVAL
    sync_max_records: int = DEFAULT_MAX_RECORDS
    http_timeout: float = DEFAULT_TIMEOUT
    dry_run: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            data_path=os.getenv("QUOTEBOOK_DATA_PATH") or DEFAULT_STORAGE_PATH,
            remote_url=os.getenv("QUOTEBOOK_REMOTE_URL") or DEFAULT_REMOTE_URL,
            sync_interval=_env_number("QUOTEBOOK_SYNC_INTERVAL", DEFAULT_SYNC_INTERVAL),
            sync_max_records=_env_number("QUOTEBOOK_SYNC_MAX_RECORDS", DEFAULT_MAX_RECORDS, cast=int),
            http_timeout=_env_number("QUOTEBOOK_HTTP_TIMEOUT", DEFAULT_TIMEOUT),
            dry_run=_env_truthy("QUOTEBOOK_DRY_RUN", default=False),
        )
