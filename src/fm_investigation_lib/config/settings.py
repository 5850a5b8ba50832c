"""Environment-driven configuration for the investigation library.

Explicit constructor arguments take precedence over environment variables,
which take precedence over defaults. A ``.env`` file in the working directory
is loaded on import.

Environment Variables:
    INVESTIGATION_STORAGE_BACKEND: "memory" (default) or "redis"
    INVESTIGATION_KEY_PREFIX: Storage key prefix (default: "skanyxx-")
    INVESTIGATION_PERSIST_DEBOUNCE_MS: Quiet period before a write (default: 100)
    INVESTIGATION_EXPORT_MODE: "json" (default) or "http"
    INVESTIGATION_EXPORT_DIR: Directory for exported reports (default: "./reports")
    INVESTIGATION_EXPORT_URL: Rendering service base URL (http mode)
    INVESTIGATION_EXPORT_TIMEOUT: Rendering request timeout in seconds (default: 30)

    REDIS_MODE, REDIS_HOST, REDIS_PORT, REDIS_DB, REDIS_PASSWORD,
    REDIS_SENTINEL_HOSTS, REDIS_MASTER_SET: Redis connection (redis backend)
"""

import logging
import os
from enum import Enum
from typing import List, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class StorageBackend(Enum):
    """Key-value backends for persisted investigations."""

    MEMORY = "memory"  # Process-local, lost on restart
    REDIS = "redis"  # Standalone or Sentinel-managed Redis


class ExportMode(Enum):
    """Document exporters."""

    JSON = "json"  # Local JSON report
    HTTP = "http"  # Remote rendering service (PDF)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer in {name}: {raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number in {name}: {raw!r}, using {default}")
        return default


def parse_sentinel_hosts(hosts_str: str) -> List[Tuple[str, int]]:
    """Parse a comma-separated ``host[:port]`` list; port defaults to 26379.

    Example:
        >>> parse_sentinel_hosts("s1:26380, s2")
        [('s1', 26380), ('s2', 26379)]
    """
    sentinels = []
    for entry in hosts_str.split(","):
        entry = entry.strip()
        if not entry:
            continue
        host, sep, port = entry.rpartition(":")
        if sep:
            sentinels.append((host, int(port)))
        else:
            sentinels.append((entry, 26379))
    return sentinels


class RedisSettings:
    """Connection settings for the Redis storage backend."""

    def __init__(
        self,
        mode: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        db: Optional[int] = None,
        password: Optional[str] = None,
        sentinel_hosts: Optional[str] = None,
        master_set: Optional[str] = None,
    ):
        self.mode = (mode or os.getenv("REDIS_MODE", "standalone")).lower()
        if self.mode not in ("standalone", "sentinel"):
            logger.warning(f"Invalid REDIS_MODE '{self.mode}', defaulting to 'standalone'")
            self.mode = "standalone"

        self.host = host or os.getenv("REDIS_HOST", "localhost")
        self.port = port if port is not None else _env_int("REDIS_PORT", 6379)
        self.db = db if db is not None else _env_int("REDIS_DB", 0)
        self.password = password or os.getenv("REDIS_PASSWORD")
        self.sentinel_hosts = sentinel_hosts or os.getenv("REDIS_SENTINEL_HOSTS", "")
        self.master_set = master_set or os.getenv("REDIS_MASTER_SET", "mymaster")

    @property
    def sentinels(self) -> List[Tuple[str, int]]:
        return parse_sentinel_hosts(self.sentinel_hosts)


class InvestigationSettings:
    """Top-level settings consumed by ``create_manager``.

    Example:
        ```python
        settings = InvestigationSettings(storage_backend="redis", debounce_ms=250)
        manager = await create_manager(settings, agents=directory)
        ```
    """

    def __init__(
        self,
        storage_backend: Optional[str] = None,
        key_prefix: Optional[str] = None,
        debounce_ms: Optional[int] = None,
        export_mode: Optional[str] = None,
        export_dir: Optional[str] = None,
        export_url: Optional[str] = None,
        export_timeout: Optional[float] = None,
        redis: Optional[RedisSettings] = None,
    ):
        backend_str = storage_backend or os.getenv("INVESTIGATION_STORAGE_BACKEND", "memory")
        try:
            self.storage_backend = StorageBackend(backend_str.lower())
        except ValueError:
            logger.warning(
                f"Invalid INVESTIGATION_STORAGE_BACKEND '{backend_str}', defaulting to 'memory'"
            )
            self.storage_backend = StorageBackend.MEMORY

        if key_prefix is not None:
            self.key_prefix = key_prefix
        else:
            self.key_prefix = os.getenv("INVESTIGATION_KEY_PREFIX", "skanyxx-")

        ms = debounce_ms if debounce_ms is not None else _env_int(
            "INVESTIGATION_PERSIST_DEBOUNCE_MS", 100
        )
        if ms < 0:
            logger.warning(f"Negative debounce {ms}ms, using 100ms")
            ms = 100
        self.debounce_ms = ms

        mode_str = export_mode or os.getenv("INVESTIGATION_EXPORT_MODE", "json")
        try:
            self.export_mode = ExportMode(mode_str.lower())
        except ValueError:
            logger.warning(f"Invalid INVESTIGATION_EXPORT_MODE '{mode_str}', defaulting to 'json'")
            self.export_mode = ExportMode.JSON

        self.export_dir = export_dir or os.getenv("INVESTIGATION_EXPORT_DIR", "./reports")
        self.export_url = export_url or os.getenv("INVESTIGATION_EXPORT_URL")
        self.export_timeout = export_timeout if export_timeout is not None else _env_float(
            "INVESTIGATION_EXPORT_TIMEOUT", 30.0
        )

        self.redis = redis or RedisSettings()

        logger.info(
            f"InvestigationSettings initialized: backend={self.storage_backend.value}, "
            f"debounce={self.debounce_ms}ms, export={self.export_mode.value}"
        )

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0
