"""Configuration"""

from .settings import (
    ExportMode,
    InvestigationSettings,
    RedisSettings,
    StorageBackend,
    parse_sentinel_hosts,
)

__all__ = [
    "InvestigationSettings",
    "RedisSettings",
    "StorageBackend",
    "ExportMode",
    "parse_sentinel_hosts",
]
