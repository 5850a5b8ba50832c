"""Utility Functions"""

from fm_investigation_lib.utils.resilience import (
    create_custom_retry,
    storage_connect_retry,
)

__all__ = [
    "create_custom_retry",
    "storage_connect_retry",
]
