"""Shared application settings helpers."""

from .coercion import coerce_record, coerce_text
from .defaults import (
    DEFAULT_API_BASE_URL,
    DEFAULT_MODEL,
    DEFAULT_SHARE_BASE,
    DEFAULT_SHORTCUTS,
    PARAM_KEYS,
    REQUEST_TIMEOUT_SEC,
)
from .paths import (
    get_api_key_file_path,
    get_client_state_file_path,
    get_crash_logs_file_path,
)
from .store import SettingsStore

__all__ = [
    "DEFAULT_API_BASE_URL",
    "DEFAULT_MODEL",
    "DEFAULT_SHARE_BASE",
    "DEFAULT_SHORTCUTS",
    "PARAM_KEYS",
    "REQUEST_TIMEOUT_SEC",
    "SettingsStore",
    "coerce_record",
    "coerce_text",
    "get_api_key_file_path",
    "get_client_state_file_path",
    "get_crash_logs_file_path",
]
