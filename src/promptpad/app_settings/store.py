from __future__ import annotations

import json
from pathlib import Path

from promptpad.logging_utils import get_logger

from .coercion import coerce_record
from .paths import get_api_key_file_path, get_client_state_file_path

_LOGGER = get_logger(__name__)


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


class SettingsStore:
    """File-backed store: one JSON entry for the settings record, one raw entry for the API key."""

    def __init__(self, state_path: Path | None = None, api_key_path: Path | None = None) -> None:
        self.state_path = state_path or get_client_state_file_path()
        self.api_key_path = api_key_path or get_api_key_file_path()

    def load_record(self) -> dict | None:
        if not self.state_path.exists():
            return None
        try:
            loaded = json.loads(self.state_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError, RecursionError) as exc:
            _LOGGER.warning("Ignoring unreadable client state %s: %s", self.state_path, exc)
            return None
        if not isinstance(loaded, dict):
            _LOGGER.warning("Ignoring client state %s: not a JSON object", self.state_path)
            return None
        return coerce_record(loaded)

    def save_record(self, record: dict) -> None:
        try:
            _atomic_write_text(self.state_path, json.dumps(record, ensure_ascii=False, indent=2))
        except OSError:
            _LOGGER.exception("Failed to write client state %s", self.state_path)

    def load_api_key(self) -> str:
        try:
            return self.api_key_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as exc:
            _LOGGER.warning("Ignoring unreadable API key file %s: %s", self.api_key_path, exc)
            return ""

    def save_api_key(self, api_key: str) -> None:
        try:
            _atomic_write_text(self.api_key_path, str(api_key or ""))
        except OSError:
            _LOGGER.exception("Failed to write API key file %s", self.api_key_path)
