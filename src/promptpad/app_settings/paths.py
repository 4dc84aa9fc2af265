from __future__ import annotations

import os
from pathlib import Path

HOME_ENV = "PROMPTPAD_HOME"


def _app_data_dir() -> Path:
    override = os.environ.get(HOME_ENV, "").strip()
    if override:
        return Path(override)
    appdata = os.environ.get("APPDATA")
    if appdata:
        return Path(appdata) / "promptpad"
    return Path.home() / ".config" / "promptpad"


def get_client_state_file_path() -> Path:
    return _app_data_dir() / "client_state.json"


def get_api_key_file_path() -> Path:
    return _app_data_dir() / "api_key.txt"


def get_crash_logs_file_path() -> Path:
    return _app_data_dir() / "crash_tracebacks.log"
