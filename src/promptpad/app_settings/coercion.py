from __future__ import annotations

from .defaults import PARAM_KEYS

TEXT_KEYS = ("apiBaseUrl", "model", "prompt", "tokenizerUrl")


def coerce_text(value: object, default: str | None = None) -> str | None:
    if isinstance(value, str):
        return value
    return default


def coerce_record(loaded: object) -> dict:
    """Keep only the known fields of a persisted or shared record.

    Text fields must already be strings; anything else is dropped so the
    caller's base value wins. ``params`` is kept as a plain mapping and
    parsed later by the request-builder parsers.
    """
    if not isinstance(loaded, dict):
        return {}
    record: dict = {}
    for key in TEXT_KEYS:
        if key not in loaded:
            continue
        text = coerce_text(loaded.get(key))
        if text is not None:
            record[key] = text
    params = loaded.get("params")
    if isinstance(params, dict):
        record["params"] = {key: params[key] for key in PARAM_KEYS if key in params}
    return record
