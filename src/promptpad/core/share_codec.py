"""URL-safe encoding of the shareable settings record."""

from __future__ import annotations

import base64
import binascii
import json
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

STATE_PARAM = "state"


class ShareDecodeError(ValueError):
    """The ``state`` parameter could not be turned back into a settings record."""


def base64_to_base64url(text: str) -> str:
    return text.replace("+", "-").replace("/", "_").rstrip("=")


def base64url_to_base64(text: str) -> str:
    restored = text.replace("-", "+").replace("_", "/")
    return restored + "=" * (-len(restored) % 4)


def encode_state(record: dict) -> str:
    raw = json.dumps(record, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return base64_to_base64url(base64.b64encode(raw).decode("ascii"))


def decode_state(encoded: str) -> dict:
    try:
        raw = base64.b64decode(base64url_to_base64(str(encoded or "").strip()), validate=True)
        decoded = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise ShareDecodeError(f"Invalid shared state: {exc}") from exc
    if not isinstance(decoded, dict):
        raise ShareDecodeError("Invalid shared state: not a JSON object")
    return decoded


def extract_state_param(link: str | None) -> str | None:
    if not link:
        return None
    query = urlsplit(str(link)).query
    values = parse_qs(query).get(STATE_PARAM)
    if not values or not values[0]:
        return None
    return values[0]


def build_share_link(base: str, record: dict) -> str:
    parts = urlsplit(base)
    query = [(key, value) for key, values in parse_qs(parts.query).items() if key != STATE_PARAM for value in values]
    query.append((STATE_PARAM, encode_state(record)))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), ""))
