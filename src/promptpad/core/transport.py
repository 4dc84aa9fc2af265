from __future__ import annotations

import json
import socket
from collections.abc import Iterator
from http.client import HTTPException
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from promptpad.app_settings.defaults import REQUEST_TIMEOUT_SEC
from promptpad.logging_utils import get_logger

CHUNK_SIZE = 1024

_LOGGER = get_logger(__name__)


class TransportError(RuntimeError):
    """Network failure, non-2xx status or missing body. Never retried."""


def _http_error_message(status: object, reason: object) -> str:
    return f"HTTP {status}: {reason or ''}".rstrip()


def post_stream(
    url: str,
    body: dict,
    api_key: str,
    *,
    timeout: float = REQUEST_TIMEOUT_SEC,
) -> Iterator[bytes]:
    request = Request(
        url,
        data=json.dumps(body).encode("utf-8"),
        method="POST",
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key or ''}",
        },
    )
    _LOGGER.debug("POST %s body_keys=%s", url, sorted(body))
    try:
        response = urlopen(request, timeout=timeout)  # noqa: S310
    except HTTPError as exc:
        raise TransportError(_http_error_message(exc.code, exc.reason)) from exc
    except (TimeoutError, socket.timeout) as exc:
        raise TransportError(f"Network timeout (>{timeout}s)") from exc
    except URLError as exc:
        raise TransportError(str(exc.reason)) from exc
    except (HTTPException, OSError) as exc:
        raise TransportError(str(exc)) from exc
    with response:
        status = getattr(response, "status", 200)
        if not 200 <= int(status) < 300:
            raise TransportError(_http_error_message(status, getattr(response, "reason", "")))
        if getattr(response, "fp", True) is None:
            raise TransportError("No response body")
        try:
            while True:
                chunk = response.read1(CHUNK_SIZE) if hasattr(response, "read1") else response.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        except (TimeoutError, socket.timeout) as exc:
            raise TransportError(f"Network timeout (>{timeout}s)") from exc
        except (HTTPException, OSError) as exc:
            raise TransportError(str(exc)) from exc
