import io
import json
import socket
import sys
import unittest
from pathlib import Path
from unittest.mock import patch
from urllib.error import HTTPError, URLError

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from promptpad.core import transport
from promptpad.core.transport import TransportError, post_stream


class _FakeResponse(io.BytesIO):
    def __init__(self, payload: bytes, status: int = 200, reason: str = "OK") -> None:
        super().__init__(payload)
        self.status = status
        self.reason = reason


class PostStreamTests(unittest.TestCase):
    def test_posts_json_with_bearer_and_yields_chunks(self) -> None:
        payload = b"data: {}\n" * 300
        captured = {}

        def _fake_urlopen(request, timeout):
            captured["request"] = request
            captured["timeout"] = timeout
            return _FakeResponse(payload)

        with patch.object(transport, "urlopen", _fake_urlopen):
            chunks = list(post_stream("https://api.test/v1/chat/completions", {"model": "m", "stream": True}, "sk-1", timeout=5))

        request = captured["request"]
        self.assertEqual(request.get_method(), "POST")
        self.assertEqual(request.full_url, "https://api.test/v1/chat/completions")
        self.assertEqual(request.get_header("Authorization"), "Bearer sk-1")
        self.assertEqual(request.get_header("Content-type"), "application/json")
        self.assertEqual(json.loads(request.data), {"model": "m", "stream": True})
        self.assertEqual(captured["timeout"], 5)
        self.assertEqual(b"".join(chunks), payload)
        self.assertGreater(len(chunks), 1)

    def test_http_error_status_message(self) -> None:
        error = HTTPError("https://api.test", 401, "Unauthorized", {}, io.BytesIO(b"{}"))
        with patch.object(transport, "urlopen", side_effect=error):
            with self.assertRaises(TransportError) as ctx:
                list(post_stream("https://api.test", {}, ""))
        self.assertEqual(str(ctx.exception), "HTTP 401: Unauthorized")

    def test_non_2xx_response_is_failure(self) -> None:
        with patch.object(transport, "urlopen", return_value=_FakeResponse(b"", status=302, reason="Found")):
            with self.assertRaises(TransportError) as ctx:
                list(post_stream("https://api.test", {}, "k"))
        self.assertEqual(str(ctx.exception), "HTTP 302: Found")

    def test_network_failures_become_transport_errors(self) -> None:
        for error in (URLError("name resolution failed"), socket.timeout("timed out"), ConnectionResetError("reset")):
            with patch.object(transport, "urlopen", side_effect=error):
                with self.assertRaises(TransportError, msg=repr(error)):
                    list(post_stream("https://api.test", {}, "k"))


if __name__ == "__main__":
    unittest.main()
