import json
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
TESTS = ROOT / "tests"
for path in (SRC, TESTS):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from _editor_stub import EditorStub, MemoryStore

from promptpad.core.generation import PromptGenerator
from promptpad.core.state_sync import StateSyncEngine
from promptpad.core.transport import TransportError


def _chat_chunk(content: str) -> bytes:
    return f"data: {json.dumps({'choices': [{'delta': {'content': content}}]})}\n\n".encode("utf-8")


class _FakePost:
    def __init__(self, chunks: list[bytes], error: Exception | None = None) -> None:
        self.chunks = chunks
        self.error = error
        self.calls: list[tuple[str, dict, str]] = []

    def __call__(self, url: str, body: dict, api_key: str):
        self.calls.append((url, body, api_key))
        yield from self.chunks
        if self.error is not None:
            raise self.error


def _engine(record: dict, api_key: str = "sk-test") -> tuple[StateSyncEngine, EditorStub]:
    engine = StateSyncEngine(MemoryStore(record, api_key=api_key))
    editor = EditorStub()
    engine.attach_editor(editor)
    return engine, editor


class ChatGenerationTests(unittest.TestCase):
    def test_chat_round_appends_reply_and_closing_marker(self) -> None:
        engine, editor = _engine(
            {"apiBaseUrl": "https://api.test/v1", "model": "m", "prompt": "<|user|>\n Hi \n", "params": {"maxTokens": "5"}}
        )
        post = _FakePost([_chat_chunk("Hel"), _chat_chunk("lo"), b"data: [DONE]\n"])
        notices: list[str] = []
        self.assertTrue(PromptGenerator(engine, post=post).run(notices.append))

        url, body, api_key = post.calls[0]
        self.assertEqual(url, "https://api.test/v1/chat/completions")
        self.assertEqual(api_key, "sk-test")
        self.assertEqual(
            body,
            {"model": "m", "messages": [{"role": "user", "content": "Hi"}], "max_tokens": 5, "stream": True},
        )
        self.assertEqual(
            editor.text,
            "<|user|>\nHi\n<|im_end|>\n\n<|assistant|>\nHello\n<|im_end|>\n\n",
        )
        self.assertEqual(engine.state.prompt, editor.text)
        self.assertFalse(engine.is_loading)
        self.assertEqual(notices, [])
        self.assertEqual(editor.revealed[-1], editor.get_line_count())

    def test_no_closing_marker_when_nothing_received(self) -> None:
        engine, editor = _engine({"prompt": "<|user|>\nHi"})
        PromptGenerator(engine, post=_FakePost([b"data: [DONE]\n"])).run(lambda _msg: None)
        self.assertEqual(editor.text, "<|user|>\nHi\n<|im_end|>\n\n<|assistant|>\n")

    def test_second_generate_while_loading_is_a_no_op(self) -> None:
        engine, _editor = _engine({"prompt": "<|user|>\nHi"})
        post = _FakePost([_chat_chunk("x")])
        generator = PromptGenerator(engine, post=post)
        prepared = generator.begin()
        self.assertIsNotNone(prepared)
        self.assertTrue(engine.is_loading)
        self.assertIsNone(generator.begin())
        self.assertFalse(generator.run(lambda _msg: None))
        self.assertEqual(post.calls, [])

        for delta in generator.stream(prepared):
            generator.apply_delta(delta)
        generator.complete(prepared, True)
        self.assertEqual(len(post.calls), 1)
        self.assertFalse(engine.is_loading)


class CompletionGenerationTests(unittest.TestCase):
    def test_completion_endpoint_streams_raw_text(self) -> None:
        engine, editor = _engine(
            {"apiBaseUrl": "https://api.test/v1", "model": "m", "tokenizerUrl": "https://hf.co/tok", "prompt": "Once upon<|im_end|>"}
        )
        post = _FakePost([b'data: {"choices":[{"text":" a time"}]}\n', b"data: [DONE]\n"])
        PromptGenerator(engine, post=post).run(lambda _msg: None)
        url, body, _key = post.calls[0]
        self.assertEqual(url, "https://api.test/v1/completions")
        self.assertEqual(body["prompt"], "Once upon")
        self.assertEqual(editor.text, "Once upon<|im_end|> a time")

    def test_delta_without_editor_goes_to_state_prompt(self) -> None:
        engine = StateSyncEngine(MemoryStore({"tokenizerUrl": "t", "prompt": "abc"}))
        engine.sync()
        PromptGenerator(engine, post=_FakePost([b'data: {"choices":[{"text":"d"}]}\n'])).run(lambda _msg: None)
        self.assertEqual(engine.state.prompt, "abcd")


class FailureTests(unittest.TestCase):
    def test_http_failure_is_reported_once_and_clears_loading(self) -> None:
        engine, editor = _engine({"prompt": "<|user|>\nHi"})
        post = _FakePost([], error=TransportError("HTTP 401: Unauthorized"))
        notices: list[str] = []
        self.assertFalse(PromptGenerator(engine, post=post).run(notices.append))
        self.assertEqual(notices, ["Request failed: HTTP 401: Unauthorized"])
        self.assertFalse(engine.is_loading)
        self.assertEqual(editor.text, "<|user|>\nHi\n<|im_end|>\n\n<|assistant|>\n")

    def test_mid_stream_failure_keeps_partial_content(self) -> None:
        engine, editor = _engine({"prompt": "<|user|>\nHi"})
        post = _FakePost([_chat_chunk("par")], error=TransportError("connection reset"))
        notices: list[str] = []
        PromptGenerator(engine, post=post).run(notices.append)
        self.assertTrue(editor.text.endswith("<|assistant|>\npar"))
        self.assertEqual(notices, ["Request failed: connection reset"])
        self.assertFalse(engine.is_loading)


if __name__ == "__main__":
    unittest.main()
