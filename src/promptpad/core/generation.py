from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from promptpad.logging_utils import get_logger

from .messages import END_OF_TURN, Message, parse_messages
from .request_builder import (
    build_chat_request,
    build_completion_request,
    chat_buffer_for,
    endpoint_url,
    uses_completion_endpoint,
)
from .state_sync import StateSyncEngine
from .streaming import iter_stream_deltas
from .transport import post_stream

CHAT_TURN_CLOSER = f"\n{END_OF_TURN}\n\n"

PostStream = Callable[[str, dict, str], Iterable[bytes]]

_LOGGER = get_logger(__name__)


@dataclass
class PreparedRequest:
    url: str
    body: dict
    api_key: str
    completion: bool
    messages: list[Message] = field(default_factory=list)


class PromptGenerator:
    """One generate call: prepare on the UI thread, stream anywhere, apply on the UI thread."""

    def __init__(self, engine: StateSyncEngine, post: PostStream = post_stream) -> None:
        self.engine = engine
        self._post = post
        self._request_counter = 0

    def begin(self) -> PreparedRequest | None:
        if self.engine.is_loading:
            _LOGGER.debug("Generate ignored: a request is already in flight")
            return None
        self.engine.set_loading(True)
        try:
            return self._prepare()
        except Exception:
            self.engine.set_loading(False)
            raise

    def _prepare(self) -> PreparedRequest:
        state = self.engine.state
        prompt = self.engine.current_prompt()
        completion = uses_completion_endpoint(state.tokenizer_url)
        url = endpoint_url(state.api_base_url, state.tokenizer_url)
        self._request_counter += 1
        if completion:
            body = build_completion_request(state.model, prompt, state.params)
            prepared = PreparedRequest(url, body, state.meta.api_key, completion=True)
        else:
            messages = parse_messages(prompt)
            body = build_chat_request(state.model, messages, state.params)
            prepared = PreparedRequest(url, body, state.meta.api_key, completion=False, messages=messages)
            self.engine.replace_buffer(chat_buffer_for(messages))
        _LOGGER.info(
            "Generate start id=%d endpoint=%s model=%r messages=%d",
            self._request_counter,
            url,
            state.model,
            len(prepared.messages),
        )
        return prepared

    def stream(self, prepared: PreparedRequest) -> Iterator[str]:
        chunks = self._post(prepared.url, prepared.body, prepared.api_key)
        yield from iter_stream_deltas(chunks, prepared.completion)

    def apply_delta(self, delta: str) -> None:
        if delta:
            self.engine.append_to_buffer(delta)

    def complete(self, prepared: PreparedRequest, received: bool) -> None:
        try:
            if received and not prepared.completion:
                self.engine.append_to_buffer(CHAT_TURN_CLOSER)
        finally:
            self.engine.set_loading(False)
        _LOGGER.info("Generate finished id=%d received=%s", self._request_counter, received)

    def fail(self, message: str) -> str:
        self.engine.set_loading(False)
        _LOGGER.error("Generate failed id=%d: %s", self._request_counter, message)
        return f"Request failed: {message}"

    def run(self, notify: Callable[[str], None]) -> bool:
        """Synchronous generate; returns False when skipped or failed."""
        prepared = self.begin()
        if prepared is None:
            return False
        received = False
        try:
            for delta in self.stream(prepared):
                received = True
                self.apply_delta(delta)
        except Exception as exc:  # noqa: BLE001
            notify(self.fail(str(exc) or exc.__class__.__name__))
            return False
        self.complete(prepared, received)
        return True
