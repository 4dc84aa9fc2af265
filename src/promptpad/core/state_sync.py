"""Owner of the client settings state.

Three sources feed the state: the persisted store (read once at
construction), the share link the app was opened with (read once, on the
first ``sync``) and the live editor buffer (kept in step through the
editor's change notification). The engine is the only writer; every
method here must run on the UI thread.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Protocol

from promptpad.app_settings.defaults import DEFAULT_SHARE_BASE
from promptpad.app_settings.store import SettingsStore
from promptpad.logging_utils import get_logger

from .client_state import ClientState, ClientStateMeta, Initialization
from .messages import parse_messages, role_template
from .request_builder import PARAM_FIELDS, endpoint_url, parse_param
from .share_codec import ShareDecodeError, build_share_link, decode_state, extract_state_param

_LOGGER = get_logger(__name__)

TEXT_FIELDS = ("api_base_url", "model", "tokenizer_url", "prompt")
PARAM_NAMES = tuple(attr for attr, _wire, _key in PARAM_FIELDS)

StateListener = Callable[[ClientState], None]


class PromptEditorLike(Protocol):
    def get_value(self) -> str: ...
    def set_value(self, text: str) -> None: ...
    def get_position(self) -> tuple[int, int]: ...
    def execute_edits(self, position: tuple[int, int], text: str) -> None: ...
    def on_content_changed(self, callback: Callable[[str], None]) -> None: ...
    def get_line_count(self) -> int: ...
    def reveal_line(self, line: int) -> None: ...
    def dispose(self) -> None: ...


def end_position(text: str) -> tuple[int, int]:
    lines = text.split("\n")
    return len(lines), len(lines[-1]) + 1


class StateSyncEngine:
    def __init__(
        self,
        store: SettingsStore,
        link_source: Callable[[], str | None] | None = None,
        listener: StateListener | None = None,
    ) -> None:
        self._store = store
        self._link_source = link_source or (lambda: None)
        self._listeners: list[StateListener] = [listener] if listener is not None else []
        self._editor: PromptEditorLike | None = None
        self._state = self._initial_state()

    def _initial_state(self) -> ClientState:
        record = self._store.load_record()
        state = ClientState.from_record(record) if record is not None else ClientState()
        state.meta = ClientStateMeta(
            initialization=Initialization.PENDING,
            is_loading=False,
            api_key=self._store.load_api_key(),
        )
        return state

    @property
    def state(self) -> ClientState:
        return self._state.snapshot()

    @property
    def editor(self) -> PromptEditorLike | None:
        return self._editor

    @property
    def is_loading(self) -> bool:
        return self._state.meta.is_loading

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def _commit(self, new_state: ClientState) -> None:
        previous = self._state
        self._state = new_state
        if new_state.to_record() != previous.to_record():
            self._store.save_record(new_state.to_record())
        if new_state != previous:
            snapshot = new_state.snapshot()
            for listener in list(self._listeners):
                listener(snapshot)

    def _set_initialization(self, value: Initialization) -> None:
        _LOGGER.debug("Client state initialization %s -> %s", self._state.meta.initialization.value, value.value)
        self._commit(replace(self._state, meta=replace(self._state.meta, initialization=value)))

    # Lifecycle

    def sync(self) -> Initialization:
        if self._state.meta.initialization is Initialization.PENDING:
            self._pull_from_link()
        if self._state.meta.initialization is Initialization.PULLED and self._editor is not None:
            self._editor.set_value(self._state.prompt)
            self._set_initialization(Initialization.COMPLETED)
        elif self._state.meta.initialization is Initialization.COMPLETED and self._editor is None:
            self._set_initialization(Initialization.PULLED)
        return self._state.meta.initialization

    def _pull_from_link(self) -> None:
        encoded = extract_state_param(self._link_source())
        base = self._state
        if encoded:
            try:
                decoded = decode_state(encoded)
            except ShareDecodeError as exc:
                _LOGGER.warning("Failed to decode state from share link: %s", exc)
            else:
                base = ClientState.from_record(decoded, self._state)
                _LOGGER.info("Applied shared state fields: %s", ", ".join(sorted(decoded)) or "(none)")
        self._commit(replace(base, meta=replace(self._state.meta, initialization=Initialization.PULLED)))

    def attach_editor(self, editor: PromptEditorLike) -> None:
        self._editor = editor
        editor.on_content_changed(self._on_editor_changed)
        self.sync()

    def detach_editor(self) -> None:
        editor, self._editor = self._editor, None
        if editor is not None:
            editor.dispose()
        self.sync()

    def _on_editor_changed(self, text: str) -> None:
        if self._editor is None:
            return
        self.update(prompt=text)

    # Mutation

    def update(self, **changes: str) -> None:
        unknown = set(changes) - set(TEXT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown client state fields: {', '.join(sorted(unknown))}")
        cleaned = {key: str(value or "") for key, value in changes.items()}
        self._commit(replace(self._state, **cleaned))

    def update_params(self, **changes: object) -> None:
        unknown = set(changes) - set(PARAM_NAMES)
        if unknown:
            raise TypeError(f"Unknown request parameters: {', '.join(sorted(unknown))}")
        parsed = {key: parse_param(key, value) for key, value in changes.items()}
        self._commit(replace(self._state, params=replace(self._state.params, **parsed)))

    def set_api_key(self, api_key: str) -> None:
        api_key = str(api_key or "")
        self._store.save_api_key(api_key)
        self._commit(replace(self._state, meta=replace(self._state.meta, api_key=api_key)))

    def set_loading(self, loading: bool) -> None:
        self._commit(replace(self._state, meta=replace(self._state.meta, is_loading=bool(loading))))

    # Editor buffer

    def current_prompt(self) -> str:
        if self._editor is not None:
            return self._editor.get_value()
        return self._state.prompt

    def replace_buffer(self, text: str) -> None:
        if self._editor is None:
            self.update(prompt=text)
            return
        self._editor.set_value(text)
        self._editor.reveal_line(self._editor.get_line_count())

    def append_to_buffer(self, text: str) -> None:
        if self._editor is None:
            self.update(prompt=self._state.prompt + text)
            return
        self._editor.execute_edits(end_position(self._editor.get_value()), text)
        self._editor.reveal_line(self._editor.get_line_count())

    def clear_prompt(self) -> None:
        if self._editor is not None:
            self._editor.set_value("")
        self.update(prompt="")

    def insert_template(self, role: str) -> None:
        template = role_template(role)
        if self._editor is None:
            return
        self._editor.execute_edits(self._editor.get_position(), template)

    # Derived values

    def share_record(self) -> dict:
        return replace(self._state, prompt=self.current_prompt()).to_record()

    def share_link(self, base: str = DEFAULT_SHARE_BASE) -> str:
        return build_share_link(base, self.share_record())

    def message_count(self) -> int:
        return len(parse_messages(self._state.prompt))

    def endpoint(self) -> str:
        return endpoint_url(self._state.api_base_url, self._state.tokenizer_url)
