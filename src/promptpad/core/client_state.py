from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from promptpad.app_settings.coercion import coerce_record
from promptpad.app_settings.defaults import DEFAULT_API_BASE_URL, DEFAULT_MODEL

from .request_builder import RequestParams


class Initialization(str, Enum):
    PENDING = "pending"
    PULLED = "pulled"
    COMPLETED = "completed"


@dataclass
class ClientStateMeta:
    """Transient fields. Never persisted, never shared."""

    initialization: Initialization = Initialization.PENDING
    is_loading: bool = False
    api_key: str = ""


@dataclass
class ClientState:
    api_base_url: str = DEFAULT_API_BASE_URL
    model: str = DEFAULT_MODEL
    tokenizer_url: str = ""
    prompt: str = ""
    params: RequestParams = field(default_factory=RequestParams)
    meta: ClientStateMeta = field(default_factory=ClientStateMeta)

    def to_record(self) -> dict:
        return {
            "apiBaseUrl": self.api_base_url,
            "model": self.model,
            "params": self.params.to_record(),
            "prompt": self.prompt,
            "tokenizerUrl": self.tokenizer_url,
        }

    @classmethod
    def from_record(cls, record: object, base: ClientState | None = None) -> ClientState:
        """Shallow-merge ``record`` onto ``base``; fields present in the record win."""
        base = base if base is not None else cls()
        cleaned = coerce_record(record)
        return replace(
            base,
            api_base_url=cleaned.get("apiBaseUrl", base.api_base_url),
            model=cleaned.get("model", base.model),
            tokenizer_url=cleaned.get("tokenizerUrl", base.tokenizer_url),
            prompt=cleaned.get("prompt", base.prompt),
            params=RequestParams.from_record(cleaned["params"]) if "params" in cleaned else replace(base.params),
            meta=replace(base.meta),
        )

    def snapshot(self) -> ClientState:
        return replace(self, params=replace(self.params), meta=replace(self.meta))
