"""Request bodies for the completion and chat endpoints."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, fields

from .messages import END_OF_TURN, Message, messages_to_prompt, role_marker

_TRAILING_END_RE = re.compile(re.escape(END_OF_TURN) + r"\s*$")

# (attribute, wire name, record key)
PARAM_FIELDS = (
    ("max_tokens", "max_tokens", "maxTokens"),
    ("temperature", "temperature", "temperature"),
    ("top_k", "top_k", "topK"),
    ("top_p", "top_p", "topP"),
    ("frequency_penalty", "frequency_penalty", "frequencyPenalty"),
    ("presence_penalty", "presence_penalty", "presencePenalty"),
)
INT_PARAMS = frozenset({"max_tokens", "top_k"})


def parse_float_param(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_int_param(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    number = parse_float_param(text)
    if number is None or not number.is_integer():
        return None
    return int(number)


def parse_param(name: str, value: object) -> int | float | None:
    if name in INT_PARAMS:
        return parse_int_param(value)
    return parse_float_param(value)


@dataclass
class RequestParams:
    max_tokens: int | None = None
    temperature: float | None = None
    top_k: int | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None

    def __post_init__(self) -> None:
        for item in fields(self):
            setattr(self, item.name, parse_param(item.name, getattr(self, item.name)))

    @classmethod
    def from_record(cls, record: object, base: "RequestParams | None" = None) -> "RequestParams":
        values = base.to_kwargs() if base is not None else {}
        if isinstance(record, dict):
            for attr, _wire, key in PARAM_FIELDS:
                if key in record:
                    values[attr] = record[key]
        return cls(**values)

    def to_kwargs(self) -> dict:
        return {attr: getattr(self, attr) for attr, _wire, _key in PARAM_FIELDS}

    def to_record(self) -> dict:
        return {key: getattr(self, attr) for attr, _wire, key in PARAM_FIELDS}

    def to_wire(self) -> dict:
        return {wire: getattr(self, attr) for attr, wire, _key in PARAM_FIELDS if getattr(self, attr) is not None}


def uses_completion_endpoint(tokenizer_url: str | None) -> bool:
    return bool(str(tokenizer_url or "").strip())


def endpoint_url(api_base_url: str, tokenizer_url: str | None) -> str:
    base = str(api_base_url or "").rstrip("/")
    if uses_completion_endpoint(tokenizer_url):
        return f"{base}/completions"
    return f"{base}/chat/completions"


def strip_trailing_end_marker(prompt: str) -> str:
    return _TRAILING_END_RE.sub("", prompt or "", count=1).strip()


def build_completion_request(model: str, prompt: str, params: RequestParams) -> dict:
    body: dict = {"model": model, "prompt": strip_trailing_end_marker(prompt)}
    body.update(params.to_wire())
    body["stream"] = True
    return body


def build_chat_request(model: str, messages: list[Message], params: RequestParams) -> dict:
    body: dict = {"model": model, "messages": [msg.to_dict() for msg in messages]}
    body.update(params.to_wire())
    body["stream"] = True
    return body


def chat_buffer_for(messages: list[Message]) -> str:
    return f"{messages_to_prompt(messages)}\n\n{role_marker('assistant')}\n"
