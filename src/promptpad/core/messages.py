"""Round-trip codec between the tagged prompt buffer and role-tagged messages."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass

ROLES = ("system", "user", "assistant")
END_OF_TURN = "<|im_end|>"

_ROLE_MARKER_RE = re.compile(r"<\|(system|user|assistant)\|>")


@dataclass(frozen=True)
class Message:
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def role_marker(role: str) -> str:
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role!r}")
    return f"<|{role}|>"


def role_template(role: str) -> str:
    return f"{role_marker(role)}\n\n{END_OF_TURN}\n"


def _clean_content(text: str) -> str:
    return text.replace(END_OF_TURN, "").strip()


def parse_messages(buffer: str) -> list[Message]:
    # re.split with one capture group alternates [preamble, role, body, role, body, ...]
    sections = _ROLE_MARKER_RE.split(buffer or "")
    messages: list[Message] = []
    for index in range(1, len(sections), 2):
        content = _clean_content(sections[index + 1])
        if content:
            messages.append(Message(sections[index], content))
    return messages


def messages_to_prompt(messages: list[Message]) -> str:
    return "\n\n".join(
        f"{role_marker(msg.role)}\n{_clean_content(msg.content)}\n{END_OF_TURN}" for msg in messages
    )
