from __future__ import annotations


class EditorStub:
    """In-memory stand-in for the prompt editor widget."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.position = (1, 1)
        self.callbacks = []
        self.revealed: list[int] = []
        self.set_value_calls = 0
        self.disposed = False

    def _changed(self) -> None:
        for callback in list(self.callbacks):
            callback(self.text)

    def get_value(self) -> str:
        return self.text

    def set_value(self, text: str) -> None:
        self.set_value_calls += 1
        self.text = text
        self._changed()

    def get_position(self) -> tuple[int, int]:
        return self.position

    def execute_edits(self, position: tuple[int, int], text: str) -> None:
        line, column = position
        lines = self.text.split("\n")
        offset = sum(len(part) + 1 for part in lines[: line - 1]) + column - 1
        self.text = self.text[:offset] + text + self.text[offset:]
        self._changed()

    def on_content_changed(self, callback) -> None:
        self.callbacks.append(callback)

    def get_line_count(self) -> int:
        return len(self.text.split("\n"))

    def reveal_line(self, line: int) -> None:
        self.revealed.append(line)

    def dispose(self) -> None:
        self.disposed = True
        self.callbacks.clear()


class MemoryStore:
    def __init__(self, record: dict | None = None, api_key: str = "") -> None:
        self.record = record
        self.api_key = api_key
        self.saved_records: list[dict] = []
        self.saved_keys: list[str] = []

    def load_record(self) -> dict | None:
        return self.record

    def save_record(self, record: dict) -> None:
        self.saved_records.append(record)
        self.record = record

    def load_api_key(self) -> str:
        return self.api_key

    def save_api_key(self, api_key: str) -> None:
        self.saved_keys.append(api_key)
        self.api_key = api_key
