from __future__ import annotations

from collections.abc import Callable

from PySide6.QtGui import QFontDatabase, QTextCursor
from PySide6.QtWidgets import QPlainTextEdit, QWidget

from .syntax_highlighter import PromptSyntaxHighlighter


class PromptEditor(QPlainTextEdit):
    """Plain-text prompt buffer. Positions are 1-based ``(line, column)``."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.WidgetWidth)
        font = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
        font.setPointSize(11)
        self.setFont(font)
        self.highlighter = PromptSyntaxHighlighter(self.document())
        self._change_callbacks: list[Callable[[str], None]] = []
        self._disposed = False
        self.textChanged.connect(self._emit_content_changed)

    def _emit_content_changed(self) -> None:
        text = self.toPlainText()
        for callback in list(self._change_callbacks):
            callback(text)

    def get_value(self) -> str:
        return self.toPlainText()

    def set_value(self, text: str) -> None:
        self.setPlainText(text)

    def get_position(self) -> tuple[int, int]:
        cursor = self.textCursor()
        return cursor.blockNumber() + 1, cursor.positionInBlock() + 1

    def _cursor_at(self, position: tuple[int, int]) -> QTextCursor:
        line, column = position
        doc = self.document()
        block = doc.findBlockByNumber(max(0, min(int(line), doc.blockCount()) - 1))
        offset = max(0, min(int(column) - 1, block.length() - 1))
        cursor = QTextCursor(doc)
        cursor.setPosition(block.position() + offset)
        return cursor

    def execute_edits(self, position: tuple[int, int], text: str) -> None:
        cursor = self._cursor_at(position)
        cursor.insertText(text)

    def on_content_changed(self, callback: Callable[[str], None]) -> None:
        self._change_callbacks.append(callback)

    def get_line_count(self) -> int:
        return self.document().blockCount()

    def reveal_line(self, line: int) -> None:
        cursor = self._cursor_at((line, 1))
        cursor.movePosition(QTextCursor.MoveOperation.EndOfBlock)
        self.setTextCursor(cursor)
        self.ensureCursorVisible()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._change_callbacks.clear()
        try:
            self.textChanged.disconnect(self._emit_content_changed)
        except (RuntimeError, TypeError):
            pass
        self.deleteLater()
