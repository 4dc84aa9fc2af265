from __future__ import annotations

import re

from PySide6.QtGui import QColor, QFont, QSyntaxHighlighter, QTextCharFormat

_FENCE_RE = re.compile(r"^\s*```")


def _fmt(color: str, bold: bool = False, italic: bool = False) -> QTextCharFormat:
    fmt = QTextCharFormat()
    fmt.setForeground(QColor(color))
    if bold:
        fmt.setFontWeight(QFont.Bold)
    if italic:
        fmt.setFontItalic(True)
    return fmt


class PromptSyntaxHighlighter(QSyntaxHighlighter):
    """Role markers plus a little markdown."""

    def __init__(self, document) -> None:
        super().__init__(document)
        self._code_fmt = _fmt("#34d399")
        self._rules: list[tuple[re.Pattern, QTextCharFormat]] = [
            (re.compile(r"^#{1,6}\s.+$"), _fmt("#60a5fa", bold=True)),
            (re.compile(r"[*_]{1,2}[^*_]+[*_]{1,2}"), _fmt("#e4e4e7", bold=True)),
            (re.compile(r"`[^`]+`"), self._code_fmt),
            (re.compile(r"^>\s.*"), _fmt("#a1a1aa", italic=True)),
            (re.compile(r"^\s*[-+*]\s.*"), _fmt("#fda4af")),
            # markers last so they win over the markdown rules
            (re.compile(r"<\|system\|>"), _fmt("#fbbf24", bold=True)),
            (re.compile(r"<\|user\|>"), _fmt("#a78bfa", bold=True)),
            (re.compile(r"<\|assistant\|>"), _fmt("#f472b6", bold=True)),
            (re.compile(r"<\|im_(?:end|start)\|>"), _fmt("#a8a29e", italic=True)),
        ]

    def highlightBlock(self, text: str) -> None:
        in_code = self.previousBlockState() == 1
        if _FENCE_RE.match(text):
            self.setFormat(0, len(text), self._code_fmt)
            self.setCurrentBlockState(0 if in_code else 1)
            return
        if in_code:
            self.setFormat(0, len(text), self._code_fmt)
            self.setCurrentBlockState(1)
            return
        self.setCurrentBlockState(0)
        for pattern, fmt in self._rules:
            for match in pattern.finditer(text):
                start, end = match.span()
                self.setFormat(start, end - start, fmt)
