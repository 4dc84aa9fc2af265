from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from promptpad.app_settings.defaults import DEFAULT_SHARE_BASE, DEFAULT_SHORTCUTS
from promptpad.core.client_state import ClientState
from promptpad.core.generation import PromptGenerator
from promptpad.core.state_sync import StateSyncEngine
from promptpad.logging_utils import get_logger

from ..config_panel import ConfigPanel
from ..generation_controller import GenerationController
from ..prompt_editor import PromptEditor

LOGGER = get_logger(__name__)


class PromptWindow(QMainWindow):
    def __init__(
        self,
        engine: StateSyncEngine,
        generator: PromptGenerator | None = None,
        *,
        share_base: str = DEFAULT_SHARE_BASE,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Promptpad")
        self.resize(1100, 760)
        self.engine = engine
        self.share_base = share_base
        self.generator = generator or PromptGenerator(engine)
        self.generation = GenerationController(self, self.generator)

        central = QWidget(self)
        layout = QVBoxLayout(central)
        self.config_panel = ConfigPanel(engine, central)
        layout.addWidget(self.config_panel)
        layout.addLayout(self._build_action_row(central))

        self.editor = PromptEditor(central)
        self.streaming_label = QLabel("streaming response...", self.editor)
        self.streaming_label.setStyleSheet(
            "background: #8b5cf6; color: white; padding: 3px 10px; border-radius: 4px;"
        )
        self.streaming_label.hide()
        layout.addWidget(self.editor, 1)

        self.footer_label = QLabel("", central)
        self.footer_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        layout.addWidget(self.footer_label)
        self.setCentralWidget(central)
        self.status = QStatusBar(self)
        self.setStatusBar(self.status)

        self._install_shortcuts()
        engine.subscribe(self._on_state_changed)
        initialization = engine.sync()
        self.config_panel.load_state(engine.state)
        engine.attach_editor(self.editor)
        LOGGER.info("Prompt window ready (initialization=%s)", initialization.value)
        self._on_state_changed(engine.state)

    def _build_action_row(self, parent: QWidget) -> QHBoxLayout:
        row = QHBoxLayout()
        self.generate_button = QPushButton("Generate", parent)
        self.share_button = QPushButton("Share URL", parent)
        self.clear_button = QPushButton("Clear", parent)
        self.generate_button.clicked.connect(self.generate)
        self.share_button.clicked.connect(self.share_as_url)
        self.clear_button.clicked.connect(self.engine.clear_prompt)
        for button in (self.generate_button, self.share_button, self.clear_button):
            row.addWidget(button)
        for role in ("system", "user", "assistant"):
            button = QPushButton(f"+{role.capitalize()}", parent)
            button.setFlat(True)
            button.clicked.connect(lambda _checked=False, role=role: self.engine.insert_template(role))
            row.addWidget(button)
        row.addStretch(1)
        return row

    def _install_shortcuts(self) -> None:
        handlers = {
            "generate_action": self.generate,
            "share_action": self.share_as_url,
            "insert_system_action": lambda: self.engine.insert_template("system"),
            "insert_user_action": lambda: self.engine.insert_template("user"),
            "insert_assistant_action": lambda: self.engine.insert_template("assistant"),
        }
        self.shortcut_actions: dict[str, QAction] = {}
        for action_id, sequence in DEFAULT_SHORTCUTS.items():
            action = QAction(action_id, self)
            action.setShortcut(QKeySequence(sequence))
            action.setShortcutContext(Qt.ShortcutContext.WindowShortcut)
            action.triggered.connect(handlers[action_id])
            self.addAction(action)
            self.shortcut_actions[action_id] = action

    def _on_state_changed(self, state: ClientState) -> None:
        loading = state.meta.is_loading
        self.generate_button.setEnabled(not loading)
        self.generate_button.setText("Generating..." if loading else "Generate")
        self.footer_label.setText(
            f"Endpoint: {self.engine.endpoint()} | Messages: {self.engine.message_count()}"
        )
        # The badge lives on the editor, which is released on close.
        if self.engine.editor is None:
            return
        self.streaming_label.setVisible(loading)
        if loading:
            self.streaming_label.adjustSize()
            self.streaming_label.move(self.editor.width() - self.streaming_label.width() - 24, 12)

    def show_status_message(self, text: str, timeout_ms: int = 0) -> None:
        self.status.showMessage(text, timeout_ms)

    def generate(self) -> None:
        self.generation.generate()

    def share_as_url(self) -> str:
        link = self.engine.share_link(self.share_base)
        QApplication.clipboard().setText(link)
        self.show_status_message("URL copied to clipboard!", 3000)
        LOGGER.info("Share link copied (chars=%d)", len(link))
        return link

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self.engine.detach_editor()
        super().closeEvent(event)
