from __future__ import annotations

from PySide6.QtWidgets import QGridLayout, QLabel, QLineEdit, QVBoxLayout, QWidget

from promptpad.core.client_state import ClientState
from promptpad.core.state_sync import StateSyncEngine

# (param attribute, label, placeholder)
PARAM_INPUTS = (
    ("max_tokens", "Max Tokens", ""),
    ("temperature", "Temperature", "0 - 2"),
    ("top_k", "Top K", ""),
    ("top_p", "Top P", "0 - 1"),
    ("frequency_penalty", "Freq Penalty", "-2 - 2"),
    ("presence_penalty", "Presence Penalty", "-2 - 2"),
)

# (state field, label, placeholder)
TEXT_INPUTS = (
    ("api_base_url", "API Base URL", "https://api.openai.com/v1"),
    ("model", "Model", "gpt-4o"),
    ("tokenizer_url", "Tokenizer URL (optional)", "https://huggingface.co/..."),
)


def format_param(value: int | float | None) -> str:
    return "" if value is None else str(value)


class ConfigPanel(QWidget):
    """Endpoint settings, API key and sampling parameters.

    Only user edits (``textEdited``) are pushed to the engine, so
    ``load_state`` never echoes back.
    """

    def __init__(self, engine: StateSyncEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.engine = engine
        self.text_inputs: dict[str, QLineEdit] = {}
        self.param_inputs: dict[str, QLineEdit] = {}

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        config_grid = QGridLayout()
        for column, (name, label, placeholder) in enumerate(TEXT_INPUTS):
            edit = self._add_input(config_grid, column, label, placeholder)
            edit.textEdited.connect(lambda text, name=name: self.engine.update(**{name: text}))
            self.text_inputs[name] = edit
        self.api_key_input = self._add_input(config_grid, len(TEXT_INPUTS), "API Key", "sk-...")
        self.api_key_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.api_key_input.textEdited.connect(self.engine.set_api_key)
        layout.addLayout(config_grid)

        param_grid = QGridLayout()
        for column, (name, label, placeholder) in enumerate(PARAM_INPUTS):
            edit = self._add_input(param_grid, column, label, placeholder)
            edit.textEdited.connect(lambda text, name=name: self.engine.update_params(**{name: text}))
            self.param_inputs[name] = edit
        layout.addLayout(param_grid)

        self.load_state(engine.state)

    def _add_input(self, grid: QGridLayout, column: int, label: str, placeholder: str) -> QLineEdit:
        caption = QLabel(label, self)
        edit = QLineEdit(self)
        edit.setPlaceholderText(placeholder)
        caption.setBuddy(edit)
        grid.addWidget(caption, 0, column)
        grid.addWidget(edit, 1, column)
        return edit

    def load_state(self, state: ClientState) -> None:
        for name, edit in self.text_inputs.items():
            edit.setText(str(getattr(state, name) or ""))
        for name, edit in self.param_inputs.items():
            edit.setText(format_param(getattr(state.params, name)))
        self.api_key_input.setText(state.meta.api_key)
