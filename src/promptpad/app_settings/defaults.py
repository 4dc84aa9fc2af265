from __future__ import annotations

DEFAULT_API_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "google/gemini-2.5-flash-preview-05-20"
DEFAULT_SHARE_BASE = "promptpad://open"
REQUEST_TIMEOUT_SEC = 120

PARAM_KEYS = (
    "maxTokens",
    "temperature",
    "topK",
    "topP",
    "frequencyPenalty",
    "presencePenalty",
)

DEFAULT_SHORTCUTS: dict[str, str] = {
    "generate_action": "Ctrl+Return",
    "share_action": "Ctrl+Shift+S",
    "insert_system_action": "Ctrl+Shift+Y",
    "insert_user_action": "Ctrl+Shift+U",
    "insert_assistant_action": "Ctrl+Shift+A",
}
