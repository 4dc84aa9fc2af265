import sys
import traceback
from typing import Optional

from PySide6.QtWidgets import QApplication

from .app_settings import DEFAULT_SHARE_BASE, SettingsStore, get_crash_logs_file_path
from .core.state_sync import StateSyncEngine
from .logging_utils import configure_app_logging, get_logger, resolve_log_level
from .ui.main_window import PromptWindow

LOGGER = get_logger(__name__)


def save_crash_traceback(error_text: str) -> None:
    try:
        path = get_crash_logs_file_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as handle:
            handle.write(error_text.rstrip("\n"))
            handle.write("\n\n")
    except OSError:
        LOGGER.exception("Failed to write crash log")


def main(
    existing_app: Optional[QApplication] = None,
    *,
    share_link: Optional[str] = None,
    log_level: Optional[str] = None,
    share_base: str = DEFAULT_SHARE_BASE,
) -> PromptWindow:
    owns_app = existing_app is None
    app = existing_app or QApplication(sys.argv)
    configure_app_logging(resolve_log_level(log_level))
    app.setApplicationName("Promptpad")
    LOGGER.info("App main() starting (owns_app=%s, share_link=%s)", owns_app, bool(share_link))

    engine = StateSyncEngine(SettingsStore(), link_source=lambda: share_link)
    window = PromptWindow(engine, share_base=share_base)
    LOGGER.info("Main window instance created")

    def _global_exception_hook(exc_type, exc_value, exc_tb) -> None:
        error_text = "".join(traceback.format_exception(exc_type, exc_value, exc_tb)).strip()
        LOGGER.error("Unhandled exception routed to global hook", exc_info=(exc_type, exc_value, exc_tb))
        save_crash_traceback(error_text)
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _global_exception_hook

    window.show()
    if owns_app:
        sys.exit(app.exec())
    return window
