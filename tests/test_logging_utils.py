import logging
import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from promptpad.logging_utils import configure_app_logging, normalize_log_level_name, resolve_log_level


class LoggingUtilsTests(unittest.TestCase):
    def test_normalize_level(self) -> None:
        self.assertEqual(normalize_log_level_name("debug"), "DEBUG")
        self.assertEqual(normalize_log_level_name("loud"), "INFO")

    def test_explicit_level_beats_environment(self) -> None:
        with patch.dict(os.environ, {"PROMPTPAD_LOG_LEVEL": "error"}, clear=False):
            self.assertEqual(resolve_log_level(None), "ERROR")
            self.assertEqual(resolve_log_level("warning"), "WARNING")

    def test_configure_is_idempotent(self) -> None:
        root = logging.getLogger()
        previous_level = root.level
        self.addCleanup(root.setLevel, previous_level)
        configure_app_logging("DEBUG")
        configure_app_logging("WARNING")
        handlers = [h for h in root.handlers if getattr(h, "_promptpad_console_handler", False)]
        self.assertEqual(len(handlers), 1)
        self.assertEqual(root.level, logging.WARNING)
        formatted = handlers[0].format(logging.LogRecord("promptpad.x", logging.INFO, __file__, 1, "hi %s", ("there",), None))
        self.assertTrue(formatted.startswith("[Info] ["))
        self.assertTrue(formatted.endswith("[promptpad.x] hi there"))


if __name__ == "__main__":
    unittest.main()
