from __future__ import annotations

import argparse
import sys

from PySide6.QtWidgets import QApplication

from .app import main
from .app_settings import DEFAULT_SHARE_BASE
from .logging_utils import LOG_LEVEL_OPTIONS, configure_app_logging, get_logger, resolve_log_level

LOGGER = get_logger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="promptpad", add_help=True)
    parser.add_argument(
        "share_link",
        nargs="?",
        default=None,
        help="Share link carrying a 'state' query parameter to open with.",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVEL_OPTIONS,
        type=str.upper,
        default=None,
        help="Console log level (default: $PROMPTPAD_LOG_LEVEL or INFO).",
    )
    parser.add_argument(
        "--share-base",
        default=DEFAULT_SHARE_BASE,
        help="Base URL used when copying share links.",
    )
    return parser


def run(argv: list[str] | None = None) -> int:
    parsed_args, qt_args = build_arg_parser().parse_known_args(sys.argv[1:] if argv is None else argv)
    configure_app_logging(resolve_log_level(parsed_args.log_level))
    LOGGER.debug("Parsed startup args: parsed=%s qt=%s", parsed_args, qt_args)
    app = QApplication([sys.argv[0], *qt_args])
    app.setQuitOnLastWindowClosed(True)
    window = main(
        existing_app=app,
        share_link=parsed_args.share_link,
        log_level=parsed_args.log_level,
        share_base=parsed_args.share_base,
    )
    exit_code = app.exec()
    LOGGER.info("Qt event loop exited with code %s (window=%s)", exit_code, type(window).__name__)
    return exit_code


if __name__ == "__main__":
    sys.exit(run())
