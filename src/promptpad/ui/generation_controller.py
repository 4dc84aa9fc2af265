from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import QObject, QThread, QTimer, Signal
from PySide6.QtWidgets import QMessageBox

from promptpad.core.generation import PreparedRequest, PromptGenerator
from promptpad.logging_utils import get_logger

_LOGGER = get_logger(__name__)


class _GenerateStreamWorker(QObject):
    chunk = Signal(str)
    finished = Signal(bool)
    failed = Signal(str)

    def __init__(self, generator: PromptGenerator, prepared: PreparedRequest) -> None:
        super().__init__()
        self.generator = generator
        self.prepared = prepared

    def run(self) -> None:
        _LOGGER.debug("Stream worker run start url=%s", self.prepared.url)
        received = 0
        try:
            for piece in self.generator.stream(self.prepared):
                received += 1
                self.chunk.emit(piece)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.exception("Stream worker failed url=%s", self.prepared.url)
            self.failed.emit(str(exc) or exc.__class__.__name__)
            return
        _LOGGER.debug("Stream worker finished deltas=%d", received)
        self.finished.emit(received > 0)


class GenerationController:
    """Runs one streaming generate at a time on a worker thread.

    The worker only reads the response; every buffer and state change is
    marshalled back onto the UI thread.
    """

    def __init__(self, window, generator: PromptGenerator) -> None:
        self.window = window
        self.generator = generator
        self._threads: list[QThread] = []
        self._active_worker: _GenerateStreamWorker | None = None

    def generate(self) -> bool:
        try:
            prepared = self.generator.begin()
        except Exception as exc:  # noqa: BLE001
            _LOGGER.exception("Failed to prepare generate request")
            self._show_failure(self.generator.fail(str(exc)))
            return False
        if prepared is None:
            return False

        thread = QThread(self.window)
        worker = _GenerateStreamWorker(self.generator, prepared)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)

        def _run_ui(action: Callable[[], None]) -> None:
            # Worker signals reach Python callables on the worker thread; hop to the UI thread.
            QTimer.singleShot(0, self.window, action)

        worker.chunk.connect(lambda piece: _run_ui(lambda piece=piece: self.generator.apply_delta(piece)))
        worker.finished.connect(
            lambda received: _run_ui(lambda received=received: self._on_finished(prepared, received))
        )
        worker.failed.connect(lambda message: _run_ui(lambda message=message: self._on_failed(message)))
        worker.finished.connect(thread.quit)
        worker.failed.connect(thread.quit)
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(lambda: self._cleanup_thread(thread))
        self._threads.append(thread)
        self._active_worker = worker
        self.window.show_status_message(f"Generating ({prepared.body.get('model', '')})...", 0)
        thread.start()
        return True

    def _on_finished(self, prepared: PreparedRequest, received: bool) -> None:
        self.generator.complete(prepared, received)
        self.window.show_status_message("Generation finished.", 3000)

    def _on_failed(self, message: str) -> None:
        self._show_failure(self.generator.fail(message))

    def _show_failure(self, text: str) -> None:
        self.window.show_status_message(text, 5000)
        QMessageBox.warning(self.window, "Generate", text)

    def _cleanup_thread(self, thread: QThread) -> None:
        if thread in self._threads:
            self._threads.remove(thread)
        self._active_worker = None
        thread.deleteLater()
