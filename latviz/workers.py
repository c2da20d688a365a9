"""Worker classes for background probe tasks."""

import logging

from PySide6.QtCore import QObject, QRunnable, Signal

from latviz.prober import ProbeExecutor

logger = logging.getLogger(__name__)


class WorkerSignals(QObject):
    """Signals for communicating between worker threads and main thread."""

    measurement_ready = Signal(object)  # Emits Measurement
    error = Signal(str, str)  # Emits (url, error message)
    finished = Signal()  # Emits when worker completes


class ProbeWorker(QRunnable):
    """Worker that executes executor.execute_probe() in a background thread."""

    def __init__(self, executor: ProbeExecutor, url: str):
        super().__init__()
        self.executor = executor
        self.url = url
        self.signals = WorkerSignals()

    def run(self):
        """Execute the probe in a background thread."""
        try:
            logger.debug("Worker starting: url=%s", self.url)

            # Blocking network call
            measurement = self.executor.execute_probe(self.url)

            self.signals.measurement_ready.emit(measurement)

            logger.debug(
                "Worker completed: url=%s, id=%d, ok=%s",
                self.url,
                measurement.id,
                measurement.ok,
            )

        except Exception as e:
            # Executors contain their own failures; this only catches broken ones
            logger.exception("Worker exception: url=%s, error=%s", self.url, str(e))
            self.signals.error.emit(self.url, str(e))

        finally:
            self.signals.finished.emit()
