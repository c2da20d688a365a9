"""Entry point for the latviz console runner."""

import logging
import os
import signal
import sys

from PySide6.QtCore import QCoreApplication, QTimer

from latviz.config import ProbeConfig
from latviz.history import ProbeHistory
from latviz.logging_config import configure_logging
from latviz.models import Measurement
from latviz.scheduler import ProbeScheduler

# Configure logging early
configure_logging()
logger = logging.getLogger(__name__)


def build_executor(history: ProbeHistory):
    """Pick the probe executor, honoring LATVIZ_PROBER=fake."""
    if os.environ.get("LATVIZ_PROBER", "").lower() == "fake":
        from latviz.fake_prober import FakeProbeExecutor

        logger.info("Using FakeProbeExecutor (LATVIZ_PROBER=fake)")
        return FakeProbeExecutor(history.next_id)

    from latviz.prober import HttpProbeExecutor

    return HttpProbeExecutor(history.next_id)


def install_sigusr1(callback):
    """Bind (or unbind, when callback is None) SIGUSR1 to a manual probe."""
    if not hasattr(signal, "SIGUSR1"):
        return
    if callback is None:
        signal.signal(signal.SIGUSR1, signal.SIG_DFL)
    else:
        signal.signal(signal.SIGUSR1, lambda *_: QTimer.singleShot(0, callback))


def main():
    """Main entry point for latviz."""
    app = QCoreApplication(sys.argv)

    config = ProbeConfig.from_env()
    history = ProbeHistory()
    executor = build_executor(history)
    scheduler = ProbeScheduler(executor, history=history, config=config)

    def report(measurement: Measurement):
        stats = history.current_stats()
        logger.info(
            "#%d %s latency=%dms status=%s | checks=%d avg=%dms max=%dms",
            measurement.id,
            "OK" if measurement.ok else "FAIL",
            measurement.latency_ms,
            measurement.status if measurement.status is not None else "--",
            stats.total_checks,
            stats.avg_latency_ms,
            stats.max_latency_ms,
        )

    scheduler.measurement_recorded.connect(report)

    def shutdown(*_):
        logger.info("Shutdown signal received")
        QTimer.singleShot(0, app.quit)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    # Python signal handlers only run when the interpreter gets control back
    wakeup = QTimer()
    wakeup.timeout.connect(lambda: None)
    wakeup.start(200)

    if not scheduler.start():
        logger.error("Cannot start: %s", config.rejection_reason())
        executor.close()
        return 2

    scheduler.install_trigger_hook(install_sigusr1)

    exit_code = app.exec()

    scheduler.remove_trigger_hook()
    scheduler.stop()
    scheduler.wait_for_idle(2000)
    executor.close()
    logger.info("Final stats: %s", scheduler.get_stats())
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
