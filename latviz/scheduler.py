"""Single-target probe scheduler."""

import logging
from dataclasses import replace
from typing import Callable

from PySide6.QtCore import QCoreApplication, QObject, QThreadPool, QTimer, Signal

from latviz.config import ProbeConfig
from latviz.history import ProbeHistory
from latviz.models import Measurement, RunState
from latviz.prober import ProbeExecutor
from latviz.workers import ProbeWorker

logger = logging.getLogger(__name__)

TriggerInstaller = Callable[[Callable[[], None] | None], None]


class ProbeScheduler(QObject):
    """Fires probes against one target at a fixed cadence and records the results.

    Key behavior:
    - start() fires one probe immediately, then arms a recurring timer
    - Exactly one timer exists; re-arming restarts it rather than adding another
    - Interval changes while running re-arm the timer with the new period
    - URL changes only affect probes fired after the change
    - Probes are not serialized: a slow probe may overlap the next tick, and
      both results are recorded in completion order
    - stop() halts the timer but lets in-flight probes finish and record

    All state lives on the thread that owns the scheduler; workers report back
    through queued signals.
    """

    # Signals
    state_changed = Signal(object)  # RunState
    config_changed = Signal(object)  # ProbeConfig
    measurement_recorded = Signal(object)  # Measurement
    start_rejected = Signal(str)  # reason
    error = Signal(str, str)  # (url, error_msg)

    def __init__(
        self,
        executor: ProbeExecutor,
        history: ProbeHistory,
        config: ProbeConfig | None = None,
        max_threads: int = 16,
        parent=None,
    ):
        """Initialize probe scheduler.

        Args:
            executor: Probe executor used for every fire
            history: History that receives measurements. It must be the history
                     whose next_id the executor draws ids from.
            config: Initial target configuration (defaults if omitted)
            max_threads: Upper bound on simultaneously running probes
            parent: Qt parent object
        """
        super().__init__(parent)

        self.executor = executor
        self.history = history
        self._config = config if config is not None else ProbeConfig()
        self._run_state = RunState.STOPPED

        # Diagnostics
        self._in_flight = 0
        self._fired = 0

        # Manual trigger hook installer, if any
        self._trigger_installer = None

        # Threading
        self.thread_pool = QThreadPool(self)
        self.thread_pool.setMaxThreadCount(max_threads)

        # Timer for periodic probing
        self.timer = QTimer(self)
        self.timer.timeout.connect(self._on_tick)

    # Read surface

    @property
    def run_state(self) -> RunState:
        return self._run_state

    @property
    def is_running(self) -> bool:
        return self._run_state is RunState.RUNNING

    @property
    def config(self) -> ProbeConfig:
        return self._config

    # Lifecycle

    def start(self) -> bool:
        """Start probing.

        Returns:
            True if the scheduler transitioned to RUNNING, False if it was
            already running or the configuration is not startable.
        """
        if self.is_running:
            return False

        reason = self._config.rejection_reason()
        if reason is not None:
            logger.warning("Start rejected: %s", reason)
            self.start_rejected.emit(reason)
            return False

        self._set_run_state(RunState.RUNNING)
        logger.info(
            "Probing started: url=%s, interval=%dms", self._config.url, self._config.interval_ms
        )

        # Immediate first fire, then the recurring cadence
        self._fire()
        self.timer.start(self._config.interval_ms)
        return True

    def stop(self) -> bool:
        """Stop probing. In-flight probes still complete and record.

        Returns:
            True if the scheduler transitioned to STOPPED.
        """
        if not self.is_running:
            return False

        self.timer.stop()
        self._set_run_state(RunState.STOPPED)
        logger.info("Probing stopped (in-flight: %d)", self._in_flight)
        return True

    # Configuration

    def set_url(self, url: str):
        """Change the target URL. Takes effect on the next fire."""
        self._apply_config(replace(self._config, url=url.strip()))

    def set_interval(self, interval_ms: int):
        """Change the cadence. While running, the timer is re-armed immediately.

        Args:
            interval_ms: New interval in milliseconds
        """
        self._apply_config(replace(self._config, interval_ms=interval_ms))

    def set_config(self, config: ProbeConfig):
        """Replace URL and interval at once."""
        self._apply_config(replace(config, url=config.url.strip()))

    def _apply_config(self, config: ProbeConfig):
        if config == self._config:
            return

        interval_changed = config.interval_ms != self._config.interval_ms
        self._config = config
        logger.debug("Config updated: url=%s, interval=%dms", config.url, config.interval_ms)

        if interval_changed and self.is_running:
            if config.interval_ms > 0:
                self.timer.start(config.interval_ms)  # restarts the single timer
                logger.debug("Timer re-armed: %dms", config.interval_ms)
            else:
                logger.warning(
                    "Ignoring non-positive interval while running: %dms", config.interval_ms
                )

        self.config_changed.emit(config)

    # Manual trigger

    def trigger_probe(self):
        """Run one probe outside the normal cadence without touching run state."""
        logger.debug("Manual probe triggered: url=%s", self._config.url)
        self._fire()

    def install_trigger_hook(self, installer: TriggerInstaller):
        """Expose trigger_probe to an external agent.

        The installer is called with trigger_probe now, and with None when the
        hook is removed.
        """
        self.remove_trigger_hook()
        self._trigger_installer = installer
        installer(self.trigger_probe)
        logger.debug("Manual trigger hook installed")

    def remove_trigger_hook(self):
        """Withdraw a previously installed trigger hook."""
        if self._trigger_installer is None:
            return
        installer = self._trigger_installer
        self._trigger_installer = None
        installer(None)
        logger.debug("Manual trigger hook removed")

    # Internals

    def _set_run_state(self, state: RunState):
        if state is self._run_state:
            return
        self._run_state = state
        self.state_changed.emit(state)

    def _on_tick(self):
        """Handle timer tick."""
        if not self.is_running:
            return
        self._fire()

    def _fire(self):
        """Dispatch one probe of the current URL to the thread pool."""
        url = self._config.url
        self._in_flight += 1
        self._fired += 1

        worker = ProbeWorker(self.executor, url)
        worker.signals.measurement_ready.connect(self._on_measurement_ready)
        worker.signals.error.connect(self._on_probe_error)
        worker.signals.finished.connect(self._on_probe_finished)

        self.thread_pool.start(worker)

    def _on_measurement_ready(self, measurement: Measurement):
        """Record a completed probe, whether or not the scheduler is still running."""
        self.history.record(measurement)
        self.measurement_recorded.emit(measurement)

    def _on_probe_error(self, url: str, error_msg: str):
        logger.error("Probe worker failed: url=%s, error=%s", url, error_msg)
        self.error.emit(url, error_msg)

    def _on_probe_finished(self):
        self._in_flight = max(0, self._in_flight - 1)
        logger.debug("Probe finished (in-flight: %d)", self._in_flight)

    def wait_for_idle(self, timeout_ms: int = 5000) -> bool:
        """Wait for in-flight probes and deliver their results.

        Returns:
            True if all workers finished within the timeout.
        """
        done = self.thread_pool.waitForDone(timeout_ms)
        QCoreApplication.processEvents()
        return done

    def get_stats(self):
        """Get scheduler statistics.

        Returns:
            Dict with scheduler state info
        """
        return {
            "state": self._run_state.value,
            "url": self._config.url,
            "interval_ms": self._config.interval_ms,
            "in_flight": self._in_flight,
            "fired": self._fired,
            "retained": len(self.history),
        }
