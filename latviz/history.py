"""Bounded measurement history with live aggregate statistics."""

import itertools
import logging
import threading
from collections import deque

from PySide6.QtCore import QObject, Signal

from latviz.models import HistorySnapshot, HistoryStats, Measurement

logger = logging.getLogger(__name__)

MAX_MEASUREMENTS = 100


def round_half_up(total: int, count: int) -> int:
    """Round total/count to the nearest int, halves away from zero.

    Exact for the non-negative integer latencies kept in history.
    """
    return (2 * total + count) // (2 * count)


def compute_stats(measurements) -> HistoryStats:
    """Derive count, average and max latency from a sequence of measurements."""
    count = len(measurements)
    if count == 0:
        return HistoryStats()

    latencies = [m.latency_ms for m in measurements]
    return HistoryStats(
        total_checks=count,
        avg_latency_ms=round_half_up(sum(latencies), count),
        max_latency_ms=max(latencies),
    )


class ProbeHistory(QObject):
    """Most-recent-first collection of measurements, capped at max_size.

    Owns the measurement id counter. All mutation and reads go through a lock,
    so stats are always computed from a single consistent snapshot even when
    workers record from other threads.
    """

    changed = Signal()
    measurement_added = Signal(object)  # Measurement

    def __init__(self, max_size: int = MAX_MEASUREMENTS, parent=None):
        super().__init__(parent)
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self._max_size = max_size
        self._measurements = deque()  # index 0 is newest
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self):
        with self._lock:
            return len(self._measurements)

    def next_id(self) -> int:
        """Allocate the next measurement id. Ids are never reused."""
        with self._id_lock:
            return next(self._ids)

    def record(self, measurement: Measurement):
        """Prepend a measurement, evicting the oldest entries beyond max_size."""
        with self._lock:
            self._measurements.appendleft(measurement)
            evicted = 0
            while len(self._measurements) > self._max_size:
                self._measurements.pop()
                evicted += 1

        logger.debug(
            "Recorded measurement id=%d latency=%dms status=%s (evicted %d)",
            measurement.id,
            measurement.latency_ms,
            measurement.status,
            evicted,
        )
        self.measurement_added.emit(measurement)
        self.changed.emit()

    def measurements(self) -> tuple[Measurement, ...]:
        """Return retained measurements, newest first."""
        with self._lock:
            return tuple(self._measurements)

    def current_stats(self) -> HistoryStats:
        """Stats over the retained window only, not every measurement ever taken."""
        with self._lock:
            return compute_stats(self._measurements)

    def snapshot(self) -> HistorySnapshot:
        """Measurements and the stats derived from them, taken atomically."""
        with self._lock:
            measurements = tuple(self._measurements)
        return HistorySnapshot(measurements=measurements, stats=compute_stats(measurements))

    def reset(self):
        """Drop all retained measurements. The id counter keeps counting."""
        with self._lock:
            if not self._measurements:
                return
            self._measurements.clear()
        logger.debug("History reset")
        self.changed.emit()
