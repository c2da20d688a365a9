"""Data models for latviz probe results."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RunState(Enum):
    """Lifecycle of a probe scheduler."""

    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True)
class Measurement:
    """Outcome of a single HTTP probe."""

    id: int
    timestamp: datetime  # UTC, when the probe completed
    latency_ms: int
    status: int | None  # None means no response was received
    ok: bool

    def __post_init__(self):
        """Derive ok from status: only a received 2xx response is ok."""
        if self.latency_ms < 0:
            raise ValueError("latency_ms cannot be negative")
        ok = self.status is not None and 200 <= self.status < 300
        if self.ok != ok:
            object.__setattr__(self, "ok", ok)

    @property
    def iso_timestamp(self) -> str:
        """Sortable ISO-8601 timestamp, e.g. 2024-05-01T12:00:00.123Z."""
        return self.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class HistoryStats:
    """Aggregates derived from the retained history window."""

    total_checks: int = 0
    avg_latency_ms: int = 0
    max_latency_ms: int = 0


@dataclass(frozen=True)
class HistorySnapshot:
    """Measurements (newest first) together with the stats computed from them."""

    measurements: tuple[Measurement, ...]
    stats: HistoryStats
