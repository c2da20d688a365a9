"""Simulated probe executor for offline runs and testing."""

import random
from datetime import datetime, timezone

from latviz.models import Measurement
from latviz.prober import IdSource


class FakeProbeExecutor:
    """Generates plausible probe measurements without touching the network."""

    def __init__(self, id_source: IdSource, seed: int | None = None):
        """Initialize with an id source and optional seed for deterministic behavior."""
        self._id_source = id_source
        # Isolated random instance; workers call this from pool threads
        self._random = random.Random(seed)

        # Simulation parameters
        self.base_latency = 120.0  # Base latency in ms
        self.latency_variance = 25.0
        self.spike_probability = 0.05
        self.spike_multiplier = 4.0
        self.failure_probability = 0.02  # No response at all
        self.error_status_probability = 0.03  # Response, but 5xx
        self.calls = 0

    def execute_probe(self, url: str) -> Measurement:
        """Simulate one probe of url."""
        self.calls += 1

        if self._random.random() < self.failure_probability:
            latency = self._random.uniform(0, self.base_latency)
            return self._measurement(latency, status=None)

        if self._random.random() < self.spike_probability:
            latency = self.base_latency * self.spike_multiplier + self._random.gauss(
                0, self.latency_variance
            )
        else:
            latency = self.base_latency + self._random.gauss(0, self.latency_variance)

        if self._random.random() < self.error_status_probability:
            status = 503
        else:
            status = 200

        return self._measurement(latency, status=status)

    def _measurement(self, latency: float, status: int | None) -> Measurement:
        return Measurement(
            id=self._id_source(),
            timestamp=datetime.now(timezone.utc),
            latency_ms=max(0, round(latency)),
            status=status,
            ok=status is not None and 200 <= status < 300,
        )

    def close(self):
        pass
