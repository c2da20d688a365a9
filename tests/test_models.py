"""Tests for latviz.models invariants."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from latviz.models import HistoryStats, Measurement, RunState


class TestMeasurement:
    """Test Measurement dataclass behavior and invariants."""

    def test_measurement_valid_success(self):
        """Test valid successful measurement."""
        ts = datetime.now(timezone.utc)
        measurement = Measurement(id=1, timestamp=ts, latency_ms=25, status=200, ok=True)

        assert measurement.id == 1
        assert measurement.timestamp == ts
        assert measurement.latency_ms == 25
        assert measurement.status == 200
        assert measurement.ok is True

    def test_measurement_valid_failure(self):
        """Test measurement for a request that never got a response."""
        measurement = Measurement(
            id=2, timestamp=datetime.now(timezone.utc), latency_ms=3, status=None, ok=False
        )

        assert measurement.status is None
        assert measurement.ok is False

    def test_post_init_no_status_forces_not_ok(self):
        """Test __post_init__ invariant: status=None forces ok=False.

        A probe with no response cannot be successful, whatever the caller said.
        """
        measurement = Measurement(
            id=1,
            timestamp=datetime.now(timezone.utc),
            latency_ms=5,
            status=None,
            ok=True,  # This should be overridden to False
        )

        assert measurement.ok is False, "When status=None, ok must be False regardless of input"

    def test_error_status_keeps_status(self):
        """Test a non-success response keeps its status code and is not ok."""
        measurement = Measurement(
            id=1, timestamp=datetime.now(timezone.utc), latency_ms=40, status=503, ok=False
        )

        assert measurement.status == 503
        assert measurement.ok is False

    @pytest.mark.parametrize("status", [301, 404, 500, 503])
    def test_post_init_non_success_status_forces_not_ok(self, status):
        """Test __post_init__ invariant: a non-2xx status can never be ok."""
        measurement = Measurement(
            id=1, timestamp=datetime.now(timezone.utc), latency_ms=12, status=status, ok=True
        )

        assert measurement.status == status
        assert measurement.ok is False

    def test_post_init_success_status_forces_ok(self):
        """Test __post_init__ invariant: a received 2xx status is ok."""
        measurement = Measurement(
            id=1, timestamp=datetime.now(timezone.utc), latency_ms=12, status=204, ok=False
        )

        assert measurement.ok is True

    def test_negative_latency_rejected(self):
        """Test latency_ms must be non-negative."""
        with pytest.raises(ValueError, match="latency_ms cannot be negative"):
            Measurement(id=1, timestamp=datetime.now(timezone.utc), latency_ms=-1, status=200, ok=True)

    def test_measurement_zero_latency(self):
        """Test measurement with zero latency (edge case)."""
        measurement = Measurement(
            id=1, timestamp=datetime.now(timezone.utc), latency_ms=0, status=204, ok=True
        )

        assert measurement.latency_ms == 0
        assert measurement.ok is True

    def test_measurement_is_immutable(self):
        """Test measurements cannot be modified after creation."""
        measurement = Measurement(
            id=1, timestamp=datetime.now(timezone.utc), latency_ms=10, status=200, ok=True
        )

        with pytest.raises(FrozenInstanceError):
            measurement.latency_ms = 20

    def test_iso_timestamp_is_sortable_utc(self):
        """Test iso_timestamp renders UTC with millisecond precision and Z suffix."""
        ts = datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
        measurement = Measurement(id=1, timestamp=ts, latency_ms=10, status=200, ok=True)

        assert measurement.iso_timestamp == "2024-05-01T12:00:00.123Z"

    def test_iso_timestamps_sort_chronologically(self):
        """Test string ordering of iso_timestamp matches time ordering."""
        earlier = datetime(2024, 5, 1, 9, 59, 59, 999000, tzinfo=timezone.utc)
        later = datetime(2024, 5, 1, 10, 0, 0, 0, tzinfo=timezone.utc)
        a = Measurement(id=1, timestamp=earlier, latency_ms=1, status=200, ok=True)
        b = Measurement(id=2, timestamp=later, latency_ms=1, status=200, ok=True)

        assert a.iso_timestamp < b.iso_timestamp


class TestHistoryStats:
    """Test HistoryStats defaults."""

    def test_defaults_are_zero(self):
        stats = HistoryStats()
        assert stats.total_checks == 0
        assert stats.avg_latency_ms == 0
        assert stats.max_latency_ms == 0


class TestRunState:
    """Test RunState enum."""

    def test_states(self):
        assert {s.value for s in RunState} == {"stopped", "running"}
