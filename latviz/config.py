"""Probe target configuration."""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://api.github.com"
DEFAULT_INTERVAL_MS = 5000
MIN_INTERVAL_MS = 500


def parse_interval_ms(text: str) -> int:
    """Parse user-entered interval text into milliseconds.

    Values below MIN_INTERVAL_MS are raised to the minimum, mirroring a
    numeric input field with a lower bound.

    Raises:
        ValueError: If the text is not a number.
    """
    try:
        value = int(float(text.strip()))
    except OverflowError:
        raise ValueError(f"Interval out of range: {text!r}") from None
    return max(MIN_INTERVAL_MS, value)


@dataclass(frozen=True)
class ProbeConfig:
    """Target URL and cadence for a probe run."""

    url: str = DEFAULT_URL
    interval_ms: int = DEFAULT_INTERVAL_MS

    def is_startable(self) -> bool:
        """Return True if a run may be started with this configuration."""
        return bool(self.url and self.url.strip()) and self.interval_ms > 0

    def rejection_reason(self) -> str | None:
        """Describe why this configuration cannot start a run, if it can't."""
        if not self.url or not self.url.strip():
            return "Target URL is empty"
        if self.interval_ms <= 0:
            return f"Interval must be positive, got {self.interval_ms}ms"
        return None

    @classmethod
    def from_env(cls) -> "ProbeConfig":
        """Build configuration from LATVIZ_URL and LATVIZ_INTERVAL_MS.

        Unset variables fall back to the defaults. An unparseable interval is
        logged and replaced by the default.
        """
        url = os.environ.get("LATVIZ_URL", DEFAULT_URL).strip()

        interval_text = os.environ.get("LATVIZ_INTERVAL_MS", "")
        interval_ms = DEFAULT_INTERVAL_MS
        if interval_text.strip():
            try:
                interval_ms = parse_interval_ms(interval_text)
            except ValueError:
                logger.warning(
                    "Invalid LATVIZ_INTERVAL_MS=%r, using %dms", interval_text, DEFAULT_INTERVAL_MS
                )

        return cls(url=url, interval_ms=interval_ms)
