"""Core data models for air-quality telemetry."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class MetricSpec:
    """Display metadata for one telemetry metric."""
    key: str
    label: str
    unit: str
    color: str


# Order matters: cards and charts are laid out in this order.
METRICS: Dict[str, MetricSpec] = {
    "temperature": MetricSpec("temperature", "Temperature", "°C", "#ef4444"),
    "humidity": MetricSpec("humidity", "Humidity", "%", "#3b82f6"),
    "pm25": MetricSpec("pm25", "PM2.5", " µg/m³", "#10b981"),
    "pm10": MetricSpec("pm10", "PM10", " µg/m³", "#8b5cf6"),
    "co2": MetricSpec("co2", "CO2", " ppm", "#f59e0b"),
    "no2": MetricSpec("no2", "NO2", " ppm", "#ec4899"),
}

METRIC_KEYS: Tuple[str, ...] = tuple(METRICS)


def get_metric(key: str) -> MetricSpec:
    """Look up a metric by key, raising ValueError for unknown keys."""
    try:
        return METRICS[key]
    except KeyError:
        raise ValueError(f"Unknown metric: {key!r}") from None


def parse_instant(timestamp: str) -> datetime:
    """Parse a provider timestamp into an aware datetime.

    Accepts ISO 8601 with a trailing 'Z' or an explicit offset, and the
    space-separated 'YYYY-MM-DD HH:MM:SS' form. Naive values are UTC.
    """
    text = timestamp.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Sample:
    """One timestamped multi-metric telemetry reading.

    The timestamp is kept exactly as the provider sent it; use `instant`
    for ordering and arithmetic.
    """
    timestamp: str
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pm25: Optional[float] = None
    pm10: Optional[float] = None
    co2: Optional[float] = None
    no2: Optional[float] = None

    @property
    def instant(self) -> datetime:
        return parse_instant(self.timestamp)

    def value(self, metric: str) -> Optional[float]:
        """Return the value of one metric, None meaning no reading."""
        get_metric(metric)
        return getattr(self, metric)

    def is_empty(self) -> bool:
        """True when none of the metrics carries a value."""
        return all(getattr(self, key) is None for key in METRIC_KEYS)
