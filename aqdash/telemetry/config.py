"""ThingSpeak channel configuration."""

from dataclasses import dataclass, field
from typing import Dict, Mapping

from aqdash.shared.models import METRIC_KEYS

DEFAULT_BASE_URL = "https://api.thingspeak.com"

# Hard cap ThingSpeak applies to a single feeds.json request.
MAX_RESULTS = 8000

# ThingSpeak channels expose field1..field8.
MIN_FIELD_INDEX = 1
MAX_FIELD_INDEX = 8


def default_field_mappings() -> Dict[str, int]:
    return {
        "temperature": 2,
        "humidity": 3,
        "pm25": 5,
        "pm10": 6,
        "co2": 1,
        "no2": 4,
    }


def validate_field_mappings(mappings: Mapping[str, int]) -> Dict[str, int]:
    """Check a metric -> field index mapping and return a clean copy.

    Raises:
        ValueError: If a metric is missing, unknown, or mapped out of range.
    """
    unknown = sorted(set(mappings) - set(METRIC_KEYS))
    if unknown:
        raise ValueError(f"Unknown metrics in field_mappings: {', '.join(unknown)}")

    missing = [key for key in METRIC_KEYS if key not in mappings]
    if missing:
        raise ValueError(f"field_mappings is missing: {', '.join(missing)}")

    cleaned: Dict[str, int] = {}
    for key in METRIC_KEYS:
        try:
            index = int(mappings[key])
        except (ValueError, TypeError):
            raise ValueError(f"field_mappings['{key}'] must be an integer") from None
        if not MIN_FIELD_INDEX <= index <= MAX_FIELD_INDEX:
            raise ValueError(
                f"field_mappings['{key}'] must be between {MIN_FIELD_INDEX} and {MAX_FIELD_INDEX}, got {index}"
            )
        cleaned[key] = index
    return cleaned


@dataclass
class ThingSpeakConfig:
    """Connection settings for one ThingSpeak channel."""
    channel_id: str = ""
    read_api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    field_mappings: Dict[str, int] = field(default_factory=default_field_mappings)
    results_cap: int = MAX_RESULTS
    request_timeout: float = 10.0  # seconds

    def __post_init__(self):
        self.field_mappings = validate_field_mappings(self.field_mappings)
        self.results_cap = max(1, min(int(self.results_cap), MAX_RESULTS))

    @classmethod
    def from_dict(cls, data: dict) -> "ThingSpeakConfig":
        """Create config from dictionary."""
        return cls(
            channel_id=str(data.get("channel_id", "")),
            read_api_key=str(data.get("read_api_key", "")),
            base_url=data.get("base_url", DEFAULT_BASE_URL),
            field_mappings=data.get("field_mappings") or default_field_mappings(),
            results_cap=data.get("results_cap", MAX_RESULTS),
            request_timeout=data.get("request_timeout", 10.0),
        )
