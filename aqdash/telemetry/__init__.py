"""Telemetry access: ThingSpeak client and sample normalization."""

from .client import ThingSpeakClient
from .config import ThingSpeakConfig
from .normalizer import normalize_feed, normalize_latest, normalize_record

__all__ = [
    "ThingSpeakClient",
    "ThingSpeakConfig",
    "normalize_feed",
    "normalize_latest",
    "normalize_record",
]
