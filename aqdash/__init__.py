"""Air quality dashboard for ThingSpeak telemetry channels."""

__version__ = "0.1.0"
