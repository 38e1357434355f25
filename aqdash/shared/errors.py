"""Error taxonomy for the dashboard.

Transport failures keep live polling alive, validation failures stop an
operation before any request goes out, and malformed payloads are logged
and treated as empty results.
"""


class DashboardError(Exception):
    """Base class for dashboard errors."""

    pass


class TransportError(DashboardError):
    """Raised when a telemetry request fails (network, timeout or HTTP status)."""

    pass


class ValidationError(DashboardError):
    """Raised when a user-supplied date range is missing or inverted."""

    pass


class DataShapeError(DashboardError):
    """Raised when a provider payload lacks the expected structure."""

    pass
