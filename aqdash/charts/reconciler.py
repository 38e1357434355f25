"""Time-axis reconciliation.

Turns one series, or a comparison pair, into chart-ready point sequences.
A single series is plotted on absolute time. A comparison pair is plotted
on elapsed time: each side is re-based on its own first sample so two
unrelated calendar ranges line up on one axis, while every point keeps its
original timestamp for display.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from aqdash.shared.models import MetricSpec, Sample, get_metric
from .series import SeriesSnapshot

logger = logging.getLogger(__name__)

FALLBACK_CONTRAST_COLOR = "#9333ea"

CONTRAST_COLORS: Dict[str, str] = {
    "#ef4444": "#3b82f6",  # red -> blue
    "#3b82f6": "#ef4444",  # blue -> red
    "#10b981": "#f59e0b",  # green -> orange
    "#8b5cf6": "#10b981",  # purple -> green
    "#f59e0b": "#8b5cf6",  # orange -> purple
    "#ec4899": "#10b981",  # pink -> green
}

COMPARISON_DASH: Tuple[int, ...] = (5, 5)

_ONE_MS = timedelta(milliseconds=1)


class AxisMode(Enum):
    ABSOLUTE = "absolute"
    ELAPSED = "elapsed"


@dataclass(frozen=True)
class RenderPoint:
    """One plotted point. y of None is a gap, not zero."""
    x: Union[datetime, int]
    y: Optional[float]
    original_timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class SeriesStyle:
    color: str
    dash: Tuple[int, ...] = ()
    width: float = 2.0
    fill: bool = False


@dataclass(frozen=True)
class PointSequence:
    label: str
    points: Tuple[RenderPoint, ...]
    style: SeriesStyle


@dataclass(frozen=True)
class ChartData:
    """Everything a renderer needs to draw one metric chart."""
    point_sequences: Tuple[PointSequence, ...]
    axis_mode: AxisMode
    metric_unit: str
    metric_label: str
    metric_key: str = ""

    @property
    def has_points(self) -> bool:
        return any(seq.points for seq in self.point_sequences)


def contrasting_color(hex_color: str) -> str:
    """Pick the comparison color paired with a primary color."""
    return CONTRAST_COLORS.get(hex_color.lower(), FALLBACK_CONTRAST_COLOR)


def _check_samples(samples: Sequence[Sample]) -> None:
    for sample in samples:
        if not isinstance(sample, Sample):
            raise TypeError(f"Series items must be Sample, got {type(sample).__name__}")


def absolute_points(samples: Sequence[Sample], metric: str) -> Tuple[RenderPoint, ...]:
    """Points with x at each sample's absolute instant."""
    return tuple(RenderPoint(x=s.instant, y=s.value(metric)) for s in samples)


def elapsed_points(samples: Sequence[Sample], metric: str) -> Tuple[RenderPoint, ...]:
    """Points with x in milliseconds since the series' own first sample.

    Out-of-order input yields negative x values; they are kept as-is.
    """
    if not samples:
        return ()

    t0 = samples[0].instant
    points: List[RenderPoint] = []
    for sample in samples:
        instant = sample.instant
        x = (instant - t0) // _ONE_MS
        points.append(RenderPoint(x=x, y=sample.value(metric), original_timestamp=instant))

    negative = sum(1 for p in points if p.x < 0)
    if negative:
        logger.warning(
            f"{negative} of {len(points)} points precede the first sample; series is not chronological"
        )
    return tuple(points)


def _single_chart(spec: MetricSpec, samples: Sequence[Sample]) -> ChartData:
    sequence = PointSequence(
        label=spec.label,
        points=absolute_points(samples, spec.key),
        style=SeriesStyle(color=spec.color, width=2.0, fill=True),
    )
    return ChartData(
        point_sequences=(sequence,),
        axis_mode=AxisMode.ABSOLUTE,
        metric_unit=spec.unit,
        metric_label=spec.label,
        metric_key=spec.key,
    )


def _comparison_chart(spec: MetricSpec, primary: Sequence[Sample], secondary: Sequence[Sample]) -> ChartData:
    first = PointSequence(
        label=f"{spec.label} (Range 1)",
        points=elapsed_points(primary, spec.key),
        style=SeriesStyle(color=spec.color, width=2.5),
    )
    second = PointSequence(
        label=f"{spec.label} (Range 2)",
        points=elapsed_points(secondary, spec.key),
        style=SeriesStyle(color=contrasting_color(spec.color), dash=COMPARISON_DASH, width=2.5),
    )
    return ChartData(
        point_sequences=(first, second),
        axis_mode=AxisMode.ELAPSED,
        metric_unit=spec.unit,
        metric_label=spec.label,
        metric_key=spec.key,
    )


def reconcile(
    metric: str,
    primary: Sequence[Sample],
    secondary: Optional[Sequence[Sample]] = None,
    comparison: bool = False,
) -> ChartData:
    """Build chart data for one metric.

    Args:
        metric: Metric key, e.g. 'pm25'.
        primary: Chronological samples of the main range.
        secondary: Chronological samples of the second range.
        comparison: Whether comparison mode is active. This alone picks the
            elapsed axis; an empty or missing secondary still compares.

    Raises:
        ValueError: For an unknown metric key.
        TypeError: If a series holds something other than Samples.
    """
    spec = get_metric(metric)
    _check_samples(primary)
    if secondary is not None:
        _check_samples(secondary)

    if comparison:
        return _comparison_chart(spec, primary, secondary or ())
    return _single_chart(spec, primary)


def reconcile_snapshot(snapshot: SeriesSnapshot, metric: str) -> ChartData:
    return reconcile(metric, snapshot.primary, snapshot.secondary, comparison=snapshot.is_comparison)


def axis_title(axis_mode: AxisMode) -> str:
    return "Elapsed Time" if axis_mode is AxisMode.ELAPSED else "Time"


def format_elapsed(milliseconds: int) -> str:
    """Format an elapsed-axis tick as HH:MM."""
    sign = "-" if milliseconds < 0 else ""
    total_minutes = int(abs(milliseconds) // 60000)
    hours, minutes = divmod(total_minutes, 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def format_instant(moment: datetime) -> str:
    """Format an absolute instant in local time for point inspection."""
    return moment.astimezone().strftime("%b %d, %Y, %I:%M:%S %p")


def format_x(point: RenderPoint, axis_mode: AxisMode) -> str:
    if axis_mode is AxisMode.ELAPSED:
        return format_elapsed(point.x)
    return format_instant(point.x)


def format_value(value: Optional[float], unit: str = "") -> str:
    """Format a point value with two decimals, or '--' for a gap."""
    if value is None:
        return "--"
    return f"{value:.2f}{unit}"
