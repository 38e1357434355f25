"""Series assembly and chart-data reconciliation."""

from .series import LIVE_WINDOW, Mode, SeriesAssembler, SeriesSnapshot
from .reconciler import (
    AxisMode,
    ChartData,
    PointSequence,
    RenderPoint,
    SeriesStyle,
    contrasting_color,
    reconcile,
    reconcile_snapshot,
)

__all__ = [
    "LIVE_WINDOW",
    "Mode",
    "SeriesAssembler",
    "SeriesSnapshot",
    "AxisMode",
    "ChartData",
    "PointSequence",
    "RenderPoint",
    "SeriesStyle",
    "contrasting_color",
    "reconcile",
    "reconcile_snapshot",
]
