"""Series assembly for live, historical and comparison views."""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterable, Optional, Tuple

from aqdash.shared.models import Sample

logger = logging.getLogger(__name__)

LIVE_WINDOW = 100

Series = Tuple[Sample, ...]


class Mode(Enum):
    """Dashboard modes."""
    LIVE = "live"
    HISTORICAL = "historical"
    COMPARE = "compare"


def chronological(samples: Iterable[Sample]) -> Series:
    """Sort samples by instant. The sort is stable, so ties keep provider order."""
    return tuple(sorted(samples, key=lambda s: s.instant))


@dataclass(frozen=True)
class SeriesSnapshot:
    """Consistent view of the active series."""
    mode: Mode
    primary: Series
    secondary: Optional[Series] = None

    @property
    def is_comparison(self) -> bool:
        return self.mode is Mode.COMPARE


class SeriesAssembler:
    """Owns the active series for the current mode.

    Live mode keeps a rolling window of the most recent samples in arrival
    order. Historical and comparison modes hold immutable tuples that are
    only ever replaced whole.
    """

    def __init__(self, mode: Mode = Mode.LIVE, live_window: int = LIVE_WINDOW):
        self.live_window = live_window
        self._mode = mode
        self._live: Deque[Sample] = deque(maxlen=live_window)
        self._primary: Series = ()
        self._secondary: Series = ()

    @property
    def mode(self) -> Mode:
        return self._mode

    def enter(self, mode: Mode) -> None:
        """Switch shape, clearing state that does not belong to the new mode."""
        previous = self._mode
        self._mode = mode

        if mode is Mode.LIVE:
            self._live = deque(maxlen=self.live_window)
            self._primary = ()
            self._secondary = ()
        else:
            self._live.clear()
            if mode is not Mode.COMPARE:
                self._secondary = ()

        if previous is not mode:
            logger.debug(f"Series assembler: {previous.value} -> {mode.value}")

    def append_live(self, sample: Sample) -> bool:
        """Append a live sample, evicting the oldest beyond the window.

        Returns False, without storing anything, outside live mode.
        """
        if self._mode is not Mode.LIVE:
            logger.debug("Ignoring live sample outside live mode")
            return False
        self._live.append(sample)
        return True

    def set_range(self, series: Iterable[Sample]) -> None:
        """Replace the historical series."""
        self._primary = chronological(series)

    def set_comparison_pair(self, primary: Iterable[Sample], secondary: Iterable[Sample]) -> None:
        """Replace both sides of the comparison pair together."""
        pair = (chronological(primary), chronological(secondary))
        self._primary, self._secondary = pair

    def snapshot(self) -> SeriesSnapshot:
        if self._mode is Mode.LIVE:
            return SeriesSnapshot(Mode.LIVE, tuple(self._live))
        if self._mode is Mode.COMPARE:
            return SeriesSnapshot(Mode.COMPARE, self._primary, self._secondary)
        return SeriesSnapshot(Mode.HISTORICAL, self._primary)

    def latest(self) -> Optional[Sample]:
        """Newest sample of the primary series, if any."""
        primary = self.snapshot().primary
        return primary[-1] if primary else None
