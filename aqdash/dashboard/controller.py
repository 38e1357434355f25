"""Mode and polling controller for the dashboard.

Holds the dashboard state (mode, cancellation token, poll task, latest
sample, error) and is the only caller that writes to the series assembler.
Every fetch carries the token that was current when it was issued; a
result whose token went stale while the request was in flight is dropped.
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from aqdash.charts.reconciler import ChartData, reconcile_snapshot
from aqdash.charts.series import Mode, SeriesAssembler
from aqdash.shared.errors import TransportError, ValidationError
from aqdash.shared.models import METRIC_KEYS, METRICS, Sample
from aqdash.telemetry.client import ThingSpeakClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchToken:
    """Identifies the state a fetch was issued under."""
    mode: Mode
    generation: int


@dataclass(frozen=True)
class DateRange:
    start: Optional[datetime]
    end: Optional[datetime]


@dataclass(frozen=True)
class MetricReadout:
    """Latest value of one metric for the card view."""
    key: str
    label: str
    value: Optional[float]
    unit: str
    color: str

    @property
    def display_value(self) -> str:
        return f"{self.value:.1f}" if self.value is not None else "--"


def default_historical_range(now: datetime, hours: float = 24.0) -> DateRange:
    """The last `hours` hours ending now."""
    return DateRange(start=now - timedelta(hours=hours), end=now)


def default_comparison_ranges(now: datetime, hours: float = 24.0) -> Tuple[DateRange, DateRange]:
    """The last `hours` hours, and the same span ending one day earlier."""
    compare_end = now - timedelta(days=1)
    return (
        default_historical_range(now, hours),
        DateRange(start=compare_end - timedelta(hours=hours), end=compare_end),
    )


def _check_ranges(ranges: Sequence[DateRange], missing_message: str, order_message: str) -> None:
    if any(r.start is None or r.end is None for r in ranges):
        raise ValidationError(missing_message)
    if any(r.start > r.end for r in ranges):
        raise ValidationError(order_message)


class DashboardController:
    """Drives mode changes, live polling and range loads."""

    def __init__(
        self,
        client: ThingSpeakClient,
        poll_interval: float,
        assembler: Optional[SeriesAssembler] = None,
    ):
        self.client = client
        self.poll_interval = poll_interval
        self.assembler = assembler or SeriesAssembler()

        self.latest: Optional[Sample] = None
        self.error: Optional[str] = None
        self.loading = False

        self._mode: Optional[Mode] = None
        self._generation = 0
        self._poll_task: Optional[asyncio.Task] = None

    @property
    def mode(self) -> Optional[Mode]:
        return self._mode

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def set_mode(self, mode: Mode, poll: bool = True) -> None:
        """Transition to `mode`.

        Leaving live cancels the poll task; entering live resets the series
        and starts a single poll task (unless `poll` is False, for one-shot
        use with poll_once). Re-entering the active mode changes nothing.
        Must be called from a running event loop.
        """
        if mode is self._mode:
            if mode is Mode.LIVE and poll:
                self._ensure_polling()
            return

        previous = self._mode
        self._generation += 1
        self._mode = mode
        self.error = None
        # Loads issued under the old generation can no longer clear this
        self.loading = False

        if previous is Mode.LIVE:
            self._stop_polling()

        self.assembler.enter(mode)
        logger.info(f"Mode changed: {previous.value if previous else 'none'} -> {mode.value}")

        if mode is Mode.LIVE and poll:
            self._ensure_polling()

    def _issue_token(self, supersede: bool = False) -> FetchToken:
        # A new range load supersedes any older load still in flight
        if supersede:
            self._generation += 1
        return FetchToken(self._mode, self._generation)

    def _is_current(self, token: FetchToken) -> bool:
        return token.mode is self._mode and token.generation == self._generation

    def _ensure_polling(self) -> None:
        if self.is_polling:
            return
        self._poll_task = asyncio.create_task(self._poll_loop())

    def _stop_polling(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None
            logger.debug("Live polling stopped")

    async def _poll_loop(self) -> None:
        logger.info(f"Live polling every {self.poll_interval:g}s")
        while True:
            try:
                await self.poll_once()
            except Exception as e:
                logger.error(f"Live poll failed: {e}")
            await asyncio.sleep(self.poll_interval)

    async def poll_once(self) -> bool:
        """Fetch the latest sample and append it to the live window.

        Returns True if a sample was committed.
        """
        token = self._issue_token()
        self.error = None
        try:
            sample = await self.client.get_latest()
        except TransportError as e:
            if self._is_current(token):
                self.error = str(e)
            logger.error(f"Error loading latest data: {e}")
            return False

        if not self._is_current(token):
            logger.debug("Discarding latest sample fetched before a mode change")
            return False
        if sample is None:
            return False

        if not self.assembler.append_live(sample):
            return False
        self.latest = sample
        return True

    async def load_historical(self, date_range: DateRange) -> bool:
        """Load one date range into historical mode.

        Returns True if the range was committed. On a transport failure the
        previous series stays in place and `error` is set.

        Raises:
            ValidationError: If a bound is missing or start is after end.
        """
        self.set_mode(Mode.HISTORICAL)
        self.error = None
        try:
            _check_ranges(
                [date_range],
                "Please select both start and end dates",
                "Start date must be before end date",
            )
        except ValidationError as e:
            self.error = str(e)
            raise

        token = self._issue_token(supersede=True)
        self.loading = True
        try:
            samples = await self.client.get_range(date_range.start, date_range.end)
        except TransportError as e:
            if self._is_current(token):
                self.error = str(e)
            logger.error(f"Error loading historical data: {e}")
            return False
        finally:
            if self._is_current(token):
                self.loading = False

        if not self._is_current(token):
            logger.info("Discarding historical range superseded while loading")
            return False

        self.assembler.set_range(samples)
        if samples:
            self.latest = self.assembler.latest()
        return True

    async def load_comparison(self, first: DateRange, second: DateRange) -> bool:
        """Load two date ranges into comparison mode.

        Both ranges are fetched concurrently and committed together; if
        either fetch fails, nothing changes.

        Raises:
            ValidationError: If any bound is missing or a start is after its end.
        """
        self.set_mode(Mode.COMPARE)
        self.error = None
        try:
            _check_ranges(
                [first, second],
                "Please select all date ranges for comparison",
                "Start date must be before end date for both ranges",
            )
        except ValidationError as e:
            self.error = str(e)
            raise

        token = self._issue_token(supersede=True)
        self.loading = True
        try:
            primary, secondary = await asyncio.gather(
                self.client.get_range(first.start, first.end),
                self.client.get_range(second.start, second.end),
            )
        except TransportError as e:
            if self._is_current(token):
                self.error = str(e)
            logger.error(f"Error loading comparison data: {e}")
            return False
        finally:
            if self._is_current(token):
                self.loading = False

        if not self._is_current(token):
            logger.info("Discarding comparison ranges superseded while loading")
            return False

        self.assembler.set_comparison_pair(primary, secondary)
        if primary:
            self.latest = self.assembler.latest()
        return True

    def chart_data(self, metric: str) -> ChartData:
        return reconcile_snapshot(self.assembler.snapshot(), metric)

    def all_chart_data(self) -> List[ChartData]:
        # One snapshot so every chart reflects the same state
        snapshot = self.assembler.snapshot()
        return [reconcile_snapshot(snapshot, key) for key in METRIC_KEYS]

    def metric_readouts(self) -> List[MetricReadout]:
        sample = self.latest
        return [
            MetricReadout(
                key=spec.key,
                label=spec.label,
                value=sample.value(spec.key) if sample else None,
                unit=spec.unit,
                color=spec.color,
            )
            for spec in METRICS.values()
        ]

    async def close(self) -> None:
        """Stop polling and wait for the poll task to finish."""
        task = self._poll_task
        self._stop_polling()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
