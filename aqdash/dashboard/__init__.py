"""Terminal dashboard service."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from typing import Optional, Sequence

from aqdash.charts.series import Mode
from aqdash.telemetry.client import ThingSpeakClient
from .config import DashboardConfig
from .controller import (
    DashboardController,
    DateRange,
    default_comparison_ranges,
    default_historical_range,
)
from .terminal_monitor import TerminalMonitor

logger = logging.getLogger(__name__)


def _parse_datetime(value: str) -> datetime:
    """Parse an ISO date/time argument; naive values are local time."""
    try:
        return datetime.fromisoformat(value).astimezone()
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date/time: {value!r}") from None


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Air quality dashboard for a ThingSpeak channel")
    p.add_argument("--config", help="Path to YAML config file")
    p.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        default=Mode.LIVE.value,
        help="Dashboard mode (default: live)",
    )
    p.add_argument("--start", type=_parse_datetime, help="Range start (historical / first comparison range)")
    p.add_argument("--end", type=_parse_datetime, help="Range end (historical / first comparison range)")
    p.add_argument("--compare-start", type=_parse_datetime, help="Second comparison range start")
    p.add_argument("--compare-end", type=_parse_datetime, help="Second comparison range end")
    p.add_argument("--once", action="store_true", help="Render a single frame and exit")
    return p.parse_args(argv)


async def run_dashboard(config: DashboardConfig, args: argparse.Namespace) -> None:
    """Load the requested mode and keep the terminal view refreshed."""
    client = ThingSpeakClient(config.thingspeak)
    controller = DashboardController(client, config.update_interval)
    monitor = TerminalMonitor(controller, config.refresh_interval)

    mode = Mode(args.mode)
    now = datetime.now().astimezone()

    try:
        if mode is Mode.LIVE:
            if args.once:
                controller.set_mode(Mode.LIVE, poll=False)
                await controller.poll_once()
            else:
                controller.set_mode(Mode.LIVE)
        elif mode is Mode.HISTORICAL:
            default = default_historical_range(now, config.history_hours)
            await controller.load_historical(
                DateRange(args.start or default.start, args.end or default.end)
            )
        else:
            first, second = default_comparison_ranges(now, config.history_hours)
            await controller.load_comparison(
                DateRange(args.start or first.start, args.end or first.end),
                DateRange(args.compare_start or second.start, args.compare_end or second.end),
            )

        if args.once:
            monitor.update_display()
        else:
            await monitor.run()
    finally:
        await controller.close()


def main(argv: Optional[Sequence[str]] = None):
    """Entry point for the dashboard."""
    from aqdash.shared.errors import ValidationError
    from aqdash.shared.logging import setup_logging
    from .config import load_config

    args = parse_args(argv)
    config = load_config(args.config)
    setup_logging(config.log_level)

    try:
        asyncio.run(run_dashboard(config, args))
    except KeyboardInterrupt:
        pass
    except ValidationError as e:
        logger.error(f"Invalid date range: {e}")
        sys.exit(2)


__all__ = ["DashboardController", "TerminalMonitor", "main", "parse_args", "run_dashboard"]
