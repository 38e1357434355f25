"""
Terminal Monitor for the Air Quality Dashboard
Full-screen terminal interface using Rich library.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from aqdash.charts.reconciler import AxisMode, ChartData, axis_title, format_value, format_x
from aqdash.charts.series import Mode
from .controller import DashboardController, MetricReadout

logger = logging.getLogger(__name__)

TITLE = "AIR QUALITY MONITORING DASHBOARD"

MODE_TITLES = {
    Mode.LIVE: "Live Mode",
    Mode.HISTORICAL: "Historical Mode",
    Mode.COMPARE: "Compare Dates",
}


class TerminalMonitor:
    """Terminal-based dashboard view using Rich"""

    def __init__(
        self,
        controller: DashboardController,
        refresh_interval: float = 1.0,
        console: Optional[Console] = None,
    ):
        self.controller = controller
        self.refresh_interval = refresh_interval
        self.console = console or Console()

    def update_display(self):
        """Redraw the display with the current dashboard state"""
        try:
            layout = self.create_layout()
            self.console.clear()
            self.console.print(layout)
        except Exception as e:
            logger.error(f"Display update failed: {e}")
            self._show_error_display(str(e))

    async def run(self):
        """Redraw every refresh_interval seconds until cancelled"""
        while True:
            self.update_display()
            await asyncio.sleep(self.refresh_interval)

    def create_layout(self) -> Layout:
        """Create the main display layout"""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="metrics", size=5),
            Layout(name="charts"),
            Layout(name="status", size=5),
        )

        layout["header"].update(self._create_header())
        layout["metrics"].update(self.create_metrics_panel(self.controller.metric_readouts()))
        layout["charts"].update(self.create_charts_panel(self.controller.all_chart_data()))
        layout["status"].update(self._create_status_panel())

        return layout

    def _create_header(self) -> Panel:
        """Create header with title, clock and mode"""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        mode = self.controller.mode

        header_text = Text()
        header_text.append(TITLE, style="bold cyan")
        header_text.append(f" - {timestamp}", style="white")
        if mode is not None:
            header_text.append(f" - {MODE_TITLES[mode]}", style="bold green" if mode is Mode.LIVE else "yellow")

        return Panel(Align.center(header_text), style="cyan")

    def create_metrics_panel(self, readouts: List[MetricReadout]) -> Panel:
        """One column per metric, like a row of metric cards"""
        table = Table(show_header=True, header_style="bold cyan", box=None, expand=True)
        for readout in readouts:
            table.add_column(readout.label.upper(), justify="center")

        table.add_row(
            *[
                Text(f"{r.display_value}{r.unit if r.value is not None else ''}", style=f"bold {r.color}")
                for r in readouts
            ]
        )
        return Panel(table, title="LATEST READINGS", style="cyan")

    def create_charts_panel(self, charts: List[ChartData]) -> Panel:
        """Summarize each chart's point sequences"""
        if not any(chart.has_points for chart in charts):
            return Panel(
                Align.center(Text(self._empty_message(), style="white")),
                title="TRENDS",
                style="cyan",
            )

        axis_mode = charts[0].axis_mode
        title = "COMPARISON: DATE RANGE 1 VS DATE RANGE 2" if axis_mode is AxisMode.ELAPSED else "HISTORICAL TRENDS"

        table = Table(show_header=True, header_style="bold cyan", box=None, expand=True)
        table.add_column("Series", style="white")
        table.add_column("Points", justify="right")
        table.add_column(f"{axis_title(axis_mode)} (first)", style="white")
        table.add_column(f"{axis_title(axis_mode)} (last)", style="white")
        table.add_column("Last value", justify="right")

        for chart in charts:
            for sequence in chart.point_sequences:
                points = sequence.points
                if points:
                    last_value = next((p.y for p in reversed(points) if p.y is not None), None)
                    table.add_row(
                        sequence.label,
                        str(len(points)),
                        format_x(points[0], chart.axis_mode),
                        format_x(points[-1], chart.axis_mode),
                        format_value(last_value, chart.metric_unit),
                        style=sequence.style.color,
                    )
                else:
                    table.add_row(sequence.label, "0", "---", "---", "--", style="dim")

        return Panel(table, title=title, style="cyan")

    def _empty_message(self) -> str:
        mode = self.controller.mode
        if mode is Mode.LIVE:
            return "Waiting for live data..."
        if mode is Mode.HISTORICAL:
            return "Select a date range and load data to view historical trends"
        return "No data available"

    def _create_status_panel(self) -> Panel:
        """Live indicator, loading state and the current error"""
        content = Text()
        controller = self.controller

        if controller.mode is Mode.LIVE:
            content.append("● ", style="bold green")
            content.append(f"Live data updating every {controller.poll_interval:g} seconds", style="green")
        elif controller.loading:
            content.append("Loading...", style="yellow")
        else:
            content.append("✓ Ready", style="green")

        if controller.error:
            content.append("\n")
            content.append(f"Error: {controller.error}", style="bold red")

        return Panel(content, title="STATUS", style="red" if controller.error else "cyan")

    def _show_error_display(self, error_msg: str):
        """Show error display when rendering fails"""
        try:
            self.console.clear()

            error_panel = Panel(
                Align.center(Text(f"DISPLAY ERROR\n\n{error_msg}", style="bold red")),
                title="System Error",
                style="red"
            )

            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            header = Panel(
                Align.center(Text(f"{TITLE} - {timestamp} - ERROR", style="bold red")),
                style="red"
            )

            self.console.print(Group(header, error_panel))

        except Exception as e:
            logger.error(f"Failed to show error display: {e}")
