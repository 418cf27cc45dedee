"""PDF generation for line metrics.

This module creates printable line metric sheets showing:
- The 56-day rotation as an 8-week calendar grid
- Weekend, weekday and block statistics
- Holiday incidence
"""

from datetime import timedelta
from io import BytesIO
from pathlib import Path
from typing import Union

from shiftcalc.domain.models import (
    CycleConfiguration,
    RotationRecord,
    WorkloadMetrics,
)

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "work": (0.55, 0.75, 0.95),  # Blue
    "weekend_work": (0.95, 0.65, 0.45),  # Orange
    "off": (0.95, 0.95, 0.95),  # Light gray
    "header": (0.85, 0.85, 0.85),  # Gray
}

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class PDFGenerator:
    """Generates printable line metric sheets, one page per rotation.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate([(record, metrics)], config, "metrics.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        entries: list[tuple[RotationRecord, WorkloadMetrics]],
        config: CycleConfiguration,
        output_path: Union[str, Path],
    ) -> None:
        """Generate the metrics PDF and save to file.

        Args:
            entries: (rotation, metrics) pairs, one page each.
            config: Cycle configuration used to date the calendar grid.
            output_path: Path to save the PDF.
        """
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        for record, metrics in entries:
            self._draw_line_page(c, record, metrics, config)
        c.save()

    def generate_to_buffer(
        self,
        entries: list[tuple[RotationRecord, WorkloadMetrics]],
        config: CycleConfiguration,
    ) -> BytesIO:
        """Generate the metrics PDF and return as bytes buffer."""
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        for record, metrics in entries:
            self._draw_line_page(c, record, metrics, config)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw_line_page(
        self,
        c,
        record: RotationRecord,
        metrics: WorkloadMetrics,
        config: CycleConfiguration,
    ) -> None:
        """Draw one rotation's page."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Line {record.label} - {record.group or 'No group'}",
        )

        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Starting {config.start_date:%B %d, %Y}, {config.cycle_count} cycle(s) of "
            f"{config.base_days} days - Pattern: {metrics.shift_pattern}",
        )

        grid_top = self.page_height - self.margin - 60
        grid_width = self.page_width * 0.55
        self._draw_calendar_grid(c, record, config, self.margin, grid_top, grid_width)

        stats_x = self.margin + grid_width + 30
        self._draw_stats(c, metrics, stats_x, grid_top)

        c.showPage()

    def _draw_calendar_grid(
        self,
        c,
        record: RotationRecord,
        config: CycleConfiguration,
        x: float,
        top: float,
        width: float,
    ) -> None:
        """Draw the cycle as weeks (rows) by weekdays (columns)."""
        first_weekday = config.start_date.weekday()
        total_cells = first_weekday + config.base_days
        rows = (total_cells + 6) // 7
        cell_w = width / 7
        cell_h = 40

        c.setFont("Helvetica-Bold", 8)
        for col, label in enumerate(WEEKDAY_LABELS):
            c.setFillColorRGB(*COLORS["header"])
            c.rect(x + col * cell_w, top - 14, cell_w, 14, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawCentredString(x + col * cell_w + cell_w / 2, top - 10, label)

        for index, assignment in enumerate(record.days):
            cell = first_weekday + index
            row, col = divmod(cell, 7)
            cell_x = x + col * cell_w
            cell_y = top - 14 - (row + 1) * cell_h
            day_date = config.start_date + timedelta(days=index)

            if assignment.is_off:
                color = COLORS["off"]
            elif col >= 5:
                color = COLORS["weekend_work"]
            else:
                color = COLORS["work"]

            c.setFillColorRGB(*color)
            c.setStrokeColorRGB(0.6, 0.6, 0.6)
            c.rect(cell_x, cell_y, cell_w, cell_h, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)

            c.setFont("Helvetica", 6)
            c.drawString(cell_x + 2, cell_y + cell_h - 8, f"{index + 1} {day_date:%b %d}")
            c.setFont("Helvetica-Bold", 9)
            c.drawCentredString(cell_x + cell_w / 2, cell_y + 10, assignment.display_code)

        c.setStrokeColorRGB(0, 0, 0)
        c.setFont("Helvetica", 7)
        c.drawString(x, top - 14 - rows * cell_h - 14,
                     "Orange: weekend work, blue: weekday work, gray: off")

    def _draw_stats(self, c, metrics: WorkloadMetrics, x: float, top: float) -> None:
        """Draw grouped metric rows."""
        sections = [
            ("Weekends", [
                ("Full weekends", metrics.weekends_on),
                ("Saturday only", metrics.saturdays_on),
                ("Sunday only", metrics.sundays_on),
                ("Fri-Sat-Sun blocks", metrics.friday_weekend_blocks),
            ]),
            ("Work Blocks", [
                ("Single days", metrics.single_day_blocks),
                ("2-day", metrics.two_day_blocks),
                ("3-day", metrics.three_day_blocks),
                ("4-day", metrics.four_day_blocks),
                ("5-day", metrics.five_day_blocks),
                ("6-day", metrics.six_day_blocks),
                ("Mon-Fri blocks", metrics.weekday_blocks),
                ("Longest stretch", metrics.longest_stretch),
            ]),
            ("Off Blocks", [
                ("2-day", metrics.two_day_off_blocks),
                ("3-day", metrics.three_day_off_blocks),
                ("4-day", metrics.four_day_off_blocks),
                ("5-day", metrics.five_day_off_blocks),
                ("6-day", metrics.six_day_off_blocks),
                ("7+ day", metrics.seven_plus_day_off_blocks),
                ("Longest off", metrics.longest_off_stretch),
                ("Shortest off", metrics.shortest_off_stretch),
            ]),
            ("Totals", [
                ("Days worked", f"{metrics.total_days_worked} of {metrics.total_days_in_period}"),
                ("Holidays working", metrics.holidays_working),
                ("Holidays off", metrics.holidays_off),
            ]),
        ]

        y = top - 10
        for title, rows in sections:
            c.setFont("Helvetica-Bold", 11)
            c.drawString(x, y, title)
            y -= 14
            c.setFont("Helvetica", 9)
            for label, value in rows:
                c.drawString(x + 10, y, label)
                c.drawRightString(x + 200, y, str(value))
                y -= 12
            y -= 8
