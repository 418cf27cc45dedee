"""Plain text reports for rotation analysis.

This module creates human-readable text output for:
- Mirror line searches (ranked candidates and day-by-day differences)
- Workload metrics of a rotation
- Criteria scoring results
"""

from pathlib import Path
from typing import Optional, Union

from shiftcalc.domain.models import (
    CriteriaScore,
    MirrorMatchResult,
    MirrorScore,
    RotationRecord,
    WorkloadMetrics,
)


class TextReportGenerator:
    """Generates text reports for analysis results.

    Each report method returns the content and, when output_path is given,
    also writes it to that file.

    Example:
        >>> generator = TextReportGenerator()
        >>> print(generator.mirror_report(result))
    """

    def __init__(self, max_difference_days: int = 20):
        """Initialize generator.

        Args:
            max_difference_days: Differing days listed per mirror candidate.
        """
        self.max_difference_days = max_difference_days

    def mirror_report(
        self,
        result: MirrorMatchResult,
        output_path: Optional[Union[str, Path]] = None,
        limit: int = 10,
    ) -> str:
        """Report ranked mirror candidates.

        Args:
            result: Mirror search result.
            output_path: Optional file to write.
            limit: Maximum number of candidates to detail.

        Returns:
            The generated text content.
        """
        lines = self._header("MIRROR LINE REPORT")

        if result.user_line is None:
            requested = result.debug_info.get("input_params", {}).get("user_line_id")
            lines.append(f"Reference line {requested!r} not found.")
            return self._finish(lines, output_path)

        user = result.user_line
        lines.append(f"Reference Line: {user.label} (group {user.group or '-'})")
        lines.append(f"Work Days per Cycle: {user.work_day_count}")
        lines.append(f"Candidates Processed: {result.debug_info.get('processed_lines', 0)}")
        lines.append(f"Below Pattern Threshold: {len(result.debug_info.get('low_score_lines', []))}")
        lines.append(f"Filtered Out: {result.debug_info.get('filtered_out_count', 0)}")
        lines.append(f"Mirror Lines Found: {len(result.mirror_scores)}")
        lines.append("")

        if not result.mirror_scores:
            lines.append("No mirror lines found.")
            return self._finish(lines, output_path)

        lines.append("-" * 80)
        lines.append(f"{'#':>3} {'Line':<10} {'Group':<10} {'Pattern':>8} {'UserOn':>8} "
                     f"{'Diff':>7} {'Trade':>7} {'Sig':>5}")
        lines.append("-" * 80)
        for rank, score in enumerate(result.mirror_scores[:limit], 1):
            lines.append(
                f"{rank:>3} {score.line.label[:10]:<10} {score.line.group[:10]:<10} "
                f"{score.pattern_score:>7.1f}% {score.user_shift_pattern_score:>7.1f}% "
                f"{score.shift_difference_score:>6.1f}% {score.meaningful_trade_score:>7.2f} "
                f"{score.significant_difference_count:>5}"
            )
        lines.append("")

        for score in result.mirror_scores[:limit]:
            lines.extend(self._mirror_details(score))

        return self._finish(lines, output_path)

    def _mirror_details(self, score: MirrorScore) -> list[str]:
        counts = score.counts
        lines = [
            "-" * 80,
            f"LINE {score.line.label}",
            "-" * 80,
            f"  Common work days: {counts.common_work_days} "
            f"(same {counts.same_category_count}, different {counts.different_category_count})",
            f"  Work/off mismatches: {counts.work_day_mismatch_count}",
            f"  Average time difference score: {counts.average_time_difference_score:.1f}",
            f"  Total score: {score.total_score:.2f}",
        ]

        different = [r for r in score.comparison if r.is_different]
        if different:
            lines.append("  Differing days:")
            for record in different[:self.max_difference_days]:
                marker = "*" if record.is_significant_difference else " "
                user = f"{record.user_shift} {record.user_time}".strip()
                other = f"{record.other_shift} {record.other_time}".strip()
                lines.append(
                    f"   {marker} Day {record.day:>3} {record.date:%a %b %d}: {user:<18} -> {other}"
                )
            if len(different) > self.max_difference_days:
                lines.append(f"    ... {len(different) - self.max_difference_days} more")
        lines.append("")
        return lines

    def metrics_report(
        self,
        record: RotationRecord,
        metrics: WorkloadMetrics,
        output_path: Optional[Union[str, Path]] = None,
    ) -> str:
        """Report workload metrics for one rotation."""
        lines = self._header(f"LINE METRICS - {record.label}")
        lines.append(f"Group: {record.group or '-'}")
        lines.append(f"Shift Pattern: {metrics.shift_pattern}")
        lines.append(f"Days Worked: {metrics.total_days_worked} of {metrics.total_days_in_period}")
        lines.append("")

        lines.append("WEEKENDS")
        lines.append(f"  Full weekends:       {metrics.weekends_on}")
        lines.append(f"  Saturday only:       {metrics.saturdays_on}")
        lines.append(f"  Sunday only:         {metrics.sundays_on}")
        lines.append(f"  Saturdays worked:    {metrics.total_saturdays} of {metrics.total_saturdays_in_period}")
        lines.append(f"  Sundays worked:      {metrics.total_sundays} of {metrics.total_sundays_in_period}")
        lines.append(f"  Fri-Sat-Sun blocks:  {metrics.friday_weekend_blocks}")
        lines.append("")

        lines.append("WEEKDAYS")
        for name in ("monday", "tuesday", "wednesday", "thursday", "friday"):
            worked = getattr(metrics, f"total_{name}s")
            total = getattr(metrics, f"total_{name}s_in_period")
            lines.append(f"  {name.capitalize() + 's':<20} {worked} of {total}")
        lines.append(f"  Mon-Fri blocks:      {metrics.weekday_blocks}")
        lines.append("")

        lines.append("WORK BLOCKS")
        histogram = [
            ("1 day", metrics.single_day_blocks),
            ("2 days", metrics.two_day_blocks),
            ("3 days", metrics.three_day_blocks),
            ("4 days", metrics.four_day_blocks),
            ("5 days", metrics.five_day_blocks),
            ("6 days", metrics.six_day_blocks),
        ]
        lines.extend(self._histogram(histogram))
        lines.append(f"  Longest stretch: {metrics.longest_stretch} days")
        lines.append("")

        lines.append("OFF BLOCKS")
        histogram = [
            ("2 days", metrics.two_day_off_blocks),
            ("3 days", metrics.three_day_off_blocks),
            ("4 days", metrics.four_day_off_blocks),
            ("5 days", metrics.five_day_off_blocks),
            ("6 days", metrics.six_day_off_blocks),
            ("7+ days", metrics.seven_plus_day_off_blocks),
        ]
        lines.extend(self._histogram(histogram))
        lines.append(f"  Longest off stretch:  {metrics.longest_off_stretch} days")
        lines.append(f"  Shortest off stretch: {metrics.shortest_off_stretch} days")
        lines.append("")

        lines.append("HOLIDAYS")
        lines.append(f"  Working: {metrics.holidays_working}")
        lines.append(f"  Off:     {metrics.holidays_off}")
        lines.append("")

        return self._finish(lines, output_path)

    def scores_report(
        self,
        ranked: list[tuple[RotationRecord, CriteriaScore]],
        output_path: Optional[Union[str, Path]] = None,
    ) -> str:
        """Report criteria scores, best first."""
        lines = self._header("CRITERIA SCORES")
        if not ranked:
            lines.append("No lines matched the criteria.")
            return self._finish(lines, output_path)

        lines.append(f"{'#':>3} {'Line':<10} {'Group':<10} {'Score':>5} {'Weekends':>10} "
                     f"{'5-day':>6} {'4-day':>6}")
        lines.append("-" * 80)
        for rank, (record, result) in enumerate(ranked, 1):
            lines.append(
                f"{rank:>3} {record.label[:10]:<10} {record.group[:10]:<10} {result.score:>5} "
                f"{result.weekends_on:>10} {result.blocks_5day:>6} {result.blocks_4day:>6}"
            )
            if result.explanation:
                lines.append(f"      {result.explanation}")
        lines.append("")
        return self._finish(lines, output_path)

    def _header(self, title: str) -> list[str]:
        return ["=" * 80, title, "=" * 80, ""]

    def _histogram(self, rows: list[tuple[str, int]]) -> list[str]:
        return [f"  {label:>7}: {'#' * min(count, 40)} ({count})" for label, count in rows]

    def _finish(self, lines: list[str], output_path: Optional[Union[str, Path]]) -> str:
        content = "\n".join(lines) + "\n"
        if output_path is not None:
            Path(output_path).write_text(content)
        return content
