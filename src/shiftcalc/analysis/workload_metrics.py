"""Workload metrics for a rotation.

Computes weekend work, work/off block histograms, weekday coverage and
holiday incidence for one cycle of a rotation placed on the calendar, then
projects the counts over the configured number of cycles.

The projection multiplies single-cycle counts by the cycle count. This is an
approximation: holidays fall on different cycle days in each repetition, and
runs that straddle two cycles are not joined. Use the block counting
strategies in shiftcalc.analysis.blocks when exact counts are needed.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, timedelta
from typing import Optional, Union

from shiftcalc.analysis.blocks import find_runs
from shiftcalc.analysis.pattern_extractor import RotationPatternExtractor
from shiftcalc.domain.models import (
    CycleConfiguration,
    DatedAssignment,
    RotationRecord,
    WorkloadMetrics,
)

logger = logging.getLogger(__name__)

_WORK_BLOCK_FIELDS = {
    1: "single_day_blocks",
    2: "two_day_blocks",
    3: "three_day_blocks",
    4: "four_day_blocks",
    5: "five_day_blocks",
    6: "six_day_blocks",
}

_OFF_BLOCK_FIELDS = {
    2: "two_day_off_blocks",
    3: "three_day_off_blocks",
    4: "four_day_off_blocks",
    5: "five_day_off_blocks",
    6: "six_day_off_blocks",
}

# date.weekday(): Monday = 0 ... Sunday = 6
_WORKED_WEEKDAY_FIELDS = {
    0: "total_mondays",
    1: "total_tuesdays",
    2: "total_wednesdays",
    3: "total_thursdays",
    4: "total_fridays",
}

_PERIOD_WEEKDAY_FIELDS = {
    0: "total_mondays_in_period",
    1: "total_tuesdays_in_period",
    2: "total_wednesdays_in_period",
    3: "total_thursdays_in_period",
    4: "total_fridays_in_period",
    5: "total_saturdays_in_period",
    6: "total_sundays_in_period",
}

FRIDAY, SATURDAY, SUNDAY = 4, 5, 6
MONDAY_TO_FRIDAY = [0, 1, 2, 3, 4]


def shift_pattern_label(codes: Iterable[str]) -> str:
    """Display label for the distinct codes worked.

    One code is shown as is, up to three are joined with "/", more are
    "Mixed", and none is "No shifts".
    """
    unique = list(dict.fromkeys(codes))
    if not unique:
        return "No shifts"
    if len(unique) == 1:
        return unique[0]
    if len(unique) <= 3:
        return "/".join(unique)
    return "Mixed"


def _has_friday_weekend(weekdays: Sequence[int]) -> bool:
    for i in range(len(weekdays) - 2):
        if (weekdays[i], weekdays[i + 1], weekdays[i + 2]) == (FRIDAY, SATURDAY, SUNDAY):
            return True
    return False


class WorkloadMetricsAnalyzer:
    """Computes workload metrics for rotations.

    Example:
        >>> analyzer = WorkloadMetricsAnalyzer()
        >>> config = CycleConfiguration(cycle_count=3, start_date=date(2025, 10, 9))
        >>> metrics = analyzer.analyze_rotation(record, config, holidays)
        >>> metrics.weekends_on
        12
    """

    def __init__(self, extractor: Optional[RotationPatternExtractor] = None):
        self.extractor = extractor or RotationPatternExtractor()

    def build_cycle(
        self,
        raw: Union[Mapping, RotationRecord],
        start_date: date,
    ) -> list[DatedAssignment]:
        """Place one cycle of a rotation on the calendar from start_date."""
        record = self.extractor.canonicalize(raw)
        return [
            DatedAssignment(
                day_number=index + 1,
                date=start_date + timedelta(days=index),
                code=assignment.code,
            )
            for index, assignment in enumerate(record.days)
        ]

    def analyze_rotation(
        self,
        raw: Union[Mapping, RotationRecord],
        config: Optional[CycleConfiguration] = None,
        holidays: Optional[Iterable[date]] = None,
    ) -> WorkloadMetrics:
        """Compute metrics for a rotation using the configuration's start date."""
        config = config or CycleConfiguration()
        cycle = self.build_cycle(raw, config.start_date)
        return self.analyze(cycle, config.cycle_count, holidays)

    def analyze(
        self,
        assignments: Sequence[DatedAssignment],
        cycle_count: int = 1,
        holidays: Optional[Iterable[date]] = None,
    ) -> WorkloadMetrics:
        """Compute metrics for one dated cycle, projected over cycle_count.

        Args:
            assignments: One cycle's days in any order.
            cycle_count: Number of cycle repetitions in the period.
            holidays: Holiday dates; None counts no holidays.

        Returns:
            WorkloadMetrics with counts over all cycles.
        """
        holiday_dates = set(holidays or ())
        days = sorted(assignments, key=lambda a: a.day_number)

        if not any(day.is_working for day in days):
            return WorkloadMetrics(shift_pattern="No shifts")

        metrics = WorkloadMetrics()
        weekends: dict[date, dict[str, bool]] = {}
        codes_worked: list[str] = []

        for day in days:
            weekday = day.date.weekday()
            field_name = _PERIOD_WEEKDAY_FIELDS[weekday]
            setattr(metrics, field_name, getattr(metrics, field_name) + 1)
            is_holiday = day.date in holiday_dates

            if not day.is_working:
                if is_holiday:
                    metrics.holidays_off += 1
                continue

            metrics.total_days_worked += 1
            codes_worked.append(day.code)
            if is_holiday:
                metrics.holidays_working += 1

            if weekday in _WORKED_WEEKDAY_FIELDS:
                field_name = _WORKED_WEEKDAY_FIELDS[weekday]
                setattr(metrics, field_name, getattr(metrics, field_name) + 1)
            else:
                # Weekend pairs are keyed by their Saturday
                saturday = day.date if weekday == SATURDAY else day.date - timedelta(days=1)
                pair = weekends.setdefault(saturday, {"saturday": False, "sunday": False})
                pair["saturday" if weekday == SATURDAY else "sunday"] = True

        for pair in weekends.values():
            if pair["saturday"] and pair["sunday"]:
                metrics.weekends_on += 1
            elif pair["saturday"]:
                metrics.saturdays_on += 1
            elif pair["sunday"]:
                metrics.sundays_on += 1
            if pair["saturday"]:
                metrics.total_saturdays += 1
            if pair["sunday"]:
                metrics.total_sundays += 1

        metrics.total_days_in_period = len(days)

        runs = find_runs([1 if day.is_working else 0 for day in days])
        work_lengths = []
        off_lengths = []
        for run in runs:
            if run.working:
                work_lengths.append(run.length)
                if run.length in _WORK_BLOCK_FIELDS:
                    field_name = _WORK_BLOCK_FIELDS[run.length]
                    setattr(metrics, field_name, getattr(metrics, field_name) + 1)

                weekdays = [d.date.weekday() for d in days[run.start:run.end]]
                if run.length >= 3 and _has_friday_weekend(weekdays):
                    metrics.friday_weekend_blocks += 1
                if run.length == 5 and sorted(weekdays) == MONDAY_TO_FRIDAY:
                    metrics.weekday_blocks += 1
            else:
                off_lengths.append(run.length)
                if run.length >= 7:
                    metrics.seven_plus_day_off_blocks += 1
                elif run.length in _OFF_BLOCK_FIELDS:
                    field_name = _OFF_BLOCK_FIELDS[run.length]
                    setattr(metrics, field_name, getattr(metrics, field_name) + 1)

        metrics.longest_stretch = max(work_lengths, default=0)
        metrics.longest_off_stretch = max(off_lengths, default=0)
        metrics.shortest_off_stretch = min(off_lengths, default=0)
        metrics.shift_pattern = shift_pattern_label(codes_worked)

        logger.debug(
            "Metrics: %d days worked of %d, %d full weekends, longest stretch %d",
            metrics.total_days_worked,
            metrics.total_days_in_period,
            metrics.weekends_on,
            metrics.longest_stretch,
        )
        return metrics.scaled(max(cycle_count or 1, 1))
