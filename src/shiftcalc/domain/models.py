"""Domain models for the rotation analysis system.

This module contains the core data structures used throughout the analysis
pipeline: rotation records and their canonical day assignments, shift code
metadata, cycle configuration, and the result records produced by the mirror
matcher, the workload metrics analyzer and the criteria scorer.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import Optional, Union

logger = logging.getLogger(__name__)

OFF_CODE = "----"  # Sentinel code for a day off
BASE_DAYS_PER_CYCLE = 56  # 8 weeks

_TIME_PATTERNS = (
    re.compile(r"^(\d{1,2}):(\d{2})$"),  # 14:30
    re.compile(r"^(\d{1,2}):(\d{2})-"),  # 14:30-01:00
    re.compile(r"^(\d{2})(\d{2})$"),  # 1430
    re.compile(r"\b(\d{1,2}):(\d{2})(?::\d{2})?\b"),  # timestamps
)


def parse_time_minutes(value: Union[str, time, None]) -> Optional[int]:
    """Parse a time-of-day value into minutes after midnight.

    Accepts "HH:MM", a range such as "14:30-01:00" (first part is used),
    numeric "HHMM", any string embedding "HH:MM[:SS]", or a datetime.time.

    Returns:
        Minutes after midnight, or None if the value can't be parsed.
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value.hour * 60 + value.minute

    text = str(value).strip()
    if not text:
        return None

    for pattern in _TIME_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1)) * 60 + int(match.group(2))
    return None


def format_shift_time(begin: Union[str, time, None], end: Union[str, time, None]) -> str:
    """Format a begin/end pair as "HH:MM-HH:MM" ("" when either is missing)."""
    if not begin or not end:
        return ""

    def _part(value) -> str:
        minutes = parse_time_minutes(value)
        if minutes is None:
            return str(value)
        hours, mins = divmod(minutes, 60)
        return f"{hours:02d}:{mins:02d}"

    return f"{_part(begin)}-{_part(end)}"


def time_difference_minutes(first: Union[str, time, None], second: Union[str, time, None]) -> int:
    """Absolute difference between two times of day in minutes.

    Differences over 12 hours wrap around midnight, so 23:30 and 00:30 are
    60 minutes apart. Unparseable values give 0.
    """
    first_minutes = parse_time_minutes(first)
    second_minutes = parse_time_minutes(second)
    if first_minutes is None or second_minutes is None:
        return 0

    diff = abs(first_minutes - second_minutes)
    if diff > 720:
        diff = 1440 - diff
    return diff


@dataclass(frozen=True)
class DayAssignment:
    """Assignment for a single cycle day: either working a code or off.

    Attributes:
        code: Shift code being worked, or None for a day off.
    """

    code: Optional[str] = None

    @classmethod
    def working(cls, code: str) -> "DayAssignment":
        return cls(code=code)

    @classmethod
    def off(cls) -> "DayAssignment":
        return cls(code=None)

    @property
    def is_off(self) -> bool:
        return self.code is None

    @property
    def is_working(self) -> bool:
        return self.code is not None

    @property
    def display_code(self) -> str:
        """Shift code, or the off sentinel for days off."""
        return OFF_CODE if self.code is None else self.code

    def __repr__(self) -> str:
        return f"Working({self.code})" if self.code is not None else "Off"


@dataclass
class RotationRecord:
    """A single rotation (bid line) over one base cycle.

    Attributes:
        id: Unique identifier of the rotation.
        line: Human-readable line label.
        group: Group/operation the line belongs to.
        days: Exactly BASE_DAYS_PER_CYCLE assignments, index 0 is cycle day 1.
    """

    id: Optional[Union[int, str]]
    line: str = ""
    group: str = ""
    days: tuple[DayAssignment, ...] = field(
        default_factory=lambda: tuple(DayAssignment.off() for _ in range(BASE_DAYS_PER_CYCLE))
    )

    def __post_init__(self):
        days = tuple(self.days)[:BASE_DAYS_PER_CYCLE]
        if len(days) < BASE_DAYS_PER_CYCLE:
            days += tuple(
                DayAssignment.off() for _ in range(BASE_DAYS_PER_CYCLE - len(days))
            )
        self.days = days

    @classmethod
    def from_codes(
        cls,
        id: Optional[Union[int, str]],
        codes: list[Optional[str]],
        line: str = "",
        group: str = "",
    ) -> "RotationRecord":
        """Create a rotation from a list of codes for cycle days 1, 2, ...

        None, empty strings and the off sentinel become days off. Missing
        trailing days are filled with days off.
        """
        days = []
        for code in codes[:BASE_DAYS_PER_CYCLE]:
            if code is None or not str(code).strip() or str(code).strip() == OFF_CODE:
                days.append(DayAssignment.off())
            else:
                days.append(DayAssignment.working(str(code).strip()))
        return cls(id=id, line=line, group=group, days=tuple(days))

    def day(self, cycle_day: int) -> DayAssignment:
        """Get the assignment for a 1-based cycle day."""
        return self.days[cycle_day - 1]

    @property
    def work_day_count(self) -> int:
        return sum(1 for d in self.days if d.is_working)

    @property
    def label(self) -> str:
        return self.line or str(self.id)


@dataclass
class ShiftCodeInfo:
    """Metadata for a shift code.

    Attributes:
        code: The shift code (e.g., "0700", "D8").
        begin: Begin time-of-day string (e.g., "07:00").
        end: End time-of-day string (e.g., "15:30").
        category: Time-of-day category if already known (e.g., "Days").
        length: Duration bucket if already known (e.g., "8 Hour Shift").
    """

    code: str
    begin: Optional[str] = None
    end: Optional[str] = None
    category: Optional[str] = None
    length: Optional[str] = None

    @property
    def begin_minutes(self) -> Optional[int]:
        return parse_time_minutes(self.begin)

    @property
    def end_minutes(self) -> Optional[int]:
        return parse_time_minutes(self.end)

    @property
    def has_times(self) -> bool:
        return bool(self.begin) and bool(self.end)

    @property
    def duration_hours(self) -> Optional[float]:
        """Shift duration in hours, wrapping overnight shifts past midnight."""
        start = self.begin_minutes
        finish = self.end_minutes
        if start is None or finish is None:
            return None
        if finish <= start:
            finish += 24 * 60
        return (finish - start) / 60

    @property
    def display_time(self) -> str:
        return format_shift_time(self.begin, self.end)


@dataclass
class CycleConfiguration:
    """Configuration of the repeating cycle.

    Attributes:
        cycle_count: Number of times the base cycle repeats.
        start_date: Calendar date of absolute day 1.
        base_days: Length of the base cycle (fixed at 56).
    """

    cycle_count: int = 1
    start_date: date = field(default_factory=date.today)
    base_days: int = BASE_DAYS_PER_CYCLE

    def __post_init__(self):
        if self.cycle_count < 1:
            logger.warning("Invalid cycle count %r, using 1", self.cycle_count)
            self.cycle_count = 1

    @classmethod
    def from_settings(cls, settings: Optional[dict] = None) -> "CycleConfiguration":
        """Build a configuration from a loosely-typed settings mapping.

        Recognizes "numCycles"/"num_cycles"/"cycleCount" and
        "startDate"/"start_date". Absent or unparseable values fall back to
        one cycle starting today.
        """
        settings = settings or {}

        cycle_count = 1
        raw_cycles = next(
            (settings[k] for k in ("numCycles", "num_cycles", "cycleCount") if k in settings),
            None,
        )
        if raw_cycles is not None:
            try:
                cycle_count = int(raw_cycles)
            except (TypeError, ValueError):
                logger.warning("Unparseable cycle count %r, using 1", raw_cycles)
            if cycle_count < 1:
                cycle_count = 1

        start = date.today()
        raw_start = settings.get("startDate", settings.get("start_date"))
        if isinstance(raw_start, date):
            start = raw_start
        elif raw_start:
            try:
                start = date.fromisoformat(str(raw_start)[:10])
            except ValueError:
                logger.warning("Unparseable start date %r, using today", raw_start)

        return cls(cycle_count=cycle_count, start_date=start)

    @property
    def total_days(self) -> int:
        return self.base_days * self.cycle_count

    @property
    def end_date(self) -> date:
        """Date immediately after the last day of the analyzed period."""
        return self.start_date + timedelta(days=self.total_days)

    def cycle_day_for_absolute(self, absolute_day: int) -> int:
        """Map a 1-based absolute day to its 1-based cycle day."""
        return ((absolute_day - 1) % self.base_days) + 1

    def date_for_absolute_day(self, absolute_day: int) -> date:
        return self.start_date + timedelta(days=absolute_day - 1)

    def cycle_day_for_date(self, target: date) -> int:
        """Map a calendar date to its 1-based cycle day.

        Dates before the start date wrap backwards, so the date exactly one
        cycle before the start maps to cycle day 1.
        """
        offset = (target - self.start_date).days
        return (offset % self.base_days) + 1


@dataclass
class RotationPattern:
    """Work/off pattern and shift sequence of a rotation over all cycles.

    Attributes:
        record: The source rotation.
        day_pattern: 1 for a work day, 0 for a day off.
        shift_codes: Shift code per day, OFF_CODE for days off.
    """

    record: RotationRecord
    day_pattern: list[int]
    shift_codes: list[str]

    def __len__(self) -> int:
        return len(self.day_pattern)

    @property
    def work_day_count(self) -> int:
        return sum(self.day_pattern)


@dataclass
class ComparisonRecord:
    """Day-by-day comparison between a reference rotation and a candidate.

    Attributes:
        day: 1-based absolute day.
        date: Calendar date of the day.
        user_shift: Reference rotation code (OFF_CODE when off).
        other_shift: Candidate rotation code (OFF_CODE when off).
        user_time: Formatted reference shift time, if known.
        other_time: Formatted candidate shift time, if known.
        is_different: Codes differ (or same code with significantly different times).
        is_work_day_mismatch: Exactly one side is off.
        start_time_diff_minutes: Start time delta when both times are known.
        end_time_diff_minutes: End time delta when both times are known.
        time_difference_score: 0-100 score of the time deltas.
        is_significant_difference: Whether the deltas matter for a trade.
    """

    day: int
    date: date
    user_shift: str
    other_shift: str
    user_time: str = ""
    other_time: str = ""
    is_different: bool = False
    is_work_day_mismatch: bool = False
    start_time_diff_minutes: Optional[int] = None
    end_time_diff_minutes: Optional[int] = None
    time_difference_score: Optional[float] = None
    is_significant_difference: bool = False

    @property
    def both_off(self) -> bool:
        return self.user_shift == OFF_CODE and self.other_shift == OFF_CODE

    @property
    def has_times(self) -> bool:
        return bool(self.user_time) and bool(self.other_time)


@dataclass
class ShiftDifferenceCounts:
    """Aggregated counts over a list of comparison records."""

    same_category_count: int = 0
    different_category_count: int = 0
    same_time_count: int = 0
    different_time_count: int = 0
    significant_difference_count: int = 0
    work_day_mismatch_count: int = 0
    average_time_difference_score: float = 0.0

    @property
    def common_work_days(self) -> int:
        return self.same_category_count + self.different_category_count


@dataclass
class MirrorScore:
    """Trade-compatibility score of a candidate against the reference.

    Attributes:
        line: Candidate rotation.
        pattern_score: % of days where work/off flags agree.
        user_shift_pattern_score: % of reference work days also worked by the candidate.
        shift_difference_score: % of common work days with different codes.
        total_score: Combined pattern/difference score.
        counts: Aggregated difference counts.
        meaningful_trade_score: Heuristic trade usefulness score.
        total_user_work_days: Number of work days in the reference rotation.
        comparison: Per-day comparison records.
    """

    line: RotationRecord
    pattern_score: float
    user_shift_pattern_score: float
    shift_difference_score: float
    total_score: float
    counts: ShiftDifferenceCounts
    meaningful_trade_score: float
    total_user_work_days: int
    comparison: list[ComparisonRecord] = field(default_factory=list)

    @property
    def significant_difference_count(self) -> int:
        return self.counts.significant_difference_count

    @property
    def average_time_difference_score(self) -> float:
        return self.counts.average_time_difference_score

    def __repr__(self) -> str:
        return (
            f"MirrorScore(line={self.line.label!r}, pattern={self.pattern_score}, "
            f"trade={self.meaningful_trade_score}, "
            f"significant={self.significant_difference_count})"
        )


@dataclass
class MirrorMatchResult:
    """Outcome of a mirror line search.

    Attributes:
        mirror_scores: Ranked candidate scores.
        user_line: The resolved reference rotation, None if not found.
        debug_info: Diagnostic counters and skipped/low-score line labels.
    """

    mirror_scores: list[MirrorScore] = field(default_factory=list)
    user_line: Optional[RotationRecord] = None
    debug_info: dict = field(default_factory=dict)


@dataclass
class DatedAssignment:
    """A cycle day placed on the calendar.

    Attributes:
        day_number: 1-based cycle day.
        date: Calendar date of the day.
        code: Shift code worked, None when off.
    """

    day_number: int
    date: date
    code: Optional[str] = None

    @property
    def is_working(self) -> bool:
        return bool(self.code) and self.code != OFF_CODE


@dataclass
class WorkloadMetrics:
    """Workload statistics for a rotation.

    All counts are totals over every cycle; stretches are single-cycle values.
    """

    weekends_on: int = 0
    saturdays_on: int = 0
    sundays_on: int = 0
    holidays_working: int = 0
    holidays_off: int = 0

    single_day_blocks: int = 0
    two_day_blocks: int = 0
    three_day_blocks: int = 0
    four_day_blocks: int = 0
    five_day_blocks: int = 0
    six_day_blocks: int = 0
    longest_stretch: int = 0

    two_day_off_blocks: int = 0
    three_day_off_blocks: int = 0
    four_day_off_blocks: int = 0
    five_day_off_blocks: int = 0
    six_day_off_blocks: int = 0
    seven_plus_day_off_blocks: int = 0
    longest_off_stretch: int = 0
    shortest_off_stretch: int = 0

    friday_weekend_blocks: int = 0
    weekday_blocks: int = 0

    # Worked days per weekday
    total_mondays: int = 0
    total_tuesdays: int = 0
    total_wednesdays: int = 0
    total_thursdays: int = 0
    total_fridays: int = 0
    total_saturdays: int = 0
    total_sundays: int = 0
    total_days_worked: int = 0

    # Calendar days per weekday
    total_mondays_in_period: int = 0
    total_tuesdays_in_period: int = 0
    total_wednesdays_in_period: int = 0
    total_thursdays_in_period: int = 0
    total_fridays_in_period: int = 0
    total_saturdays_in_period: int = 0
    total_sundays_in_period: int = 0
    total_days_in_period: int = 0

    shift_pattern: str = "No shifts"

    def scaled(self, cycle_count: int) -> "WorkloadMetrics":
        """Copy with every count multiplied by cycle_count.

        Longest/shortest stretches are single-run values and stay unchanged.
        """
        values = {}
        for name, value in vars(self).items():
            if name in _UNSCALED_METRICS or not isinstance(value, int):
                values[name] = value
            else:
                values[name] = value * cycle_count
        return WorkloadMetrics(**values)


_UNSCALED_METRICS = frozenset({"longest_stretch", "longest_off_stretch", "shortest_off_stretch"})


@dataclass
class CriteriaWeights:
    """Weights of each criteria dimension. A weight of 0 disables it."""

    group: float = 0.0
    days_off: float = 1.0
    shift: float = 1.0
    blocks_5day: float = 0.0
    blocks_4day: float = 0.0
    weekend: float = 0.0
    saturday: float = 0.0
    sunday: float = 0.0


@dataclass
class FilterCriteria:
    """User search criteria for scoring rotations.

    Attributes:
        selected_groups: Groups the rotation must belong to (empty = any).
        day_off_dates: Calendar dates the user wants off.
        selected_codes: Shift codes the user wants to work.
        selected_categories: Time-of-day categories the user wants.
        selected_lengths: Shift length buckets the user wants.
        category_intent: "any" or "mix" (mix requires variety).
        weights: Per-dimension weights.
    """

    selected_groups: list[str] = field(default_factory=list)
    day_off_dates: list[date] = field(default_factory=list)
    selected_codes: list[str] = field(default_factory=list)
    selected_categories: list[str] = field(default_factory=list)
    selected_lengths: list[str] = field(default_factory=list)
    category_intent: str = "any"
    weights: CriteriaWeights = field(default_factory=CriteriaWeights)


@dataclass
class DayOffMatches:
    """Which requested days off land on the rotation's days off."""

    matched: list[date] = field(default_factory=list)
    missing: list[date] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.missing)

    @property
    def match_rate(self) -> float:
        return len(self.matched) / self.total if self.total else 0.0


@dataclass
class CriteriaScore:
    """Score of a rotation against filter criteria.

    Attributes:
        score: Final 0-100 score.
        explanation: Human-readable reasons, "; "-joined.
        full_weekends: Weekends with both days worked.
        solitary_saturdays: Weekends with only Saturday worked.
        solitary_sundays: Weekends with only Sunday worked.
        total_weekends: Weekends in the analyzed period.
        blocks_5day: Exact 5-day work blocks over all cycles.
        blocks_4day: Exact 4-day work blocks over all cycles.
        shift_counts: Worked days per shift code over all cycles.
        total_shifts: Worked days over all cycles.
        day_off_details: Requested day-off matches, if any were requested.
        excluded: True when a hard filter (group, category mix) rejected the
            rotation rather than the weighted dimensions scoring it 0.
    """

    score: int
    explanation: str
    full_weekends: int = 0
    solitary_saturdays: int = 0
    solitary_sundays: int = 0
    total_weekends: int = 0
    blocks_5day: int = 0
    blocks_4day: int = 0
    shift_counts: dict[str, int] = field(default_factory=dict)
    total_shifts: int = 0
    day_off_details: Optional[DayOffMatches] = None
    excluded: bool = False

    @property
    def weekends_on(self) -> str:
        return f"{self.full_weekends} of {self.total_weekends}"

    @property
    def saturdays_on(self) -> str:
        # Solitary Saturdays only
        return f"{self.solitary_saturdays} of {self.total_weekends}"

    @property
    def sundays_on(self) -> str:
        return f"{self.solitary_sundays} of {self.total_weekends}"
