"""Policy definitions for rotation comparison and scoring rules.

This module contains the tuned heuristics used by the analyzers: how shift
time differences are scored and judged significant, how a mirror candidate's
trade usefulness is computed, and how shift codes are classified into
time-of-day categories and length buckets. Policies are kept separate from
the analyzers so thresholds can be tested and replaced independently.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from shiftcalc.domain.models import ShiftCodeInfo


class TimeDifferencePolicy(ABC):
    """Abstract base class for shift time difference rules."""

    @abstractmethod
    def score(self, start_diff: int, end_diff: int) -> float:
        """Score start/end deltas (minutes) on a 0-100 scale.

        Args:
            start_diff: Absolute start time difference in minutes.
            end_diff: Absolute end time difference in minutes.

        Returns:
            Combined difference score, 0 = identical, 100 = extreme.
        """
        pass

    @abstractmethod
    def is_significant(self, start_diff: Optional[float], end_diff: Optional[float]) -> bool:
        """Check if start/end deltas make two shifts meaningfully different."""
        pass


class TradeScorePolicy(ABC):
    """Abstract base class for mirror trade scoring rules."""

    @abstractmethod
    def meaningful_trade_score(
        self,
        pattern_score: float,
        average_time_difference: float,
        significant_count: int,
        common_work_days: int,
    ) -> float:
        """Compute how useful a candidate is as a trade partner.

        Args:
            pattern_score: % of days with matching work/off flags.
            average_time_difference: Mean time difference score.
            significant_count: Number of significantly different days.
            common_work_days: Days both rotations work.

        Returns:
            Trade score; low values mean near-clones with little trade value.
        """
        pass

    @abstractmethod
    def is_candidate(self, pattern_score: float) -> bool:
        """Check if a pattern score is high enough to consider the line."""
        pass

    @abstractmethod
    def is_worth_trading(
        self,
        pattern_score: float,
        trade_score: float,
        significant_count: int,
    ) -> bool:
        """Check if a scored candidate should be returned."""
        pass

    @abstractmethod
    def total_score(self, pattern_score: float, shift_difference_score: float) -> float:
        """Combine pattern and shift difference scores."""
        pass


class ShiftClassificationPolicy(ABC):
    """Abstract base class for shift code classification rules."""

    @abstractmethod
    def category_for(self, info: Optional[ShiftCodeInfo]) -> str:
        """Time-of-day category derived from the shift's begin time."""
        pass

    @abstractmethod
    def category_for_code(self, code: str) -> str:
        """Time-of-day category inferred from a code's leading hour digits."""
        pass

    @abstractmethod
    def length_for(self, info: Optional[ShiftCodeInfo]) -> Optional[str]:
        """Length bucket (e.g., "8 Hour Shift") derived from begin/end times."""
        pass


@dataclass
class DefaultTimeDifferencePolicy(TimeDifferencePolicy):
    """Default time difference policy implementation.

    Scoring:
    - Both deltas under 90 minutes: small variant, 5-15 points
    - Otherwise each delta is tiered: minor (<30) 0-25, moderate (<120)
      25-50, major (<240) 50-75, extreme 75-100 capped at 8 hours
    - Combined as 60% start, 40% end

    Significance:
    - Start >= 60, end >= 75, or start + end >= 120 minutes
    - Not significant when the start is within 15 minutes and the end within
      90 minutes (same shift split into codes with a slightly later end)
    """

    small_variant_limit: int = 90
    small_variant_base: float = 5.0
    small_variant_span: float = 10.0

    # Tier upper bounds in minutes
    minor_limit: int = 30
    moderate_limit: int = 120
    major_limit: int = 240
    extreme_cap: int = 480  # 8 hours

    start_weight: float = 0.6
    end_weight: float = 0.4

    significant_start: int = 60
    significant_end: int = 75
    significant_total: int = 120

    code_split_start: int = 15
    code_split_end: int = 90

    def _tier_score(self, diff: float) -> float:
        if diff < self.minor_limit:
            return (diff / self.minor_limit) * 25
        elif diff < self.moderate_limit:
            span = self.moderate_limit - self.minor_limit
            return 25 + ((diff - self.minor_limit) / span) * 25
        elif diff < self.major_limit:
            span = self.major_limit - self.moderate_limit
            return 50 + ((diff - self.moderate_limit) / span) * 25
        else:
            span = self.extreme_cap - self.major_limit
            return 75 + ((min(diff, self.extreme_cap) - self.major_limit) / span) * 25

    def score(self, start_diff: int, end_diff: int) -> float:
        if start_diff < self.small_variant_limit and end_diff < self.small_variant_limit:
            smaller = min(start_diff, end_diff)
            return self.small_variant_base + (smaller / self.small_variant_limit) * self.small_variant_span

        return (
            self._tier_score(start_diff) * self.start_weight
            + self._tier_score(end_diff) * self.end_weight
        )

    def is_significant(self, start_diff: Optional[float], end_diff: Optional[float]) -> bool:
        if start_diff is None or end_diff is None:
            return False
        if start_diff != start_diff or end_diff != end_diff:  # NaN
            return False

        if start_diff <= self.code_split_start and end_diff < self.code_split_end:
            return False

        return (
            start_diff >= self.significant_start
            or end_diff >= self.significant_end
            or start_diff + end_diff >= self.significant_total
        )


@dataclass
class DefaultTradeScorePolicy(TradeScorePolicy):
    """Default trade score policy implementation.

    Trade score:
    - Near-clone (pattern > 95%, avg time diff < 10, < 2 significant days): 10
    - Minor variant (pattern > 75%, avg time diff < 20, < 5 significant days):
      25 + 1.5 per significant day
    - Otherwise 40% pattern + 30% avg time diff + 30% significant-day rate

    Candidates need a pattern score of at least 50%. Lines scoring under 15,
    or exact clones (pattern > 99% with no significant day), are dropped.
    """

    min_pattern_score: float = 50.0

    clone_pattern: float = 95.0
    clone_max_time_difference: float = 10.0
    clone_max_significant: int = 2
    clone_score: float = 10.0

    minor_pattern: float = 75.0
    minor_max_time_difference: float = 20.0
    minor_max_significant: int = 5
    minor_base_score: float = 25.0
    minor_per_significant: float = 1.5

    pattern_weight: float = 0.4
    time_difference_weight: float = 0.3
    significant_weight: float = 0.3

    min_trade_score: float = 15.0
    exact_clone_pattern: float = 99.0

    # Legacy combined score
    total_pattern_weight: float = 0.7
    total_difference_weight: float = 0.3

    def meaningful_trade_score(
        self,
        pattern_score: float,
        average_time_difference: float,
        significant_count: int,
        common_work_days: int,
    ) -> float:
        if (
            pattern_score > self.clone_pattern
            and average_time_difference < self.clone_max_time_difference
            and significant_count < self.clone_max_significant
        ):
            return self.clone_score

        if (
            pattern_score > self.minor_pattern
            and average_time_difference < self.minor_max_time_difference
            and significant_count < self.minor_max_significant
        ):
            return self.minor_base_score + significant_count * self.minor_per_significant

        significant_rate = (
            significant_count / common_work_days * 100 if common_work_days > 0 else 0
        )
        return round(
            pattern_score * self.pattern_weight
            + average_time_difference * self.time_difference_weight
            + significant_rate * self.significant_weight,
            2,
        )

    def is_candidate(self, pattern_score: float) -> bool:
        return pattern_score >= self.min_pattern_score

    def is_worth_trading(
        self,
        pattern_score: float,
        trade_score: float,
        significant_count: int,
    ) -> bool:
        if trade_score < self.min_trade_score:
            return False
        if pattern_score > self.exact_clone_pattern and significant_count == 0:
            return False
        return True

    def total_score(self, pattern_score: float, shift_difference_score: float) -> float:
        return round(
            pattern_score * self.total_pattern_weight
            + shift_difference_score * self.total_difference_weight,
            2,
        )


def _default_category_ranges() -> list[tuple[str, int, int]]:
    # (category, first minute, last minute) by begin time
    return [
        ("Days", 6 * 60, 8 * 60),
        ("Late Days", 8 * 60 + 30, 8 * 60 + 49),
        ("Mid Days", 9 * 60, 11 * 60 + 30),
        ("Afternoons", 12 * 60 + 30, 15 * 60 + 54),
        ("Midnights", 18 * 60 + 45, 20 * 60 + 45),
    ]


def _default_hour_categories() -> list[tuple[str, int, int]]:
    # (category, first hour, last hour) by leading code digits
    return [
        ("Days", 6, 9),
        ("Mid Days", 10, 13),
        ("Afternoons", 14, 17),
        ("Midnights", 18, 21),
        ("Midnights", 22, 99),
        ("Midnights", 0, 5),
    ]


_CODE_HOUR = re.compile(r"^(\d{2})")


@dataclass
class DefaultShiftClassificationPolicy(ShiftClassificationPolicy):
    """Default shift classification implementation.

    Categories by begin time:
    - 06:00-08:00 Days, 08:30-08:49 Late Days, 09:00-11:30 Mid Days
    - 12:30-15:54 Afternoons, 18:45-20:45 Midnights
    - anything else Other, no begin time Unknown

    A supplied category always wins over the derived one.

    Length bucket is paid hours: duration (overnight shifts wrap past
    midnight) minus a 30 minute unpaid break on shifts of 6 hours or more.
    """

    category_ranges: list[tuple[str, int, int]] = field(default_factory=_default_category_ranges)
    hour_categories: list[tuple[str, int, int]] = field(default_factory=_default_hour_categories)

    unpaid_break_threshold: float = 6.0  # hours
    unpaid_break_hours: float = 0.5

    def category_for(self, info: Optional[ShiftCodeInfo]) -> str:
        if info is None:
            return "Unknown"
        if info.category:
            return info.category

        begin = info.begin_minutes
        if begin is None:
            return "Unknown"
        for category, first, last in self.category_ranges:
            if first <= begin <= last:
                return category
        return "Other"

    def category_for_code(self, code: str) -> str:
        match = _CODE_HOUR.match(code or "")
        if not match:
            return "Other"
        hour = int(match.group(1))
        for category, first, last in self.hour_categories:
            if first <= hour <= last:
                return category
        return "Other"

    def length_for(self, info: Optional[ShiftCodeInfo]) -> Optional[str]:
        if info is None:
            return None
        if info.length:
            return info.length

        hours = info.duration_hours
        if hours is None:
            return None
        if hours >= self.unpaid_break_threshold:
            hours -= self.unpaid_break_hours
        return f"{round(hours, 2):g} Hour Shift"


@dataclass
class CriteriaScoringConfig:
    """Limits used when turning raw facts into criteria dimension scores.

    Attributes:
        max_expected_5day_blocks: 5-day block count that scores 0.
        max_expected_4day_blocks: 4-day block count that scores 0.
        days_off_bonus: Bonus points per unit of days-off ratio.
        days_off_note_ratio: Days-off ratio above which the total is explained.
        explanation_day_limit: Dates listed before summarizing as "+ N more".
    """

    max_expected_5day_blocks: int = 6
    max_expected_4day_blocks: int = 8
    days_off_bonus: float = 10.0
    days_off_note_ratio: float = 0.4
    explanation_day_limit: int = 8
