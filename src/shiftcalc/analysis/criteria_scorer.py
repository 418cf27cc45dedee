"""Criteria-based rotation scoring.

Scores a rotation against a user's search criteria: wanted days off, shift
codes, time-of-day categories and lengths, and how much the user wants to
avoid long work blocks and weekend work. Each enabled dimension produces a
0-100 score; the final score is their weighted average plus a small bonus for
rotations with many days off.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Union

from shiftcalc.analysis.blocks import count_blocks_with_cycle_wraparound
from shiftcalc.analysis.pattern_extractor import RotationPatternExtractor
from shiftcalc.domain.models import (
    OFF_CODE,
    CriteriaScore,
    CycleConfiguration,
    DayOffMatches,
    FilterCriteria,
    RotationRecord,
    ShiftCodeInfo,
)
from shiftcalc.domain.policies import (
    CriteriaScoringConfig,
    DefaultShiftClassificationPolicy,
    ShiftClassificationPolicy,
)

logger = logging.getLogger(__name__)

SATURDAY = 5


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_day(day: date) -> str:
    """Compact "Jan 15" label."""
    return f"{day:%b} {day.day}"


@dataclass
class WeekendSummary:
    """Weekend work over the analyzed period."""

    full: int = 0
    saturday_only: int = 0
    sunday_only: int = 0
    off: int = 0

    @property
    def total(self) -> int:
        return self.full + self.saturday_only + self.sunday_only + self.off


class _Accumulator:
    def __init__(self):
        self.total = 0.0
        self.weight = 0.0

    def add(self, score: float, weight: float) -> None:
        if weight > 0:
            self.total += score * weight
            self.weight += weight

    @property
    def average(self) -> float:
        return self.total / self.weight if self.weight > 0 else 0.0


class CriteriaScorer:
    """Scores rotations against filter criteria.

    Example:
        >>> scorer = CriteriaScorer()
        >>> criteria = FilterCriteria(day_off_dates=[date(2025, 12, 25)])
        >>> result = scorer.score(record, criteria, CycleConfiguration(cycle_count=3))
        >>> result.score
        87
    """

    def __init__(
        self,
        classification_policy: Optional[ShiftClassificationPolicy] = None,
        scoring_config: Optional[CriteriaScoringConfig] = None,
        extractor: Optional[RotationPatternExtractor] = None,
    ):
        self.classification_policy = classification_policy or DefaultShiftClassificationPolicy()
        self.scoring_config = scoring_config or CriteriaScoringConfig()
        self.extractor = extractor or RotationPatternExtractor()

    def day_off_matches(
        self,
        record: RotationRecord,
        requested: Sequence[date],
        config: CycleConfiguration,
    ) -> DayOffMatches:
        """Split requested dates into those on the rotation's days off and the rest."""
        matches = DayOffMatches()
        for day in requested:
            if record.day(config.cycle_day_for_date(day)).is_off:
                matches.matched.append(day)
            else:
                matches.missing.append(day)
        return matches

    def shift_counts(self, shift_codes: Sequence[str]) -> tuple[dict[str, int], int]:
        """Count worked days per code. Returns (counts, total worked days)."""
        counts: dict[str, int] = {}
        for code in shift_codes:
            if code == OFF_CODE:
                continue
            counts[code] = counts.get(code, 0) + 1
        return counts, sum(counts.values())

    def category_of(self, code: str, catalog: Mapping[str, ShiftCodeInfo]) -> str:
        """Category from catalog metadata, falling back to the code's hour digits."""
        info = catalog.get(code)
        if info is not None:
            category = self.classification_policy.category_for(info)
            if category != "Unknown":
                return category
        return self.classification_policy.category_for_code(code)

    def analyze_weekends(self, record: RotationRecord, config: CycleConfiguration) -> WeekendSummary:
        """Classify every weekend in the period as full, Saturday/Sunday only or off.

        Starts at the first Saturday on or after the start date and includes
        each weekend whose Sunday is on or before the period end date.
        """
        summary = WeekendSummary()
        end = config.end_date
        saturday = config.start_date + timedelta(days=(SATURDAY - config.start_date.weekday()) % 7)

        while saturday < end:
            sunday = saturday + timedelta(days=1)
            if sunday <= end:
                sat_works = record.day(config.cycle_day_for_date(saturday)).is_working
                sun_works = record.day(config.cycle_day_for_date(sunday)).is_working
                if sat_works and sun_works:
                    summary.full += 1
                elif sat_works:
                    summary.saturday_only += 1
                elif sun_works:
                    summary.sunday_only += 1
                else:
                    summary.off += 1
            saturday += timedelta(days=7)

        return summary

    def _describe_days(self, prefix: str, days: Sequence[date]) -> str:
        limit = self.scoring_config.explanation_day_limit
        labels = ", ".join(format_day(d) for d in days[:limit])
        if len(days) > limit:
            return f"{prefix}: {labels} + {len(days) - limit} more"
        return f"{prefix}: {labels}"

    def _describe_codes(
        self,
        selected: Sequence[str],
        counts: dict[str, int],
        total: int,
        rate: float,
    ) -> str:
        percent = round_half_up(rate * 100)
        found = [code for code in selected if counts.get(code)]
        matching = sum(counts[code] for code in found)

        if len(found) == 1:
            text = f"{matching} of {total} total shifts are {found[0]} ({percent}%)"
        elif len(found) > 1:
            details = ", ".join(f"{code}: {counts[code]}" for code in found)
            text = f"{matching} of {total} total shifts are {details} ({percent}%)"
        else:
            text = f"{percent}% of shifts match selected codes"

        others = {code: count for code, count in counts.items() if code not in selected}
        other_count = total - matching
        if found and other_count > 0:
            if len(others) == 1:
                text += f"; The other {other_count} shifts are: {next(iter(others))}"
            else:
                details = ", ".join(f"{code}: {count}" for code, count in others.items())
                text += f"; The other {other_count} shifts are: {details}"
        return text

    def score(
        self,
        raw: Union[Mapping, RotationRecord],
        criteria: FilterCriteria,
        config: Optional[CycleConfiguration] = None,
        shift_codes: Optional[Sequence[ShiftCodeInfo]] = None,
    ) -> CriteriaScore:
        """Score a rotation against criteria.

        Args:
            raw: Raw record mapping or canonical record.
            criteria: The user's filter criteria and weights.
            config: Cycle configuration (defaults to one cycle from today).
            shift_codes: Optional shift code catalog.

        Returns:
            CriteriaScore with the final score, explanation and raw facts.
        """
        config = config or CycleConfiguration()
        catalog = {info.code: info for info in (shift_codes or [])}
        weights = criteria.weights
        pattern = self.extractor.extract(raw, config)
        record = pattern.record

        accumulator = _Accumulator()
        explanation: list[str] = []

        if criteria.selected_groups:
            if record.group not in criteria.selected_groups:
                logger.debug("Line %s group %r not in %s", record.label, record.group,
                             criteria.selected_groups)
                return CriteriaScore(score=0, explanation="Group mismatch", excluded=True)
            accumulator.add(100.0, weights.group)
            explanation.append("Group matches")

        day_matches = None
        if criteria.day_off_dates:
            day_matches = self.day_off_matches(record, criteria.day_off_dates, config)
            rate = day_matches.match_rate
            accumulator.add(100 * rate, weights.days_off)
            explanation.append(
                f"{round_half_up(rate * 100)}% of requested days off match "
                f"({len(day_matches.matched)}/{day_matches.total})"
            )
            if day_matches.matched:
                explanation.append(self._describe_days("Days off", day_matches.matched))
            if day_matches.missing:
                explanation.append(self._describe_days("Missing", day_matches.missing))

        counts, total_shifts = self.shift_counts(pattern.shift_codes)

        if criteria.selected_codes:
            matched = sum(counts.get(code, 0) for code in criteria.selected_codes)
            rate = matched / total_shifts if total_shifts else 0.0
            accumulator.add(100 * rate, weights.shift)
            explanation.append(self._describe_codes(criteria.selected_codes, counts, total_shifts, rate))

        if criteria.selected_categories:
            category_counts: dict[str, int] = {}
            for code, count in counts.items():
                category = self.category_of(code, catalog)
                if category in criteria.selected_categories:
                    category_counts[category] = category_counts.get(category, 0) + count

            wants_mix = criteria.category_intent == "mix" and len(criteria.selected_categories) > 1
            if wants_mix and len(category_counts) < 2:
                return CriteriaScore(
                    score=0, explanation="Single shift type (looking for variety)", excluded=True
                )

            rate = sum(category_counts.values()) / total_shifts if total_shifts else 0.0
            accumulator.add(100 * rate, weights.shift)
            if wants_mix:
                explanation.append(
                    f"{len(category_counts)} different shift types "
                    f"({', '.join(category_counts)})"
                )
            else:
                explanation.append(f"{round_half_up(rate * 100)}% of shifts match selected categories")

        if criteria.selected_lengths:
            matched = sum(
                count for code, count in counts.items()
                if self.classification_policy.length_for(catalog.get(code)) in criteria.selected_lengths
            )
            rate = matched / total_shifts if total_shifts else 0.0
            accumulator.add(100 * rate, weights.shift)
            explanation.append(f"{round_half_up(rate * 100)}% of shifts match selected lengths")

        cycle_flags = pattern.day_pattern[:config.base_days]
        blocks_5day = count_blocks_with_cycle_wraparound(cycle_flags, 5, config.cycle_count)
        blocks_4day = count_blocks_with_cycle_wraparound(cycle_flags, 4, config.cycle_count)

        if weights.blocks_5day > 0:
            max_blocks = self.scoring_config.max_expected_5day_blocks
            accumulator.add(max(0.0, 100 - blocks_5day / max_blocks * 100), weights.blocks_5day)
            if blocks_5day > 0:
                explanation.append(f"{blocks_5day} five-day work blocks")

        if weights.blocks_4day > 0:
            max_blocks = self.scoring_config.max_expected_4day_blocks
            accumulator.add(max(0.0, 100 - blocks_4day / max_blocks * 100), weights.blocks_4day)
            if blocks_4day > 0:
                explanation.append(f"{blocks_4day} four-day work blocks")

        weekends = self.analyze_weekends(record, config)
        total_weekends = weekends.total

        def _share_off(worked: int) -> float:
            if total_weekends == 0:
                return 100.0
            return max(0.0, 100 * (1 - worked / total_weekends))

        if weights.weekend > 0:
            accumulator.add(_share_off(weekends.full), weights.weekend)
            if weekends.full > 0:
                explanation.append(f"{weekends.full} of {total_weekends} full weekends working")

        if weights.saturday > 0:
            accumulator.add(_share_off(weekends.full + weekends.saturday_only), weights.saturday)
            if weekends.saturday_only > 0:
                explanation.append(f"{weekends.saturday_only} solitary Saturdays working")

        if weights.sunday > 0:
            accumulator.add(_share_off(weekends.full + weekends.sunday_only), weights.sunday)
            if weekends.sunday_only > 0:
                explanation.append(f"{weekends.sunday_only} solitary Sundays working")

        total_days_off = len(pattern) - pattern.work_day_count
        days_off_ratio = total_days_off / len(pattern) if len(pattern) else 0.0
        final = accumulator.average + days_off_ratio * self.scoring_config.days_off_bonus
        if days_off_ratio > self.scoring_config.days_off_note_ratio:
            explanation.append(f"{total_days_off} total days off")

        score = max(0, min(100, round_half_up(final)))
        logger.debug("Line %s scored %d", record.label, score)

        return CriteriaScore(
            score=score,
            explanation="; ".join(explanation),
            full_weekends=weekends.full,
            solitary_saturdays=weekends.saturday_only,
            solitary_sundays=weekends.sunday_only,
            total_weekends=total_weekends,
            blocks_5day=blocks_5day,
            blocks_4day=blocks_4day,
            shift_counts=counts,
            total_shifts=total_shifts,
            day_off_details=day_matches,
        )
