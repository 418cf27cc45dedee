"""Mirror line matching.

Finds rotations that are good shift-trade partners for a reference rotation:
lines whose work/off pattern largely agrees with the reference, but whose
shifts differ enough on common work days to make a trade worthwhile.
Near-identical clones are filtered out.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Optional, Union

from shiftcalc.analysis.pattern_extractor import RotationPatternExtractor
from shiftcalc.domain.models import (
    OFF_CODE,
    ComparisonRecord,
    CycleConfiguration,
    MirrorMatchResult,
    MirrorScore,
    RotationRecord,
    ShiftCodeInfo,
    ShiftDifferenceCounts,
    format_shift_time,
    time_difference_minutes,
)
from shiftcalc.domain.policies import (
    DefaultTimeDifferencePolicy,
    DefaultTradeScorePolicy,
    TimeDifferencePolicy,
    TradeScorePolicy,
)

logger = logging.getLogger(__name__)

RawRotation = Union[Mapping, RotationRecord]


def calculate_pattern_score(pattern1: Sequence[int], pattern2: Sequence[int]) -> float:
    """Percentage of days where both work/off flags agree."""
    if not pattern1:
        return 0.0
    matches = sum(1 for a, b in zip(pattern1, pattern2) if a == b)
    return matches / len(pattern1) * 100


def calculate_user_shift_pattern_score(
    user_pattern: Sequence[int],
    other_pattern: Sequence[int],
) -> tuple[float, int]:
    """Percentage of the user's work days the other line also works.

    Returns:
        Tuple of (score, user_work_day_count). Score is 0 when the user has
        no work days.
    """
    user_work_days = 0
    matching = 0
    for user_flag, other_flag in zip(user_pattern, other_pattern):
        if user_flag == 1:
            user_work_days += 1
            if other_flag == 1:
                matching += 1

    if user_work_days == 0:
        return 0.0, 0
    return matching / user_work_days * 100, user_work_days


def calculate_shift_difference_score(shifts1: Sequence[str], shifts2: Sequence[str]) -> float:
    """Percentage of common work days with different shift codes."""
    common = 0
    different = 0
    for first, second in zip(shifts1, shifts2):
        if first == OFF_CODE or second == OFF_CODE:
            continue
        common += 1
        if first != second:
            different += 1

    if common == 0:
        return 0.0
    return different / common * 100


def _same_id(first, second) -> bool:
    if first is None or second is None:
        return False
    return first == second or str(first) == str(second)


class MirrorMatcher:
    """Scores and ranks candidate rotations as trade partners.

    Example:
        >>> matcher = MirrorMatcher()
        >>> result = matcher.find_mirrored_lines(
        ...     user_line_id=12,
        ...     schedules=all_lines,
        ...     shift_codes=catalog,
        ...     config=CycleConfiguration(cycle_count=3),
        ... )
        >>> best = result.mirror_scores[0]
    """

    def __init__(
        self,
        time_policy: Optional[TimeDifferencePolicy] = None,
        trade_policy: Optional[TradeScorePolicy] = None,
        extractor: Optional[RotationPatternExtractor] = None,
    ):
        """Initialize matcher with policies.

        Args:
            time_policy: Rules for scoring shift time differences.
            trade_policy: Rules for trade scores, filtering and ranking.
            extractor: Pattern extractor for raw records.
        """
        self.time_policy = time_policy or DefaultTimeDifferencePolicy()
        self.trade_policy = trade_policy or DefaultTradeScorePolicy()
        self.extractor = extractor or RotationPatternExtractor()

    def compare_shifts(
        self,
        shifts1: Sequence[str],
        shifts2: Sequence[str],
        config: CycleConfiguration,
        shift_codes: Optional[dict[str, ShiftCodeInfo]] = None,
    ) -> list[ComparisonRecord]:
        """Build day-by-day comparison records.

        Args:
            shifts1: Reference shift sequence (OFF_CODE for days off).
            shifts2: Candidate shift sequence.
            config: Cycle configuration providing the start date.
            shift_codes: Shift code metadata keyed by code.

        Returns:
            One ComparisonRecord per absolute day.
        """
        shift_codes = shift_codes or {}
        records = []

        for index, (user_code, other_code) in enumerate(zip(shifts1, shifts2)):
            user_off = user_code == OFF_CODE
            other_off = other_code == OFF_CODE
            record = ComparisonRecord(
                day=index + 1,
                date=config.date_for_absolute_day(index + 1),
                user_shift=user_code,
                other_shift=other_code,
                is_different=user_code != other_code and not user_off and not other_off,
                is_work_day_mismatch=user_off != other_off,
            )

            user_info = None if user_off else shift_codes.get(user_code)
            other_info = None if other_off else shift_codes.get(other_code)
            if user_info is not None:
                record.user_time = format_shift_time(user_info.begin, user_info.end)
            if other_info is not None:
                record.other_time = format_shift_time(other_info.begin, other_info.end)

            if (
                user_info is not None
                and other_info is not None
                and user_info.has_times
                and other_info.has_times
            ):
                start_diff = time_difference_minutes(user_info.begin, other_info.begin)
                end_diff = time_difference_minutes(user_info.end, other_info.end)
                record.start_time_diff_minutes = start_diff
                record.end_time_diff_minutes = end_diff
                record.time_difference_score = self.time_policy.score(start_diff, end_diff)
                record.is_significant_difference = self.time_policy.is_significant(
                    start_diff, end_diff
                )
                if user_code == other_code:
                    record.is_different = record.is_significant_difference
                else:
                    record.is_different = True

            records.append(record)

        return records

    def count_shift_differences(self, comparison: Sequence[ComparisonRecord]) -> ShiftDifferenceCounts:
        """Aggregate comparison records into difference counts."""
        counts = ShiftDifferenceCounts()
        score_total = 0.0
        scored_days = 0

        for record in comparison:
            if record.is_work_day_mismatch:
                counts.work_day_mismatch_count += 1
                continue
            if record.both_off:
                continue

            if record.is_different:
                counts.different_category_count += 1
                if record.has_times:
                    counts.different_time_count += 1
            else:
                counts.same_category_count += 1
                if record.has_times:
                    counts.same_time_count += 1

            if record.is_significant_difference:
                counts.significant_difference_count += 1

            if record.time_difference_score is not None:
                score_total += record.time_difference_score
                scored_days += 1

        counts.average_time_difference_score = score_total / scored_days if scored_days else 0.0
        return counts

    def score_candidate(
        self,
        user: RawRotation,
        other: RawRotation,
        config: Optional[CycleConfiguration] = None,
        shift_codes: Optional[dict[str, ShiftCodeInfo]] = None,
    ) -> MirrorScore:
        """Score a single candidate against the reference rotation."""
        config = config or CycleConfiguration()
        user_pattern = self.extractor.extract(user, config)
        other_pattern = self.extractor.extract(other, config)

        pattern_score = calculate_pattern_score(
            user_pattern.day_pattern, other_pattern.day_pattern
        )
        user_shift_score, user_work_days = calculate_user_shift_pattern_score(
            user_pattern.day_pattern, other_pattern.day_pattern
        )
        difference_score = calculate_shift_difference_score(
            user_pattern.shift_codes, other_pattern.shift_codes
        )

        comparison = self.compare_shifts(
            user_pattern.shift_codes, other_pattern.shift_codes, config, shift_codes
        )
        counts = self.count_shift_differences(comparison)
        trade_score = self.trade_policy.meaningful_trade_score(
            pattern_score,
            counts.average_time_difference_score,
            counts.significant_difference_count,
            counts.common_work_days,
        )

        return MirrorScore(
            line=other_pattern.record,
            pattern_score=pattern_score,
            user_shift_pattern_score=user_shift_score,
            shift_difference_score=difference_score,
            total_score=self.trade_policy.total_score(pattern_score, difference_score),
            counts=counts,
            meaningful_trade_score=trade_score,
            total_user_work_days=user_work_days,
            comparison=comparison,
        )

    def find_mirrored_lines(
        self,
        user_line_id,
        schedules: Sequence[RawRotation],
        shift_codes: Optional[Sequence[ShiftCodeInfo]] = None,
        config: Optional[CycleConfiguration] = None,
        target_groups: Optional[Sequence[str]] = None,
    ) -> MirrorMatchResult:
        """Find and rank trade partners for a rotation.

        Args:
            user_line_id: Id of the reference rotation in schedules.
            schedules: Candidate pool, including the reference rotation.
            shift_codes: Optional shift code catalog.
            config: Cycle configuration (defaults to one cycle from today).
            target_groups: Only consider candidates in these groups.

        Returns:
            MirrorMatchResult with ranked scores; user_line is None when the
            id isn't in the pool.
        """
        config = config or CycleConfiguration()
        records = [self.extractor.canonicalize(raw) for raw in schedules]
        catalog = {info.code: info for info in (shift_codes or [])}

        debug_info = {
            "input_params": {
                "user_line_id": user_line_id,
                "total_schedules": len(records),
                "shift_codes_count": len(catalog),
                "cycle_count": config.cycle_count,
                "target_groups": list(target_groups or []),
            },
            "processed_lines": 0,
            "skipped_lines": [],
            "low_score_lines": [],
        }

        user_line = next((r for r in records if _same_id(r.id, user_line_id)), None)
        if user_line is None:
            logger.warning("Reference line %r not found among %d lines", user_line_id, len(records))
            return MirrorMatchResult(user_line=None, debug_info=debug_info)

        logger.info("Finding mirror lines for %s (group %s) over %d cycle(s)",
                    user_line.label, user_line.group, config.cycle_count)

        scores: list[MirrorScore] = []
        for other in records:
            if _same_id(other.id, user_line.id):
                continue
            if target_groups and other.group not in target_groups:
                debug_info["skipped_lines"].append({
                    "line": other.line,
                    "group": other.group,
                    "reason": "Not in target groups",
                })
                continue

            debug_info["processed_lines"] += 1
            score = self.score_candidate(user_line, other, config, catalog)

            if self.trade_policy.is_candidate(score.pattern_score):
                scores.append(score)
            else:
                debug_info["low_score_lines"].append({
                    "line": other.line,
                    "group": other.group,
                    "pattern_score": score.pattern_score,
                    "reason": "Pattern score below threshold",
                })

        kept = [
            s for s in scores
            if self.trade_policy.is_worth_trading(
                s.pattern_score, s.meaningful_trade_score, s.significant_difference_count
            )
        ]
        kept.sort(key=self._rank_key)

        debug_info["final_results_count"] = len(kept)
        debug_info["filtered_out_count"] = len(scores) - len(kept)
        logger.info("Found %d mirror lines for %s (%d filtered out)",
                    len(kept), user_line.label, len(scores) - len(kept))

        return MirrorMatchResult(mirror_scores=kept, user_line=user_line, debug_info=debug_info)

    @staticmethod
    def _rank_key(score: MirrorScore) -> tuple[bool, float]:
        # Lines with no significant difference rank below any with one
        significant = score.significant_difference_count
        return (significant == 0, -(significant * 3 + score.user_shift_pattern_score))
