"""Main analysis interface.

This module provides the high-level RotationAnalyzer class that wires the
pattern extractor, mirror matcher, workload metrics analyzer and criteria
scorer together with a shared set of policies.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Optional, Union

from shiftcalc.analysis.criteria_scorer import CriteriaScorer
from shiftcalc.analysis.mirror_matcher import MirrorMatcher
from shiftcalc.analysis.pattern_extractor import RotationPatternExtractor
from shiftcalc.analysis.workload_metrics import WorkloadMetricsAnalyzer
from shiftcalc.domain.models import (
    CriteriaScore,
    CycleConfiguration,
    FilterCriteria,
    MirrorMatchResult,
    RotationRecord,
    ShiftCodeInfo,
    WorkloadMetrics,
)
from shiftcalc.domain.policies import (
    CriteriaScoringConfig,
    DefaultShiftClassificationPolicy,
    DefaultTimeDifferencePolicy,
    DefaultTradeScorePolicy,
    ShiftClassificationPolicy,
    TimeDifferencePolicy,
    TradeScorePolicy,
)

logger = logging.getLogger(__name__)

RawRotation = Union[Mapping, RotationRecord]


class RotationAnalyzer:
    """High-level analyzer for rotation trade, workload and criteria questions.

    Example:
        >>> analyzer = RotationAnalyzer(config=CycleConfiguration(cycle_count=3))
        >>> result = analyzer.find_mirrored_lines(12, lines, shift_codes)
        >>> metrics = analyzer.workload_metrics(lines[0], holidays)
    """

    def __init__(
        self,
        config: Optional[CycleConfiguration] = None,
        time_policy: Optional[TimeDifferencePolicy] = None,
        trade_policy: Optional[TradeScorePolicy] = None,
        classification_policy: Optional[ShiftClassificationPolicy] = None,
        scoring_config: Optional[CriteriaScoringConfig] = None,
    ):
        """Initialize analyzer with configuration and policies.

        Args:
            config: Cycle configuration shared by every analysis.
            time_policy: Rules for shift time differences.
            trade_policy: Rules for mirror trade scoring.
            classification_policy: Rules for shift categories and lengths.
            scoring_config: Limits for criteria scoring.
        """
        self.config = config or CycleConfiguration()
        self.time_policy = time_policy or DefaultTimeDifferencePolicy()
        self.trade_policy = trade_policy or DefaultTradeScorePolicy()
        self.classification_policy = classification_policy or DefaultShiftClassificationPolicy()
        self.scoring_config = scoring_config or CriteriaScoringConfig()

        self.extractor = RotationPatternExtractor()
        self.mirror_matcher = MirrorMatcher(
            time_policy=self.time_policy,
            trade_policy=self.trade_policy,
            extractor=self.extractor,
        )
        self.metrics_analyzer = WorkloadMetricsAnalyzer(extractor=self.extractor)
        self.criteria_scorer = CriteriaScorer(
            classification_policy=self.classification_policy,
            scoring_config=self.scoring_config,
            extractor=self.extractor,
        )

    def find_mirrored_lines(
        self,
        user_line_id,
        schedules: Sequence[RawRotation],
        shift_codes: Optional[Sequence[ShiftCodeInfo]] = None,
        target_groups: Optional[Sequence[str]] = None,
    ) -> MirrorMatchResult:
        return self.mirror_matcher.find_mirrored_lines(
            user_line_id,
            schedules,
            shift_codes=shift_codes,
            config=self.config,
            target_groups=target_groups,
        )

    def workload_metrics(
        self,
        raw: RawRotation,
        holidays: Optional[Iterable[date]] = None,
    ) -> WorkloadMetrics:
        return self.metrics_analyzer.analyze_rotation(raw, self.config, holidays)

    def score_line(
        self,
        raw: RawRotation,
        criteria: FilterCriteria,
        shift_codes: Optional[Sequence[ShiftCodeInfo]] = None,
    ) -> CriteriaScore:
        return self.criteria_scorer.score(raw, criteria, self.config, shift_codes)

    def score_lines(
        self,
        schedules: Sequence[RawRotation],
        criteria: FilterCriteria,
        shift_codes: Optional[Sequence[ShiftCodeInfo]] = None,
    ) -> list[tuple[RotationRecord, CriteriaScore]]:
        """Score every rotation and rank them, best first.

        Rotations rejected by a hard filter (group mismatch, no variety) are
        left out; rotations whose weighted score is 0 are kept and rank last.
        """
        ranked, _ = self.score_lines_with_stats(schedules, criteria, shift_codes)
        return ranked

    def score_lines_with_stats(
        self,
        schedules: Sequence[RawRotation],
        criteria: FilterCriteria,
        shift_codes: Optional[Sequence[ShiftCodeInfo]] = None,
    ) -> tuple[list[tuple[RotationRecord, CriteriaScore]], dict]:
        """Score and rank rotations, also returning summary statistics.

        Returns:
            Tuple of (ranked results, statistics dict).
        """
        results = []
        excluded = 0
        for raw in schedules:
            record = self.extractor.canonicalize(raw)
            result = self.criteria_scorer.score(record, criteria, self.config, shift_codes)
            if result.excluded:
                excluded += 1
                continue
            results.append((record, result))

        # Stable: ties keep input order
        results.sort(key=lambda item: item[1].score, reverse=True)

        stats = {
            "total_lines": len(schedules),
            "scored_lines": len(results),
            "excluded_lines": excluded,
            "zero_scores": sum(1 for _, r in results if r.score == 0),
            "best_score": results[0][1].score if results else 0,
            "average_score": (
                sum(r.score for _, r in results) / len(results) if results else 0.0
            ),
        }
        logger.info("Scored %d of %d lines (%d excluded)",
                    stats["scored_lines"], stats["total_lines"], excluded)
        return results, stats
