"""Rotation analysis engine components."""

from shiftcalc.analysis.analyzer import RotationAnalyzer
from shiftcalc.analysis.blocks import (
    Run,
    count_blocks_exact_expansion,
    count_blocks_with_cycle_wraparound,
    count_exact_blocks,
    find_runs,
)
from shiftcalc.analysis.criteria_scorer import CriteriaScorer, WeekendSummary
from shiftcalc.analysis.mirror_matcher import (
    MirrorMatcher,
    calculate_pattern_score,
    calculate_shift_difference_score,
    calculate_user_shift_pattern_score,
)
from shiftcalc.analysis.pattern_extractor import RotationPatternExtractor
from shiftcalc.analysis.workload_metrics import WorkloadMetricsAnalyzer, shift_pattern_label

__all__ = [
    "RotationAnalyzer",
    "RotationPatternExtractor",
    # Mirror matching
    "MirrorMatcher",
    "calculate_pattern_score",
    "calculate_shift_difference_score",
    "calculate_user_shift_pattern_score",
    # Workload metrics
    "WorkloadMetricsAnalyzer",
    "shift_pattern_label",
    # Criteria scoring
    "CriteriaScorer",
    "WeekendSummary",
    # Blocks
    "Run",
    "count_blocks_exact_expansion",
    "count_blocks_with_cycle_wraparound",
    "count_exact_blocks",
    "find_runs",
]
