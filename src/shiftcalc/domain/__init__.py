"""Domain models and business rules for rotation analysis."""

from shiftcalc.domain.models import (
    BASE_DAYS_PER_CYCLE,
    OFF_CODE,
    ComparisonRecord,
    CriteriaScore,
    CriteriaWeights,
    CycleConfiguration,
    DatedAssignment,
    DayAssignment,
    DayOffMatches,
    FilterCriteria,
    MirrorMatchResult,
    MirrorScore,
    RotationPattern,
    RotationRecord,
    ShiftCodeInfo,
    ShiftDifferenceCounts,
    WorkloadMetrics,
    format_shift_time,
    parse_time_minutes,
    time_difference_minutes,
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

__all__ = [
    # Constants
    "BASE_DAYS_PER_CYCLE",
    "OFF_CODE",
    # Models
    "ComparisonRecord",
    "CriteriaScore",
    "CriteriaWeights",
    "CycleConfiguration",
    "DatedAssignment",
    "DayAssignment",
    "DayOffMatches",
    "FilterCriteria",
    "MirrorMatchResult",
    "MirrorScore",
    "RotationPattern",
    "RotationRecord",
    "ShiftCodeInfo",
    "ShiftDifferenceCounts",
    "WorkloadMetrics",
    # Time helpers
    "format_shift_time",
    "parse_time_minutes",
    "time_difference_minutes",
    # Policies
    "CriteriaScoringConfig",
    "DefaultShiftClassificationPolicy",
    "DefaultTimeDifferencePolicy",
    "DefaultTradeScorePolicy",
    "ShiftClassificationPolicy",
    "TimeDifferencePolicy",
    "TradeScorePolicy",
]
