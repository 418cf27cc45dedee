"""Tests for comparison and classification policies."""

import pytest

from shiftcalc.domain.models import ShiftCodeInfo
from shiftcalc.domain.policies import (
    DefaultShiftClassificationPolicy,
    DefaultTimeDifferencePolicy,
    DefaultTradeScorePolicy,
)


class TestDefaultTimeDifferencePolicy:
    """Tests for DefaultTimeDifferencePolicy."""

    @pytest.fixture
    def policy(self):
        return DefaultTimeDifferencePolicy()

    def test_identical_times_score_small_variant_base(self, policy):
        """Identical times still score the small variant base."""
        assert policy.score(0, 0) == pytest.approx(5.0)

    def test_small_variant_uses_smaller_delta(self, policy):
        """Both deltas under 90 minutes score 5-15 by the smaller one."""
        assert policy.score(30, 60) == pytest.approx(5 + 30 / 90 * 10)

    def test_tiered_major_start(self, policy):
        """A 2 hour start delta is the start of the major tier."""
        assert policy.score(120, 0) == pytest.approx(30.0)

    def test_tiered_moderate(self, policy):
        """Moderate tier is linear between 25 and 50."""
        expected = (25 + 60 / 90 * 25) * 0.6 + 25 * 0.4
        assert policy.score(90, 30) == pytest.approx(expected)

    def test_extreme_is_capped(self, policy):
        """Deltas of 8 hours or more score 100."""
        assert policy.score(480, 480) == pytest.approx(100.0)
        assert policy.score(720, 600) == pytest.approx(100.0)

    def test_code_split_variant_not_significant(self, policy):
        """Same start with a modestly later end is not significant."""
        assert policy.is_significant(10, 40) is False
        assert policy.is_significant(0, 75) is False
        assert policy.is_significant(15, 89) is False

    def test_large_start_shift_significant(self, policy):
        """A 70 minute start shift is significant even with a close end."""
        assert policy.is_significant(70, 10) is True

    def test_thresholds(self, policy):
        """Start, end and total thresholds should each trigger."""
        assert policy.is_significant(60, 20) is True
        assert policy.is_significant(30, 80) is True
        assert policy.is_significant(50, 70) is True
        assert policy.is_significant(40, 30) is False

    def test_missing_values_not_significant(self, policy):
        """None and NaN deltas are never significant."""
        assert policy.is_significant(None, 100) is False
        assert policy.is_significant(float("nan"), 100) is False


class TestDefaultTradeScorePolicy:
    """Tests for DefaultTradeScorePolicy."""

    @pytest.fixture
    def policy(self):
        return DefaultTradeScorePolicy()

    def test_clone_score(self, policy):
        """Near-identical lines score 10."""
        assert policy.meaningful_trade_score(100, 5, 0, 40) == 10.0

    def test_minor_variant_score(self, policy):
        """Minor variants score 25 plus 1.5 per significant day."""
        assert policy.meaningful_trade_score(80, 15, 2, 20) == 28.0

    def test_weighted_score(self, policy):
        """Other lines use the weighted formula."""
        assert policy.meaningful_trade_score(60, 30, 4, 20) == 39.0

    def test_weighted_score_without_common_days(self, policy):
        """No common work days gives a zero significant rate."""
        assert policy.meaningful_trade_score(60, 30, 4, 0) == 33.0

    def test_candidate_threshold(self, policy):
        """Pattern scores of 50% or more are candidates."""
        assert policy.is_candidate(50.0) is True
        assert policy.is_candidate(49.9) is False

    def test_low_trade_score_dropped(self, policy):
        """Trade scores under 15 are dropped."""
        assert policy.is_worth_trading(80, 10, 1) is False

    def test_exact_clone_dropped(self, policy):
        """Exact clones without significant differences are dropped."""
        assert policy.is_worth_trading(100, 25, 0) is False

    def test_real_trade_kept(self, policy):
        """Useful trades are kept."""
        assert policy.is_worth_trading(80, 28, 2) is True

    def test_total_score(self, policy):
        """Total score is 70% pattern plus 30% difference."""
        assert policy.total_score(100, 50) == 85.0


class TestDefaultShiftClassificationPolicy:
    """Tests for DefaultShiftClassificationPolicy."""

    @pytest.fixture
    def policy(self):
        return DefaultShiftClassificationPolicy()

    @pytest.mark.parametrize("begin,expected", [
        ("06:15", "Days"),
        ("07:00", "Days"),
        ("08:00", "Days"),
        ("08:10", "Other"),
        ("08:30", "Late Days"),
        ("08:50", "Other"),
        ("10:00", "Mid Days"),
        ("13:00", "Afternoons"),
        ("19:00", "Midnights"),
        ("17:00", "Other"),
        ("03:00", "Other"),
    ])
    def test_category_by_begin(self, policy, begin, expected):
        """Categories follow the begin time."""
        info = ShiftCodeInfo(code="X", begin=begin, end="23:00")
        assert policy.category_for(info) == expected

    def test_category_supplied_wins(self, policy):
        """A supplied category overrides the derived one."""
        info = ShiftCodeInfo(code="X", begin="07:00", end="15:00", category="Training")
        assert policy.category_for(info) == "Training"

    def test_category_unknown(self, policy):
        """Missing info or begin time is Unknown."""
        assert policy.category_for(None) == "Unknown"
        assert policy.category_for(ShiftCodeInfo(code="X")) == "Unknown"

    @pytest.mark.parametrize("code,expected", [
        ("06BO", "Days"),
        ("0900", "Days"),
        ("10AX", "Mid Days"),
        ("15", "Afternoons"),
        ("19N", "Midnights"),
        ("23", "Midnights"),
        ("03", "Midnights"),
        ("AB", "Other"),
    ])
    def test_category_for_code(self, policy, code, expected):
        """Codes are categorized by their leading hour digits."""
        assert policy.category_for_code(code) == expected

    def test_length_subtracts_unpaid_break(self, policy):
        """Shifts of 6 hours or more lose a 30 minute break."""
        info = ShiftCodeInfo(code="0700", begin="07:00", end="15:30")
        assert policy.length_for(info) == "8 Hour Shift"

    def test_length_overnight(self, policy):
        """Overnight shifts wrap past midnight."""
        info = ShiftCodeInfo(code="2200", begin="22:00", end="08:00")
        assert policy.length_for(info) == "9.5 Hour Shift"

    def test_length_short_shift(self, policy):
        """Short shifts keep their full duration."""
        info = ShiftCodeInfo(code="0800", begin="08:00", end="12:00")
        assert policy.length_for(info) == "4 Hour Shift"

    def test_length_unknown(self, policy):
        """No times give no length."""
        assert policy.length_for(ShiftCodeInfo(code="X")) is None
        assert policy.length_for(None) is None
