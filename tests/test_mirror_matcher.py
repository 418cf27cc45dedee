"""Tests for mirror line matching."""

from datetime import date

import pytest

from shiftcalc.analysis.mirror_matcher import (
    MirrorMatcher,
    calculate_pattern_score,
    calculate_shift_difference_score,
    calculate_user_shift_pattern_score,
)
from shiftcalc.domain.models import (
    OFF_CODE,
    CycleConfiguration,
    RotationRecord,
    ShiftCodeInfo,
)

START = date(2025, 10, 6)  # Monday


def weekly_line(id, code, work_days=5, group="OPS"):
    """Line working the first work_days days of every week."""
    codes = [code if i % 7 < work_days else None for i in range(56)]
    return RotationRecord.from_codes(id, codes, line=f"L{id}", group=group)


def inverse_line(id, work_days=5, group="OPS"):
    """Line working exactly the days weekly_line has off."""
    codes = ["0700" if i % 7 >= work_days else None for i in range(56)]
    return RotationRecord.from_codes(id, codes, line=f"L{id}", group=group)


CATALOG = [
    ShiftCodeInfo(code="A", begin="07:00", end="15:00"),
    ShiftCodeInfo(code="A2", begin="07:00", end="15:00"),
    ShiftCodeInfo(code="C", begin="19:00", end="03:00"),
]


class TestScoreFunctions:
    """Tests for the pattern/shift score functions."""

    def test_identical_pattern_score(self):
        """A pattern compared with itself scores 100."""
        pattern = [1, 0, 1, 1, 0]
        assert calculate_pattern_score(pattern, pattern) == 100.0

    def test_partial_pattern_score(self):
        """Pattern score is the share of agreeing days."""
        assert calculate_pattern_score([1, 0, 1, 0], [1, 1, 1, 1]) == 50.0

    def test_identical_user_shift_pattern_score(self):
        """A pattern with work days fully covers itself."""
        pattern = [1, 0, 1, 1, 0]
        assert calculate_user_shift_pattern_score(pattern, pattern) == (100.0, 3)

    def test_user_shift_pattern_score_without_work_days(self):
        """No user work days gives a zero score and count."""
        assert calculate_user_shift_pattern_score([0, 0], [1, 1]) == (0.0, 0)

    def test_user_shift_pattern_score_partial(self):
        """Only user work days are considered."""
        score, work_days = calculate_user_shift_pattern_score([1, 1, 0, 0], [1, 0, 1, 1])
        assert score == 50.0
        assert work_days == 2

    def test_identical_shift_difference_score(self):
        """Identical sequences have no differing shifts."""
        shifts = ["A", OFF_CODE, "B"]
        assert calculate_shift_difference_score(shifts, shifts) == 0.0

    def test_shift_difference_without_common_days(self):
        """No common work days gives zero."""
        assert calculate_shift_difference_score(["A", OFF_CODE], [OFF_CODE, "B"]) == 0.0

    def test_odd_days_different_codes(self):
        """Same odd-day pattern with different codes is a full mirror."""
        user = ["A" if i % 2 == 0 else OFF_CODE for i in range(56)]
        other = ["B" if i % 2 == 0 else OFF_CODE for i in range(56)]
        user_flags = [0 if c == OFF_CODE else 1 for c in user]
        other_flags = [0 if c == OFF_CODE else 1 for c in other]

        assert calculate_pattern_score(user_flags, other_flags) == 100.0
        assert calculate_user_shift_pattern_score(user_flags, other_flags)[0] == 100.0
        assert calculate_shift_difference_score(user, other) == 100.0


class TestCompareShifts:
    """Tests for day-by-day comparison."""

    @pytest.fixture
    def matcher(self):
        return MirrorMatcher()

    @pytest.fixture
    def config(self):
        return CycleConfiguration(start_date=START)

    @pytest.fixture
    def catalog(self):
        return {info.code: info for info in CATALOG}

    def test_dates_and_flags(self, matcher, config):
        """Records carry dates and mismatch/difference flags."""
        records = matcher.compare_shifts(
            ["A", "A", OFF_CODE, OFF_CODE],
            ["A", "B", "B", OFF_CODE],
            config,
        )
        assert [r.date for r in records] == [date(2025, 10, 6 + i) for i in range(4)]
        assert records[0].is_different is False
        assert records[1].is_different is True
        assert records[2].is_work_day_mismatch is True
        assert records[2].is_different is False
        assert records[3].both_off is True

    def test_times_and_significance(self, matcher, config, catalog):
        """Known times produce deltas, a score and significance."""
        records = matcher.compare_shifts(["A"], ["C"], config, catalog)
        record = records[0]
        assert record.user_time == "07:00-15:00"
        assert record.other_time == "19:00-03:00"
        assert record.start_time_diff_minutes == 720
        assert record.end_time_diff_minutes == 720
        assert record.time_difference_score == pytest.approx(100.0)
        assert record.is_significant_difference is True
        assert record.is_different is True

    def test_same_times_different_codes(self, matcher, config, catalog):
        """Different codes stay different even with identical times."""
        record = matcher.compare_shifts(["A"], ["A2"], config, catalog)[0]
        assert record.is_significant_difference is False
        assert record.is_different is True

    def test_same_code_uses_significance(self, matcher, config, catalog):
        """The same code is only different when significant."""
        record = matcher.compare_shifts(["A"], ["A"], config, catalog)[0]
        assert record.time_difference_score == pytest.approx(5.0)
        assert record.is_different is False

    def test_unknown_codes_have_no_times(self, matcher, config, catalog):
        """Codes missing from the catalog have no time information."""
        record = matcher.compare_shifts(["A"], ["Z"], config, catalog)[0]
        assert record.user_time == "07:00-15:00"
        assert record.other_time == ""
        assert record.time_difference_score is None

    def test_count_shift_differences(self, matcher, config, catalog):
        """Counts aggregate categories, times, mismatches and scores."""
        records = matcher.compare_shifts(
            ["A", "A", "A", OFF_CODE, "A"],
            ["A", "C", OFF_CODE, OFF_CODE, "Z"],
            config,
            catalog,
        )
        counts = matcher.count_shift_differences(records)
        assert counts.same_category_count == 1
        assert counts.same_time_count == 1
        assert counts.different_category_count == 2
        assert counts.different_time_count == 1
        assert counts.work_day_mismatch_count == 1
        assert counts.significant_difference_count == 1
        assert counts.average_time_difference_score == pytest.approx((5.0 + 100.0) / 2)
        assert counts.common_work_days == 3


class TestFindMirroredLines:
    """Tests for the full mirror search."""

    @pytest.fixture
    def matcher(self):
        return MirrorMatcher()

    @pytest.fixture
    def config(self):
        return CycleConfiguration(start_date=START)

    @pytest.fixture
    def lines(self):
        return [
            weekly_line(1, "A"),  # reference
            weekly_line(2, "C"),  # same days, very different times
            weekly_line(3, "B", work_days=6),  # extra day, code not in catalog
            weekly_line(4, "A"),  # clone
            inverse_line(5),  # opposite days
            weekly_line(6, "C", group="OTHER"),
        ]

    def test_identical_lines(self, matcher, config):
        """A line compared with itself is a clone."""
        line = weekly_line(1, "A")
        score = matcher.score_candidate(line, line, config, {i.code: i for i in CATALOG})
        assert score.pattern_score == 100.0
        assert score.user_shift_pattern_score == 100.0
        assert score.shift_difference_score == 0.0
        assert score.significant_difference_count == 0
        assert score.meaningful_trade_score == 10.0
        assert score.total_user_work_days == 40

    def test_reference_not_found(self, matcher, lines, config):
        """Unknown reference gives no line and no scores."""
        result = matcher.find_mirrored_lines(99, lines, CATALOG, config)
        assert result.user_line is None
        assert result.mirror_scores == []

    def test_ranking_and_filtering(self, matcher, lines, config):
        """Significant lines rank first; clones and low patterns are removed."""
        result = matcher.find_mirrored_lines(1, lines, CATALOG, config)
        ids = [s.line.id for s in result.mirror_scores]
        assert result.user_line.id == 1
        assert 1 not in ids
        assert 4 not in ids  # clone
        assert 5 not in ids  # pattern below threshold
        assert ids[0] in (2, 6)
        assert ids[-1] == 3

    def test_significant_mirror_scores(self, matcher, lines, config):
        """A same-pattern line with opposite times scores as a real trade."""
        result = matcher.find_mirrored_lines(1, lines, CATALOG, config)
        score = next(s for s in result.mirror_scores if s.line.id == 2)
        assert score.pattern_score == 100.0
        assert score.shift_difference_score == 100.0
        assert score.significant_difference_count == 40
        assert score.average_time_difference_score == pytest.approx(100.0)
        assert score.meaningful_trade_score == 100.0
        assert score.total_score == 100.0
        assert len(score.comparison) == 56

    def test_minor_variant_score(self, matcher, lines, config):
        """A near pattern without time data scores as a minor variant."""
        result = matcher.find_mirrored_lines(1, lines, CATALOG, config)
        score = next(s for s in result.mirror_scores if s.line.id == 3)
        assert score.pattern_score == pytest.approx(48 / 56 * 100)
        assert score.user_shift_pattern_score == 100.0
        assert score.counts.work_day_mismatch_count == 8
        assert score.counts.different_time_count == 0
        assert score.meaningful_trade_score == 25.0

    def test_debug_info(self, matcher, lines, config):
        """Diagnostics count processed, low-score and filtered lines."""
        result = matcher.find_mirrored_lines(1, lines, CATALOG, config)
        info = result.debug_info
        assert info["processed_lines"] == 5
        assert len(info["low_score_lines"]) == 1
        assert info["low_score_lines"][0]["line"] == "L5"
        assert info["filtered_out_count"] == 1
        assert info["final_results_count"] == 3

    def test_target_groups(self, matcher, lines, config):
        """Lines outside the target groups are skipped."""
        result = matcher.find_mirrored_lines(1, lines, CATALOG, config, target_groups=["OPS"])
        ids = [s.line.id for s in result.mirror_scores]
        assert 6 not in ids
        assert [s["line"] for s in result.debug_info["skipped_lines"]] == ["L6"]

    def test_string_id_matches(self, matcher, lines, config):
        """A string id finds an integer-keyed line."""
        result = matcher.find_mirrored_lines("1", lines, CATALOG, config)
        assert result.user_line is not None

    def test_raw_records(self, matcher, config):
        """Raw mappings are accepted as candidates."""
        raw = [
            {"id": 1, "LINE": "1", "GROUP": "OPS", "DAY_001": "A", "DAY_002": "A"},
            {"id": 2, "LINE": "2", "GROUP": "OPS", "DAY_001": "C", "DAY_002": "C"},
        ]
        result = matcher.find_mirrored_lines(1, raw, CATALOG, config)
        assert [s.line.id for s in result.mirror_scores] == [2]

    def test_cycle_count_expands_comparison(self, matcher, lines):
        """Comparisons cover every cycle."""
        config = CycleConfiguration(cycle_count=3, start_date=START)
        result = matcher.find_mirrored_lines(1, lines, CATALOG, config)
        score = result.mirror_scores[0]
        assert len(score.comparison) == 168
        assert score.total_user_work_days == 120
