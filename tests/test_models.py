"""Tests for domain models."""

from datetime import date, time, timedelta

import pytest

from shiftcalc.domain.models import (
    BASE_DAYS_PER_CYCLE,
    OFF_CODE,
    CycleConfiguration,
    DayAssignment,
    RotationRecord,
    ShiftCodeInfo,
    WorkloadMetrics,
    format_shift_time,
    parse_time_minutes,
    time_difference_minutes,
)


class TestTimeHelpers:
    """Tests for time parsing and formatting helpers."""

    def test_parse_hh_mm(self):
        """Plain HH:MM should parse."""
        assert parse_time_minutes("14:30") == 870
        assert parse_time_minutes("7:05") == 425

    def test_parse_range_uses_first_part(self):
        """A time range should parse its start."""
        assert parse_time_minutes("14:30-01:00") == 870

    def test_parse_numeric(self):
        """Numeric HHMM should parse."""
        assert parse_time_minutes("0630") == 390

    def test_parse_timestamp(self):
        """A time embedded in a timestamp should parse."""
        assert parse_time_minutes("Wed Dec 31 1969 20:00:00 GMT-0500") == 1200

    def test_parse_time_object(self):
        """datetime.time values should parse."""
        assert parse_time_minutes(time(7, 15)) == 435

    def test_parse_invalid(self):
        """Unparseable values should give None."""
        assert parse_time_minutes("soon") is None
        assert parse_time_minutes("") is None
        assert parse_time_minutes(None) is None

    def test_difference_wraps_midnight(self):
        """Differences over 12 hours wrap around midnight."""
        assert time_difference_minutes("23:30", "00:30") == 60

    def test_difference_plain(self):
        """Same-day differences are absolute."""
        assert time_difference_minutes("15:00", "07:00") == 480

    def test_difference_unparseable_is_zero(self):
        """Unparseable times give a zero difference."""
        assert time_difference_minutes("later", "07:00") == 0

    def test_format_shift_time(self):
        """Begin/end should be formatted as HH:MM-HH:MM."""
        assert format_shift_time("7:00", "15:30") == "07:00-15:30"
        assert format_shift_time("", "15:30") == ""


class TestRotationRecord:
    """Tests for RotationRecord and DayAssignment."""

    def test_default_is_all_off(self):
        """A record without days should have 56 days off."""
        record = RotationRecord(id=1)
        assert len(record.days) == BASE_DAYS_PER_CYCLE
        assert all(d.is_off for d in record.days)

    def test_from_codes_pads_and_normalizes(self):
        """from_codes should map sentinels to off and pad to 56 days."""
        record = RotationRecord.from_codes(1, ["0700", OFF_CODE, "", None, " 1900 "])
        assert len(record.days) == BASE_DAYS_PER_CYCLE
        assert record.day(1) == DayAssignment.working("0700")
        assert record.day(2).is_off
        assert record.day(3).is_off
        assert record.day(4).is_off
        assert record.day(5).code == "1900"
        assert record.work_day_count == 2

    def test_display_code(self):
        """Days off display as the off sentinel."""
        assert DayAssignment.off().display_code == OFF_CODE
        assert DayAssignment.working("D8").display_code == "D8"

    def test_label_falls_back_to_id(self):
        """Label should use the line name, falling back to the id."""
        assert RotationRecord(id=7, line="L7").label == "L7"
        assert RotationRecord(id=7).label == "7"


class TestShiftCodeInfo:
    """Tests for ShiftCodeInfo."""

    def test_duration_day_shift(self):
        """Day shift duration should be end minus begin."""
        info = ShiftCodeInfo(code="0700", begin="07:00", end="15:30")
        assert info.duration_hours == 8.5

    def test_duration_overnight(self):
        """Overnight shifts should wrap past midnight."""
        info = ShiftCodeInfo(code="2200", begin="22:00", end="06:00")
        assert info.duration_hours == 8.0

    def test_duration_unknown(self):
        """Missing times give no duration."""
        assert ShiftCodeInfo(code="X").duration_hours is None


class TestCycleConfiguration:
    """Tests for CycleConfiguration."""

    def test_total_days(self):
        """Total days should be 56 per cycle."""
        assert CycleConfiguration(cycle_count=3).total_days == 168

    def test_cycle_day_for_absolute(self):
        """Absolute days should wrap every 56 days."""
        config = CycleConfiguration(cycle_count=3)
        assert config.cycle_day_for_absolute(1) == 1
        assert config.cycle_day_for_absolute(56) == 56
        assert config.cycle_day_for_absolute(57) == 1
        assert config.cycle_day_for_absolute(168) == 56

    def test_cycle_day_for_date_before_start(self):
        """A date one cycle before the start maps to the start's cycle day."""
        start = date(2025, 10, 9)
        config = CycleConfiguration(start_date=start)
        assert config.cycle_day_for_date(start) == 1
        assert config.cycle_day_for_date(start - timedelta(days=56)) == 1
        assert config.cycle_day_for_date(start - timedelta(days=1)) == 56
        assert config.cycle_day_for_date(start + timedelta(days=57)) == 2

    def test_invalid_cycle_count(self):
        """A cycle count below 1 should fall back to 1."""
        assert CycleConfiguration(cycle_count=0).cycle_count == 1

    def test_from_settings(self):
        """Settings values should be read."""
        config = CycleConfiguration.from_settings({"numCycles": 3, "startDate": "2025-10-09"})
        assert config.cycle_count == 3
        assert config.start_date == date(2025, 10, 9)

    def test_from_settings_defaults(self):
        """Missing settings give one cycle starting today."""
        config = CycleConfiguration.from_settings(None)
        assert config.cycle_count == 1
        assert config.start_date == date.today()

    def test_from_settings_unparseable(self):
        """Unparseable settings fall back to defaults."""
        config = CycleConfiguration.from_settings({"numCycles": "many", "startDate": "someday"})
        assert config.cycle_count == 1
        assert config.start_date == date.today()

    def test_end_date(self):
        """End date is the day after the period."""
        config = CycleConfiguration(cycle_count=1, start_date=date(2025, 10, 6))
        assert config.end_date == date(2025, 12, 1)


class TestWorkloadMetrics:
    """Tests for WorkloadMetrics scaling."""

    def test_scaled_multiplies_counts(self):
        """Counts should be multiplied, stretches should not."""
        metrics = WorkloadMetrics(weekends_on=2, longest_stretch=5, shortest_off_stretch=2,
                                  shift_pattern="0700")
        scaled = metrics.scaled(3)
        assert scaled.weekends_on == 6
        assert scaled.longest_stretch == 5
        assert scaled.shortest_off_stretch == 2
        assert scaled.shift_pattern == "0700"

    @pytest.mark.parametrize("count", [1, 2])
    def test_scaled_returns_copy(self, count):
        """Scaling should not modify the original."""
        metrics = WorkloadMetrics(total_days_worked=10)
        metrics.scaled(count)
        assert metrics.total_days_worked == 10
