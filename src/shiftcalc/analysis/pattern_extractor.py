"""Rotation pattern extraction.

Raw rotation records arrive as loosely-typed mappings with one field per
cycle day ("DAY_001", "day_1", "Day_056", ...). The extractor canonicalizes
them once into a RotationRecord with a fixed 56-slot day array, then expands
that array over the configured number of cycles into a work/off pattern and
a shift code sequence.
"""

import logging
import re
from collections.abc import Mapping
from typing import Optional, Union

from shiftcalc.domain.models import (
    BASE_DAYS_PER_CYCLE,
    OFF_CODE,
    CycleConfiguration,
    DayAssignment,
    RotationPattern,
    RotationRecord,
)

logger = logging.getLogger(__name__)

_DAY_KEY = re.compile(r"^day[_\- ]?(\d{1,3})$", re.IGNORECASE)

_ID_KEYS = ("id", "ID", "Id")
_LINE_KEYS = ("LINE", "line", "Line")
_GROUP_KEYS = ("GROUP", "group", "Group", "operation", "OPERATION")


def _first_present(raw: Mapping, keys: tuple[str, ...]):
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _to_assignment(value) -> DayAssignment:
    # Falsy cells (None, 0, False) from spreadsheet imports are days off
    if not value:
        return DayAssignment.off()
    code = str(value).strip()
    if not code or code == OFF_CODE:
        return DayAssignment.off()
    return DayAssignment.working(code)


class RotationPatternExtractor:
    """Turns raw rotation records into canonical patterns.

    Example:
        >>> extractor = RotationPatternExtractor()
        >>> config = CycleConfiguration(cycle_count=3)
        >>> pattern = extractor.extract({"id": 7, "DAY_001": "0700"}, config)
        >>> len(pattern.day_pattern)
        168
    """

    def canonicalize(self, raw: Union[Mapping, RotationRecord, None]) -> RotationRecord:
        """Build a RotationRecord from a raw mapping.

        Day field lookup tolerates casing, zero padding and separators.
        Null, empty, falsy (0, False) and "----" values are days off.
        Anything that is not a mapping degrades to an all-off record.

        Args:
            raw: Raw record mapping, or an already canonical record.

        Returns:
            RotationRecord with exactly 56 day assignments.
        """
        if isinstance(raw, RotationRecord):
            return raw
        if not isinstance(raw, Mapping):
            logger.warning("Rotation record is not a mapping (%s), treating as all off",
                           type(raw).__name__)
            return RotationRecord(id=None)

        days: list[DayAssignment] = [DayAssignment.off()] * BASE_DAYS_PER_CYCLE
        for key, value in raw.items():
            match = _DAY_KEY.match(str(key))
            if not match:
                continue
            index = int(match.group(1))
            if not 1 <= index <= BASE_DAYS_PER_CYCLE:
                logger.debug("Ignoring out-of-range day field %r", key)
                continue
            days[index - 1] = _to_assignment(value)

        line = _first_present(raw, _LINE_KEYS)
        group = _first_present(raw, _GROUP_KEYS)
        record = RotationRecord(
            id=_first_present(raw, _ID_KEYS),
            line="" if line is None else str(line),
            group="" if group is None else str(group),
            days=tuple(days),
        )
        logger.debug("Canonicalized line %s with %d work days",
                     record.label, record.work_day_count)
        return record

    def extract(
        self,
        raw: Union[Mapping, RotationRecord, None],
        config: Optional[CycleConfiguration] = None,
    ) -> RotationPattern:
        """Expand a rotation over every configured cycle.

        Absolute day i (1-based) reads cycle day ((i - 1) mod 56) + 1.

        Args:
            raw: Raw record mapping or canonical record.
            config: Cycle configuration (defaults to one cycle).

        Returns:
            RotationPattern with 56 * cycle_count entries.
        """
        config = config or CycleConfiguration()
        record = self.canonicalize(raw)

        day_pattern: list[int] = []
        shift_codes: list[str] = []
        for absolute_day in range(1, config.total_days + 1):
            assignment = record.day(config.cycle_day_for_absolute(absolute_day))
            day_pattern.append(1 if assignment.is_working else 0)
            shift_codes.append(assignment.display_code)

        return RotationPattern(record=record, day_pattern=day_pattern, shift_codes=shift_codes)

    def extract_day_pattern(
        self,
        raw: Union[Mapping, RotationRecord, None],
        config: Optional[CycleConfiguration] = None,
    ) -> list[int]:
        return self.extract(raw, config).day_pattern

    def extract_shift_codes(
        self,
        raw: Union[Mapping, RotationRecord, None],
        config: Optional[CycleConfiguration] = None,
    ) -> list[str]:
        return self.extract(raw, config).shift_codes
