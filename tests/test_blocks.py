"""Tests for run detection and block counting strategies."""

import pytest

from shiftcalc.analysis.blocks import (
    Run,
    count_blocks_exact_expansion,
    count_blocks_with_cycle_wraparound,
    count_exact_blocks,
    find_runs,
)


def straddling_cycle():
    """Cycle with a 5-day block inside and a 5-day run across the junction.

    Days 1-3 and 55-56 work (3 + 2 across the junction), days 10-14 work.
    """
    flags = [0] * 56
    for index in (0, 1, 2, 9, 10, 11, 12, 13, 54, 55):
        flags[index] = 1
    return flags


class TestFindRuns:
    """Tests for find_runs."""

    def test_runs(self):
        """Runs should split on flag changes."""
        assert find_runs([1, 1, 0, 1]) == [
            Run(start=0, length=2, working=True),
            Run(start=2, length=1, working=False),
            Run(start=3, length=1, working=True),
        ]

    def test_empty(self):
        """No flags give no runs."""
        assert find_runs([]) == []

    def test_run_end(self):
        """Run end is one past the last index."""
        assert Run(start=3, length=4, working=True).end == 7


class TestCountExactBlocks:
    """Tests for exact-size block counting in one span."""

    def test_exact_size_only(self):
        """Only runs of exactly the target size count."""
        flags = [1] * 5 + [0] + [1] * 4 + [0] + [1] * 6
        assert count_exact_blocks(flags, 5) == 1
        assert count_exact_blocks(flags, 4) == 1
        assert count_exact_blocks(flags, 6) == 1
        assert count_exact_blocks(flags, 3) == 0

    def test_edges_bound_blocks(self):
        """Array edges bound blocks like days off."""
        assert count_exact_blocks([1, 1, 1, 1, 1], 5) == 1


class TestCycleWraparound:
    """Tests for the cycle wraparound strategy."""

    def test_junction_block_counted_per_junction(self):
        """A run straddling the junction adds cycle_count - 1."""
        flags = straddling_cycle()
        assert count_exact_blocks(flags, 5) == 1
        assert count_blocks_with_cycle_wraparound(flags, 5, 3) == 1 * 3 + 2

    def test_matches_exact_expansion(self):
        """Wraparound agrees with exact expansion when edges are not worked alone."""
        flags = straddling_cycle()
        assert count_blocks_exact_expansion(flags, 5, 3) == count_blocks_with_cycle_wraparound(flags, 5, 3)

    def test_single_cycle_has_no_junction(self):
        """One cycle adds nothing for junction runs."""
        assert count_blocks_with_cycle_wraparound(straddling_cycle(), 5, 1) == 1

    def test_all_working_cycle(self):
        """An all-working cycle has no bounded 5-day block."""
        assert count_blocks_with_cycle_wraparound([1] * 56, 5, 3) == 0

    @pytest.mark.parametrize("cycles", [1, 2, 3])
    def test_weekday_pattern(self, cycles):
        """Mon-Fri work gives 8 blocks per cycle and none across junctions."""
        flags = [1 if i % 7 < 5 else 0 for i in range(56)]
        assert count_blocks_with_cycle_wraparound(flags, 5, cycles) == 8 * cycles
        assert count_blocks_exact_expansion(flags, 5, cycles) == 8 * cycles
