"""Work/off run detection and block counting strategies.

A block is a run of exactly N consecutive work days bounded on both sides by
a day off or the edge of the analyzed span. Two strategies count blocks over
several repetitions of a 56-day cycle:

- exact expansion: repeat the cycle and count over the expanded span;
- cycle wraparound: count within one cycle, multiply by the cycle count, then
  add the blocks that straddle each junction between consecutive cycles.

The workload metrics use a third, coarser approach (single-cycle counts
multiplied by the cycle count, with no junction handling). See
WorkloadMetricsAnalyzer.
"""

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass
class Run:
    """A maximal run of identical work/off flags.

    Attributes:
        start: 0-based index of the first day.
        length: Number of days in the run.
        working: True for a work run, False for an off run.
    """

    start: int
    length: int
    working: bool

    @property
    def end(self) -> int:
        """Index one past the last day of the run."""
        return self.start + self.length


def find_runs(flags: Sequence[int]) -> list[Run]:
    """Split a 0/1 work pattern into maximal runs."""
    runs: list[Run] = []
    for index, flag in enumerate(flags):
        working = bool(flag)
        if runs and runs[-1].working == working:
            runs[-1].length += 1
        else:
            runs.append(Run(start=index, length=1, working=working))
    return runs


def count_exact_blocks(flags: Sequence[int], target_size: int) -> int:
    """Count work runs of exactly target_size days in a single span."""
    return sum(1 for run in find_runs(flags) if run.working and run.length == target_size)


def count_blocks_exact_expansion(
    cycle_flags: Sequence[int],
    target_size: int,
    cycle_count: int = 1,
) -> int:
    """Count blocks over the cycle repeated cycle_count times."""
    return count_exact_blocks(list(cycle_flags) * max(cycle_count, 1), target_size)


def count_blocks_with_cycle_wraparound(
    cycle_flags: Sequence[int],
    target_size: int,
    cycle_count: int = 1,
) -> int:
    """Count blocks per cycle, projected over cycles, plus junction blocks.

    Blocks fully inside one cycle are counted once and multiplied by
    cycle_count. Each run of exactly target_size days that straddles the
    end of the cycle and the start of the next (bounded by off days or the
    edge of the doubled cycle) adds cycle_count - 1, one per junction.

    Args:
        cycle_flags: Single-cycle 0/1 work pattern.
        target_size: Exact block length to count.
        cycle_count: Number of cycle repetitions.

    Returns:
        Total block count over all cycles.
    """
    per_cycle = count_exact_blocks(cycle_flags, target_size)
    total = per_cycle * cycle_count

    length = len(cycle_flags)
    if target_size < 2 or length == 0:
        return total

    wrapped = list(cycle_flags) + list(cycle_flags)
    for i in range(max(length - (target_size - 1), 0), length):
        window = wrapped[i:i + target_size]
        if len(window) < target_size or not all(window):
            continue
        left_ok = i == 0 or wrapped[i - 1] == 0
        right_ok = i + target_size == len(wrapped) or wrapped[i + target_size] == 0
        if left_ok and right_ok:
            total += cycle_count - 1

    return total
