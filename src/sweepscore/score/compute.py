from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..samples.parse import StreamAggregate

# Bounds wider than any realistic spread between the two sweeps.
MIN_SENTINEL = 100.0
MAX_SENTINEL = -100.0


def compute_score(
    outer_sum: Sequence[float],
    inner_sum: Sequence[float],
    outer_count: int,
    inner_count: int,
) -> float:
    """Score two sweeps as min(diff) + max(diff) over their shared buckets.

    diff[i] is the outer bucket average minus the inner bucket average. With no
    shared bucket both extremes stay at their sentinels and the score is 0.0.

    Raises ValueError if a shared bucket would be averaged over a zero count.
    """
    overlap = min(len(outer_sum), len(inner_sum))
    if overlap and (outer_count <= 0 or inner_count <= 0):
        raise ValueError("cannot average buckets with a zero sample count")

    lo = MIN_SENTINEL
    hi = MAX_SENTINEL
    for i in range(overlap):
        diff = outer_sum[i] / outer_count - inner_sum[i] / inner_count
        if diff < lo:
            lo = diff
        if diff > hi:
            hi = diff
    # Sum of extremes, not their range.
    return lo + hi


@dataclass
class ScoreComputer:
    """Score a pair of stream aggregates.

    CONTRACT
    - Inputs: outer and inner StreamAggregate
    - Outputs:
      - periodic(): score, or None while either stream has no samples yet
      - final(): score; 0.0 when the streams share no bucket
    - Invariants:
      - Never divides by a zero count
      - Aggregates are read, never mutated
    """

    def periodic(self, outer: StreamAggregate, inner: StreamAggregate) -> float | None:
        if outer.count == 0 or inner.count == 0:
            return None
        return compute_score(outer.sum, inner.sum, outer.count, inner.count)

    def final(self, outer: StreamAggregate, inner: StreamAggregate) -> float:
        # An empty aggregate always has an empty sum, so there is no overlap to average.
        return compute_score(outer.sum, inner.sum, outer.count, inner.count)
