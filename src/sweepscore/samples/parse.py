from __future__ import annotations

"""Sweep sample parsing and per-stream aggregation.

CONTRACT
- Inputs: one CSV line per sweep sample
  - fields 0-5 are metadata and ignored
  - fields 6..N are one float per frequency bucket
- Outputs:
  - parse_sample() returns the accumulator with the line's values added
  - StreamAggregate keeps running bucket sums and a sample count
- Invariants:
  - The accumulator only grows; new buckets are zero-padded, never reset
  - A malformed field leaves its bucket untouched and the rest of the line is still used
  - Lines with fewer than 7 fields are ignored entirely
- Failure:
  - None. Nothing here raises on bad input.
"""

from dataclasses import dataclass, field

METADATA_FIELDS = 6


def _decimal(raw: str) -> float | None:
    # float() also takes non-ASCII digits and "1_0"; sweep fields are plain ASCII decimals.
    text = raw.strip()
    if not text.isascii() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_sample(line: str, acc: list[float]) -> list[float]:
    parts = line.split(",")
    # not enough data
    if len(parts) <= METADATA_FIELDS:
        return acc
    values = parts[METADATA_FIELDS:]
    if len(acc) < len(values):
        acc.extend([0.0] * (len(values) - len(acc)))
    for i, raw in enumerate(values):
        value = _decimal(raw)
        if value is not None:
            acc[i] += value
    return acc


def is_sample(line: str) -> bool:
    return line.count(",") >= METADATA_FIELDS


@dataclass
class StreamAggregate:
    """Running bucket sums for one sweep stream."""

    sum: list[float] = field(default_factory=list)
    count: int = 0

    def add_line(self, line: str) -> bool:
        """Fold one line into the aggregate. Returns False if the line was ignored."""
        if not is_sample(line):
            return False
        self.sum = parse_sample(line, self.sum)
        self.count += 1
        return True

    @property
    def width(self) -> int:
        return len(self.sum)

    def averages(self) -> list[float]:
        if not self.count:
            return []
        return [v / self.count for v in self.sum]


if __name__ == "__main__":
    import argparse
    import sys
    from pathlib import Path

    parser = argparse.ArgumentParser(description="Aggregate a sweep file")
    parser.add_argument("--file", required=True, help="Path to sweep CSV file")
    args = parser.parse_args()

    try:
        agg = StreamAggregate()
        with Path(args.file).open(encoding="utf-8", errors="replace") as f:
            for ln in f:
                agg.add_line(ln.rstrip("\r\n"))
        print(f"Samples: {agg.count}")
        print(f"Buckets: {agg.width}")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
