from __future__ import annotations

"""Error taxonomy.

CONTRACT
- Parse-level problems never raise (see samples.parse).
- Stream and scoreboard faults propagate as these types up to the orchestrator.
"""


class SweepscoreError(Exception):
    """Base class for all sweepscore failures."""


class ScoringCancelled(SweepscoreError):
    def __init__(self, message: str = "Scoring canceled") -> None:
        super().__init__(message)


class StreamReadError(SweepscoreError):
    """Underlying I/O fault reported by a stream source."""

    def __init__(self, stream: str, cause: BaseException) -> None:
        super().__init__(f"Error reading {stream} sweep stream: {cause}")
        self.stream = stream
        self.cause = cause


class ScoreboardError(SweepscoreError):
    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
