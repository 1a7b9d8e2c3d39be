from __future__ import annotations

"""Scoreboard client protocol definition.

CONTRACT
- start() registers a run and returns its score id
- update() reports a score; finalize=True is sent once, as the last call of a run
- cancel() withdraws a run that did not finish
- Failure:
  - Raises ScoreboardError on transport or HTTP failures
"""

from typing import Protocol


class ScoreboardClient(Protocol):
    async def start(self, name: str, competition_class: str, email: str | None = None) -> str: ...

    async def update(self, score_id: str, score: float, *, finalize: bool) -> None: ...

    async def cancel(self, score_id: str) -> None: ...

    async def aclose(self) -> None: ...
