from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from loguru import logger

from .base import ScoreboardClient


@dataclass
class NullScoreboardClient(ScoreboardClient):
    """Offline scoreboard.

    Hands out local score ids and keeps every update in memory instead of
    talking to a server.
    """

    updates: list[tuple[str, float, bool]] = field(default_factory=list)
    cancelled: list[str] = field(default_factory=list)

    async def start(self, name: str, competition_class: str, email: str | None = None) -> str:
        score_id = f"offline-{uuid.uuid4().hex[:12]}"
        logger.info(f"Offline scoring started for {name or '(unnamed)'} in {competition_class or '(no class)'}")
        return score_id

    async def update(self, score_id: str, score: float, *, finalize: bool) -> None:
        self.updates.append((score_id, score, finalize))

    async def cancel(self, score_id: str) -> None:
        logger.info(f"Canceling offline scoring for {score_id}")
        self.cancelled.append(score_id)

    async def aclose(self) -> None:
        return None

    @property
    def final_score(self) -> float | None:
        for _, score, finalize in reversed(self.updates):
            if finalize:
                return score
        return None
