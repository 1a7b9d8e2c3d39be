"""sweepscore package.

Simple API for scoring a finished pair of sweep files:

    import sweepscore

    # Score locally, no scoreboard
    result = sweepscore.score_files("outer.csv", "inner.csv")

    # Report to a scoreboard
    result = sweepscore.score_files(
        "outer.csv", "inner.csv", url="https://scores.example", api_key="...", name="Ada"
    )
"""

import asyncio
from pathlib import Path
from typing import Optional

__version__ = "0.1.0"

from .config import ContestantConfig, RunConfig, ScoreboardConfig, TailConfig
from .orchestrator import RunResult, run_scoring_session
from .samples.parse import StreamAggregate, parse_sample
from .score.compute import ScoreComputer, compute_score
from .session import ScoringSession, SessionControl, SessionSignal, SessionState


def score_files(
    outer: str | Path,
    inner: str | Path,
    *,
    url: Optional[str] = None,
    api_key: Optional[str] = None,
    name: str = "",
    competition_class: str = "",
    email: Optional[str] = None,
    follow: bool = False,
) -> dict:
    """Score two sweep files. Returns structured result.

    Args:
        outer: Path to the outer sweep file
        inner: Path to the inner sweep file
        url: Scoreboard URL (scores offline when omitted)
        api_key: Scoreboard API key
        follow: Keep waiting for new data until SIGUSR1 (default: stop at EOF)

    Returns:
        dict with keys: status, score_id, score, outer_samples, inner_samples, message
    """
    cfg = RunConfig(
        outer_path=Path(outer),
        inner_path=Path(inner),
        scoreboard=ScoreboardConfig(url=url, api_key=api_key),
        contestant=ContestantConfig(name=name, competition_class=competition_class, email=email),
        tail=TailConfig(follow=follow),
        offline=url is None,
    )
    result = asyncio.run(run_scoring_session(cfg))
    return result.as_dict()


__all__ = [
    "score_files",
    "RunConfig",
    "RunResult",
    "run_scoring_session",
    "ScoringSession",
    "SessionControl",
    "SessionSignal",
    "SessionState",
    "StreamAggregate",
    "ScoreComputer",
    "compute_score",
    "parse_sample",
]
