from __future__ import annotations

"""Orchestrator for one scoring run.

CONTRACT
- Inputs: RunConfig (sweep files, scoreboard, contestant, tail settings)
- Outputs (required):
  - RunResult (status DONE | CANCELLED | FAIL, score id, score, sample counts)
- Invariants:
  - Sweep files are opened before the scoreboard run is started
  - Any run that was started but did not finish is cancelled on the scoreboard
  - Stream sources and the scoreboard client are always closed
- Failure:
  - Returns RunResult(status="FAIL") on open, start, stream or final update failures
  - Returns RunResult(status="CANCELLED") on a cancel signal
"""

import asyncio
import signal
from dataclasses import dataclass
from typing import Callable, Iterator

from loguru import logger

from .config import RunConfig
from .errors import ScoreboardError, ScoringCancelled, StreamReadError
from .scoreboard.base import ScoreboardClient
from .scoreboard.http import HttpScoreboardClient
from .scoreboard.null import NullScoreboardClient
from .session import ScoringSession, SessionControl
from .stream.tail import TailSource
from .util.events import RunEventLog


@dataclass(frozen=True)
class RunResult:
    status: str
    score_id: str | None = None
    score: float | None = None
    outer_samples: int = 0
    inner_samples: int = 0
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "DONE"

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "score_id": self.score_id,
            "score": self.score,
            "outer_samples": self.outer_samples,
            "inner_samples": self.inner_samples,
            "message": self.message,
        }


def client_for_config(cfg: RunConfig) -> ScoreboardClient:
    if cfg.offline:
        return NullScoreboardClient()
    if not cfg.scoreboard.url or not cfg.scoreboard.api_key:
        raise ValueError("Scoreboard URL and API key are required unless running offline")
    return HttpScoreboardClient(
        base_url=cfg.scoreboard.url,
        api_key=cfg.scoreboard.api_key,
        timeout_s=cfg.scoreboard.timeout_s,
    )


def _signal_map(control: SessionControl) -> Iterator[tuple[int, Callable[[], object]]]:
    # USR1 means no more data is being written: drain and send the final score.
    usr1 = getattr(signal, "SIGUSR1", None)
    if usr1 is not None:
        yield usr1, control.finish
    yield signal.SIGINT, control.cancel
    yield signal.SIGTERM, control.cancel


def _install_signal_handlers(control: SessionControl) -> list[int]:
    loop = asyncio.get_running_loop()
    installed: list[int] = []
    for sig, handler in _signal_map(control):
        try:
            loop.add_signal_handler(sig, handler)
        except (NotImplementedError, RuntimeError, ValueError):
            logger.debug(f"Cannot install handler for {sig}; signal ignored")
            continue
        installed.append(sig)
    return installed


def _remove_signal_handlers(installed: list[int]) -> None:
    loop = asyncio.get_running_loop()
    for sig in installed:
        loop.remove_signal_handler(sig)


async def _cancel_quietly(client: ScoreboardClient, score_id: str, ev: RunEventLog | None, reason: str) -> None:
    try:
        await client.cancel(score_id)
    except ScoreboardError as e:
        logger.error(f"Unable to cancel scoring {score_id}: {e}")
        return
    if ev is not None:
        ev.cancel(reason)


async def run_scoring_session(
    cfg: RunConfig,
    *,
    client: ScoreboardClient | None = None,
    control: SessionControl | None = None,
    handle_signals: bool = True,
) -> RunResult:
    control = control or SessionControl()
    if client is None:
        try:
            client = client_for_config(cfg)
        except ValueError as e:
            logger.error(str(e))
            return RunResult(status="FAIL", message=str(e))
    ev: RunEventLog | None = None

    outer = TailSource(cfg.outer_path, cfg.tail, name="outer")
    inner = TailSource(cfg.inner_path, cfg.tail, name="inner")
    installed: list[int] = []
    try:
        try:
            outer.start()
            inner.start()
        except OSError as e:
            logger.error(f"Cannot open sweep file: {e}")
            return RunResult(status="FAIL", message=str(e))
        if cfg.events_path is not None:
            ev = RunEventLog(cfg.events_path).open()

        if handle_signals:
            installed = _install_signal_handlers(control)

        ct = cfg.contestant
        try:
            score_id = await client.start(ct.name, ct.competition_class, ct.email)
        except ScoreboardError as e:
            logger.error(f"Unable to start scoring: {e}")
            return RunResult(status="FAIL", message=f"Unable to start scoring: {e}")
        if ev is not None:
            ev.start(score_id, ct.name, ct.competition_class)

        session = ScoringSession(
            client,
            score_id,
            outer,
            inner,
            control,
            tick_interval_s=cfg.tick_interval_s,
            events=ev,
        )
        try:
            result = await session.run()
        except ScoringCancelled as e:
            await _cancel_quietly(client, score_id, ev, "cancelled")
            return _failed("CANCELLED", session, score_id, str(e))
        except (StreamReadError, ScoreboardError) as e:
            logger.error(f"Unable to complete scoring: {e}")
            await _cancel_quietly(client, score_id, ev, str(e))
            return _failed("FAIL", session, score_id, f"Unable to complete scoring: {e}")

        return RunResult(
            status="DONE",
            score_id=score_id,
            score=result.score,
            outer_samples=result.outer_samples,
            inner_samples=result.inner_samples,
        )
    finally:
        if installed:
            _remove_signal_handlers(installed)
        await outer.aclose()
        await inner.aclose()
        await client.aclose()
        if ev is not None:
            ev.close()


def _failed(status: str, session: ScoringSession, score_id: str, message: str) -> RunResult:
    return RunResult(
        status=status,
        score_id=score_id,
        score=session.last_score,
        outer_samples=session.outer.count,
        inner_samples=session.inner.count,
        message=message,
    )
