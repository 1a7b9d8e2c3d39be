from __future__ import annotations

"""Scoring session event loop.

CONTRACT
- Inputs: ScoreboardClient, score id, outer/inner StreamSource, SessionControl
- Outputs (required):
  - Non-final score update on every tick once both streams have samples
  - Exactly one final update after both streams have closed
  - SessionResult(state=DONE, score, sample counts)
- Invariants:
  - Both aggregates are owned and mutated by this loop only
  - A stream's "parsing complete" notice is emitted once
  - A tick never follows the final update
- Failure:
  - Raises ScoringCancelled on a cancel signal (no final update is sent)
  - Raises StreamReadError on a stream I/O fault
  - Raises ScoreboardError if the final update fails
  - State is CANCELLED after any of the above
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from .errors import ScoreboardError, ScoringCancelled, StreamReadError
from .samples.parse import StreamAggregate
from .score.compute import ScoreComputer
from .scoreboard.base import ScoreboardClient
from .stream.base import LineEvent, StreamSource
from .util.events import RunEventLog


class SessionState(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    FINALIZING = "FINALIZING"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


class SessionSignal(str, Enum):
    CANCEL = "cancel"
    FINISH = "finish"


class SessionControl:
    """Single-shot cancel/finish channel for one session.

    The first signal wins; anything sent afterwards is ignored.
    """

    def __init__(self) -> None:
        self._signal: SessionSignal | None = None
        self._event = asyncio.Event()

    @property
    def signal(self) -> SessionSignal | None:
        return self._signal

    def send(self, signal: SessionSignal) -> bool:
        if self._signal is not None:
            logger.debug(f"Ignoring {signal.value} signal; {self._signal.value} already requested")
            return False
        self._signal = signal
        self._event.set()
        return True

    def cancel(self) -> bool:
        return self.send(SessionSignal.CANCEL)

    def finish(self) -> bool:
        return self.send(SessionSignal.FINISH)

    async def wait(self) -> SessionSignal:
        await self._event.wait()
        assert self._signal is not None
        return self._signal


@dataclass(eq=False)
class _Channel:
    label: str
    source: StreamSource
    aggregate: StreamAggregate = field(default_factory=StreamAggregate)
    closed: bool = False


@dataclass(frozen=True)
class SessionResult:
    state: SessionState
    score: float
    outer_samples: int
    inner_samples: int
    outer_buckets: int
    inner_buckets: int


_CONTROL = "control"
_TICK = "tick"


class ScoringSession:
    def __init__(
        self,
        client: ScoreboardClient,
        score_id: str,
        outer: StreamSource,
        inner: StreamSource,
        control: SessionControl | None = None,
        *,
        tick_interval_s: float = 1.0,
        computer: ScoreComputer | None = None,
        events: RunEventLog | None = None,
    ) -> None:
        self.client = client
        self.score_id = score_id
        self.control = control or SessionControl()
        self.tick_interval_s = tick_interval_s
        self.computer = computer or ScoreComputer()
        self.events = events
        self.state = SessionState.IDLE
        self.last_score: float | None = None
        self._outer = _Channel("outer", outer)
        self._inner = _Channel("inner", inner)

    @property
    def outer(self) -> StreamAggregate:
        return self._outer.aggregate

    @property
    def inner(self) -> StreamAggregate:
        return self._inner.aggregate

    def _all_closed(self) -> bool:
        return self._outer.closed and self._inner.closed

    async def run(self) -> SessionResult:
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"Session already {self.state.value}")
        self.state = SessionState.RUNNING
        try:
            await self._loop()
            self.state = SessionState.FINALIZING
            score = self.computer.final(self.outer, self.inner)
            await self._submit(score, finalize=True)
        except BaseException:
            self.state = SessionState.CANCELLED
            raise
        self.state = SessionState.DONE
        return SessionResult(
            state=self.state,
            score=score,
            outer_samples=self.outer.count,
            inner_samples=self.inner.count,
            outer_buckets=self.outer.width,
            inner_buckets=self.inner.width,
        )

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        waiters: dict[asyncio.Future, object] = {}

        def watch(key: object, aw) -> None:
            waiters[asyncio.ensure_future(aw)] = key

        channels = (self._outer, self._inner)
        for ch in channels:
            watch(ch, ch.source.lines.get())
        watch(_CONTROL, self.control.wait())
        next_tick = loop.time() + self.tick_interval_s
        watch(_TICK, asyncio.sleep(self.tick_interval_s))

        try:
            while not self._all_closed():
                done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
                fired = {waiters.pop(t): t for t in done}

                if _CONTROL in fired:
                    self._on_signal(fired[_CONTROL].result())

                for ch in channels:
                    if ch in fired:
                        self._on_event(ch, fired[ch].result())
                        if not ch.closed:
                            watch(ch, ch.source.lines.get())

                if _TICK in fired:
                    if not self._all_closed():
                        await self._report()
                    now = loop.time()
                    while next_tick <= now:
                        next_tick += self.tick_interval_s
                    watch(_TICK, asyncio.sleep(next_tick - now))
        finally:
            for t in waiters:
                t.cancel()

    def _on_signal(self, signal: SessionSignal) -> None:
        if signal is SessionSignal.CANCEL:
            logger.info("Canceling scoring...")
            raise ScoringCancelled()
        logger.info("Finishing scoring...")
        for ch in (self._outer, self._inner):
            if not ch.closed:
                ch.source.stop_at_eof()

    def _on_event(self, ch: _Channel, event: LineEvent) -> None:
        if event.error is not None:
            raise StreamReadError(ch.label, event.error) from event.error
        if event.eof:
            # Closed channels are not read again, so this runs once per stream.
            logger.info(f"Parsing {ch.label} sweep file complete")
            ch.closed = True
            return
        ch.aggregate.add_line(event.text)

    async def _report(self) -> None:
        score = self.computer.periodic(self.outer, self.inner)
        if score is None:
            return
        try:
            await self._submit(score, finalize=False)
        except ScoreboardError as e:
            logger.warning(f"Periodic score update failed: {e}")

    async def _submit(self, score: float, *, finalize: bool) -> None:
        logger.info(f"Current score: {score:f}")
        self.last_score = score
        await self.client.update(self.score_id, score, finalize=finalize)
        if self.events is not None:
            if finalize:
                self.events.finalize(score)
            else:
                self.events.update(score)
