import asyncio

import pytest
from loguru import logger

from sweepscore.errors import ScoreboardError
from sweepscore.stream.base import LineEvent


class QueueSource:
    """In-memory stream source; `end=False` keeps it open until stop_at_eof()."""

    def __init__(self, name, lines=(), *, end=True):
        self.name = name
        self.lines = asyncio.Queue()
        self.stop_requested = False
        for ln in lines:
            self.lines.put_nowait(ln if isinstance(ln, LineEvent) else LineEvent(text=ln))
        if end:
            self.lines.put_nowait(LineEvent.end_of_stream())

    def stop_at_eof(self):
        self.stop_requested = True
        self.lines.put_nowait(LineEvent.end_of_stream())


class RecordingClient:
    def __init__(self, *, fail_start=False, fail_periodic=False, fail_final=False):
        self.fail_start = fail_start
        self.fail_periodic = fail_periodic
        self.fail_final = fail_final
        self.started = []
        self.updates = []
        self.cancelled = []
        self.closed = False

    async def start(self, name, competition_class, email=None):
        if self.fail_start:
            raise ScoreboardError("Communication error: 503 Service Unavailable", status_code=503)
        self.started.append((name, competition_class, email))
        return "score-1"

    async def update(self, score_id, score, *, finalize):
        if finalize and self.fail_final:
            raise ScoreboardError("Communication error: 500 Internal Server Error", status_code=500)
        if not finalize and self.fail_periodic:
            raise ScoreboardError("Communication error: 502 Bad Gateway", status_code=502)
        self.updates.append((score_id, score, finalize))

    async def cancel(self, score_id):
        self.cancelled.append(score_id)

    async def aclose(self):
        self.closed = True

    @property
    def finals(self):
        return [u for u in self.updates if u[2]]


@pytest.fixture
def queue_source():
    return QueueSource


@pytest.fixture
def recording_client():
    return RecordingClient


@pytest.fixture
def log_messages():
    messages = []
    sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(sink_id)
