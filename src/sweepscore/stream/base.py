from __future__ import annotations

"""Stream source protocol definition.

CONTRACT
- Outputs (required):
  - `lines` queue of LineEvent in file order
  - exactly one end-of-stream event once the source is done
- Invariants:
  - stop_at_eof() never discards lines that are already readable
  - An error event is the last event a source delivers
- Failure:
  - I/O faults are delivered as LineEvent(error=...), not raised into the consumer
"""

import asyncio
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class LineEvent:
    text: str = ""
    error: BaseException | None = None
    eof: bool = False

    @classmethod
    def end_of_stream(cls) -> LineEvent:
        return cls(eof=True)


class StreamSource(Protocol):
    name: str
    lines: asyncio.Queue[LineEvent]

    def stop_at_eof(self) -> None: ...
