from __future__ import annotations

"""Run event log.

CONTRACT
- Inputs: JSONL path, opened once per scoring run
- Outputs:
  - One JSON line per start/update/finalize/cancel, flushed as written
- Invariants:
  - Lines written before the score id is known carry no `score_id`
  - Writing after close() raises ValueError
- Failure:
  - open() raises OSError if the path is not writable
"""

import json
import time
from pathlib import Path
from typing import IO, Any


class RunEventLog:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.score_id: str | None = None
        self._fh: IO[str] | None = None

    def open(self) -> RunEventLog:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("a", encoding="utf-8")
        return self

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def start(self, score_id: str, name: str, competition_class: str) -> None:
        self.score_id = score_id
        self._write("start", name=name, competition_class=competition_class)

    def update(self, score: float) -> None:
        self._write("update", score=score)

    def finalize(self, score: float) -> None:
        self._write("finalize", score=score)

    def cancel(self, reason: str) -> None:
        self._write("cancel", reason=reason)

    def _write(self, event: str, **fields: Any) -> None:
        if self._fh is None:
            raise ValueError(f"Event log {self.path} is not open")
        record = {"ts_ms": int(time.time() * 1000), "event": event, "score_id": self.score_id, **fields}
        self._fh.write(json.dumps(record, ensure_ascii=False) + "\n")
        self._fh.flush()
