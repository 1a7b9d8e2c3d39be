from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import BinaryIO

from loguru import logger

from ..config import TailConfig
from .base import LineEvent


class TailSource:
    """Follow a growing sweep file and deliver its lines on a queue.

    CONTRACT
    - Inputs: file path, TailConfig
    - Outputs:
      - LineEvent per newline-terminated line, CR/LF stripped
      - One end-of-stream event after stop_at_eof() (or at EOF when follow=False)
    - Invariants:
      - Lines are delivered in file order
      - Trailing unterminated text is only delivered once the source stops
      - With reopen=True a rotated or truncated file is re-read from the start
    - Failure:
      - start() raises FileNotFoundError if must_exist and the file is missing
      - OSError while tailing becomes an error event and ends the source
    """

    def __init__(self, path: Path, config: TailConfig | None = None, *, name: str | None = None):
        self.path = Path(path)
        self.config = config or TailConfig()
        self.name = name or self.path.name
        self.lines: asyncio.Queue[LineEvent] = asyncio.Queue(maxsize=self.config.buffer_lines)
        self._stopping = False
        self._fh: BinaryIO | None = None
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        try:
            self._fh = self.path.open("rb")
        except FileNotFoundError:
            if self.config.must_exist:
                raise
            logger.info(f"Waiting for {self.path} to appear")
        self._task = asyncio.create_task(self._run(), name=f"tail:{self.name}")

    def stop_at_eof(self) -> None:
        self._stopping = True

    async def aclose(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._close_fh()

    def _open(self) -> BinaryIO | None:
        try:
            return self.path.open("rb")
        except FileNotFoundError:
            return None

    def _close_fh(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def _rotated(self) -> bool:
        assert self._fh is not None
        try:
            st = self.path.stat()
        except FileNotFoundError:
            return False
        cur = os.fstat(self._fh.fileno())
        return st.st_ino != cur.st_ino or st.st_size < self._fh.tell()

    async def _run(self) -> None:
        try:
            await self._follow()
        except OSError as e:
            logger.error(f"Tailing {self.path} failed: {e}")
            await self.lines.put(LineEvent(error=e))
        finally:
            self._close_fh()

    async def _emit(self, raw: bytes) -> None:
        text = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        await self.lines.put(LineEvent(text=text))

    async def _follow(self) -> None:
        partial = b""
        while True:
            if self._fh is None:
                # Waiting for the file to (re)appear.
                if self._stopping or not self.config.follow:
                    break
                await asyncio.sleep(self.config.poll_interval_s)
                self._fh = self._open()
                continue

            chunk = self._fh.readline()
            if chunk:
                if chunk.endswith(b"\n"):
                    await self._emit(partial + chunk)
                    partial = b""
                else:
                    partial += chunk
                continue

            if self._stopping or not self.config.follow:
                break
            if self.config.reopen and self._rotated():
                logger.info(f"{self.path} was rotated; reopening")
                self._close_fh()
                self._fh = self._open()
                partial = b""
                continue
            await asyncio.sleep(self.config.poll_interval_s)

        if partial:
            await self._emit(partial)
        await self.lines.put(LineEvent.end_of_stream())
