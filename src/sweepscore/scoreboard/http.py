from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from ..errors import ScoreboardError
from .base import ScoreboardClient
from .schemas import CreateScoreRequest, CreateScoreResponse, UpdateScoreRequest


@dataclass
class HttpScoreboardClient(ScoreboardClient):
    """Scoreboard client over HTTP.

    CONTRACT
    - Inputs: base URL, API key (sent as a bearer token)
    - Outputs:
      - POST   {url}/admin/score       -> score id
      - POST   {url}/admin/score/{id}  score update
      - DELETE {url}/admin/score/{id}  cancel
    - Invariants:
      - Status codes in [200, 400) are success
    - Failure:
      - Raises ScoreboardError with status and body on any other status
      - Transport errors are wrapped in ScoreboardError
    """

    base_url: str
    api_key: str
    timeout_s: float = 30.0
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = field(default=None, init=False, repr=False)

    def _http(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url.rstrip("/"),
                timeout=self.timeout_s,
                transport=self.transport,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        return self._client

    async def _request(self, method: str, path: str, body: BaseModel | dict | None = None) -> httpx.Response:
        payload: Any = body.model_dump() if isinstance(body, BaseModel) else body
        try:
            resp = await self._http().request(method, path, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ScoreboardError(f"Communication error: {e}") from e
        if resp.status_code < 200 or resp.status_code >= 400:
            raise ScoreboardError(
                f"Communication error: {resp.status_code} {resp.reason_phrase} ({resp.text})",
                status_code=resp.status_code,
                body=resp.text,
            )
        return resp

    async def start(self, name: str, competition_class: str, email: str | None = None) -> str:
        req = CreateScoreRequest(name=name, competition_class=competition_class, email=email or None)
        resp = await self._request("POST", "/admin/score", req.to_json())
        try:
            created = CreateScoreResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise ScoreboardError(f"Unexpected start response: {resp.text}", body=resp.text) from e
        logger.info(f"Scoring started for {name} in {competition_class}")
        logger.info(f"Score ID: {created.id}")
        return created.id

    async def update(self, score_id: str, score: float, *, finalize: bool) -> None:
        await self._request("POST", f"/admin/score/{score_id}", UpdateScoreRequest(score=score, finalize=finalize))

    async def cancel(self, score_id: str) -> None:
        logger.info(f"Canceling scoring for {score_id}")
        await self._request("DELETE", f"/admin/score/{score_id}")

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
