from __future__ import annotations

"""Scoreboard wire schemas.

CONTRACT
- Inputs: Pydantic models
- Outputs:
  - JSON bodies for the /admin/score endpoints
- Invariants:
  - `class` is a Python keyword, so the field is aliased
  - An empty email is left out of the request
- Failure:
  - Raises ValidationError on a malformed response body
"""

from pydantic import BaseModel, ConfigDict, Field


class CreateScoreRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    competition_class: str = Field(alias="class")
    email: str | None = None

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class CreateScoreResponse(BaseModel):
    id: str


class UpdateScoreRequest(BaseModel):
    score: float
    finalize: bool = False
