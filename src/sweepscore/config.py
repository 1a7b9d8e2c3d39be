from __future__ import annotations

"""Configuration models.

CONTRACT
- Inputs: YAML config file path (optional) plus CLI overrides
- Outputs (required):
  - Validated RunConfig, ScoreboardConfig, ContestantConfig, TailConfig objects
- Invariants:
  - Defaults follow live files with reopen-on-rotate and a 1s score tick
  - Unknown top-level sections are rejected
- Failure:
  - Raises ValueError on invalid schema
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True)
class ScoreboardConfig:
    url: str | None = None
    api_key: str | None = None
    timeout_s: float = 30.0


@dataclass(frozen=True)
class ContestantConfig:
    name: str = ""
    competition_class: str = ""
    email: str | None = None


@dataclass(frozen=True)
class TailConfig:
    follow: bool = True
    reopen: bool = True
    must_exist: bool = True
    poll_interval_s: float = 0.25
    buffer_lines: int = 1024


@dataclass(frozen=True)
class FileConfig:
    scoreboard: ScoreboardConfig = field(default_factory=ScoreboardConfig)
    contestant: ContestantConfig = field(default_factory=ContestantConfig)
    tail: TailConfig = field(default_factory=TailConfig)
    tick_interval_s: float = 1.0


@dataclass(frozen=True)
class RunConfig:
    outer_path: Path
    inner_path: Path
    scoreboard: ScoreboardConfig = field(default_factory=ScoreboardConfig)
    contestant: ContestantConfig = field(default_factory=ContestantConfig)
    tail: TailConfig = field(default_factory=TailConfig)
    tick_interval_s: float = 1.0
    offline: bool = False
    events_path: Path | None = None


CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "scoreboard": {
            "type": "object",
            "properties": {
                "url": {"type": "string"},
                "api_key": {"type": "string"},
                "timeout_s": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": False,
        },
        "contestant": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "class": {"type": "string"},
                "email": {"type": ["string", "null"]},
            },
            "additionalProperties": False,
        },
        "tail": {
            "type": "object",
            "properties": {
                "follow": {"type": "boolean"},
                "reopen": {"type": "boolean"},
                "must_exist": {"type": "boolean"},
                "poll_interval_s": {"type": "number", "exclusiveMinimum": 0},
                "buffer_lines": {"type": "integer", "minimum": 1},
            },
            "additionalProperties": False,
        },
        "session": {
            "type": "object",
            "properties": {
                "tick_interval_s": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}


def load_config_file(path: Path) -> FileConfig:
    import jsonschema  # lazy import

    data: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    try:
        jsonschema.validate(instance=data, schema=CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ValueError(f"Invalid config file {path}: {e.message}") from e

    sb = data.get("scoreboard", {}) or {}
    ct = data.get("contestant", {}) or {}
    tl = data.get("tail", {}) or {}
    ss = data.get("session", {}) or {}
    defaults = TailConfig()
    return FileConfig(
        scoreboard=ScoreboardConfig(
            url=sb.get("url"),
            api_key=sb.get("api_key"),
            timeout_s=float(sb.get("timeout_s", 30.0)),
        ),
        contestant=ContestantConfig(
            name=str(ct.get("name", "")),
            competition_class=str(ct.get("class", "")),
            email=ct.get("email") or None,
        ),
        tail=TailConfig(
            follow=bool(tl.get("follow", defaults.follow)),
            reopen=bool(tl.get("reopen", defaults.reopen)),
            must_exist=bool(tl.get("must_exist", defaults.must_exist)),
            poll_interval_s=float(tl.get("poll_interval_s", defaults.poll_interval_s)),
            buffer_lines=int(tl.get("buffer_lines", defaults.buffer_lines)),
        ),
        tick_interval_s=float(ss.get("tick_interval_s", 1.0)),
    )


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Config Loader CLI")
    parser.add_argument("--config", required=True, help="Path to sweepscore.yaml")
    args = parser.parse_args()

    try:
        cfg = load_config_file(Path(args.config))
        print(f"Scoreboard: {cfg.scoreboard.url or '(offline)'}")
        print(f"Tail: {cfg.tail}")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
