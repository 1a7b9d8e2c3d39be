import pytest

from sweepscore.config import FileConfig, TailConfig, load_config_file


def test_load_full_config(tmp_path):
    p = tmp_path / "sweepscore.yaml"
    p.write_text(
        """
scoreboard:
  url: https://scores.example
  api_key: k
  timeout_s: 5
contestant:
  name: Ada
  class: unlimited
  email: ada@example.com
tail:
  follow: false
  poll_interval_s: 0.5
session:
  tick_interval_s: 2
"""
    )
    cfg = load_config_file(p)
    assert cfg.scoreboard.url == "https://scores.example"
    assert cfg.scoreboard.timeout_s == 5.0
    assert cfg.contestant.competition_class == "unlimited"
    assert cfg.contestant.email == "ada@example.com"
    assert cfg.tail == TailConfig(follow=False, poll_interval_s=0.5)
    assert cfg.tick_interval_s == 2.0


def test_empty_config_uses_defaults(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert load_config_file(p) == FileConfig()


def test_unknown_section_is_rejected(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("tracks: []\n")
    with pytest.raises(ValueError, match="Invalid config file"):
        load_config_file(p)


def test_bad_value_type_is_rejected(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("session:\n  tick_interval_s: soon\n")
    with pytest.raises(ValueError, match="Invalid config file"):
        load_config_file(p)
