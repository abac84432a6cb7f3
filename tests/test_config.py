"""Tests for config module."""

import json
import logging

import pytest

from readalong.config import PlayerConfig, load_config, save_config
from readalong.constants import DEFAULT_VOICE, SETTLE_DELAY_SECONDS


def test_missing_file_gives_defaults(tmp_path):
    """No config file → defaults."""
    config = load_config(str(tmp_path / "nope.json"))
    assert config == PlayerConfig()
    assert config.voice == DEFAULT_VOICE
    assert config.settle_delay == SETTLE_DELAY_SECONDS


def test_round_trip(tmp_path):
    """Saved settings load back unchanged."""
    path = str(tmp_path / "readalong.json")
    config = PlayerConfig(voice="en-GB-SoniaNeural", rate="-10%", settle_delay=0.5, max_segment_chars=200)
    save_config(config, path)
    assert load_config(path) == config


def test_malformed_file_warns(tmp_path, caplog):
    """Broken JSON logs a warning and falls back to defaults."""
    path = tmp_path / "readalong.json"
    path.write_text("{not json")
    with caplog.at_level(logging.WARNING, logger="readalong.config"):
        config = load_config(str(path))
    assert config == PlayerConfig()
    assert "Malformed config file" in caplog.text


def test_unknown_keys_ignored(tmp_path, caplog):
    """Unknown keys are dropped with a warning."""
    path = tmp_path / "readalong.json"
    path.write_text(json.dumps({"voice": "en-US-GuyNeural", "volume": 11}))
    with caplog.at_level(logging.WARNING, logger="readalong.config"):
        config = load_config(str(path))
    assert config.voice == "en-US-GuyNeural"
    assert "volume" in caplog.text


def test_non_object_file(tmp_path):
    """A JSON list is not a config."""
    path = tmp_path / "readalong.json"
    path.write_text("[1, 2]")
    assert load_config(str(path)) == PlayerConfig()


def test_invalid_values_rejected():
    """Negative delay and zero split size are errors."""
    with pytest.raises(ValueError):
        PlayerConfig(settle_delay=-1)
    with pytest.raises(ValueError):
        PlayerConfig(max_segment_chars=0)


def test_wrong_types_rejected():
    """Values of the wrong type are ValueErrors, not TypeErrors."""
    with pytest.raises(ValueError, match="settle_delay"):
        PlayerConfig(settle_delay="abc")
    with pytest.raises(ValueError, match="settle_delay"):
        PlayerConfig(settle_delay=None)
    with pytest.raises(ValueError, match="max_segment_chars"):
        PlayerConfig(max_segment_chars=2.5)
    with pytest.raises(ValueError, match="voice"):
        PlayerConfig(voice=7)


def test_invalid_values_in_file_fall_back(tmp_path, caplog):
    """A file with a bad value logs a warning and gives defaults."""
    path = tmp_path / "readalong.json"
    path.write_text(json.dumps({"settle_delay": "abc", "voice": "en-US-GuyNeural"}))
    with caplog.at_level(logging.WARNING, logger="readalong.config"):
        config = load_config(str(path))
    assert config == PlayerConfig()
    assert "Invalid config file" in caplog.text


def test_out_of_range_value_in_file_falls_back(tmp_path, caplog):
    """A negative delay in the file is treated the same way."""
    path = tmp_path / "readalong.json"
    path.write_text(json.dumps({"settle_delay": -2}))
    with caplog.at_level(logging.WARNING, logger="readalong.config"):
        config = load_config(str(path))
    assert config.settle_delay == SETTLE_DELAY_SECONDS
    assert "settle_delay must be >= 0" in caplog.text
