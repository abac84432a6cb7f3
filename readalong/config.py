"""Player settings loaded from a JSON file."""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields

from readalong.constants import (
    DEFAULT_VOICE,
    SEGMENT_SPLIT_THRESHOLD,
    SETTLE_DELAY_SECONDS,
    TTS_RATE,
)

logger = logging.getLogger(__name__)


@dataclass
class PlayerConfig:
    voice: str = DEFAULT_VOICE
    rate: str = TTS_RATE              # relative string like "-10%"
    settle_delay: float = SETTLE_DELAY_SECONDS
    max_segment_chars: int = SEGMENT_SPLIT_THRESHOLD

    def __post_init__(self):
        for name in ("voice", "rate"):
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"{name} must be a string, got {getattr(self, name)!r}")
        if isinstance(self.settle_delay, bool) or not isinstance(self.settle_delay, (int, float)):
            raise ValueError(f"settle_delay must be a number, got {self.settle_delay!r}")
        if isinstance(self.max_segment_chars, bool) or not isinstance(self.max_segment_chars, int):
            raise ValueError(f"max_segment_chars must be an integer, got {self.max_segment_chars!r}")
        if self.settle_delay < 0:
            raise ValueError(f"settle_delay must be >= 0, got {self.settle_delay}")
        if self.max_segment_chars < 1:
            raise ValueError(f"max_segment_chars must be >= 1, got {self.max_segment_chars}")


def load_config(path: str) -> PlayerConfig:
    """Load settings from a JSON file.

    Returns defaults if the file is missing, malformed or holds invalid
    values. Unknown keys are ignored with a warning.
    """
    if not os.path.exists(path):
        return PlayerConfig()
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError:
        logger.warning("Malformed config file: %s, using defaults", path)
        return PlayerConfig()
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a JSON object, using defaults", path)
        return PlayerConfig()

    known = {f.name for f in fields(PlayerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
    try:
        return PlayerConfig(**{k: v for k, v in data.items() if k in known})
    except ValueError as e:
        logger.warning("Invalid config file %s: %s, using defaults", path, e)
        return PlayerConfig()


def save_config(config: PlayerConfig, path: str) -> str:
    """Write settings as JSON. Returns the path written."""
    with open(path, "w") as f:
        json.dump(asdict(config), f, indent=2)
    return path
