"""Data models for read-aloud playback."""

from dataclasses import dataclass
from enum import Enum


class PlaybackStatus(Enum):
    IDLE = "idle"
    PLAYING_SINGLE = "playing"
    PLAYING_ALL = "playing-all"
    PAUSED = "paused"

    @property
    def is_playing(self) -> bool:
        return self in (PlaybackStatus.PLAYING_SINGLE, PlaybackStatus.PLAYING_ALL)


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot handed to the presentation layer on every change."""

    status: PlaybackStatus
    cursor: int
    segment_count: int

    @property
    def has_previous(self) -> bool:
        return self.cursor > 0

    @property
    def has_next(self) -> bool:
        return self.cursor < self.segment_count - 1
