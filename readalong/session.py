"""A reader session: one speech engine shared by the texts shown over time."""

import logging

from readalong.config import PlayerConfig
from readalong.controller import PlaybackController
from readalong.engine import SpeechEngine
from readalong.segmenter import preprocess_for_tts

logger = logging.getLogger(__name__)


class ReaderSession:
    """Owns the engine and mounts at most one controller at a time.

    Opening a new text disposes the controller of the previous one, the way
    navigating away from a page tears down its player.
    """

    def __init__(self, engine: SpeechEngine, config: PlayerConfig | None = None):
        self.engine = engine
        self.config = config or PlayerConfig()
        self.controller = None

    def _segment(self, text: str) -> list[str]:
        return preprocess_for_tts(text, max_chars=self.config.max_segment_chars)

    async def open(self, text: str, renderer=None) -> PlaybackController:
        """Mount a controller for text, replacing the current one."""
        await self.unmount()
        self.controller = PlaybackController(
            text,
            self.engine,
            renderer=renderer,
            segmenter=self._segment,
            settle_delay=self.config.settle_delay,
        )
        logger.debug("Mounted controller for %d chars of text", len(text))
        return self.controller

    async def unmount(self) -> None:
        if self.controller is not None:
            await self.controller.aclose()
            self.controller = None

    async def stop(self) -> None:
        """Silence the engine whatever controller is mounted."""
        await self.engine.stop()

    async def aclose(self) -> None:
        await self.unmount()
        await self.engine.stop()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
