"""Playback sequencing for read-aloud text.

The controller owns the segment list, the cursor and the playback status.
Every control operation starts a new run: it cancels the previous run's token
and stops the engine before anything new is spoken, so at most one utterance
is ever outstanding. A superseded run exits quietly and leaves status and
cursor to whichever operation replaced it.
"""

import asyncio
import logging

from readalong.constants import SETTLE_DELAY_SECONDS
from readalong.engine import SpeechEngine
from readalong.models import PlaybackState, PlaybackStatus
from readalong.segmenter import preprocess_for_tts

logger = logging.getLogger(__name__)


class CancelToken:
    """One-shot cancellation signal for a single playback run."""

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


class PlaybackController:
    """Steps through the segments of one text on a shared speech engine.

    The renderer, if given, is any object with a ``render(state)`` method and
    is called with a PlaybackState whenever something it displays changes.
    Control operations are coroutines; run ``play_all()`` as a task so the
    other controls can interrupt it. Must be disposed on the event loop.
    """

    def __init__(
        self,
        text: str,
        engine: SpeechEngine,
        renderer=None,
        segmenter=preprocess_for_tts,
        settle_delay: float = SETTLE_DELAY_SECONDS,
    ):
        self.text = text
        self.status = PlaybackStatus.IDLE
        self.cursor = 0
        self.segments: list[str] = []
        self._engine = engine
        self._renderer = renderer
        self._segmenter = segmenter
        self._settle_delay = settle_delay
        self._disposed = False
        self._run = CancelToken()
        self._utterance = None
        self._speaking_index = None
        self._closing = None

    # --- State ---

    @property
    def live(self) -> bool:
        return not self._disposed

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(self.status, self.cursor, len(self.segments))

    def _active(self, run: CancelToken) -> bool:
        return not self._disposed and not run.cancelled

    def _notify(self) -> None:
        if self._renderer is not None and not self._disposed:
            self._renderer.render(self.state)

    def _update(self, **changes) -> None:
        """Apply attribute changes; render only if the visible state moved."""
        before = self.state
        for name, value in changes.items():
            setattr(self, name, value)
        if self.state != before:
            self._notify()

    def ensure_segmented(self) -> None:
        if not self.segments:
            self.segments = list(self._segmenter(self.text))
            logger.debug("Segmented text into %d segments", len(self.segments))

    # --- Engine coordination ---

    def _on_complete(self) -> None:
        if self._disposed:
            return
        utterance = self._utterance
        if utterance is not None and not utterance.done():
            utterance.set_result(None)

    async def _interrupt(self) -> CancelToken:
        """Supersede the current run and silence the engine."""
        self._run.cancel()
        self._speaking_index = None
        run = self._run = CancelToken()
        await self._engine.stop()
        return run

    async def _utter(self, text: str, run: CancelToken) -> bool:
        """Speak text and wait for completion or cancellation.

        Returns True if the engine reported completion.
        """
        utterance = self._utterance = asyncio.get_running_loop().create_future()
        self._engine.set_completion_handler(self._on_complete)
        cancelled = asyncio.ensure_future(run.wait())
        try:
            await self._engine.speak(text)
            await asyncio.wait({utterance, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancelled.cancel()
            if self._utterance is utterance:
                self._utterance = None
        return utterance.done()

    async def _settle(self, run: CancelToken) -> None:
        if self._settle_delay <= 0:
            return
        try:
            await asyncio.wait_for(run.wait(), timeout=self._settle_delay)
        except asyncio.TimeoutError:
            pass

    async def _speak_current(self, run: CancelToken) -> None:
        if not self.segments or not 0 <= self.cursor < len(self.segments):
            if self._active(run):
                self._update(status=PlaybackStatus.IDLE)
            return
        self._update(status=PlaybackStatus.PLAYING_SINGLE)
        line = self.segments[self.cursor].strip()
        if line:
            logger.debug("Speaking segment %d/%d", self.cursor + 1, len(self.segments))
            if await self._utter(line, run):
                await self._settle(run)
        if self._active(run):
            self._update(status=PlaybackStatus.IDLE)

    # --- Controls ---

    async def play(self) -> None:
        """Speak the current segment. Never moves the cursor."""
        if self._disposed:
            return
        run = await self._interrupt()
        if not self._active(run):
            return
        self.ensure_segmented()
        self._update(status=PlaybackStatus.PLAYING_SINGLE)
        await self._speak_current(run)

    async def pause(self) -> None:
        """Silence playback but keep the position for the next play().

        Pausing play_all() mid-segment moves the cursor onto the segment that
        was being spoken, so play() resumes there.
        """
        if self._disposed:
            return
        speaking = self._speaking_index
        run = await self._interrupt()
        if not self._active(run):
            return
        if speaking is None:
            self._update(status=PlaybackStatus.PAUSED)
        else:
            self._update(status=PlaybackStatus.PAUSED, cursor=speaking)

    async def stop(self) -> None:
        """Silence playback, rewind and drop the segments."""
        if self._disposed:
            return
        run = await self._interrupt()
        if self._active(run):
            self._update(status=PlaybackStatus.IDLE, cursor=0, segments=[])

    async def previous(self) -> None:
        if self._disposed or self.cursor == 0:
            return
        run = await self._interrupt()
        if not self._active(run):
            return
        self._update(cursor=self.cursor - 1, status=PlaybackStatus.IDLE)
        await self._speak_current(run)

    async def next(self) -> None:
        if self._disposed or self.cursor >= len(self.segments) - 1:
            return
        run = await self._interrupt()
        if not self._active(run):
            return
        self._update(cursor=self.cursor + 1, status=PlaybackStatus.IDLE)
        await self._speak_current(run)

    async def play_all(self) -> None:
        """Speak every segment from the first, advancing the cursor after each.

        Blank segments are not spoken but still count as a step.
        """
        if self._disposed:
            return
        run = await self._interrupt()
        if not self._active(run):
            return
        self.ensure_segmented()
        self._engine.set_completion_handler(self._on_complete)
        self._update(status=PlaybackStatus.PLAYING_ALL, cursor=0)

        segments = self.segments
        for i, segment in enumerate(segments):
            if not self._active(run):
                break
            line = segment.strip()
            if line:
                logger.debug("Speaking segment %d/%d", i + 1, len(segments))
                self._speaking_index = i
                await self._utter(line, run)
                if not self._active(run):
                    break
                self._speaking_index = None
            self.cursor = i
            self._notify()

        if self._active(run):
            self._update(status=PlaybackStatus.IDLE)
        else:
            logger.debug("Play-all interrupted at segment %d", self.cursor + 1)

    # --- Lifecycle ---

    def dispose(self) -> None:
        """Tear down: cancel the current run and request an engine stop."""
        if self._disposed:
            return
        self._disposed = True
        self._run.cancel()
        self._engine.set_completion_handler(None)
        self._closing = asyncio.get_running_loop().create_task(self._engine.stop())

    async def aclose(self) -> None:
        self.dispose()
        await self._closing

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
