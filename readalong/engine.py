"""Speech engines: the contract the controller relies on, and an edge-tts backend."""

import asyncio
import logging
import os
import tempfile
from typing import Callable

import edge_tts
from pydub import AudioSegment
from pydub.utils import get_player_name

from readalong.constants import (
    DEFAULT_VOICE,
    PLAYER_ARGS,
    TTS_RATE,
    TTS_RETRY_BASE_DELAY,
    TTS_RETRY_COUNT,
)

logger = logging.getLogger(__name__)


class SpeechEngine:
    """Base class for speech engines.

    Contract:
      - speak(text) starts one utterance and returns once it is under way.
      - stop() silences the current utterance; a no-op while idle.
      - The completion handler fires exactly once for every utterance that
        finishes naturally, and never for one silenced by stop().
    """

    def set_completion_handler(self, handler: Callable[[], None] | None) -> None:
        raise NotImplementedError

    async def speak(self, text: str) -> None:
        raise NotImplementedError

    async def stop(self) -> None:
        raise NotImplementedError


def _clip_is_playable(path: str) -> bool:
    if not os.path.exists(path) or os.path.getsize(path) == 0:
        return False
    return len(AudioSegment.from_file(path)) > 0


async def synthesize(text: str, voice: str, output_path: str, rate: str = TTS_RATE) -> None:
    """Synthesize one utterance to an MP3 file with retry logic.

    Retries on network errors, HTTP errors, or clips that decode to nothing.
    Raises the last error once all attempts are used up.
    """
    last_error = None
    for attempt in range(TTS_RETRY_COUNT):
        try:
            communicate = edge_tts.Communicate(text, voice, rate=rate)
            await communicate.save(output_path)

            if await asyncio.to_thread(_clip_is_playable, output_path):
                return

            last_error = Exception(f"TTS produced an empty clip for: {text[:50]}...")
        except Exception as e:
            last_error = e

        if attempt < TTS_RETRY_COUNT - 1:
            delay = TTS_RETRY_BASE_DELAY * (2 ** attempt)
            logger.warning("Synthesis attempt %d failed (%s), retrying in %.1fs", attempt + 1, last_error, delay)
            await asyncio.sleep(delay)

    raise last_error


async def _terminate(proc) -> None:
    if proc.returncode is not None:
        return
    try:
        proc.terminate()
    except ProcessLookupError:
        return
    await proc.wait()


class EdgeTTSEngine(SpeechEngine):
    """Speaks through edge-tts and plays clips with ffplay (or avplay)."""

    def __init__(self, voice: str = DEFAULT_VOICE, rate: str = TTS_RATE):
        self.voice = voice
        self.rate = rate
        self._handler = None
        self._proc = None
        self._generation = 0
        self._watchers = set()

    def set_completion_handler(self, handler):
        self._handler = handler

    async def speak(self, text: str) -> None:
        generation = self._generation
        fd, path = tempfile.mkstemp(suffix=".mp3", prefix="readalong_")
        os.close(fd)
        try:
            await synthesize(text, self.voice, path, rate=self.rate)
            if generation != self._generation:
                # stop() arrived while synthesizing
                os.remove(path)
                return
            proc = await asyncio.create_subprocess_exec(
                get_player_name(), *PLAYER_ARGS, path,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except BaseException:
            os.remove(path)
            raise

        if generation != self._generation:
            # stop() arrived while the player was starting
            try:
                await _terminate(proc)
            finally:
                os.remove(path)
            return
        self._proc = proc
        watcher = asyncio.ensure_future(self._watch(proc, path))
        self._watchers.add(watcher)
        watcher.add_done_callback(self._watchers.discard)

    async def _watch(self, proc, path: str) -> None:
        try:
            returncode = await proc.wait()
        finally:
            os.remove(path)

        # stop() clears _proc before terminating, so a silenced clip lands here
        if proc is not self._proc:
            return
        self._proc = None
        if returncode != 0:
            logger.warning("Player exited with status %d", returncode)
        if self._handler is not None:
            self._handler()

    async def stop(self) -> None:
        self._generation += 1
        proc, self._proc = self._proc, None
        if proc is not None:
            await _terminate(proc)
