"""Shared fixtures for readalong tests."""

import asyncio

import pytest

from readalong.controller import PlaybackController
from readalong.engine import SpeechEngine


class FakeEngine(SpeechEngine):
    """Records every call. Utterances finish on the next loop turn unless
    auto_complete is off, in which case the test calls finish()."""

    def __init__(self, auto_complete=True):
        self.auto_complete = auto_complete
        self.calls = []
        self.handler = None
        self.speaking = False

    @property
    def spoken(self):
        return [c[1] for c in self.calls if c[0] == "speak"]

    def set_completion_handler(self, handler):
        self.handler = handler

    async def speak(self, text):
        self.calls.append(("speak", text))
        self.speaking = True
        if self.auto_complete:
            asyncio.get_running_loop().call_soon(self.finish)

    def finish(self):
        if not self.speaking:
            return
        self.speaking = False
        if self.handler is not None:
            self.handler()

    async def stop(self):
        self.calls.append(("stop",))
        self.speaking = False


class RecordingRenderer:
    def __init__(self):
        self.states = []

    def render(self, state):
        self.states.append(state)


async def spin(turns=10):
    """Let pending callbacks and tasks run."""
    for _ in range(turns):
        await asyncio.sleep(0)


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def manual_engine():
    return FakeEngine(auto_complete=False)


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def make_controller(renderer):
    """Build a controller with no settling delay."""
    def factory(text, engine, **kwargs):
        kwargs.setdefault("renderer", renderer)
        kwargs.setdefault("settle_delay", 0)
        return PlaybackController(text, engine, **kwargs)
    return factory
