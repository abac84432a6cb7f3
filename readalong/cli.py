"""CLI interface with subcommand routing and console playback."""

import argparse
import asyncio
import logging
import shutil
import sys

from pydub.utils import get_player_name

from readalong.config import PlayerConfig, load_config
from readalong.constants import CONFIG_FILENAME, VERSION
from readalong.controls import build_controls, dispatch, main_icon
from readalong.engine import EdgeTTSEngine
from readalong.models import PlaybackState
from readalong.segmenter import preprocess_for_tts
from readalong.session import ReaderSession

# Interactive keys → index into build_controls()
CONTROL_KEYS = {"a": 0, "p": 1, "s": 2, "n": 3, "b": 4}
INTERACTIVE_HELP = "Keys: a=play all, p=play, s=pause/stop, n=next, b=previous, q=quit"


class ConsoleRenderer:
    """Prints one status line per state change."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def render(self, state: PlaybackState) -> None:
        position = f"{state.cursor + 1}/{state.segment_count}" if state.segment_count else "-"
        controls = " ".join(
            f"[{c.label}]" if c.enabled else f"({c.label})"
            for c in build_controls(state)
        )
        print(f"{main_icon(state):>9} {state.status.value:<11} {position:>7}  {controls}", file=self.stream)


def _check_player():
    """Verify an ffplay-compatible player is installed."""
    if not shutil.which(get_player_name()):
        print("Error: ffplay is required but not found.", file=sys.stderr)
        print("Install ffmpeg, e.g.: brew install ffmpeg", file=sys.stderr)
        raise SystemExit(1)


def _read_text(file_path: str) -> str:
    try:
        with open(file_path) as f:
            text = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)

    if not text.strip():
        print(f"Error: File is empty: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    return text


def _load_settings(args) -> PlayerConfig:
    """Config file values, overridden by any command-line flags."""
    config = load_config(args.config)
    if getattr(args, "voice", None):
        config.voice = args.voice
    if getattr(args, "rate", None):
        config.rate = args.rate
    return config


def _read_command(prompt: str) -> str:
    return input(prompt)


def _report_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        print(f"Error: playback failed: {exc}", file=sys.stderr)


async def _play(text: str, config: PlayerConfig, start: int = 1, play_all: bool = False) -> None:
    engine = EdgeTTSEngine(voice=config.voice, rate=config.rate)
    async with ReaderSession(engine, config) as session:
        controller = await session.open(text, renderer=ConsoleRenderer())
        if play_all:
            await controller.play_all()
            return

        controller.ensure_segmented()
        if not 1 <= start <= len(controller.segments):
            print(f"Error: --start must be between 1 and {len(controller.segments)}", file=sys.stderr)
            raise SystemExit(1)
        controller.cursor = start - 1
        await controller.play()


async def _interactive(text: str, config: PlayerConfig) -> None:
    engine = EdgeTTSEngine(voice=config.voice, rate=config.rate)
    tasks = set()
    async with ReaderSession(engine, config) as session:
        controller = await session.open(text, renderer=ConsoleRenderer())
        print(INTERACTIVE_HELP)
        while True:
            try:
                key = (await asyncio.to_thread(_read_command, "> ")).strip().lower()
            except EOFError:
                break
            if key == "q":
                break
            if key not in CONTROL_KEYS:
                print(INTERACTIVE_HELP)
                continue

            control = build_controls(controller.state)[CONTROL_KEYS[key]]
            if not control.enabled:
                print(f"{control.label} is not available here.")
                continue
            task = asyncio.create_task(dispatch(controller, control))
            tasks.add(task)
            task.add_done_callback(tasks.discard)
            task.add_done_callback(_report_failure)

        await session.unmount()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


def cmd_segments(args):
    """Print the numbered segments of a text file."""
    text = _read_text(args.file)
    config = load_config(args.config)
    segments = preprocess_for_tts(text, max_chars=config.max_segment_chars)
    width = len(str(len(segments)))
    for i, segment in enumerate(segments, start=1):
        shown = segment.strip() or "(blank)"
        print(f"{i:>{width}}: {shown}")
    blank = sum(1 for s in segments if not s.strip())
    print(f"{len(segments)} segments ({blank} blank)")


def cmd_play(args):
    """Read a text file aloud."""
    _check_player()
    text = _read_text(args.file)
    config = _load_settings(args)
    asyncio.run(_play(text, config, start=args.start, play_all=args.all))


def cmd_interactive(args):
    """Read a text file aloud with keyboard controls."""
    _check_player()
    text = _read_text(args.file)
    config = _load_settings(args)
    asyncio.run(_interactive(text, config))


def _add_config_option(parser):
    parser.add_argument("--config", default=CONFIG_FILENAME, help=f"Settings file (default: {CONFIG_FILENAME})")


def _add_voice_options(parser):
    parser.add_argument("--voice", help="edge-tts voice name (e.g. en-GB-SoniaNeural)")
    parser.add_argument("--rate", help="Relative speech rate (e.g. -10%%)")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="readalong",
        description="Read text files aloud, one segment at a time",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # segments
    segments_parser = subparsers.add_parser("segments", help="Show how a file is split into segments")
    segments_parser.add_argument("file", help="Path to the text file")
    _add_config_option(segments_parser)
    segments_parser.set_defaults(func=cmd_segments)

    # play
    play_parser = subparsers.add_parser("play", help="Speak one segment, or the whole file")
    play_parser.add_argument("file", help="Path to the text file")
    play_parser.add_argument("--all", action="store_true", help="Speak every segment in order")
    play_parser.add_argument("--start", type=int, default=1, help="Segment number to speak (default: 1)")
    _add_voice_options(play_parser)
    _add_config_option(play_parser)
    play_parser.set_defaults(func=cmd_play)

    # interactive
    interactive_parser = subparsers.add_parser("interactive", help="Control playback from the keyboard")
    interactive_parser.add_argument("file", help="Path to the text file")
    _add_voice_options(interactive_parser)
    _add_config_option(interactive_parser)
    interactive_parser.set_defaults(func=cmd_interactive)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    args.func(args)
