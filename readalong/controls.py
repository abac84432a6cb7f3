"""View model for the five playback controls."""

from dataclasses import dataclass

from readalong.models import PlaybackState


@dataclass(frozen=True)
class Control:
    label: str
    icon: str
    action: str        # PlaybackController coroutine name
    enabled: bool = True


def main_icon(state: PlaybackState) -> str:
    """Icon for the collapsed control button."""
    return "pause" if state.status.is_playing else "volume_up"


def build_controls(state: PlaybackState) -> list[Control]:
    """Controls in display order: Play All, Play, Pause/Stop, Next, Previous.

    The middle control pauses while something is playing and stops otherwise.
    Next and Previous are disabled at the ends of the segment list.
    """
    playing = state.status.is_playing
    return [
        Control(label="Play All", icon="queue_music", action="play_all"),
        Control(label="Play", icon="play_arrow", action="play"),
        Control(
            label="Pause" if playing else "Stop",
            icon="pause" if playing else "stop",
            action="pause" if playing else "stop",
        ),
        Control(label="Next", icon="skip_next", action="next", enabled=state.has_next),
        Control(label="Previous", icon="skip_previous", action="previous", enabled=state.has_previous),
    ]


async def dispatch(controller, control: Control) -> None:
    """Run the controller operation behind a control."""
    if not control.enabled:
        raise ValueError(f"Control '{control.label}' is disabled")
    await getattr(controller, control.action)()
