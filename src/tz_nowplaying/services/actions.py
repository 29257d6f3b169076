"""Transport control set for the surface.

Order is fixed (prev, play/pause, next, stop) and disabled controls are simply
left out. The compact view takes the first three entries by position, so with
prev disabled the stop button moves into the collapsed surface.
"""

from __future__ import annotations

from tz_nowplaying.models import Command, ControlDescriptor, ShowRequest

ICON_PREV = "exo_icon_previous"
ICON_PLAY = "exo_icon_play"
ICON_PAUSE = "exo_icon_pause"
ICON_NEXT = "exo_icon_next"
ICON_STOP = "exo_icon_stop"

COMPACT_VIEW_SLOTS = 3


def build_actions(request: ShowRequest) -> tuple[ControlDescriptor, ...]:
    settings = request.notification_settings
    player_id = request.player_id
    actions: list[ControlDescriptor] = []
    if settings.prev_enabled:
        actions.append(
            ControlDescriptor("prev", ICON_PREV, "prev", Command("prev", player_id))
        )
    if settings.play_pause_enabled:
        actions.append(_play_pause(request))
    if settings.next_enabled:
        actions.append(
            ControlDescriptor("next", ICON_NEXT, "next", Command("next", player_id))
        )
    if settings.stop_enabled:
        actions.append(
            ControlDescriptor("stop", ICON_STOP, "stop", Command("stop", player_id))
        )
    return tuple(actions)


def _play_pause(request: ShowRequest) -> ControlDescriptor:
    # Toggle carries the next request so a tap can re-render without the player.
    command = Command(
        "toggle",
        request.player_id,
        payload=request.copy_with(is_playing=not request.is_playing),
    )
    if request.is_playing:
        return ControlDescriptor("play_pause", ICON_PAUSE, "pause", command)
    return ControlDescriptor("play_pause", ICON_PLAY, "play", command)


def compact_view_indices(actions: tuple[ControlDescriptor, ...]) -> tuple[int, ...]:
    """Return positions shown on the collapsed surface."""
    return tuple(range(min(COMPACT_VIEW_SLOTS, len(actions))))
