"""In-memory player stand-in for the demo app and deterministic tests."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable

from tz_nowplaying.events import Hide, NotificationAction, Show
from tz_nowplaying.models import (
    AudioMetas,
    Command,
    ImageReference,
    NotificationSettings,
    ShowRequest,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DemoTrack:
    title: str
    artist: str
    album: str
    image: ImageReference | None = None


DEFAULT_TRACKS: tuple[DemoTrack, ...] = (
    DemoTrack("Sunrise Loop", "The Placeholders", "Test Pressing"),
    DemoTrack("Night Drive", "The Placeholders", "Test Pressing"),
    DemoTrack("Static Bloom", "Fixture Band", "Mock Sessions"),
)


class DemoPlayer:
    """Reacts to surface commands by publishing fresh Show/Hide actions."""

    def __init__(
        self,
        *,
        publish: Callable[[NotificationAction], object],
        player_id: str = "demo",
        tracks: Sequence[DemoTrack] = DEFAULT_TRACKS,
        settings: NotificationSettings | None = None,
        on_select: Callable[[], None] | None = None,
    ) -> None:
        if not tracks:
            raise ValueError("tracks must be non-empty")
        self._publish = publish
        self._player_id = player_id
        self._tracks = tuple(tracks)
        self._settings = settings or NotificationSettings()
        self._on_select = on_select
        self._index = 0
        self._is_playing = False

    @property
    def player_id(self) -> str:
        return self._player_id

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def index(self) -> int:
        return self._index

    def current_request(self) -> ShowRequest:
        track = self._tracks[self._index]
        return ShowRequest(
            player_id=self._player_id,
            audio_metas=AudioMetas(
                title=track.title,
                artist=track.artist,
                album=track.album,
                image=track.image,
            ),
            is_playing=self._is_playing,
            notification_settings=self._settings,
        )

    def play(self) -> None:
        self._is_playing = True
        self._publish(Show(self.current_request()))

    async def handle_command(self, command: Command) -> None:
        if command.player_id != self._player_id:
            logger.warning("Ignoring command for unknown player %s", command.player_id)
            return
        if command.kind == "toggle":
            self._is_playing = not self._is_playing
            # Surface already re-rendered from the embedded request.
            if command.payload is None:
                self._publish(Show(self.current_request()))
        elif command.kind == "prev":
            self._index = (self._index - 1) % len(self._tracks)
            self._publish(Show(self.current_request()))
        elif command.kind == "next":
            self._index = (self._index + 1) % len(self._tracks)
            self._publish(Show(self.current_request()))
        elif command.kind == "stop":
            self._is_playing = False
            self._publish(Hide())
        elif command.kind == "select":
            if self._on_select is not None:
                self._on_select()
