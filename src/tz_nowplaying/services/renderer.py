"""Surface payload assembly and the only gateway to the presentation API.

Every render rebuilds the payload from scratch. Platform failures in channel
registration or presentation are not caught here; they are fatal for the
platform and surface to whoever awaited the render.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from tz_nowplaying.config import DEFAULT_CHANNEL_ID
from tz_nowplaying.models import Command, ControlDescriptor, ImageData, ShowRequest
from tz_nowplaying.services.actions import compact_view_indices
from tz_nowplaying.services.commands import encode_command
from tz_nowplaying.services.presentation import (
    NotificationChannel,
    PresentationPlatform,
)

logger = logging.getLogger(__name__)

NOTIFICATION_ID = 1
MEDIA_SESSION_TAG = "tz_nowplaying"
CHANNEL_NAME = "Foreground Service Channel"
DEFAULT_SMALL_ICON = "exo_icon_circular_play"
PRIORITY_MAX = 2
SILENT_VIBRATION = (0,)


@dataclass(frozen=True)
class SurfaceAction:
    icon: str
    label: str
    token: str


@dataclass(frozen=True)
class MediaStyle:
    compact_view_indices: tuple[int, ...]
    show_cancel_button: bool
    session_token: str


@dataclass(frozen=True)
class SurfacePayload:
    """Rendered, platform-presentable surface."""

    notification_id: int
    channel_id: str
    small_icon: str
    title: str | None
    text: str | None
    sub_text: str | None
    large_icon: ImageData | None
    actions: tuple[SurfaceAction, ...]
    style: MediaStyle
    content_token: str
    visibility: Literal["public"] = "public"
    priority: int = PRIORITY_MAX
    vibrate: tuple[int, ...] = SILENT_VIBRATION


class MediaSession:
    """Correlates button presses with one rendered payload."""

    def __init__(self, tag: str, generation: int) -> None:
        self.token = f"{tag}#{generation}"
        self.active = True

    def release(self) -> None:
        self.active = False


def resolve_small_icon(
    override: str | None, has_resource: Callable[[str], bool]
) -> str:
    """Return the override icon when the platform knows it, else the default."""
    if override is None or not override.strip():
        return DEFAULT_SMALL_ICON
    name = override.strip()
    try:
        available = has_resource(name)
    except Exception as exc:
        logger.debug("Small icon lookup for %s failed: %s", name, exc)
        return DEFAULT_SMALL_ICON
    if not available:
        logger.debug("Small icon override %s unavailable; using default", name)
        return DEFAULT_SMALL_ICON
    return name


class SurfaceRenderer:
    """Owns the media session and talks to the presentation platform."""

    def __init__(
        self,
        platform: PresentationPlatform,
        *,
        channel_id: str = DEFAULT_CHANNEL_ID,
        small_icon: str | None = None,
    ) -> None:
        self._platform = platform
        self._channel_id = channel_id
        self._small_icon = resolve_small_icon(small_icon, platform.has_resource)
        self._created_channels: set[str] = set()
        self._session: MediaSession | None = None
        self._generation = 0

    @property
    def small_icon(self) -> str:
        return self._small_icon

    @property
    def session(self) -> MediaSession | None:
        return self._session

    def render(
        self,
        request: ShowRequest,
        art: ImageData | None,
        actions: tuple[ControlDescriptor, ...],
    ) -> SurfacePayload:
        self._ensure_channel()
        session = self._new_session()
        metas = request.audio_metas
        return SurfacePayload(
            notification_id=NOTIFICATION_ID,
            channel_id=self._channel_id,
            small_icon=self._small_icon,
            title=metas.title,
            text=metas.artist,
            sub_text=metas.album,
            large_icon=art,
            actions=tuple(
                SurfaceAction(
                    icon=action.icon,
                    label=action.label,
                    token=encode_command(action.command),
                )
                for action in actions
            ),
            style=MediaStyle(
                compact_view_indices=compact_view_indices(actions),
                show_cancel_button=True,
                session_token=session.token,
            ),
            content_token=encode_command(Command("select", request.player_id)),
        )

    def present(self, payload: SurfacePayload, *, hold_foreground: bool) -> None:
        self._platform.present(
            payload.notification_id, payload, hold_foreground=hold_foreground
        )

    def withdraw(self, *, remove: bool) -> None:
        self._platform.withdraw(remove=remove)

    def release(self) -> None:
        """Release the current media session (process teardown)."""
        if self._session is not None:
            self._session.release()
            self._session = None

    def _ensure_channel(self) -> None:
        if self._channel_id in self._created_channels:
            return
        self._platform.create_notification_channel(
            NotificationChannel(
                id=self._channel_id,
                name=CHANNEL_NAME,
                importance="low",
                description=self._channel_id,
                show_badge=False,
                lockscreen_visibility="public",
            )
        )
        self._created_channels.add(self._channel_id)

    def _new_session(self) -> MediaSession:
        self.release()
        self._generation += 1
        self._session = MediaSession(MEDIA_SESSION_TAG, self._generation)
        return self._session
