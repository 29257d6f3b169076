"""Value types shared by the render pipeline, command router and host adapter.

Everything here is an immutable dataclass so a `ShowRequest` can be copied
into a toggle command and replayed later without aliasing live player state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal

ImageKind = Literal["asset", "file", "network"]
CommandKind = Literal["toggle", "prev", "next", "stop", "select"]
IconKind = Literal["prev", "play_pause", "next", "stop"]

IMAGE_KINDS: tuple[ImageKind, ...] = ("asset", "file", "network")
COMMAND_KINDS: tuple[CommandKind, ...] = ("toggle", "prev", "next", "stop", "select")


@dataclass(frozen=True)
class ImageReference:
    """Where artwork lives; resolution is delegated to `ArtworkResolver`."""

    kind: ImageKind
    path: str
    package: str | None = None


@dataclass(frozen=True)
class AudioMetas:
    title: str | None = None
    artist: str | None = None
    album: str | None = None
    image: ImageReference | None = None


@dataclass(frozen=True)
class NotificationSettings:
    """Per-surface switches for the transport controls."""

    prev_enabled: bool = True
    play_pause_enabled: bool = True
    next_enabled: bool = True
    stop_enabled: bool = True


@dataclass(frozen=True)
class ShowRequest:
    """One render cycle worth of surface input."""

    player_id: str
    audio_metas: AudioMetas
    is_playing: bool
    notification_settings: NotificationSettings = field(
        default_factory=NotificationSettings
    )

    def copy_with(self, *, is_playing: bool | None = None) -> ShowRequest:
        if is_playing is None:
            return self
        return replace(self, is_playing=is_playing)


@dataclass(frozen=True)
class Command:
    """Outbound player command produced by activating a surface control.

    Only `toggle` carries `payload`: the originating request with `is_playing`
    already inverted, ready to be rendered again.
    """

    kind: CommandKind
    player_id: str
    payload: ShowRequest | None = None


@dataclass(frozen=True)
class ControlDescriptor:
    icon_kind: IconKind
    icon: str
    label: str
    command: Command


@dataclass(frozen=True)
class ImageData:
    """Decoded RGBA artwork."""

    width: int
    height: int
    mode: str
    pixels: bytes
    source: str


@dataclass(frozen=True)
class ResolveError:
    """Artwork could not be produced; callers render without a large icon."""

    reference: ImageReference
    reason: str
