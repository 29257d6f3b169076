"""Cross-module event/message models for service, host and UI communication.

`Show`/`Hide` are the inbound notification actions. The other dataclass events
are emitted by `NotificationService` for observers, while `textual.message`
types are used for widget-level interaction routing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from textual.message import Message

from tz_nowplaying.models import Command, ShowRequest

if TYPE_CHECKING:
    from tz_nowplaying.services.renderer import SurfacePayload
    from tz_nowplaying.services.visibility import VisibilityState


@dataclass(frozen=True)
class Show:
    """Inbound request to render (or re-render) the surface."""

    request: ShowRequest


@dataclass(frozen=True)
class Hide:
    """Inbound request to drop foreground status; the surface is kept."""


NotificationAction = Union[Show, Hide]


@dataclass(frozen=True)
class VisibilityChanged:
    """Service event emitted on every visibility state transition."""

    previous: VisibilityState
    current: VisibilityState


@dataclass(frozen=True)
class SurfacePresented:
    """Service event emitted after a payload reached the platform."""

    payload: SurfacePayload


@dataclass(frozen=True)
class CommandDispatched:
    """Receiver event emitted when a decoded command reached the player."""

    command: Command


@dataclass(frozen=True)
class CommandRejected:
    """Receiver event emitted when a tapped token could not be decoded."""

    reason: str


class SurfaceControlActivated(Message):
    """UI message for a tap on a surface control or the surface body."""

    def __init__(self, token: str) -> None:
        super().__init__()
        self.token = token
