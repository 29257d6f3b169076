"""Platform presentation contracts.

`SurfaceRenderer` depends on this protocol to stay platform-agnostic. Concrete
implementations (in-memory/Textual) translate payloads into whatever the host
actually draws.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Protocol

if TYPE_CHECKING:
    from tz_nowplaying.services.renderer import SurfacePayload

Importance = Literal["min", "low", "default", "high"]


@dataclass(frozen=True)
class NotificationChannel:
    """Channel/category a surface is posted under."""

    id: str
    name: str
    importance: Importance = "low"
    description: str = ""
    show_badge: bool = False
    lockscreen_visibility: str = "public"


class PresentationPlatform(Protocol):
    """Presentation primitives consumed by `SurfaceRenderer`."""

    def create_notification_channel(self, channel: NotificationChannel) -> None: ...

    def present(
        self, notification_id: int, payload: SurfacePayload, *, hold_foreground: bool
    ) -> None: ...

    def withdraw(self, *, remove: bool) -> None: ...

    def has_resource(self, name: str) -> bool: ...


@dataclass(frozen=True)
class PlatformCall:
    """One recorded call against `InMemoryPresentationPlatform`."""

    name: str
    foreground: bool | None = None
    remove: bool | None = None


class InMemoryPresentationPlatform:
    """Deterministic platform that records calls instead of drawing."""

    def __init__(self, *, resources: frozenset[str] | set[str] | None = None) -> None:
        self._resources = frozenset(resources or ())
        self.channels: dict[str, NotificationChannel] = {}
        self.calls: list[PlatformCall] = []
        self.current: SurfacePayload | None = None
        self.foreground = False

    def create_notification_channel(self, channel: NotificationChannel) -> None:
        self.channels[channel.id] = channel
        self.calls.append(PlatformCall("create_channel"))

    def present(
        self, notification_id: int, payload: SurfacePayload, *, hold_foreground: bool
    ) -> None:
        del notification_id
        self.current = payload
        self.foreground = hold_foreground
        self.calls.append(PlatformCall("present", foreground=hold_foreground))

    def withdraw(self, *, remove: bool) -> None:
        self.foreground = False
        if remove:
            self.current = None
        self.calls.append(PlatformCall("withdraw", remove=remove))

    def has_resource(self, name: str) -> bool:
        return name in self._resources
