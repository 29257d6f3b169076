"""Presentation platform backed by the Textual `NowPlayingPanel`."""

from __future__ import annotations

import logging

from tz_nowplaying.services.presentation import NotificationChannel
from tz_nowplaying.services.renderer import SurfacePayload
from tz_nowplaying.ui.now_playing_panel import ICON_GLYPHS, NowPlayingPanel

logger = logging.getLogger(__name__)


class TextualPresentationPlatform:
    """Draws the surface into a panel; must be driven from the app's loop."""

    def __init__(
        self,
        panel: NowPlayingPanel,
        *,
        resources: frozenset[str] | None = None,
    ) -> None:
        self._panel = panel
        self._resources = resources if resources is not None else frozenset(ICON_GLYPHS)
        self.channels: dict[str, NotificationChannel] = {}

    def create_notification_channel(self, channel: NotificationChannel) -> None:
        self.channels[channel.id] = channel
        logger.debug("Registered surface channel %s", channel.id)

    def present(
        self, notification_id: int, payload: SurfacePayload, *, hold_foreground: bool
    ) -> None:
        del notification_id
        self._panel.update_payload(payload)
        self._panel.set_foreground(hold_foreground)

    def withdraw(self, *, remove: bool) -> None:
        self._panel.set_foreground(False)
        if remove:
            self._panel.update_payload(None)

    def has_resource(self, name: str) -> bool:
        return name in self._resources
