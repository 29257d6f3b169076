"""Thin adapter from host service lifecycle callbacks to surface actions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from tz_nowplaying.codec import (
    MalformedPayloadError,
    show_request_from_dict,
    show_request_to_dict,
)
from tz_nowplaying.events import Hide, NotificationAction, Show
from tz_nowplaying.services.commands import EXTRA_NOTIFICATION_ACTION
from tz_nowplaying.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

START_NOT_STICKY = 2


def notification_action_from_dict(data: Any) -> NotificationAction:
    """Decode `{"type": "show", ...}` / `{"type": "hide"}` host extras."""
    if not isinstance(data, dict):
        raise MalformedPayloadError("notification action must be an object")
    kind = data.get("type")
    if kind == "hide":
        return Hide()
    if kind == "show":
        return Show(show_request_from_dict(data))
    raise MalformedPayloadError(f"unknown notification action type: {kind!r}")


def notification_action_to_dict(action: NotificationAction) -> dict[str, Any]:
    if isinstance(action, Hide):
        return {"type": "hide"}
    return {"type": "show", **show_request_to_dict(action.request)}


class NotificationHost:
    """Translates host start/task-removed/destroy callbacks for the service."""

    def __init__(self, service: NotificationService) -> None:
        self._service = service

    def on_start_command(self, extras: Mapping[str, Any]) -> int:
        raw = extras.get(EXTRA_NOTIFICATION_ACTION)
        try:
            action = notification_action_from_dict(raw)
        except MalformedPayloadError as exc:
            logger.warning("Ignoring malformed start command: %s", exc)
            return START_NOT_STICKY
        self._service.submit(action)
        return START_NOT_STICKY

    def on_task_removed(self) -> None:
        self._service.teardown()

    async def on_destroy(self) -> None:
        await self._service.shutdown()
