"""Return-intent routing between surface controls and the player.

Each rendered control carries an opaque token. The token is URL-safe base64
over a small JSON envelope holding the action name, the player id and, for
toggle, the full next `ShowRequest`.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from collections.abc import Awaitable
from typing import Any, Callable, cast

from tz_nowplaying.codec import (
    MalformedPayloadError,
    show_request_from_dict,
    show_request_to_dict,
)
from tz_nowplaying.events import CommandDispatched, CommandRejected
from tz_nowplaying.models import COMMAND_KINDS, Command, CommandKind, ShowRequest

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "tznp1."
EXTRA_PLAYER_ID = "playerId"
EXTRA_ACTION = "action"
EXTRA_NOTIFICATION_ACTION = "notificationAction"


class InvalidCommandToken(ValueError):
    """Raised when a token does not decode to a well-formed `Command`."""


def encode_command(command: Command) -> str:
    if not command.player_id:
        raise ValueError("command player id must be non-empty")
    envelope: dict[str, Any] = {
        EXTRA_ACTION: command.kind,
        EXTRA_PLAYER_ID: command.player_id,
    }
    if command.kind == "toggle" and command.payload is not None:
        envelope[EXTRA_NOTIFICATION_ACTION] = show_request_to_dict(command.payload)
    raw = json.dumps(envelope, separators=(",", ":"), sort_keys=True)
    return TOKEN_PREFIX + base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_command(token: str) -> Command:
    if not isinstance(token, str) or not token.startswith(TOKEN_PREFIX):
        raise InvalidCommandToken("unrecognized token format")
    body = token[len(TOKEN_PREFIX) :]
    try:
        raw = base64.urlsafe_b64decode(body.encode("ascii"))
        envelope = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError, RecursionError) as exc:
        raise InvalidCommandToken(f"undecodable token: {exc}") from exc
    if not isinstance(envelope, dict):
        raise InvalidCommandToken("token envelope must be an object")

    kind = envelope.get(EXTRA_ACTION)
    if kind not in COMMAND_KINDS:
        raise InvalidCommandToken(f"unknown action: {kind!r}")
    player_id = envelope.get(EXTRA_PLAYER_ID)
    if not isinstance(player_id, str) or not player_id:
        raise InvalidCommandToken("missing player id")

    payload: ShowRequest | None = None
    if kind == "toggle" and EXTRA_NOTIFICATION_ACTION in envelope:
        try:
            payload = show_request_from_dict(envelope[EXTRA_NOTIFICATION_ACTION])
        except MalformedPayloadError as exc:
            raise InvalidCommandToken(f"bad toggle payload: {exc}") from exc
        if payload.player_id != player_id:
            raise InvalidCommandToken("toggle payload targets another player")
    return Command(kind=cast(CommandKind, kind), player_id=player_id, payload=payload)


class NotificationActionReceiver:
    """Decodes tapped tokens and forwards commands to the player.

    Malformed tokens are logged and dropped; nothing reaches the player.
    """

    def __init__(
        self,
        *,
        command_handler: Callable[[Command], Awaitable[None]],
        rerender: Callable[[ShowRequest], object] | None = None,
        emit_event: Callable[[object], Awaitable[None]] | None = None,
    ) -> None:
        self._command_handler = command_handler
        self._rerender = rerender
        self._emit_event = emit_event

    async def receive(self, token: str) -> Command | None:
        try:
            command = decode_command(token)
        except InvalidCommandToken as exc:
            logger.warning("Dropping surface command token: %s", exc)
            await self._emit(CommandRejected(str(exc)))
            return None
        logger.debug(
            "Surface command %s for player %s",
            command.kind,
            command.player_id,
            extra={"command": command.kind, "player_id": command.player_id},
        )
        if command.kind == "toggle" and command.payload is not None:
            if self._rerender is not None:
                self._rerender(command.payload)
        await self._command_handler(command)
        await self._emit(CommandDispatched(command))
        return command

    async def _emit(self, event: object) -> None:
        if self._emit_event is None:
            return
        await self._emit_event(event)
