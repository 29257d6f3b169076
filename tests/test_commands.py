"""Tests for surface command tokens and the activation receiver."""

from __future__ import annotations

import asyncio
import base64
import json
import logging

import pytest

from tz_nowplaying.codec import show_request_to_dict
from tz_nowplaying.events import CommandDispatched, CommandRejected
from tz_nowplaying.models import (
    AudioMetas,
    Command,
    ImageReference,
    NotificationSettings,
    ShowRequest,
)
from tz_nowplaying.services.commands import (
    TOKEN_PREFIX,
    InvalidCommandToken,
    NotificationActionReceiver,
    decode_command,
    encode_command,
)


def _run(coro):
    return asyncio.run(coro)


_NESTED_TOKEN = TOKEN_PREFIX + base64.urlsafe_b64encode(b"[" * 200_000).decode(
    "ascii"
)


def _request(is_playing: bool = False) -> ShowRequest:
    return ShowRequest(
        player_id="p1",
        audio_metas=AudioMetas(
            title="Song",
            artist=None,
            album="Album",
            image=ImageReference("asset", "art/cover.png", package="theme"),
        ),
        is_playing=is_playing,
        notification_settings=NotificationSettings(
            prev_enabled=False, stop_enabled=False
        ),
    )


@pytest.mark.parametrize(
    "command",
    [
        Command("prev", "p1"),
        Command("next", "p1"),
        Command("stop", "p1"),
        Command("select", "p1"),
        Command("toggle", "p1"),
        Command("toggle", "p1", payload=_request()),
        Command(
            "toggle",
            "p1",
            payload=ShowRequest(
                "p1", AudioMetas(image=ImageReference("file", "")), is_playing=True
            ),
        ),
    ],
)
def test_decode_inverts_encode(command: Command) -> None:
    token = encode_command(command)

    assert token.startswith(TOKEN_PREFIX)
    assert decode_command(token) == command


def test_tokens_differ_per_player() -> None:
    assert encode_command(Command("next", "a")) != encode_command(Command("next", "b"))


@pytest.mark.parametrize(
    "token",
    [
        "",
        "not-a-token",
        TOKEN_PREFIX + "%%%",
        TOKEN_PREFIX + base64.urlsafe_b64encode(b"[1, 2]").decode("ascii"),
        TOKEN_PREFIX
        + base64.urlsafe_b64encode(b'{"action": "eject", "playerId": "p1"}').decode(
            "ascii"
        ),
        TOKEN_PREFIX
        + base64.urlsafe_b64encode(b'{"action": "next", "playerId": ""}').decode(
            "ascii"
        ),
        pytest.param(_NESTED_TOKEN, id="deeply-nested"),
    ],
)
def test_malformed_tokens_raise(token: str) -> None:
    with pytest.raises(InvalidCommandToken):
        decode_command(token)


def test_toggle_payload_for_other_player_is_rejected() -> None:
    envelope = {
        "action": "toggle",
        "playerId": "p9",
        "notificationAction": show_request_to_dict(_request()),
    }
    raw = json.dumps(envelope).encode("utf-8")
    token = TOKEN_PREFIX + base64.urlsafe_b64encode(raw).decode("ascii")

    with pytest.raises(InvalidCommandToken):
        decode_command(token)


def test_receiver_forwards_decoded_command() -> None:
    handled: list[Command] = []
    events: list[object] = []

    async def handler(command: Command) -> None:
        handled.append(command)

    async def emit_event(event: object) -> None:
        events.append(event)

    receiver = NotificationActionReceiver(
        command_handler=handler, emit_event=emit_event
    )
    result = _run(receiver.receive(encode_command(Command("next", "p1"))))

    assert result == Command("next", "p1")
    assert handled == [Command("next", "p1")]
    assert events == [CommandDispatched(Command("next", "p1"))]


def test_receiver_rerenders_toggle_payload_before_player() -> None:
    order: list[str] = []
    rerendered: list[ShowRequest] = []

    async def handler(command: Command) -> None:
        order.append(f"player:{command.kind}")

    def rerender(request: ShowRequest) -> None:
        order.append("rerender")
        rerendered.append(request)

    receiver = NotificationActionReceiver(command_handler=handler, rerender=rerender)
    next_request = _request(is_playing=True)
    _run(receiver.receive(encode_command(Command("toggle", "p1", next_request))))

    assert order == ["rerender", "player:toggle"]
    assert rerendered == [next_request]


def test_receiver_drops_malformed_token(caplog) -> None:
    handled: list[Command] = []
    events: list[object] = []

    async def handler(command: Command) -> None:
        handled.append(command)

    async def emit_event(event: object) -> None:
        events.append(event)

    receiver = NotificationActionReceiver(
        command_handler=handler, emit_event=emit_event
    )
    with caplog.at_level(logging.WARNING):
        result = _run(receiver.receive("garbage"))

    assert result is None
    assert handled == []
    assert len(events) == 1 and isinstance(events[0], CommandRejected)
    assert any("Dropping surface command token" in r.message for r in caplog.records)


def test_receiver_drops_deeply_nested_token() -> None:
    handled: list[Command] = []

    async def handler(command: Command) -> None:
        handled.append(command)

    receiver = NotificationActionReceiver(command_handler=handler)

    assert _run(receiver.receive(_NESTED_TOKEN)) is None
    assert handled == []


def test_encode_rejects_empty_player_id() -> None:
    with pytest.raises(ValueError, match="player id"):
        encode_command(Command("next", ""))
