"""Tests for surface payload rendering."""

from __future__ import annotations

from dataclasses import replace

from tz_nowplaying.models import (
    AudioMetas,
    Command,
    ImageData,
    NotificationSettings,
    ShowRequest,
)
from tz_nowplaying.services.actions import build_actions
from tz_nowplaying.services.commands import decode_command
from tz_nowplaying.services.presentation import InMemoryPresentationPlatform
from tz_nowplaying.services.renderer import (
    DEFAULT_SMALL_ICON,
    PRIORITY_MAX,
    SurfaceRenderer,
    resolve_small_icon,
)

ART = ImageData(
    width=1, height=1, mode="RGBA", pixels=b"\x00\x00\x00\xff", source="file"
)


def _request(is_playing: bool = True) -> ShowRequest:
    return ShowRequest(
        player_id="p1",
        audio_metas=AudioMetas(title="A", artist="B", album="C"),
        is_playing=is_playing,
        notification_settings=NotificationSettings(prev_enabled=False),
    )


def test_payload_fields_follow_metadata_and_fixed_rules() -> None:
    renderer = SurfaceRenderer(InMemoryPresentationPlatform())
    request = _request()
    payload = renderer.render(request, ART, build_actions(request))

    assert (payload.title, payload.text, payload.sub_text) == ("A", "B", "C")
    assert payload.large_icon == ART
    assert payload.small_icon == DEFAULT_SMALL_ICON
    assert payload.visibility == "public"
    assert payload.priority == PRIORITY_MAX
    assert payload.vibrate == (0,)
    assert payload.style.show_cancel_button is True
    assert payload.style.compact_view_indices == (0, 1, 2)
    assert [action.label for action in payload.actions] == ["pause", "next", "stop"]
    assert decode_command(payload.content_token) == Command("select", "p1")


def test_action_tokens_decode_to_descriptor_commands() -> None:
    renderer = SurfaceRenderer(InMemoryPresentationPlatform())
    request = _request()
    actions = build_actions(request)
    payload = renderer.render(request, None, actions)

    decoded = [decode_command(action.token) for action in payload.actions]
    assert decoded == [action.command for action in actions]


def test_artwork_failure_only_drops_large_icon() -> None:
    request = _request()
    with_art = SurfaceRenderer(InMemoryPresentationPlatform()).render(
        request, ART, build_actions(request)
    )
    without_art = SurfaceRenderer(InMemoryPresentationPlatform()).render(
        request, None, build_actions(request)
    )

    assert without_art.large_icon is None
    assert replace(with_art, large_icon=None) == without_art


def test_channel_is_created_once() -> None:
    platform = InMemoryPresentationPlatform()
    renderer = SurfaceRenderer(platform, channel_id="chan")
    request = _request()
    renderer.render(request, None, build_actions(request))
    renderer.render(request, None, build_actions(request))

    assert [call.name for call in platform.calls] == ["create_channel"]
    channel = platform.channels["chan"]
    assert channel.importance == "low"
    assert channel.show_badge is False
    assert channel.lockscreen_visibility == "public"


def test_each_render_replaces_media_session() -> None:
    renderer = SurfaceRenderer(InMemoryPresentationPlatform())
    request = _request()
    first = renderer.render(request, None, build_actions(request))
    first_session = renderer.session
    second = renderer.render(request, None, build_actions(request))

    assert first.style.session_token != second.style.session_token
    assert first_session is not None and first_session.active is False
    assert renderer.session is not None and renderer.session.active is True
    renderer.release()
    assert renderer.session is None


def test_small_icon_override_used_when_available() -> None:
    platform = InMemoryPresentationPlatform(resources={"custom_icon"})
    renderer = SurfaceRenderer(platform, small_icon="custom_icon")

    assert renderer.small_icon == "custom_icon"


def test_small_icon_override_falls_back_silently() -> None:
    def boom(_name: str) -> bool:
        raise LookupError("resource table unavailable")

    assert resolve_small_icon(None, lambda _name: True) == DEFAULT_SMALL_ICON
    assert resolve_small_icon("  ", lambda _name: True) == DEFAULT_SMALL_ICON
    assert resolve_small_icon("missing", lambda _name: False) == DEFAULT_SMALL_ICON
    assert resolve_small_icon("custom", boom) == DEFAULT_SMALL_ICON


def test_present_and_withdraw_reach_platform() -> None:
    platform = InMemoryPresentationPlatform()
    renderer = SurfaceRenderer(platform)
    request = _request()
    payload = renderer.render(request, None, build_actions(request))

    renderer.present(payload, hold_foreground=True)
    assert platform.current == payload
    assert platform.foreground is True

    renderer.withdraw(remove=False)
    assert platform.current == payload
    assert platform.foreground is False
