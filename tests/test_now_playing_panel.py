"""Tests for the terminal surface panel and its presentation platform."""

from __future__ import annotations

from textual.message import Message

from tz_nowplaying.events import SurfaceControlActivated
from tz_nowplaying.models import (
    AudioMetas,
    ImageData,
    NotificationSettings,
    ShowRequest,
)
from tz_nowplaying.services.actions import build_actions
from tz_nowplaying.services.presentation import InMemoryPresentationPlatform
from tz_nowplaying.services.renderer import SurfaceRenderer
from tz_nowplaying.ui.now_playing_panel import (
    NowPlayingPanel,
    SurfaceButton,
    SurfaceCancelRequested,
    format_artwork,
    format_body,
    format_header,
    glyph_for,
    visible_actions,
)
from tz_nowplaying.ui.surface_platform import TextualPresentationPlatform


class _FakeEvent:
    def __init__(self, key: str = "") -> None:
        self.key = key
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


def _payload(*, art: ImageData | None = None, prev_enabled: bool = True):
    request = ShowRequest(
        "p1",
        AudioMetas(title="Song", artist="Band", album="Record"),
        is_playing=True,
        notification_settings=NotificationSettings(prev_enabled=prev_enabled),
    )
    renderer = SurfaceRenderer(InMemoryPresentationPlatform())
    return renderer.render(request, art, build_actions(request))


def test_visible_actions_compact_uses_first_three() -> None:
    payload = _payload()

    assert len(visible_actions(payload, compact=False)) == 4
    compact = visible_actions(payload, compact=True)
    assert [action.label for action in compact] == ["prev", "pause", "next"]


def test_formatting_helpers() -> None:
    art = ImageData(width=64, height=32, mode="RGBA", pixels=b"", source="file")
    payload = _payload(art=art)

    body = format_body(payload)
    assert body.plain == "Song\nBand\nRecord"
    assert format_header(payload, foreground=True) == "(>) tz_nowplaying [FG]"
    assert format_header(payload, foreground=False).endswith("[--]")
    assert format_artwork(payload) == "[art 64x32 file]"
    assert format_artwork(_payload()) == ""
    assert glyph_for("exo_icon_pause") == "PAUSE"
    assert glyph_for("unknown_icon") == "?"


def test_surface_button_posts_token_on_click_and_key() -> None:
    button = SurfaceButton("PLAY", token="tznp1.abc")
    emitted: list[Message] = []
    button.post_message = emitted.append  # type: ignore[assignment]

    click = _FakeEvent()
    button.on_click(click)  # type: ignore[arg-type]
    enter = _FakeEvent("enter")
    button.on_key(enter)  # type: ignore[arg-type]
    other = _FakeEvent("a")
    button.on_key(other)  # type: ignore[arg-type]

    assert click.stopped is True
    assert enter.stopped is True
    assert other.stopped is False
    assert len(emitted) == 2
    assert all(isinstance(message, SurfaceControlActivated) for message in emitted)
    assert emitted[0].token == "tznp1.abc"  # type: ignore[attr-defined]


def test_surface_button_without_token_requests_cancel() -> None:
    button = SurfaceButton("x", token="")
    emitted: list[Message] = []
    button.post_message = emitted.append  # type: ignore[assignment]

    button.on_click(_FakeEvent())  # type: ignore[arg-type]

    assert len(emitted) == 1
    assert isinstance(emitted[0], SurfaceCancelRequested)


def test_textual_platform_drives_unmounted_panel() -> None:
    panel = NowPlayingPanel()
    platform = TextualPresentationPlatform(panel)
    payload = _payload()

    platform.present(1, payload, hold_foreground=True)
    assert panel.payload is payload
    assert panel.foreground is True

    platform.withdraw(remove=False)
    assert panel.payload is payload
    assert panel.foreground is False

    platform.withdraw(remove=True)
    assert panel.payload is None


def test_textual_platform_resources_default_to_known_glyphs() -> None:
    platform = TextualPresentationPlatform(NowPlayingPanel())

    assert platform.has_resource("exo_icon_circular_play") is True
    assert platform.has_resource("ic_missing") is False
    custom = TextualPresentationPlatform(
        NowPlayingPanel(), resources=frozenset({"ic_custom"})
    )
    assert custom.has_resource("ic_custom") is True
