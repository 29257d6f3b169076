"""Terminal rendition of the "now playing" surface."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import Click, Key
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Static

from tz_nowplaying.events import SurfaceControlActivated
from tz_nowplaying.services.renderer import SurfaceAction, SurfacePayload

ICON_GLYPHS = {
    "exo_icon_circular_play": "(>)",
    "exo_icon_previous": "|<<",
    "exo_icon_play": "PLAY",
    "exo_icon_pause": "PAUSE",
    "exo_icon_next": ">>|",
    "exo_icon_stop": "STOP",
}
CANCEL_GLYPH = "x"


class SurfaceCancelRequested(Message):
    bubble = True


def glyph_for(icon: str) -> str:
    return ICON_GLYPHS.get(icon, "?")


def visible_actions(
    payload: SurfacePayload, *, compact: bool
) -> tuple[SurfaceAction, ...]:
    """Return the controls drawn for expanded or compact mode."""
    if not compact:
        return payload.actions
    return tuple(
        payload.actions[index]
        for index in payload.style.compact_view_indices
        if index < len(payload.actions)
    )


def format_body(payload: SurfacePayload) -> Text:
    text = Text()
    text.append(payload.title or "", style="bold")
    if payload.text:
        text.append(f"\n{payload.text}")
    if payload.sub_text:
        text.append(f"\n{payload.sub_text}", style="dim")
    return text


def format_header(payload: SurfacePayload, *, foreground: bool) -> str:
    badge = "FG" if foreground else "--"
    return f"{glyph_for(payload.small_icon)} {payload.channel_id} [{badge}]"


def format_artwork(payload: SurfacePayload) -> str:
    art = payload.large_icon
    if art is None:
        return ""
    return f"[art {art.width}x{art.height} {art.source}]"


class SurfaceButton(Static):
    """Focusable control that posts its command token when activated."""

    def __init__(self, label: str | Text, *, token: str, **kwargs) -> None:
        super().__init__(label, classes="surface-button", **kwargs)
        self.token = token
        self.can_focus = True

    def on_click(self, event: Click) -> None:
        self._emit()
        event.stop()

    def on_key(self, event: Key) -> None:
        if event.key not in {"enter", "space"}:
            return
        self._emit()
        event.stop()

    def _emit(self) -> None:
        if self.token:
            self.post_message(SurfaceControlActivated(self.token))
        else:
            self.post_message(SurfaceCancelRequested())


class NowPlayingPanel(Widget):
    DEFAULT_CSS = """
    NowPlayingPanel {
        height: auto;
        border: solid white;
        padding: 0 1;
        layout: vertical;
    }

    #surface-header, #surface-art {
        height: 1;
        color: $text-muted;
    }

    #surface-body {
        height: auto;
    }

    #surface-controls {
        height: 1;
    }

    NowPlayingPanel .surface-button {
        width: auto;
        background: $panel;
        color: $text;
        padding: 0 1;
        margin-right: 1;
    }

    NowPlayingPanel .surface-button:focus {
        background: $boost;
    }
    """

    BINDINGS = [("c", "toggle_compact", "Compact")]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._header = Static("", id="surface-header")
        self._body = SurfaceButton("", token="", id="surface-body")
        self._art = Static("", id="surface-art")
        self._controls = Horizontal(id="surface-controls")
        self._payload: SurfacePayload | None = None
        self._foreground = False
        self._compact = False

    @property
    def payload(self) -> SurfacePayload | None:
        return self._payload

    @property
    def foreground(self) -> bool:
        return self._foreground

    @property
    def compact(self) -> bool:
        return self._compact

    def compose(self) -> ComposeResult:
        yield self._header
        yield self._body
        yield self._art
        yield self._controls

    def on_mount(self) -> None:
        self._refresh_view()

    def update_payload(self, payload: SurfacePayload | None) -> None:
        self._payload = payload
        self._refresh_view()

    def set_foreground(self, foreground: bool) -> None:
        self._foreground = foreground
        self._refresh_view()

    def action_toggle_compact(self) -> None:
        self._compact = not self._compact
        self._refresh_view()

    def _refresh_view(self) -> None:
        if not self.is_mounted:
            return
        payload = self._payload
        self.display = payload is not None
        if payload is None:
            return
        self._header.update(format_header(payload, foreground=self._foreground))
        self._body.update(format_body(payload))
        self._body.token = payload.content_token
        self._art.update(format_artwork(payload))
        buttons = [
            SurfaceButton(glyph_for(action.icon), token=action.token)
            for action in visible_actions(payload, compact=self._compact)
        ]
        if self._compact and payload.style.show_cancel_button:
            buttons.append(SurfaceButton(CANCEL_GLYPH, token=""))
        self._controls.remove_children()
        self._controls.mount(*buttons)
