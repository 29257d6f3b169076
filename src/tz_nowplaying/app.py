"""Textual demo app wiring a demo player to the now-playing surface."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, Static

from . import __version__
from .config import SurfaceConfig, load_config_with_notice
from .events import (
    CommandDispatched,
    CommandRejected,
    Hide,
    Show,
    SurfaceControlActivated,
    VisibilityChanged,
)
from .logging_utils import setup_logging
from .models import Command, ShowRequest
from .paths import config_path, log_dir
from .runtime_config import (
    RENDER_POLICIES,
    resolve_log_level,
    supersedes_stale_renders,
)
from .services.artwork import ArtworkResolver
from .services.commands import NotificationActionReceiver
from .services.demo_player import DemoPlayer
from .services.notification_service import NotificationService
from .services.renderer import SurfaceRenderer
from .ui.now_playing_panel import NowPlayingPanel, SurfaceCancelRequested
from .ui.surface_platform import TextualPresentationPlatform
from .version import build_help_epilog

logger = logging.getLogger(__name__)


class NowPlayingApp(App):
    TITLE = "tz-nowplaying"
    CSS = """
    Screen {
        layout: vertical;
    }

    #status-line {
        height: 1;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("p", "player_toggle", "Play/Pause"),
        ("h", "hide_surface", "Hide"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        config: SurfaceConfig | None = None,
        config_notice: str | None = None,
    ) -> None:
        super().__init__()
        self._config = config or SurfaceConfig()
        self._config_notice = config_notice
        self._panel = NowPlayingPanel(id="now-playing")
        self._status_line = Static("", id="status-line")
        self._service: NotificationService | None = None
        self._receiver: NotificationActionReceiver | None = None
        self._player: DemoPlayer | None = None

    @property
    def service(self) -> NotificationService | None:
        return self._service

    @property
    def player(self) -> DemoPlayer | None:
        return self._player

    def compose(self) -> ComposeResult:
        yield Header()
        yield self._panel
        yield self._status_line
        yield Footer()

    async def on_mount(self) -> None:
        config = self._config
        renderer = SurfaceRenderer(
            TextualPresentationPlatform(self._panel),
            channel_id=config.channel_id,
            small_icon=config.small_icon,
        )
        resolver = ArtworkResolver(
            assets_dir=Path(config.assets_dir) if config.assets_dir else None,
            timeout_s=config.artwork_timeout_s,
            max_px=config.artwork_max_px,
        )
        self._service = NotificationService(
            renderer=renderer,
            resolver=resolver,
            emit_event=self._on_service_event,
            supersede_stale_renders=config.supersede_stale_renders,
        )
        self._player = DemoPlayer(
            publish=self._service.submit, on_select=self._on_player_selected
        )
        self._receiver = NotificationActionReceiver(
            command_handler=self._player.handle_command,
            rerender=self._rerender,
            emit_event=self._on_service_event,
        )
        if self._config_notice:
            self._status_line.update(self._config_notice.splitlines()[0])
        self._player.play()

    async def on_unmount(self) -> None:
        if self._service is not None:
            await self._service.shutdown()

    async def on_surface_control_activated(
        self, message: SurfaceControlActivated
    ) -> None:
        if self._receiver is None:
            return
        await self._receiver.receive(message.token)

    def on_surface_cancel_requested(self, message: SurfaceCancelRequested) -> None:
        del message
        if self._service is None:
            return
        # Only a surface that no longer holds foreground can be dismissed.
        if self._service.visibility != "foreground":
            self._service.teardown()

    async def action_player_toggle(self) -> None:
        if self._player is None:
            return
        await self._player.handle_command(Command("toggle", self._player.player_id))

    def action_hide_surface(self) -> None:
        if self._service is not None:
            self._service.submit(Hide())

    def _rerender(self, request: ShowRequest) -> None:
        if self._service is not None:
            self._service.submit(Show(request))

    def _on_player_selected(self) -> None:
        self._panel.focus()
        self._status_line.update("Surface opened the player")

    async def _on_service_event(self, event: object) -> None:
        if isinstance(event, VisibilityChanged):
            self._status_line.update(f"Visibility: {event.current}")
        elif isinstance(event, CommandDispatched):
            self._status_line.update(f"Command: {event.command.kind}")
        elif isinstance(event, CommandRejected):
            self._status_line.update(f"Rejected: {event.reason}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tz-nowplaying",
        description="Now-playing control surface demo.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=build_help_epilog(),
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--quiet", action="store_true", help="Only show warnings and errors"
    )
    parser.add_argument("--log-file", help="Write logs to a file path")
    parser.add_argument("--config", help="Surface config JSON path")
    parser.add_argument(
        "--render-policy",
        choices=RENDER_POLICIES,
        help="supersede: newer Show cancels in-flight render; race: last write wins.",
    )
    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    try:
        level = resolve_log_level(verbose=args.verbose, quiet=args.quiet)
        setup_logging(
            log_dir=log_dir(),
            level=level,
            log_file=Path(args.log_file) if args.log_file else None,
            console=False,
        )
        config_file = Path(args.config) if args.config else config_path()
        config, notice = load_config_with_notice(config_file)
        render_policy = getattr(args, "render_policy", None)
        if render_policy is not None:
            config = replace(
                config,
                supersede_stale_renders=supersedes_stale_renders(render_policy),
            )
        logger.info("Starting tz-nowplaying TUI")
        NowPlayingApp(config=config, config_notice=notice).run()
        return 0
    except Exception as exc:  # pragma: no cover - top-level safety net
        logger.exception("Fatal startup error: %s", exc)
        print(
            "Startup failed. Verify config/log paths and re-run with --verbose.",
            file=sys.stderr,
        )
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
