"""Command-line tools for inspecting surface tokens and previewing payloads."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from . import __version__
from .codec import show_request_to_dict
from .config import SurfaceConfig, load_config
from .events import Show
from .logging_utils import setup_logging
from .models import AudioMetas, ImageReference, NotificationSettings, ShowRequest
from .paths import config_path, log_dir
from .runtime_config import resolve_log_level
from .services.artwork import ArtworkResolver
from .services.commands import InvalidCommandToken, decode_command
from .services.notification_service import NotificationService
from .services.presentation import InMemoryPresentationPlatform
from .services.renderer import SurfacePayload, SurfaceRenderer

logger = logging.getLogger(__name__)

CONTROLS = ("prev", "play_pause", "next", "stop")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tz-nowplaying-cli", description="Now-playing surface tools."
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
    subparsers = parser.add_subparsers(dest="command", required=True)

    decode = subparsers.add_parser("decode", help="Decode a surface control token.")
    decode.add_argument("token")

    preview = subparsers.add_parser(
        "preview", help="Render a surface headlessly and print the payload."
    )
    preview.add_argument("--player-id", default="cli")
    preview.add_argument("--title", default="")
    preview.add_argument("--artist", default="")
    preview.add_argument("--album", default="")
    preview.add_argument(
        "--image-type", choices=("asset", "file", "network"), help="Artwork kind."
    )
    preview.add_argument("--image", help="Artwork path or URL.")
    preview.add_argument("--image-package", help="Package for asset artwork.")
    preview.add_argument("--paused", action="store_true", help="Render as paused")
    preview.add_argument(
        "--disable",
        action="append",
        choices=CONTROLS,
        default=[],
        help="Disable a control (repeatable).",
    )
    return parser


def request_from_args(args: argparse.Namespace) -> ShowRequest:
    image = None
    if args.image_type and args.image:
        image = ImageReference(
            kind=args.image_type, path=args.image, package=args.image_package
        )
    disabled = set(args.disable or ())
    return ShowRequest(
        player_id=args.player_id,
        audio_metas=AudioMetas(
            title=args.title or None,
            artist=args.artist or None,
            album=args.album or None,
            image=image,
        ),
        is_playing=not args.paused,
        notification_settings=NotificationSettings(
            prev_enabled="prev" not in disabled,
            play_pause_enabled="play_pause" not in disabled,
            next_enabled="next" not in disabled,
            stop_enabled="stop" not in disabled,
        ),
    )


async def preview_request(
    request: ShowRequest, config: SurfaceConfig
) -> tuple[SurfacePayload | None, str]:
    """Run the full pipeline against an in-memory platform."""
    platform = InMemoryPresentationPlatform()
    service = NotificationService(
        renderer=SurfaceRenderer(
            platform, channel_id=config.channel_id, small_icon=config.small_icon
        ),
        resolver=ArtworkResolver(
            assets_dir=Path(config.assets_dir) if config.assets_dir else None,
            timeout_s=config.artwork_timeout_s,
            max_px=config.artwork_max_px,
        ),
    )
    try:
        await service.handle(Show(request))
        return service.payload, service.visibility
    finally:
        await service.shutdown()


def render_payload_table(payload: SurfacePayload, visibility: str) -> Table:
    table = Table(title="Surface payload", show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("title", payload.title or "")
    table.add_row("text", payload.text or "")
    table.add_row("sub text", payload.sub_text or "")
    table.add_row("small icon", payload.small_icon)
    art = payload.large_icon
    table.add_row(
        "large icon", f"{art.width}x{art.height} ({art.source})" if art else "-"
    )
    table.add_row("actions", ", ".join(action.label for action in payload.actions))
    compact = [payload.actions[i].label for i in payload.style.compact_view_indices]
    table.add_row("compact view", ", ".join(compact))
    table.add_row("visibility", visibility)
    return table


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    console = Console()
    try:
        level = resolve_log_level(verbose=args.verbose, quiet=args.quiet)
        setup_logging(
            log_dir=log_dir(),
            level=level,
            log_file=Path(args.log_file) if args.log_file else None,
        )
        if args.command == "decode":
            try:
                command = decode_command(args.token)
            except InvalidCommandToken as exc:
                print(
                    "Token could not be decoded.\n"
                    f"Likely cause: {exc}.\n"
                    "Next step: copy the full token from the surface and retry.",
                    file=sys.stderr,
                )
                return 2
            decoded: dict[str, object] = {
                "kind": command.kind,
                "playerId": command.player_id,
            }
            if command.payload is not None:
                decoded["payload"] = show_request_to_dict(command.payload)
            console.print_json(json.dumps(decoded))
            return 0
        config = load_config(Path(args.config) if args.config else config_path())
        payload, visibility = asyncio.run(
            preview_request(request_from_args(args), config)
        )
        if payload is not None:
            console.print(render_payload_table(payload, visibility))
        return 0
    except Exception as exc:  # pragma: no cover - top-level safety net
        logger.exception("Unhandled error: %s", exc)
        print("Unexpected error. Re-run with --verbose for details.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
