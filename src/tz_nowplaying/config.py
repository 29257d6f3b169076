"""JSON persistence for per-install surface configuration.

The loader is tolerant of invalid/missing values so a hand-edited or partially
written file degrades to safe defaults instead of aborting startup.
"""

from __future__ import annotations

import json
import logging
import math
import time
from contextlib import suppress
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_ID = "tz_nowplaying"


@dataclass(frozen=True)
class SurfaceConfig:
    """Per-install settings read once and passed to the pipeline at construction."""

    small_icon: str | None = None
    channel_id: str = DEFAULT_CHANNEL_ID
    assets_dir: str | None = None
    artwork_timeout_s: float = 10.0
    artwork_max_px: int = 512
    supersede_stale_renders: bool = True
    log_level: str = "INFO"


def _coerce_config(data: dict[str, Any]) -> SurfaceConfig:
    """Coerce untyped JSON object into validated `SurfaceConfig` with defaults.

    Accepts the legacy `notification_icon` key as an alias of `small_icon`.
    """

    def _optional_str(value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def _str_or_default(value: Any, default: str) -> str:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return default

    def _positive_float_or_default(value: Any, default: float) -> float:
        if isinstance(value, bool):
            return default
        if isinstance(value, (int, float)):
            normalized = float(value)
            if math.isfinite(normalized) and normalized > 0:
                return normalized
        return default

    def _positive_int_or_default(value: Any, default: int) -> int:
        if isinstance(value, bool):
            return default
        if isinstance(value, int) and value > 0:
            return value
        return default

    def _bool_or_default(value: Any, default: bool) -> bool:
        if isinstance(value, bool):
            return value
        return default

    small_icon = (
        _optional_str(data.get("small_icon"))
        if "small_icon" in data
        else _optional_str(data.get("notification_icon"))
    )
    return SurfaceConfig(
        small_icon=small_icon,
        channel_id=_str_or_default(data.get("channel_id"), DEFAULT_CHANNEL_ID),
        assets_dir=_optional_str(data.get("assets_dir")),
        artwork_timeout_s=_positive_float_or_default(
            data.get("artwork_timeout_s"), 10.0
        ),
        artwork_max_px=_positive_int_or_default(data.get("artwork_max_px"), 512),
        supersede_stale_renders=_bool_or_default(
            data.get("supersede_stale_renders"), True
        ),
        log_level=_str_or_default(data.get("log_level"), "INFO"),
    )


def load_config_with_notice(path: Path) -> tuple[SurfaceConfig, str | None]:
    """Load config and return an optional user-facing notice."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("Config file missing at %s; using defaults.", path)
        return SurfaceConfig(), None
    except OSError as exc:
        logger.warning("Failed to read config file %s: %s; using defaults.", path, exc)
        return (
            SurfaceConfig(),
            "Surface settings were reset to defaults.\n"
            "Likely cause: config file is unreadable due to permissions or IO issues.\n"
            f"Next step: verify access to '{path}' and restart.",
        )

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Config file at %s is invalid JSON; using defaults.", path)
        return (
            SurfaceConfig(),
            "Surface settings were reset to defaults.\n"
            "Likely cause: config file is corrupt or partially written.\n"
            f"Next step: remove or repair '{path}' and restart.",
        )

    if not isinstance(data, dict):
        logger.warning("Config file at %s is not a JSON object; using defaults.", path)
        return (
            SurfaceConfig(),
            "Surface settings were reset to defaults.\n"
            "Likely cause: config file format is invalid for this version.\n"
            f"Next step: remove '{path}' and restart.",
        )

    return _coerce_config(data), None


def load_config(path: Path) -> SurfaceConfig:
    """Load the surface configuration from disk, falling back to defaults."""
    config, _notice = load_config_with_notice(path)
    return config


def save_config(path: Path, config: SurfaceConfig) -> None:
    """Persist config atomically to disk via write-then-replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.{uuid4().hex}.tmp")
    payload = json.dumps(asdict(config), indent=2, sort_keys=True)
    delay_s = 0.02
    try:
        for attempt in range(4):
            tmp_path.write_text(payload, encoding="utf-8")
            try:
                tmp_path.replace(path)
                return
            except OSError as exc:
                if not _is_retryable_windows_replace_error(exc) or attempt >= 3:
                    raise
                time.sleep(delay_s)
                delay_s = min(0.25, delay_s * 2.0)
    finally:
        with suppress(OSError):
            tmp_path.unlink()


def _is_retryable_windows_replace_error(exc: OSError) -> bool:
    """Return whether an atomic replace failure is likely transient on Windows."""
    winerror = getattr(exc, "winerror", None)
    if winerror in {32, 5, 2}:
        return True
    errno = getattr(exc, "errno", None)
    if errno in {13, 16}:
        return True
    text = str(exc).lower()
    return "used by another process" in text or "permission denied" in text
