"""Dict codecs for requests crossing process/host boundaries.

Key names follow the host channel's camelCase extras (`playerId`,
`audioMetas`, `notificationSettings`) so payloads produced by the plugin side
decode without translation.
"""

from __future__ import annotations

from typing import Any, cast

from tz_nowplaying.models import (
    IMAGE_KINDS,
    AudioMetas,
    ImageKind,
    ImageReference,
    NotificationSettings,
    ShowRequest,
)


class MalformedPayloadError(ValueError):
    """Raised when an inbound dict cannot be decoded into a model value."""


def image_reference_to_dict(ref: ImageReference) -> dict[str, Any]:
    return {"type": ref.kind, "path": ref.path, "package": ref.package}


def image_reference_from_dict(data: Any) -> ImageReference:
    if not isinstance(data, dict):
        raise MalformedPayloadError("image must be an object")
    kind = data.get("type")
    if kind not in IMAGE_KINDS:
        raise MalformedPayloadError(f"unknown image type: {kind!r}")
    path = data.get("path")
    if not isinstance(path, str):
        raise MalformedPayloadError("path must be a string")
    package = _optional_str(data, "package")
    return ImageReference(kind=cast(ImageKind, kind), path=path, package=package)


def show_request_to_dict(request: ShowRequest) -> dict[str, Any]:
    metas = request.audio_metas
    settings = request.notification_settings
    return {
        "playerId": request.player_id,
        "isPlaying": request.is_playing,
        "audioMetas": {
            "title": metas.title,
            "artist": metas.artist,
            "album": metas.album,
            "image": image_reference_to_dict(metas.image) if metas.image else None,
        },
        "notificationSettings": {
            "prevEnabled": settings.prev_enabled,
            "playPauseEnabled": settings.play_pause_enabled,
            "nextEnabled": settings.next_enabled,
            "stopEnabled": settings.stop_enabled,
        },
    }


def show_request_from_dict(data: Any) -> ShowRequest:
    if not isinstance(data, dict):
        raise MalformedPayloadError("show request must be an object")
    player_id = _required_str(data, "playerId")
    is_playing = data.get("isPlaying")
    if not isinstance(is_playing, bool):
        raise MalformedPayloadError("isPlaying must be a boolean")

    metas_raw = data.get("audioMetas", {})
    if not isinstance(metas_raw, dict):
        raise MalformedPayloadError("audioMetas must be an object")
    image_raw = metas_raw.get("image")
    metas = AudioMetas(
        title=_optional_str(metas_raw, "title"),
        artist=_optional_str(metas_raw, "artist"),
        album=_optional_str(metas_raw, "album"),
        image=image_reference_from_dict(image_raw) if image_raw is not None else None,
    )

    settings_raw = data.get("notificationSettings", {})
    if not isinstance(settings_raw, dict):
        raise MalformedPayloadError("notificationSettings must be an object")
    settings = NotificationSettings(
        prev_enabled=_bool_or_default(settings_raw, "prevEnabled"),
        play_pause_enabled=_bool_or_default(settings_raw, "playPauseEnabled"),
        next_enabled=_bool_or_default(settings_raw, "nextEnabled"),
        stop_enabled=_bool_or_default(settings_raw, "stopEnabled"),
    )
    return ShowRequest(
        player_id=player_id,
        audio_metas=metas,
        is_playing=is_playing,
        notification_settings=settings,
    )


def _required_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedPayloadError(f"{key} must be a non-empty string")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedPayloadError(f"{key} must be a string")
    return value


def _bool_or_default(data: dict[str, Any], key: str, default: bool = True) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise MalformedPayloadError(f"{key} must be a boolean")
    return value
