"""Best-effort artwork resolution for the surface's large icon.

`ArtworkResolver.resolve` never raises for a bad reference: missing files,
HTTP failures and undecodable bytes all come back as `ResolveError`, and the
pipeline renders without a large icon. Cancellation still propagates so a
superseded render can be abandoned.
"""

from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from pathlib import Path

import aiohttp
from PIL import Image, UnidentifiedImageError

from tz_nowplaying.models import ImageData, ImageReference, ResolveError
from tz_nowplaying.utils.async_utils import run_blocking

logger = logging.getLogger(__name__)

_MAX_ARTWORK_BYTES = 20 * 1024 * 1024
_CHUNK_BYTES = 64 * 1024


class ArtworkUnavailable(Exception):
    """Internal failure signal converted to `ResolveError` at the boundary."""


class ArtworkResolver:
    """Loads and decodes artwork for an `ImageReference`, one attempt per call."""

    def __init__(
        self,
        *,
        assets_dir: Path | None = None,
        timeout_s: float = 10.0,
        max_px: int = 512,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        if max_px < 1:
            raise ValueError("max_px must be >= 1")
        self._assets_dir = assets_dir
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._max_px = max_px
        self._session = session
        self._owns_session = session is None

    async def resolve(
        self, ref: ImageReference | None
    ) -> ImageData | ResolveError | None:
        """Return decoded artwork, `None` for no reference, or a typed failure."""
        if ref is None:
            return None
        try:
            raw = await self._load_bytes(ref)
            return await run_blocking(
                _decode_image, raw, max_px=self._max_px, source=ref.kind
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            logger.warning(
                "Artwork resolution failed for %s %s: %s",
                ref.kind,
                ref.path,
                reason,
                extra={"image_kind": ref.kind, "image_path": ref.path},
            )
            return ResolveError(reference=ref, reason=reason)

    async def close(self) -> None:
        """Close the owned HTTP session; injected sessions are left open."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def _load_bytes(self, ref: ImageReference) -> bytes:
        if ref.kind == "network":
            return await self._fetch(ref.path)
        if ref.kind == "file":
            return await run_blocking(_read_file, Path(ref.path))
        return await run_blocking(_read_file, self._asset_path(ref))

    def _asset_path(self, ref: ImageReference) -> Path:
        if self._assets_dir is None:
            raise ArtworkUnavailable("no assets directory configured")
        if ref.package:
            return self._assets_dir / "packages" / ref.package / ref.path
        return self._assets_dir / ref.path

    async def _fetch(self, url: str) -> bytes:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        async with self._session.get(url, timeout=self._timeout) as response:
            response.raise_for_status()
            declared = response.content_length
            if declared is not None and declared > _MAX_ARTWORK_BYTES:
                raise ArtworkUnavailable("artwork exceeds size limit")
            buffer = bytearray()
            async for chunk in response.content.iter_chunked(_CHUNK_BYTES):
                buffer.extend(chunk)
                if len(buffer) > _MAX_ARTWORK_BYTES:
                    raise ArtworkUnavailable("artwork exceeds size limit")
        data = bytes(buffer)
        if not data:
            raise ArtworkUnavailable("artwork URL returned 0 bytes")
        logger.debug("Downloaded %d bytes of artwork from %s", len(data), url)
        return data


def _read_file(path: Path) -> bytes:
    try:
        size = path.stat().st_size
    except FileNotFoundError as exc:
        raise ArtworkUnavailable(f"missing artwork file: {path}") from exc
    if size <= 0:
        raise ArtworkUnavailable(f"empty artwork file: {path}")
    if size > _MAX_ARTWORK_BYTES:
        raise ArtworkUnavailable(f"artwork file exceeds size limit: {path}")
    return path.read_bytes()


def _decode_image(raw: bytes, *, max_px: int, source: str) -> ImageData:
    """Decode image bytes into RGBA pixels no larger than `max_px` per edge."""
    try:
        with Image.open(BytesIO(raw)) as image:
            image.load()
            rgba = image.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise ArtworkUnavailable(f"undecodable artwork: {exc}") from exc
    rgba.thumbnail((max_px, max_px))
    width, height = rgba.size
    if width <= 0 or height <= 0:
        raise ArtworkUnavailable("artwork has no pixels")
    return ImageData(
        width=width,
        height=height,
        mode=rgba.mode,
        pixels=rgba.tobytes(),
        source=source,
    )
