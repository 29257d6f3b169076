"""Now-playing control surface for media players."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _dist_version

from tz_nowplaying.version import __version__ as _source_version

__all__ = ["__version__"]

try:
    __version__ = _dist_version("tz-nowplaying")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = _source_version
