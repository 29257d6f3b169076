"""Basic smoke tests."""

import importlib
import importlib.metadata

import tz_nowplaying
import tz_nowplaying.version


def test_version_defined() -> None:
    assert isinstance(tz_nowplaying.__version__, str)


def test_version_single_source_of_truth() -> None:
    assert tz_nowplaying.__version__ == tz_nowplaying.version.__version__


def test_version_falls_back_to_source_when_not_installed(monkeypatch) -> None:
    def not_installed(name: str) -> str:
        raise importlib.metadata.PackageNotFoundError(name)

    monkeypatch.setattr(importlib.metadata, "version", not_installed)
    reloaded = importlib.reload(tz_nowplaying)

    assert reloaded.__version__ == tz_nowplaying.version.__version__
    assert callable(reloaded._dist_version)
