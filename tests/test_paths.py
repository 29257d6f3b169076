"""Tests for platform-specific paths."""

from __future__ import annotations

from pathlib import Path

import tz_nowplaying.paths as paths


class FakeAppDirs:
    """AppDirs stand-in that pins path roots to a temp directory."""

    def __init__(self, data_dir: Path, config_dir: Path) -> None:
        self.user_data_dir = str(data_dir)
        self.user_config_dir = str(config_dir)


def test_paths_use_platformdirs_and_create_dirs(tmp_path, monkeypatch) -> None:
    data_dir = tmp_path / "data"
    config_dir = tmp_path / "config"
    seen: list[str] = []

    def fake_app_dirs(app_name: str, appauthor: bool | None = None) -> FakeAppDirs:
        assert appauthor is False
        seen.append(app_name)
        return FakeAppDirs(data_dir, config_dir)

    monkeypatch.setattr(paths, "AppDirs", fake_app_dirs)
    paths.get_app_dirs.cache_clear()
    try:
        assert paths.data_dir() == data_dir
        assert paths.config_dir() == config_dir
        assert paths.log_dir() == data_dir / "logs"
        assert paths.config_path() == config_dir / "config.json"
    finally:
        paths.get_app_dirs.cache_clear()

    assert seen == ["tz-nowplaying"]
    assert data_dir.exists()
    assert config_dir.exists()
    assert (data_dir / "logs").exists()
