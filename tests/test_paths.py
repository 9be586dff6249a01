"""Tests for platformdirs-based path helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from photoingest.paths import APP_NAME, CONFIG_FILENAME, config_dir, default_config_file


class TestConfigDir:
    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PHOTOINGEST_CONFIG_DIR", str(tmp_path / "cfg"))
        assert config_dir() == tmp_path / "cfg"
        assert default_config_file() == tmp_path / "cfg" / CONFIG_FILENAME

    def test_platform_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PHOTOINGEST_CONFIG_DIR", raising=False)
        assert config_dir().name == APP_NAME

    def test_does_not_create(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PHOTOINGEST_CONFIG_DIR", str(tmp_path / "cfg"))
        config_dir()
        assert not (tmp_path / "cfg").exists()
