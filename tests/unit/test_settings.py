"""Unit tests for environment settings."""

from pathlib import Path

import pytest

from feedrank.settings import AppSettings


class TestAppSettings:
    """Tests for AppSettings."""

    @pytest.mark.unit
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Without environment variables the defaults apply."""
        monkeypatch.chdir(tmp_path)
        for name in ("FEEDRANK_CONFIG_PATH", "FEEDRANK_LOG_LEVEL", "FEEDRANK_LOG_JSON"):
            monkeypatch.delenv(name, raising=False)

        settings = AppSettings()

        assert settings.config_path is None
        assert settings.log_level == "INFO"
        assert settings.log_json is True

    @pytest.mark.unit
    def test_reads_environment(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Environment variables override defaults."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("FEEDRANK_CONFIG_PATH", "/etc/feedrank/ranking.yaml")
        monkeypatch.setenv("FEEDRANK_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("FEEDRANK_LOG_JSON", "false")

        settings = AppSettings()

        assert settings.config_path == Path("/etc/feedrank/ranking.yaml")
        assert settings.log_level == "DEBUG"
        assert settings.log_json is False
