"""
Tests for configuration module.
"""

from pathlib import Path

from lightsurvey.core.config import Settings


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self, tmp_path: Path) -> None:
        settings = Settings(recordings_dir=tmp_path)

        assert settings.kmz_fetch_timeout_seconds == 20.0
        assert settings.parse_cache_ttl_seconds == 0
        assert settings.parse_cache_enabled is False
        assert settings.route_recordings_url is None
        assert settings.api_v1_prefix == "/api/v1"
        assert settings.environment == "development"

    def test_recordings_dir_created(self, tmp_path: Path) -> None:
        recordings_dir = tmp_path / "recordings"
        assert not recordings_dir.exists()

        Settings(recordings_dir=recordings_dir)

        assert recordings_dir.is_dir()

    def test_cache_enabled_by_ttl(self, tmp_path: Path) -> None:
        settings = Settings(recordings_dir=tmp_path, parse_cache_ttl_seconds=300)

        assert settings.parse_cache_enabled is True

    def test_cors_origins_list(self, tmp_path: Path) -> None:
        settings = Settings(
            recordings_dir=tmp_path,
            cors_origins="http://a.test, http://b.test",
        )

        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_environment_variables(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("LIGHTSURVEY_KMZ_FETCH_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("LIGHTSURVEY_ROUTE_RECORDINGS_URL", "https://api.test/routes")
        monkeypatch.setenv("LIGHTSURVEY_RECORDINGS_DIR", str(tmp_path / "env-recordings"))

        settings = Settings()

        assert settings.kmz_fetch_timeout_seconds == 5.0
        assert settings.route_recordings_url == "https://api.test/routes"
        assert settings.recordings_dir == tmp_path / "env-recordings"
        assert settings.recordings_dir.is_dir()
