"""
Unit Tests for Application Settings Configuration

Tests for:
- Default values
- Loading settings from environment variables, including nested AUDIO__ keys
- Blank optional values treated as unset
- Custom validators (log level, ranges)
- Settings caching and clearing
"""

import pytest
from pydantic import SecretStr, ValidationError

from guild_jukebox.config.settings import AudioSettings, Settings, clear_settings_cache, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "DISCORD_TOKEN",
        "TOKEN",
        "GUILD_ID",
        "LOG_LEVEL",
        "PLAYLIST_MAX",
        "YT_COOKIE",
        "SYNC_ON_STARTUP",
        "AUDIO__DEFAULT_VOLUME",
        "AUDIO__FFMPEG_EXECUTABLE",
        "AUDIO__PREFER_PASSTHROUGH",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# AudioSettings Tests
# =============================================================================


class TestAudioSettings:
    def test_defaults(self):
        audio = AudioSettings()

        assert audio.default_volume == 1.0
        assert audio.search_candidates == 3
        assert audio.ytdlp_format == "bestaudio/best"
        assert audio.ffmpeg_executable == "ffmpeg"
        assert audio.ytdlp_executable == "yt-dlp"
        assert audio.prefer_passthrough is False

    def test_short_aliases(self):
        audio = AudioSettings(ffmpeg="/opt/ffmpeg", ytdlp="/opt/yt-dlp")

        assert audio.ffmpeg_executable == "/opt/ffmpeg"
        assert audio.ytdlp_executable == "/opt/yt-dlp"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"default_volume": 0.0},
            {"default_volume": 2.5},
            {"search_candidates": 0},
            {"probe_timeout_s": 0},
            {"reconnect_delay_max": 120},
        ],
    )
    def test_out_of_range_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            AudioSettings(**kwargs)

    def test_frozen(self):
        audio = AudioSettings()
        with pytest.raises(ValidationError):
            audio.default_volume = 0.5


# =============================================================================
# Settings Tests
# =============================================================================


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.discord_token.get_secret_value() == ""
        assert settings.guild_id is None
        assert settings.sync_on_startup is True
        assert settings.playlist_max == 100
        assert settings.cookie is None
        assert settings.log_level == "INFO"

    def test_loads_from_environment(self, monkeypatch):
        monkeypatch.setenv("DISCORD_TOKEN", "secret")
        monkeypatch.setenv("GUILD_ID", "123456789012345678")
        monkeypatch.setenv("PLAYLIST_MAX", "25")
        monkeypatch.setenv("YT_COOKIE", "SID=abc")

        settings = Settings(_env_file=None)

        assert settings.discord_token == SecretStr("secret")
        assert settings.guild_id == 123456789012345678
        assert settings.playlist_max == 25
        assert settings.cookie == "SID=abc"

    def test_token_alias(self, monkeypatch):
        monkeypatch.setenv("TOKEN", "via-alias")
        assert Settings(_env_file=None).discord_token.get_secret_value() == "via-alias"

    def test_nested_audio_settings(self, monkeypatch):
        monkeypatch.setenv("AUDIO__DEFAULT_VOLUME", "0.5")
        monkeypatch.setenv("AUDIO__PREFER_PASSTHROUGH", "true")

        settings = Settings(_env_file=None)

        assert settings.audio.default_volume == 0.5
        assert settings.audio.prefer_passthrough is True

    def test_blank_optional_values_are_unset(self, monkeypatch):
        monkeypatch.setenv("GUILD_ID", "")
        monkeypatch.setenv("YT_COOKIE", "   ")

        settings = Settings(_env_file=None)

        assert settings.guild_id is None
        assert settings.cookie is None

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(_env_file=None, log_level="LOUD")

    @pytest.mark.parametrize("value", [0, 5001])
    def test_playlist_max_range(self, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, playlist_max=value)

    def test_cookie_hidden_in_repr(self, monkeypatch):
        monkeypatch.setenv("YT_COOKIE", "SID=abc")
        assert "SID=abc" not in repr(Settings(_env_file=None))


class TestSettingsCache:
    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self):
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first
