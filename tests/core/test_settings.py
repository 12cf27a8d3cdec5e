"""Tests for tablemap.settings module.

Covers:
- TablemapSettings instantiation with defaults
- Environment variable override
- get_settings caching and reload
"""

from tablemap.settings import TablemapSettings, get_settings


class TestTablemapSettingsDefaults:
    def test_default_database_url_is_in_memory_sqlite(self):
        s = TablemapSettings()
        assert s.database_url == "sqlite://"

    def test_default_echo_sql_false(self):
        assert TablemapSettings().echo_sql is False

    def test_default_log_level(self):
        assert TablemapSettings().log_level == "INFO"

    def test_default_log_json_auto(self):
        assert TablemapSettings().log_json is None


class TestTablemapSettingsEnvOverride:
    def test_database_url_from_env(self, monkeypatch):
        monkeypatch.setenv("TABLEMAP_DATABASE_URL", "sqlite:///shop.db")
        assert TablemapSettings().database_url == "sqlite:///shop.db"

    def test_echo_sql_from_env(self, monkeypatch):
        monkeypatch.setenv("TABLEMAP_ECHO_SQL", "true")
        assert TablemapSettings().echo_sql is True

    def test_log_json_from_env(self, monkeypatch):
        monkeypatch.setenv("TABLEMAP_LOG_JSON", "false")
        assert TablemapSettings().log_json is False

    def test_unprefixed_variables_ignored(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://elsewhere/db")
        assert TablemapSettings().database_url == "sqlite://"


class TestGetSettings:
    def test_returns_cached_instance(self):
        first = get_settings(_force_reload=True)
        assert get_settings() is first

    def test_force_reload_reads_environment_again(self, monkeypatch):
        get_settings(_force_reload=True)
        monkeypatch.setenv("TABLEMAP_LOG_LEVEL", "DEBUG")
        assert get_settings().log_level == "INFO"
        assert get_settings(_force_reload=True).log_level == "DEBUG"
        monkeypatch.delenv("TABLEMAP_LOG_LEVEL")
        get_settings(_force_reload=True)
