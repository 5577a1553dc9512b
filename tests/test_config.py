"""
Tests for settings loading.
"""

from set_query.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("SET_QUERY_RESOLVER_TIMEOUT", raising=False)

    settings = Settings(_env_file=None)

    assert settings.resolver_timeout == 5.0
    assert settings.sets_config_path is None
    assert settings.default_page_size == 10


def test_environment_prefix(monkeypatch):
    monkeypatch.setenv("SET_QUERY_RESOLVER_TIMEOUT", "1.5")
    monkeypatch.setenv("SET_QUERY_SETS_CONFIG_PATH", "/etc/set_query/sets.yaml")

    settings = Settings(_env_file=None)

    assert settings.resolver_timeout == 1.5
    assert settings.sets_config_path == "/etc/set_query/sets.yaml"
