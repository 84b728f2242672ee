"""Tests for settings and the clients YAML file."""

from __future__ import annotations

from graphbind import ClientConfig, ClientSettings, ClientsConfig, LoggerLevel, load_clients_config


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("GRAPHBIND_TIMEOUT", raising=False)
    settings = ClientSettings(_env_file=None)

    assert settings.timeout == 30.0
    assert settings.disable_ssl_validation is False
    assert settings.logger_level == LoggerLevel.NONE
    assert settings.sensitive_headers == ["Authorization"]


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("GRAPHBIND_TIMEOUT", "5")
    monkeypatch.setenv("GRAPHBIND_DISABLE_SSL_VALIDATION", "true")
    monkeypatch.setenv("GRAPHBIND_LOGGER_LEVEL", "HEADERS")
    monkeypatch.setenv("GRAPHBIND_SENSITIVE_HEADERS", '["Authorization", "X-Api-Key"]')

    settings = ClientSettings(_env_file=None)

    assert settings.timeout == 5.0
    assert settings.disable_ssl_validation is True
    assert settings.logger_level == LoggerLevel.HEADERS
    assert settings.sensitive_headers == ["Authorization", "X-Api-Key"]


def test_load_clients_config(tmp_path):
    path = tmp_path / "graphbind.yaml"
    path.write_text(
        "clients:\n"
        "  books:\n"
        "    url: http://localhost:8080/graphql\n"
        "    timeout: 10\n"
        "    headers:\n"
        "      X-Api-Key: secret\n"
        "  authors:\n"
        "    url: http://localhost:8081/graphql\n"
    )

    config = load_clients_config(path)

    assert config.get("books") == ClientConfig(
        name="books",
        url="http://localhost:8080/graphql",
        timeout=10,
        headers={"X-Api-Key": "secret"},
    )
    assert config.get("authors").timeout is None
    assert config.get("reviews") is None


def test_missing_clients_config(tmp_path):
    assert load_clients_config(tmp_path / "missing.yaml") is None


def test_save_and_reload(tmp_path):
    path = tmp_path / "graphbind.yaml"
    config = ClientsConfig(clients={
        "books": ClientConfig(name="books", url="http://localhost:8080/graphql", headers={"X-Api-Key": "secret"}),
    })

    config.save(path)

    assert load_clients_config(path) == config
