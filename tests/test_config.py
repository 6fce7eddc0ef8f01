"""Tests for client configuration parsing and loading."""

import json

import pytest

from infrachat.config import load_config, read_config_file
from infrachat.constants import BASE_URL_ENV_VAR, DEFAULT_BASE_URL, MIN_DECISION_ID_LENGTH
from infrachat.domain.config import ClientConfig, validate_base_url


def test_defaults():
    config = ClientConfig.from_dict({})

    assert config.base_url == DEFAULT_BASE_URL
    assert config.min_decision_id_length == MIN_DECISION_ID_LENGTH
    assert config.extras == {}


def test_from_dict_keeps_unknown_keys_as_extras():
    config = ClientConfig.from_dict(
        {"base_url": "https://infra.example.com/api/", "timeout": 0, "theme": "dark"}
    )

    assert config.base_url == "https://infra.example.com/api"
    assert config.timeout == 0
    assert config.extras == {"theme": "dark"}
    assert config.to_dict()["theme"] == "dark"


@pytest.mark.parametrize(
    "raw",
    [
        {"timeout": True},
        {"timeout": -1},
        {"timeout": "30"},
        {"reconnect_delay": float("inf")},
        {"reconnect_delay": 0},
        {"reconnect_delay": -0.5},
        {"min_decision_id_length": 0},
        {"min_decision_id_length": 12.5},
        {"logs_dir": ""},
        {"base_url": "ftp://example.com"},
        {"base_url": "localhost:8080"},
    ],
)
def test_from_dict_rejects_invalid_values(raw):
    with pytest.raises(ValueError):
        ClientConfig.from_dict(raw)


def test_validate_base_url_strips_whitespace_and_slash():
    assert validate_base_url("  http://localhost:9000/ ") == "http://localhost:9000"


def test_read_config_file_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_config_file(str(tmp_path / "missing.json"))

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid JSON"):
        read_config_file(str(bad_json))

    not_object = tmp_path / "list.json"
    not_object.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError, match="JSON object"):
        read_config_file(str(not_object))


def test_load_config_precedence(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"base_url": "http://from-file:8080", "reconnect_delay": 1}),
        encoding="utf-8",
    )
    monkeypatch.delenv(BASE_URL_ENV_VAR, raising=False)

    assert load_config(str(path)).base_url == "http://from-file:8080"

    monkeypatch.setenv(BASE_URL_ENV_VAR, "http://from-env:8080")
    config = load_config(str(path))
    assert config.base_url == "http://from-env:8080"
    assert config.reconnect_delay == 1

    assert load_config(str(path), base_url="http://from-cli:8080").base_url == "http://from-cli:8080"


def test_load_config_without_file(monkeypatch):
    monkeypatch.delenv(BASE_URL_ENV_VAR, raising=False)

    assert load_config().base_url == DEFAULT_BASE_URL


def test_direct_construction_requires_positive_reconnect_delay():
    with pytest.raises(ValueError, match="greater than zero"):
        ClientConfig(reconnect_delay=0)

    assert ClientConfig(reconnect_delay=0.01).reconnect_delay == 0.01
