from __future__ import annotations

import pytest
from pydantic import ValidationError

from wshm_client.config import ENV_FIELDS, ENV_PREFIX, ClientConfig, ConfigError, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so that values written by load_dotenv are removed on teardown
    for key in ENV_FIELDS:
        name = f"{ENV_PREFIX}{key.upper()}"
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults():
    config = ClientConfig(url="ws://localhost:8765")
    assert config.auto_reconnect is True
    assert config.reconnect_delay == 1.0
    assert config.max_reconnect_attempts == 5
    assert config.escape_char == "~"
    assert config.max_message_size == 1024 * 1024
    assert config.max_parts == 100
    assert config.max_json_size == 10 * 1024
    assert config.protocol_version == "1.0"
    assert config.sanitizers == {}


def test_load_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("WSHM_URL", "ws://localhost:9000")
    monkeypatch.setenv("WSHM_AUTO_RECONNECT", "false")
    monkeypatch.setenv("WSHM_RECONNECT_DELAY", "0.5")
    monkeypatch.setenv("WSHM_LOG_LEVEL", "debug")

    config = load_config(env_path=str(tmp_path / "missing.env"))
    assert config.url == "ws://localhost:9000"
    assert config.auto_reconnect is False
    assert config.reconnect_delay == 0.5
    assert config.log_level == "DEBUG"


def test_load_from_dotenv_file(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("WSHM_URL=wss://example.com/live\nWSHM_ESCAPE_CHAR=^\nWSHM_MAX_PARTS=10\n")
    monkeypatch.setenv("WSHM_MAX_PARTS", "20")

    config = load_config(env_path=str(env_file))
    assert config.url == "wss://example.com/live"
    assert config.escape_char == "^"
    # process environment wins over the file
    assert config.max_parts == 20


def test_overrides_win(monkeypatch, tmp_path):
    monkeypatch.setenv("WSHM_URL", "ws://localhost:9000")
    seen = []
    config = load_config(env_path=str(tmp_path / "missing.env"), url="ws://other:1", on_message=seen.append)
    assert config.url == "ws://other:1"
    config.on_message("hello")
    assert seen == ["hello"]


def test_missing_url(tmp_path):
    with pytest.raises(ConfigError):
        load_config(env_path=str(tmp_path / "missing.env"))


@pytest.mark.parametrize("escape_char", ["|", "", "~~"])
def test_bad_escape_char(tmp_path, escape_char):
    with pytest.raises(ConfigError):
        load_config(env_path=str(tmp_path / "missing.env"), url="ws://localhost:8765", escape_char=escape_char)


def test_bad_numbers_and_level():
    with pytest.raises(ValidationError):
        ClientConfig(url="ws://localhost:8765", max_parts=0)
    with pytest.raises(ValidationError):
        ClientConfig(url="ws://localhost:8765", reconnect_delay=-1)
    with pytest.raises(ValidationError):
        ClientConfig(url="ws://localhost:8765", log_level="LOUD")


def test_config_is_read_only():
    config = ClientConfig(url="ws://localhost:8765")
    with pytest.raises(ValidationError):
        config.escape_char = "^"
