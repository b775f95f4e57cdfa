import pytest
from pydantic import ValidationError

from ollama_rest import Client, ClientSettings, ExecutionMode
from ollama_rest.config import DEFAULT_HOST, DEFAULT_TIMEOUT, get_settings, normalize_host


def test_defaults():
    settings = ClientSettings()
    assert settings.base_url == DEFAULT_HOST
    assert settings.timeout == DEFAULT_TIMEOUT
    assert settings.execution_mode is ExecutionMode.BLOCKING
    assert settings.enable_logging is False


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("http://localhost:11434", "http://localhost:11434"),
        ("http://localhost:11434/", "http://localhost:11434"),
        ("localhost", "http://localhost:11434"),
        ("0.0.0.0:11434", "http://0.0.0.0:11434"),
        ("example.com:8080", "http://example.com:8080"),
        ("https://ollama.example.com", "https://ollama.example.com"),
        ("http://gateway:8000/ollama", "http://gateway:8000/ollama"),
    ],
)
def test_normalize_host(raw, expected):
    assert normalize_host(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["", "   ", "ftp://localhost:11434", "http://", "http://localhost:11434/?q=1"],
)
def test_malformed_base_url_is_rejected(raw):
    with pytest.raises(ValueError):
        normalize_host(raw)


def test_client_construction_fails_on_malformed_base_url():
    with pytest.raises(ValueError):
        Client("ftp://localhost:11434")


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("OLLAMA_HOST", "0.0.0.0:11434")
    monkeypatch.setenv("OLLAMA_TIMEOUT", "2.5")
    monkeypatch.setenv("OLLAMA_EXECUTION_MODE", "Suspending")
    monkeypatch.setenv("OLLAMA_ENABLE_LOGGING", "false")

    settings = ClientSettings()

    assert settings.base_url == "http://0.0.0.0:11434"
    assert settings.timeout == 2.5
    assert settings.execution_mode is ExecutionMode.SUSPENDING


def test_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("OLLAMA_HOST=http://from-dotenv:1234\n")
    assert ClientSettings().base_url == "http://from-dotenv:1234"


def test_settings_are_frozen():
    settings = ClientSettings()
    with pytest.raises(ValidationError):
        settings.host = "http://elsewhere:11434"


def test_non_positive_timeout_is_rejected():
    with pytest.raises(ValidationError):
        ClientSettings(timeout=0)


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("OLLAMA_HOST", "http://changed:1")
    assert get_settings() is first
    get_settings.cache_clear()
    assert get_settings().base_url == "http://changed:1"


def test_client_arguments_override_settings():
    base = ClientSettings(host="http://base:1", timeout=5)
    client = Client(settings=base, timeout=9)
    try:
        assert client.base_url == "http://base:1"
        assert client.settings.timeout == 9
        assert base.timeout == 5
    finally:
        client.close()


def test_client_without_arguments_uses_environment(monkeypatch):
    monkeypatch.setenv("OLLAMA_HOST", "http://env-host:4321")
    client = Client()
    try:
        assert client.base_url == "http://env-host:4321"
        assert client.execution_mode is ExecutionMode.BLOCKING
    finally:
        client.close()


def test_client_timeout_none_waits_forever(monkeypatch):
    monkeypatch.setenv("OLLAMA_TIMEOUT", "3")

    configured = Client()
    unlimited = Client(timeout=None)
    try:
        assert configured.settings.timeout == 3
        assert unlimited.settings.timeout is None
    finally:
        configured.close()
        unlimited.close()


def test_client_timeout_none_overrides_given_settings():
    client = Client(settings=ClientSettings(timeout=5), timeout=None)
    try:
        assert client.settings.timeout is None
    finally:
        client.close()
