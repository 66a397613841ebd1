import pytest

from trip_viewport.api.config import get_viewport_config, get_websocket_config, validate_viewport_config
from trip_viewport.api.device import is_constrained_platform

IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148"
DESKTOP = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("VIEWPORT_BOUNDS_PADDING", "VIEWPORT_SETTLE_DELAY_MS",
                "VIEWPORT_CONSTRAINED_PLATFORM", "VIEWPORT_SESSION_TIMEOUT_SECONDS",
                "WEBSOCKET_NAMESPACE"):
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    config = get_viewport_config()

    assert config["bounds_padding"] == (30, 30)
    assert config["settle_delay_ms"] == 250
    assert config["constrained_platform"] == "auto"
    assert get_websocket_config()["namespace"] == "/trip/ws"
    assert validate_viewport_config() is True


def test_overrides(monkeypatch):
    monkeypatch.setenv("VIEWPORT_BOUNDS_PADDING", "12")
    monkeypatch.setenv("VIEWPORT_SETTLE_DELAY_MS", "400")
    monkeypatch.setenv("VIEWPORT_CONSTRAINED_PLATFORM", " TRUE ")

    config = get_viewport_config()

    assert config["bounds_padding"] == (12, 12)
    assert config["settle_delay_ms"] == 400
    assert config["constrained_platform"] == "true"


@pytest.mark.parametrize("key,value", [
    ("VIEWPORT_BOUNDS_PADDING", "-1,5"),
    ("VIEWPORT_SETTLE_DELAY_MS", "-10"),
    ("VIEWPORT_CONSTRAINED_PLATFORM", "sometimes"),
    ("VIEWPORT_SESSION_TIMEOUT_SECONDS", "0"),
])
def test_invalid_values(monkeypatch, key, value):
    monkeypatch.setenv(key, value)

    with pytest.raises(ValueError):
        validate_viewport_config()


def test_malformed_padding(monkeypatch):
    monkeypatch.setenv("VIEWPORT_BOUNDS_PADDING", "1,2,3")

    with pytest.raises(ValueError):
        get_viewport_config()


@pytest.mark.parametrize("user_agent,override,expected", [
    (IPHONE, "auto", True),
    (DESKTOP, "auto", False),
    (None, "auto", False),
    (DESKTOP, "true", True),
    (IPHONE, "false", False),
])
def test_constrained_platform_detection(user_agent, override, expected):
    assert is_constrained_platform(user_agent, override) is expected
