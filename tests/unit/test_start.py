"""
Unit Tests for the Start Script

These tests verify that resolve_bind:
- Binds to APP_HOST / APP_PORT from settings
- Lets a platform-assigned $PORT override APP_PORT

Run with:
    pytest tests/unit/test_start.py -v
"""

from core.config import Settings
from start import resolve_bind


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestResolveBind:

    def test_uses_configured_host_and_port(self):
        config = make_settings(app_host="127.0.0.1", app_port=8123)

        assert resolve_bind(config, env={}) == ("127.0.0.1", 8123)

    def test_platform_port_takes_precedence(self):
        config = make_settings(app_host="127.0.0.1", app_port=8123)

        assert resolve_bind(config, env={"PORT": "9000"}) == ("127.0.0.1", 9000)

    def test_empty_platform_port_is_ignored(self):
        config = make_settings(app_host="0.0.0.0", app_port=8123)

        assert resolve_bind(config, env={"PORT": ""}) == ("0.0.0.0", 8123)
