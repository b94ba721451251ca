"""
Unit Tests for Configuration Module

These tests verify that the configuration system works correctly:
- Default values are applied when needed
- Validation catches invalid configurations
- Property methods work as expected
- The settings-backed stores read what the settings hold

Run with:
    pytest tests/unit/test_config.py -v
"""

import pytest
from core.config import SUPPORTED_CURRENCIES, Settings, settings, validate_configuration
from storage.stores import SettingsAccountStore, SettingsPreferences


def make_settings(**overrides) -> Settings:
    """Settings built from explicit values only (no .env file)."""
    return Settings(_env_file=None, **overrides)


class TestConfigurationLoading:
    """Test that configuration loads correctly"""

    def test_service_url_loaded(self):
        """Verify the service URL is a WebSocket URL"""
        assert settings.service_url.startswith(("ws://", "wss://"))

    def test_defaults(self):
        config = make_settings()

        assert config.service_url == "wss://raicast.lightrai.com:443"
        assert config.local_currency == "USD"
        assert config.default_block_count == 10
        assert config.ws_reconnect is False
        assert config.publisher_max_queue_size == 0

    def test_app_port_is_valid_integer(self):
        """Verify app port is a valid integer"""
        assert isinstance(settings.app_port, int)
        assert 1 <= settings.app_port <= 65535

    def test_only_used_settings_are_declared(self):
        assert "environment" not in Settings.model_fields
        assert "debug" not in Settings.model_fields

    def test_usd_and_btc_pricing_currencies(self):
        assert "USD" in SUPPORTED_CURRENCIES
        assert "BTC" not in SUPPORTED_CURRENCIES


class TestProperties:

    def test_cors_origins_list(self):
        config = make_settings(cors_origins=" http://a.test , ,http://b.test")

        assert config.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_has_account(self):
        assert make_settings(account_address="nano_1abc").has_account is True
        assert make_settings(account_address="   ").has_account is False


class TestValidation:
    """Test validate_configuration()"""

    def test_valid_configuration_passes(self):
        """Should not raise for the defaults"""
        validate_configuration(make_settings())

    def test_lowercase_currency_accepted(self):
        validate_configuration(make_settings(local_currency="eur"))

    @pytest.mark.parametrize("overrides", [
        {"service_url": "https://raicast.lightrai.com"},
        {"local_currency": "XYZ"},
        {"default_block_count": -1},
        {"publisher_max_queue_size": -5},
        {"app_port": 70000},
        {"log_level": "VERBOSE"},
    ])
    def test_invalid_configuration_raises(self, overrides):
        with pytest.raises(ValueError):
            validate_configuration(make_settings(**overrides))


class TestSettingsStores:

    def test_address_is_stripped(self):
        store = SettingsAccountStore(make_settings(account_address="  nano_1abc \n"))

        assert store.get_address() == "nano_1abc"

    def test_blank_address_is_none(self):
        assert SettingsAccountStore(make_settings()).get_address() is None

    def test_currency_is_uppercased(self):
        preferences = SettingsPreferences(make_settings(local_currency="gbp"))

        assert preferences.get_local_currency() == "GBP"
