"""Unit tests for runtime configuration."""
import dataclasses
import pytest
from unittest.mock import patch

from maestro_hub.core.config import (
    DEFAULT_PROVIDER_TIMEOUT_SECONDS,
    BankCredentials,
    Settings,
)
from maestro_hub.core.types import BankProvider, Environment


class TestBankCredentials:
    """Test configured / environment derivation."""

    def test_configured_requires_api_key_and_client_id(self):
        """Test both API key and client id are needed."""
        assert BankCredentials(api_key="k", client_id="c").configured is True
        assert BankCredentials(api_key="k").configured is False
        assert BankCredentials(client_id="c").configured is False
        assert BankCredentials().configured is False

    def test_client_secret_alone_does_not_configure(self):
        """Test a secret without key/id leaves the bank unconfigured."""
        assert BankCredentials(client_secret="s").configured is False

    def test_environment_defaults_to_sandbox(self):
        """Test sandbox is the default environment."""
        assert BankCredentials().environment == Environment.SANDBOX
        assert BankCredentials(use_sandbox=False).environment == Environment.PRODUCTION

    def test_credentials_are_immutable(self):
        """Test credentials cannot be mutated after construction."""
        creds = BankCredentials(api_key="k")

        with pytest.raises(dataclasses.FrozenInstanceError):
            creds.api_key = "other"


class TestSettingsFromEnv:
    """Test Settings.from_env."""

    def test_empty_env_gives_unconfigured_banks(self):
        """Test no variables means every bank is in demo mode."""
        # ACT
        settings = Settings.from_env(env={})

        # ASSERT
        for provider in BankProvider:
            assert settings.credentials_for(provider).configured is False
            assert settings.credentials_for(provider).environment == Environment.SANDBOX
        assert settings.provider_timeout == DEFAULT_PROVIDER_TIMEOUT_SECONDS
        assert settings.price_sources.binance_use_testnet is True
        assert settings.price_sources.coingecko_api_key is None

    def test_reads_prefixed_credentials(self):
        """Test each bank reads its own prefix."""
        # ARRANGE
        env = {
            "RAKBANK_API_KEY": "rak_key",
            "RAKBANK_CLIENT_ID": "rak_id",
            "EMIRATES_NBD_API_KEY": "enbd_key",
            "EMIRATES_NBD_CLIENT_ID": "enbd_id",
            "EMIRATES_NBD_ACCESS_TOKEN": "enbd_token",
        }

        # ACT
        settings = Settings.from_env(env=env)

        # ASSERT
        rak = settings.credentials_for(BankProvider.RAKBANK)
        enbd = settings.credentials_for(BankProvider.EMIRATES_NBD)
        assert rak.configured is True
        assert rak.api_key == "rak_key"
        assert enbd.access_token == "enbd_token"
        assert settings.credentials_for(BankProvider.WIO).configured is False

    @pytest.mark.parametrize("value,expected", [
        ("false", Environment.PRODUCTION),
        ("FALSE", Environment.PRODUCTION),
        ("true", Environment.SANDBOX),
        ("0", Environment.SANDBOX),
        ("no", Environment.SANDBOX),
        ("", Environment.SANDBOX),
    ])
    def test_only_literal_false_selects_production(self, value, expected):
        """Test sandbox flag defaults on unless explicitly 'false'."""
        settings = Settings.from_env(env={"WIO_USE_SANDBOX": value})

        assert settings.credentials_for(BankProvider.WIO).environment == expected

    def test_price_source_settings(self):
        """Test Binance testnet flag and CoinGecko key."""
        settings = Settings.from_env(env={
            "BINANCE_USE_TESTNET": "false",
            "COINGECKO_API_KEY": "cg_key",
        })

        assert settings.price_sources.binance_use_testnet is False
        assert settings.price_sources.coingecko_api_key == "cg_key"

    def test_provider_timeout_override(self):
        """Test MAESTRO_PROVIDER_TIMEOUT is parsed as seconds."""
        settings = Settings.from_env(env={"MAESTRO_PROVIDER_TIMEOUT": "2.5"})

        assert settings.provider_timeout == 2.5

    @pytest.mark.parametrize("value", ["abc", "0", "-1"])
    def test_invalid_timeout_raises(self, value):
        """Test non-numeric or non-positive timeout is rejected."""
        with pytest.raises(ValueError, match="MAESTRO_PROVIDER_TIMEOUT"):
            Settings.from_env(env={"MAESTRO_PROVIDER_TIMEOUT": value})

    def test_loads_dotenv_when_reading_process_env(self):
        """Test .env is loaded only when no explicit mapping is given."""
        with patch("maestro_hub.core.config.load_dotenv") as mock_load, \
                patch.dict("os.environ", {"MASHREQ_API_KEY": "k", "MASHREQ_CLIENT_ID": "c"}, clear=True):
            settings = Settings.from_env(dotenv_path=".env.test")

        mock_load.assert_called_once_with(".env.test")
        assert settings.credentials_for(BankProvider.MASHREQ).configured is True

    def test_explicit_env_skips_dotenv(self):
        """Test passing env never touches .env files."""
        with patch("maestro_hub.core.config.load_dotenv") as mock_load:
            Settings.from_env(env={})

        mock_load.assert_not_called()

    def test_missing_provider_gets_empty_credentials(self):
        """Test credentials_for falls back to unconfigured credentials."""
        settings = Settings()

        assert settings.credentials_for(BankProvider.WIO) == BankCredentials()
