"""Shared pytest fixtures and configuration."""
import pytest
from datetime import datetime, timezone
from decimal import Decimal

from maestro_hub.adapters.banks import build_bank_registry
from maestro_hub.core.config import BankCredentials, Settings
from maestro_hub.core.types import BankProvider, TransferRequest, UnifiedCryptoPrice


@pytest.fixture
def demo_settings():
    """Settings with no credentials at all (every bank in demo mode)."""
    return Settings.from_env(env={})


@pytest.fixture
def live_credentials():
    """Sandbox credentials that mark an adapter as configured."""
    return BankCredentials(
        api_key="test_key",
        client_id="test_client",
        client_secret="test_secret",
        access_token="test_token",
    )


@pytest.fixture
def live_settings(live_credentials):
    """Settings with every bank configured."""
    return Settings(banks={provider: live_credentials for provider in BankProvider})


@pytest.fixture
def demo_registry(demo_settings):
    """Registry of demo adapters in canonical order."""
    return build_bank_registry(demo_settings)


@pytest.fixture
def transfer_request():
    """Sample transfer through Wio."""
    return TransferRequest(
        provider="wio",
        from_account_id="WIO001",
        to_beneficiary_id="BEN001",
        amount=Decimal("250.00"),
        currency="AED",
        purpose="Invoice payment",
        reference="INV-2026-001",
    )


@pytest.fixture
def make_price():
    """Factory for UnifiedCryptoPrice with sensible defaults."""
    def _make(symbol, volume=0.0, source="binance", price=100.0, market_cap=None):
        return UnifiedCryptoPrice(
            symbol=symbol,
            name=symbol,
            price=price,
            price_aed=price * 3.6725,
            change_24h=0.0,
            change_percent_24h=0.0,
            high_24h=price,
            low_24h=price,
            volume_24h=volume,
            source=source,
            last_updated=datetime(2026, 1, 1, tzinfo=timezone.utc),
            market_cap=market_cap,
        )
    return _make
