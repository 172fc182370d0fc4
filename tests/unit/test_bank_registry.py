"""Unit tests for the demo adapter and the bank registry."""
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from maestro_hub.adapters.banks import (
    DemoBankAdapter,
    EmiratesNBDAdapter,
    MashreqAdapter,
    ProviderNotConfiguredError,
    RakbankAdapter,
    WioAdapter,
    build_bank_registry,
)
from maestro_hub.core.config import BankCredentials, Settings
from maestro_hub.core.types import BankProvider


class TestBuildBankRegistry:
    """Test registry construction from settings."""

    def test_registry_in_canonical_order(self, demo_registry):
        """Test providers are keyed and ordered canonically."""
        assert list(demo_registry) == ["rakbank", "mashreq", "wio", "emirates_nbd"]

    def test_unconfigured_banks_are_demo(self, demo_registry):
        """Test every bank without credentials is wrapped in a demo adapter."""
        for adapter in demo_registry.values():
            assert isinstance(adapter, DemoBankAdapter)
            assert adapter.is_configured() is False

    def test_configured_bank_is_live(self, live_credentials):
        """Test only banks with credentials get a live adapter."""
        # ARRANGE
        settings = Settings(banks={BankProvider.WIO: live_credentials}, provider_timeout=3.0)

        # ACT
        registry = build_bank_registry(settings)

        # ASSERT
        assert isinstance(registry["wio"], WioAdapter)
        assert registry["wio"].is_configured() is True
        assert registry["wio"].timeout == 3.0
        assert isinstance(registry["rakbank"], DemoBankAdapter)
        assert isinstance(registry["mashreq"], DemoBankAdapter)
        assert isinstance(registry["emirates_nbd"], DemoBankAdapter)

    def test_all_configured(self, live_settings):
        """Test a fully configured settings object yields no demo adapters."""
        registry = build_bank_registry(live_settings)

        assert isinstance(registry["rakbank"], RakbankAdapter)
        assert isinstance(registry["mashreq"], MashreqAdapter)
        assert isinstance(registry["emirates_nbd"], EmiratesNBDAdapter)
        assert not any(isinstance(a, DemoBankAdapter) for a in registry.values())


class TestDemoBankAdapter:
    """Test mock data substitution."""

    def test_demo_mirrors_wrapped_metadata(self):
        """Test demo adapter reports the wrapped bank's identity."""
        demo = DemoBankAdapter(RakbankAdapter())

        assert demo.provider == BankProvider.RAKBANK
        assert demo.display_name == "RAKBANK"
        assert demo.supports_beneficiaries is True
        assert demo.field_map == RakbankAdapter.field_map

    def test_config_status_flags_demo(self):
        """Test config status marks demo substitution."""
        status = DemoBankAdapter(WioAdapter()).get_config_status()

        assert status["demo"] is True
        assert status["configured"] is False

    def test_demo_accounts_are_mock_fixtures(self):
        """Test demo accounts are the adapter's mock accounts."""
        demo = DemoBankAdapter(MashreqAdapter())

        accounts = demo.get_accounts()

        assert [a["id"] for a in accounts] == ["MASHREQ001", "MASHREQ002"]
        assert sum(Decimal(a["balance"]) for a in accounts) == Decimal("325000.00")

    def test_demo_transactions_filter_by_account(self):
        """Test per-account transactions only return that account's rows."""
        demo = DemoBankAdapter(RakbankAdapter())

        assert len(demo.get_transactions("ACC001")) == 2
        assert demo.get_transactions("ACC002") == []

    def test_demo_transactions_filter_by_date(self):
        """Test from/to dates bound the booking date."""
        demo = DemoBankAdapter(MashreqAdapter())
        today = datetime.now(timezone.utc).date()

        recent = demo.get_transactions("MASHREQ001", from_date=today - timedelta(days=1))
        older = demo.get_transactions("MASHREQ001", to_date=today - timedelta(days=2))

        assert [t["id"] for t in recent] == ["MASHREQ_TXN001", "MASHREQ_TXN002"]
        assert [t["id"] for t in older] == ["MASHREQ_TXN003"]

    def test_demo_transactions_limit(self):
        """Test limit truncates the mock transactions."""
        demo = DemoBankAdapter(EmiratesNBDAdapter())

        assert len(demo.get_transactions("ENBD001", limit=1)) == 1

    def test_demo_recent_transactions_are_all_mocks(self):
        """Test recent transactions return every mock row."""
        demo = DemoBankAdapter(WioAdapter())

        assert len(demo.list_recent_transactions()) == len(WioAdapter().get_mock_transactions())

    def test_demo_beneficiaries_empty(self):
        """Test demo mode has no beneficiary fixtures."""
        assert DemoBankAdapter(EmiratesNBDAdapter()).get_beneficiaries() == []

    def test_demo_transfer_raises_not_configured(self, transfer_request):
        """Test demo adapters refuse to move money."""
        demo = DemoBankAdapter(WioAdapter())

        with pytest.raises(ProviderNotConfiguredError, match="Wio Bank API not configured"):
            demo.transfer(transfer_request)

    def test_demo_keeps_environment_of_credentials(self):
        """Test demo reports the wrapped adapter's declared environment."""
        adapter = WioAdapter(credentials=BankCredentials(use_sandbox=False))

        assert DemoBankAdapter(adapter).environment.value == "production"
