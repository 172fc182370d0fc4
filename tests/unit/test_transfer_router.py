"""Unit tests for transfer routing and the payment route heuristic."""
import pytest
from decimal import Decimal
from unittest.mock import MagicMock, patch
import requests

from maestro_hub.adapters.banks import build_bank_registry
from maestro_hub.core.config import Settings
from maestro_hub.core.types import BankProvider, TransferRequest
from maestro_hub.services.banking.router import UNKNOWN_PROVIDER, TransferRouter


def _registry_with(credentials, *providers):
    return build_bank_registry(Settings(banks={p: credentials for p in providers}))


class TestRoute:
    """Test TransferRouter.route."""

    @pytest.mark.asyncio
    async def test_unknown_provider(self, demo_registry, transfer_request):
        """Test an unregistered provider id is rejected without raising."""
        router = TransferRouter(demo_registry)
        transfer_request.provider = "hsbc"

        response = await router.route(transfer_request)

        assert response.success is False
        assert response.error == UNKNOWN_PROVIDER

    @pytest.mark.asyncio
    async def test_demo_provider_reports_not_configured(self, demo_registry, transfer_request):
        """Test demo adapters fail the transfer with a clear message."""
        router = TransferRouter(demo_registry)
        transfer_request.provider = "emirates_nbd"

        response = await router.route(transfer_request)

        assert response.success is False
        assert response.error == "Emirates NBD API not configured"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10")])
    async def test_non_positive_amount_rejected(self, demo_registry, transfer_request, amount):
        """Test invalid amounts never reach the bank."""
        router = TransferRouter(demo_registry)
        transfer_request.amount = amount

        response = await router.route(transfer_request)

        assert response.success is False
        assert response.error == "Transfer amount must be positive"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["NaN", "sNaN", "Infinity", "-Infinity"])
    async def test_non_finite_amount_rejected(self, demo_registry, transfer_request, amount):
        """Test NaN and infinite amounts are rejected without raising."""
        router = TransferRouter(demo_registry)
        transfer_request.amount = Decimal(amount)

        response = await router.route(transfer_request)

        assert response.success is False
        assert response.error == "Transfer amount must be positive"

    @pytest.mark.asyncio
    async def test_enum_provider_is_dispatched(self, demo_registry, transfer_request):
        """Test a BankProvider member reaches the same adapter as its id."""
        router = TransferRouter(demo_registry)
        transfer_request.provider = BankProvider.WIO

        with patch("maestro_hub.core.logging_config.logger") as mock_logger:
            response = await router.route(transfer_request)

        assert response.success is False
        assert response.error == "Wio Bank API not configured"
        assert mock_logger.warning.call_args[1]["provider"] == "wio"

    @pytest.mark.asyncio
    @patch("maestro_hub.adapters.banks.base.requests.Session.request")
    async def test_recommended_route_can_be_used_for_transfer(self, mock_request, live_credentials, transfer_request):
        """Test the provider from find_best_payment_route can submit a transfer."""
        # ARRANGE
        response = MagicMock()
        response.status_code = 201
        response.json.return_value = {"transferId": "WT-456", "status": "PENDING"}
        mock_request.return_value = response
        router = TransferRouter(_registry_with(live_credentials, BankProvider.WIO))
        transfer_request.provider = router.find_best_payment_route(transfer_request.amount).recommended_provider

        # ACT
        result = await router.route(transfer_request)

        # ASSERT
        assert result.success is True
        assert result.transaction_id == "WT-456"

    @pytest.mark.asyncio
    @patch("maestro_hub.adapters.banks.base.requests.Session.request")
    async def test_live_transfer_success(self, mock_request, live_credentials, transfer_request):
        """Test a live transfer maps the bank's id field to transaction_id."""
        # ARRANGE
        response = MagicMock()
        response.status_code = 201
        response.json.return_value = {"transferId": "WT-123", "status": "PENDING", "reference": "INV-2026-001"}
        mock_request.return_value = response
        router = TransferRouter(_registry_with(live_credentials, BankProvider.WIO))

        # ACT
        result = await router.route(transfer_request)

        # ASSERT
        assert result.success is True
        assert result.transaction_id == "WT-123"
        assert result.status == "PENDING"
        assert result.reference == "INV-2026-001"
        assert mock_request.call_args[0][0] == "POST"

    @pytest.mark.asyncio
    @patch("maestro_hub.adapters.banks.base.requests.Session.request")
    async def test_live_transfer_failure(self, mock_request, live_credentials, transfer_request):
        """Test bank errors become success=False with the message."""
        mock_request.side_effect = requests.exceptions.ConnectionError("reset by peer")
        router = TransferRouter(_registry_with(live_credentials, BankProvider.WIO))

        result = await router.route(transfer_request)

        assert result.success is False
        assert "Wio Bank request failed" in result.error

    @pytest.mark.asyncio
    async def test_transfer_events_logged(self, demo_registry, transfer_request):
        """Test failed transfers emit a transfer_failed event."""
        with patch("maestro_hub.core.logging_config.logger") as mock_logger:
            router = TransferRouter(demo_registry)
            await router.route(transfer_request)

        context = mock_logger.warning.call_args[1]
        assert context["event"] == "transfer_failed"
        assert context["provider"] == "wio"
        assert context["amount"] == "250.00"

    def test_validate_request_requires_parties(self):
        """Test source account and beneficiary are mandatory."""
        request = TransferRequest(
            provider="wio",
            from_account_id="",
            to_beneficiary_id="BEN001",
            amount=Decimal("1"),
            currency="AED",
            purpose="",
            reference="",
        )

        assert TransferRouter.validate_request(request) == "Source account and beneficiary are required"


class TestFindBestPaymentRoute:
    """Test the fixed AANI preference heuristic."""

    def test_nothing_configured_returns_demo_route(self, demo_registry):
        """Test demo recommendation with its fixed alternatives."""
        # ACT
        route = TransferRouter(demo_registry).find_best_payment_route(Decimal("500"), "AED")

        # ASSERT
        assert route.recommended_provider == BankProvider.EMIRATES_NBD
        assert route.reason == "Emirates NBD offers instant payments via AANI with competitive fees"
        assert [(a.provider, a.estimated_time, a.fees) for a in route.alternatives] == [
            (BankProvider.MASHREQ, "Instant", Decimal("0")),
            (BankProvider.WIO, "Instant", Decimal("0")),
            (BankProvider.RAKBANK, "Same day", Decimal("5")),
        ]

    def test_emirates_nbd_preferred(self, live_credentials):
        """Test Emirates NBD wins when configured."""
        registry = _registry_with(live_credentials, BankProvider.WIO, BankProvider.EMIRATES_NBD, BankProvider.MASHREQ)

        route = TransferRouter(registry).find_best_payment_route(Decimal("500"))

        assert route.recommended_provider == BankProvider.EMIRATES_NBD
        assert route.reason == "Instant payment via AANI available"
        assert [a.provider for a in route.alternatives] == [BankProvider.MASHREQ, BankProvider.WIO]
        assert all(a.estimated_time == "Same day" and a.fees == Decimal("0") for a in route.alternatives)

    def test_mashreq_when_emirates_nbd_missing(self, live_credentials):
        """Test Mashreq is next in line for AANI."""
        registry = _registry_with(live_credentials, BankProvider.RAKBANK, BankProvider.MASHREQ)

        route = TransferRouter(registry).find_best_payment_route(Decimal("500"))

        assert route.recommended_provider == BankProvider.MASHREQ
        assert route.reason == "Instant payment via AANI available"
        assert [a.provider for a in route.alternatives] == [BankProvider.RAKBANK]

    def test_first_configured_fallback(self, live_credentials):
        """Test the first configured bank when no AANI bank is available."""
        registry = _registry_with(live_credentials, BankProvider.WIO, BankProvider.RAKBANK)

        route = TransferRouter(registry).find_best_payment_route(Decimal("500"))

        assert route.recommended_provider == BankProvider.RAKBANK
        assert route.reason == "Primary connected bank"
        assert [a.provider for a in route.alternatives] == [BankProvider.WIO]

    def test_single_configured_bank_has_no_alternatives(self, live_credentials):
        """Test alternatives are empty when only one bank is live."""
        registry = _registry_with(live_credentials, BankProvider.WIO)

        route = TransferRouter(registry).find_best_payment_route(Decimal("500"))

        assert route.recommended_provider == BankProvider.WIO
        assert route.alternatives == []

    def test_demo_route_not_shared_between_calls(self, demo_registry):
        """Test mutating a returned route does not leak into later calls."""
        router = TransferRouter(demo_registry)

        router.find_best_payment_route(Decimal("1")).alternatives.clear()

        assert len(router.find_best_payment_route(Decimal("1")).alternatives) == 3

    def test_demo_alternatives_not_shared_between_calls(self, demo_registry):
        """Test editing a returned alternative leaves later demo routes intact."""
        router = TransferRouter(demo_registry)
        first = router.find_best_payment_route(Decimal("1"))

        first.alternatives[2].fees = Decimal("999")
        second = router.find_best_payment_route(Decimal("1"))

        assert second.alternatives[2].fees == Decimal("5")
        assert second.alternatives[2] is not first.alternatives[2]
