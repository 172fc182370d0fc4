"""
Transfer routing.

A transfer is one registry lookup and one adapter call. Each adapter
builds its own request body and declares which response field holds the
transaction id, so no per-bank branching lives here.

Also hosts the payment route heuristic: a fixed, ordered preference for
banks on the AANI instant payment rail, not a fee optimizer.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from loguru import logger

from maestro_hub.adapters.banks.base import BankAdapter
from maestro_hub.core.config import DEFAULT_PROVIDER_TIMEOUT_SECONDS
from maestro_hub.core.fanout import describe_error, run_blocking
from maestro_hub.core.logging_config import ProviderEventLogger
from maestro_hub.core.types import (
    BankProvider,
    PaymentRoute,
    RouteAlternative,
    TransferRequest,
    TransferResponse,
)

UNKNOWN_PROVIDER = "Unknown provider"

# Banks settling instantly over AANI, in order of preference
AANI_PREFERENCE = [BankProvider.EMIRATES_NBD, BankProvider.MASHREQ]

# Shown when nothing is configured (demo mode)
DEMO_RECOMMENDATION = BankProvider.EMIRATES_NBD
DEMO_REASON = "Emirates NBD offers instant payments via AANI with competitive fees"
# (provider, estimated time, fee)
DEMO_ALTERNATIVES = (
    (BankProvider.MASHREQ, "Instant", "0"),
    (BankProvider.WIO, "Instant", "0"),
    (BankProvider.RAKBANK, "Same day", "5"),
)


class TransferRouter:
    """Dispatches transfers to the adapter registered for the provider."""

    def __init__(
        self,
        registry: Dict[str, BankAdapter],
        timeout: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS
    ):
        """
        Args:
            registry: provider id -> adapter
            timeout: Seconds allowed for one adapter call
        """
        self.registry = registry
        self.timeout = timeout
        self.events = ProviderEventLogger("transfer_router")

    @staticmethod
    def validate_request(request: TransferRequest) -> Optional[str]:
        """
        Validate a transfer before submission.

        Returns:
            Error message, or None if the request is acceptable
        """
        if not request.amount.is_finite() or request.amount <= 0:
            return "Transfer amount must be positive"
        if not request.from_account_id or not request.to_beneficiary_id:
            return "Source account and beneficiary are required"
        return None

    async def route(self, request: TransferRequest) -> TransferResponse:
        """
        Submit a transfer through the requested provider.

        Never raises: unknown providers, validation failures and adapter
        errors all come back as TransferResponse(success=False, error=...).
        """
        # Accept BankProvider members as well as their string ids
        provider = getattr(request.provider, "value", request.provider)
        adapter = self.registry.get(provider)
        if adapter is None:
            logger.warning(f"Transfer rejected: unknown provider {provider!r}")
            return TransferResponse(success=False, error=UNKNOWN_PROVIDER)

        invalid = self.validate_request(request)
        if invalid:
            self.events.transfer_failed(provider, request.amount, request.currency, invalid)
            return TransferResponse(success=False, error=invalid)

        try:
            raw = await run_blocking(adapter.transfer, request, timeout=self.timeout)
            response = adapter.normalize_transfer_response(raw)
        except Exception as e:
            message = describe_error(e)
            self.events.transfer_failed(provider, request.amount, request.currency, message)
            return TransferResponse(success=False, error=message)

        self.events.transfer_submitted(
            provider,
            request.amount,
            request.currency,
            transaction_id=response.transaction_id,
            status=response.status,
        )
        return response

    def configured_providers(self) -> List[BankProvider]:
        """Live (non-demo) providers in canonical order."""
        return [
            provider for provider in BankProvider
            if provider.value in self.registry and self.registry[provider.value].is_configured()
        ]

    def find_best_payment_route(self, amount: Decimal, currency: str = "AED") -> PaymentRoute:
        """
        Recommend a provider for an outgoing payment.

        Order of evaluation:
            1. Nothing configured -> fixed demo recommendation (Emirates NBD)
            2. Emirates NBD configured -> Emirates NBD (AANI)
            3. Mashreq configured -> Mashreq (AANI)
            4. Otherwise the first configured provider

        Args:
            amount: Payment amount (not used by the current heuristic)
            currency: Payment currency (not used by the current heuristic)
        """
        configured = self.configured_providers()
        logger.debug(f"Routing {amount} {currency} across {[p.value for p in configured]}")

        if not configured:
            return PaymentRoute(
                recommended_provider=DEMO_RECOMMENDATION,
                reason=DEMO_REASON,
                alternatives=[
                    RouteAlternative(provider, estimated_time, Decimal(fee))
                    for provider, estimated_time, fee in DEMO_ALTERNATIVES
                ],
            )

        for preferred in AANI_PREFERENCE:
            if preferred in configured:
                return PaymentRoute(
                    recommended_provider=preferred,
                    reason="Instant payment via AANI available",
                    alternatives=self._alternatives(p for p in configured if p != preferred),
                )

        return PaymentRoute(
            recommended_provider=configured[0],
            reason="Primary connected bank",
            alternatives=self._alternatives(configured[1:]),
        )

    @staticmethod
    def _alternatives(providers) -> List[RouteAlternative]:
        return [RouteAlternative(p, "Same day", Decimal("0")) for p in providers]
