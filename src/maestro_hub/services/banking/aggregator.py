"""
Multi-bank aggregator with partial-failure tolerance.

Fans out to every registered bank adapter concurrently and merges the
normalized results. A failing bank never aborts the aggregation: its
error is reported next to the data the other banks returned.

Unconfigured banks are registered as demo adapters and answer with their
mock fixtures, so every provider always contributes accounts.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from maestro_hub.adapters.banks import build_bank_registry
from maestro_hub.adapters.banks.base import BankAdapter
from maestro_hub.core.config import DEFAULT_PROVIDER_TIMEOUT_SECONDS, Settings
from maestro_hub.core.fanout import capture, gather_outcomes
from maestro_hub.core.logging_config import ProviderEventLogger
from maestro_hub.core.types import (
    AccountsResult,
    BalanceSummary,
    BankProvider,
    BeneficiariesResult,
    PaymentRoute,
    ProviderError,
    TransactionsResult,
    TransferRequest,
    TransferResponse,
    UnifiedAccount,
    UnifiedBeneficiary,
    UnifiedTransaction,
)
from maestro_hub.services.banking.router import TransferRouter


def _fetch_accounts(adapter: BankAdapter) -> List[UnifiedAccount]:
    return [adapter.normalize_account(raw) for raw in adapter.get_accounts()]


def _fetch_recent_transactions(adapter: BankAdapter) -> List[UnifiedTransaction]:
    return [adapter.normalize_transaction(raw) for raw in adapter.list_recent_transactions()]


def _fetch_beneficiaries(adapter: BankAdapter) -> List[UnifiedBeneficiary]:
    return [adapter.normalize_beneficiary(raw) for raw in adapter.get_beneficiaries()]


class BankingAggregator:
    """
    Aggregates accounts, transactions and beneficiaries across banks.

    Provides:
    - Concurrent fan-out with a per-bank timeout
    - Normalization into the unified model
    - Side-channel error list instead of exceptions
    - Transfer dispatch and payment route recommendation
    """

    def __init__(
        self,
        registry: Dict[str, BankAdapter],
        timeout: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS,
        router: Optional[TransferRouter] = None
    ):
        """
        Initialize aggregator with a bank registry.

        Args:
            registry: provider id -> adapter (live or demo)
            timeout: Seconds allowed for each bank call
            router: Transfer router (default: one built on the same registry)
        """
        self.registry = registry
        self.timeout = timeout
        self.router = router or TransferRouter(registry, timeout=timeout)
        self.events = ProviderEventLogger("banking_aggregator")

    @classmethod
    def from_settings(cls, settings: Settings) -> "BankingAggregator":
        return cls(build_bank_registry(settings), timeout=settings.provider_timeout)

    async def _fan_out(
        self,
        operation: str,
        fetch: Callable[[BankAdapter], List[Any]],
        adapters: Optional[List[BankAdapter]] = None
    ) -> Tuple[List[Any], List[ProviderError]]:
        """
        Run `fetch` against each adapter concurrently.

        Returns:
            (items from successful adapters in registry order, errors)
        """
        if adapters is None:
            adapters = list(self.registry.values())

        outcomes = await gather_outcomes([
            capture(fetch, adapter, timeout=self.timeout) for adapter in adapters
        ])

        items: List[Any] = []
        errors: List[ProviderError] = []
        for adapter, outcome in zip(adapters, outcomes):
            if outcome.ok:
                items.extend(outcome.value)
                if not adapter.is_configured():
                    self.events.demo_data_served(adapter.provider.value, operation, len(outcome.value))
            else:
                errors.append(ProviderError(provider=adapter.provider, error=outcome.error))
                self.events.provider_call_failed(adapter.provider.value, operation, outcome.error)

        return items, errors

    async def get_all_accounts(self) -> AccountsResult:
        """Accounts from every bank (mock accounts for demo banks)."""
        accounts, errors = await self._fan_out("get_accounts", _fetch_accounts)
        return AccountsResult(accounts=accounts, errors=errors)

    async def get_total_balance(self) -> BalanceSummary:
        """
        Sum balances globally, per currency and per provider.

        Every provider appears in `by_provider`, with 0 if it has no accounts.
        Balances in different currencies are summed as-is (no FX conversion).
        """
        result = await self.get_all_accounts()

        total = Decimal("0")
        by_currency: Dict[str, Decimal] = {}
        by_provider: Dict[BankProvider, Decimal] = {p: Decimal("0") for p in BankProvider}

        for account in result.accounts:
            total += account.balance
            by_currency[account.currency] = by_currency.get(account.currency, Decimal("0")) + account.balance
            by_provider[account.provider] += account.balance

        return BalanceSummary(total=total, by_currency=by_currency, by_provider=by_provider)

    async def get_recent_transactions(self, limit: int = 20) -> TransactionsResult:
        """
        Most recent transactions across all banks.

        Args:
            limit: Maximum number of transactions to return

        Returns:
            Transactions sorted newest first (stable for equal dates)
        """
        transactions, errors = await self._fan_out("list_recent_transactions", _fetch_recent_transactions)
        # sorted() is stable with reverse=True: equal dates keep arrival order
        transactions = sorted(transactions, key=lambda t: t.date, reverse=True)
        return TransactionsResult(transactions=transactions[:max(limit, 0)], errors=errors)

    async def get_account_transactions(
        self,
        provider: BankProvider,
        account_id: str,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: Optional[int] = None
    ) -> TransactionsResult:
        """Transactions of one account at one bank, honoring the bank's filters."""
        adapter = self.registry.get(provider.value)
        if adapter is None:
            return TransactionsResult(
                transactions=[],
                errors=[ProviderError(provider=provider, error="Provider not registered")]
            )

        def fetch(a: BankAdapter) -> List[UnifiedTransaction]:
            raws = a.get_transactions(account_id, from_date=from_date, to_date=to_date, limit=limit)
            return [a.normalize_transaction(raw) for raw in raws]

        transactions, errors = await self._fan_out("get_transactions", fetch, adapters=[adapter])
        transactions = sorted(transactions, key=lambda t: t.date, reverse=True)
        return TransactionsResult(transactions=transactions, errors=errors)

    async def get_all_beneficiaries(self) -> BeneficiariesResult:
        """Beneficiaries from the banks that support listing them."""
        adapters = [a for a in self.registry.values() if a.supports_beneficiaries]
        beneficiaries, errors = await self._fan_out("get_beneficiaries", _fetch_beneficiaries, adapters)
        return BeneficiariesResult(beneficiaries=beneficiaries, errors=errors)

    async def make_transfer(self, request: TransferRequest) -> TransferResponse:
        return await self.router.route(request)

    def find_best_payment_route(self, amount: Decimal, currency: str = "AED") -> PaymentRoute:
        return self.router.find_best_payment_route(amount, currency)
