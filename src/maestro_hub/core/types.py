"""
Unified data model shared by every provider adapter and aggregator.

Bank data (balances, amounts, fees) is Decimal end to end.
Market data from price sources is float, as delivered by the exchanges.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional


class BankProvider(Enum):
    """Banking provider identifier (declaration order is the canonical order)."""
    RAKBANK = "rakbank"
    MASHREQ = "mashreq"
    WIO = "wio"
    EMIRATES_NBD = "emirates_nbd"


class TransactionType(Enum):
    """Direction of a bank transaction."""
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class Environment(Enum):
    """Provider API environment."""
    SANDBOX = "sandbox"
    PRODUCTION = "production"


class SourceHealth(Enum):
    """Availability of a crypto price source."""
    ONLINE = "online"
    OFFLINE = "offline"
    ERROR = "error"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UnifiedAccount:
    """
    Bank account normalized across providers.

    `id` is only unique within `provider`; use `key` for a global identity.
    """
    id: str
    provider: BankProvider
    account_number: str
    account_type: str
    currency: str
    balance: Decimal
    available_balance: Decimal
    status: str
    iban: Optional[str] = None
    last_sync: datetime = field(default_factory=utc_now)

    @property
    def key(self) -> tuple:
        return (self.provider.value, self.id)


@dataclass
class UnifiedTransaction:
    """Bank transaction normalized across providers."""
    id: str
    provider: BankProvider
    account_id: str
    type: TransactionType
    amount: Decimal
    currency: str
    description: str
    date: datetime          # Booking date (UTC, timezone-aware)
    reference: str
    status: str
    merchant_name: Optional[str] = None
    category: Optional[str] = None


@dataclass
class UnifiedBeneficiary:
    """Saved transfer beneficiary normalized across providers."""
    id: str
    provider: BankProvider
    name: str
    account_number: str
    currency: str
    bank_name: Optional[str] = None
    iban: Optional[str] = None
    country: Optional[str] = None
    is_verified: Optional[bool] = None


@dataclass
class TransferRequest:
    """
    Transfer instruction routed to a single provider.

    `provider` is the raw identifier string so that unknown providers
    can be expressed and rejected by the router.
    """
    provider: str
    from_account_id: str
    to_beneficiary_id: str
    amount: Decimal
    currency: str
    purpose: str
    reference: str


@dataclass
class TransferResponse:
    """Provider-agnostic outcome of a transfer."""
    success: bool
    transaction_id: Optional[str] = None
    status: Optional[str] = None
    reference: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ProviderError:
    """A failed adapter call, reported alongside partial results."""
    provider: BankProvider
    error: str


@dataclass
class ProviderStatus:
    """Static capability descriptor for a banking provider."""
    name: BankProvider
    display_name: str
    configured: bool
    environment: Environment
    features: List[str]
    last_checked: datetime = field(default_factory=utc_now)


@dataclass
class UnifiedCryptoPrice:
    """Crypto price snapshot; at most one per symbol in any result set."""
    symbol: str
    name: str
    price: float
    price_aed: float
    change_24h: float
    change_percent_24h: float
    high_24h: float
    low_24h: float
    volume_24h: float
    source: str
    last_updated: datetime
    market_cap: Optional[float] = None


@dataclass
class PriceSourceStatus:
    """Health of a crypto price source as seen by the last probe."""
    name: str
    status: SourceHealth
    latency_ms: Optional[float] = None
    error: Optional[str] = None


@dataclass
class AedConversion:
    """Crypto amount converted to UAE dirhams."""
    aed_amount: float
    rate: float
    symbol: str
    source: str


@dataclass
class AccountsResult:
    accounts: List[UnifiedAccount]
    errors: List[ProviderError]


@dataclass
class TransactionsResult:
    transactions: List[UnifiedTransaction]
    errors: List[ProviderError]


@dataclass
class BeneficiariesResult:
    beneficiaries: List[UnifiedBeneficiary]
    errors: List[ProviderError]


@dataclass
class BalanceSummary:
    """
    Balances summed three ways.

    total == sum(by_provider.values()) == sum(by_currency.values())
    """
    total: Decimal
    by_currency: Dict[str, Decimal]
    by_provider: Dict[BankProvider, Decimal]


@dataclass
class RouteAlternative:
    provider: BankProvider
    estimated_time: str
    fees: Decimal


@dataclass
class PaymentRoute:
    """Recommended provider for an outgoing payment."""
    recommended_provider: BankProvider
    reason: str
    alternatives: List[RouteAlternative]


@dataclass
class CryptoPricesResult:
    prices: List[UnifiedCryptoPrice]
    sources: List[PriceSourceStatus]
