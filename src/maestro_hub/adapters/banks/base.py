"""Base bank adapter interface.

All bank implementations inherit from `HttpBankAdapter` so the aggregator
sees one contract regardless of institution. Native records keep the
bank's own field names; each adapter declares a `FieldMap` that the
normalizers use to rename them into the unified model.

An adapter without credentials is wrapped in `DemoBankAdapter`, which
serves the adapter's mock fixtures instead of calling the network.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from maestro_hub.core.config import BankCredentials
from maestro_hub.core.types import (
    BankProvider,
    Environment,
    TransactionType,
    TransferRequest,
    TransferResponse,
    UnifiedAccount,
    UnifiedBeneficiary,
    UnifiedTransaction,
)


class BankAPIError(Exception):
    """Bank API errors (network, non-2xx, malformed payload)."""

    def __init__(self, message: str, provider: Optional[BankProvider] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class ProviderNotConfiguredError(BankAPIError):
    """Operation needs live credentials the adapter does not have."""
    pass


@dataclass(frozen=True)
class FieldMap:
    """Native field names for the values the unified model needs."""
    account_id: str = "id"
    transaction_id: str = "id"
    transaction_date: str = "bookingDate"
    merchant_name: Optional[str] = "merchantName"
    category: Optional[str] = "category"
    beneficiary_id: str = "id"
    transfer_id: str = "paymentId"


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp (or datetime) into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_decimal(value: Any) -> Decimal:
    # str() first so floats from JSON keep their printed precision
    return Decimal(str(value))


def iso_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class BankAdapter(ABC):
    """Contract every bank adapter (live or demo) satisfies."""

    provider: BankProvider
    display_name: str
    features: List[str] = []
    supports_beneficiaries: bool = False
    field_map: FieldMap = FieldMap()

    @abstractmethod
    def is_configured(self) -> bool:
        """True when the adapter talks to the live API."""
        pass

    @abstractmethod
    def get_config_status(self) -> Dict[str, Any]:
        """Configuration flags (never the secrets themselves)."""
        pass

    @property
    @abstractmethod
    def environment(self) -> Environment:
        pass

    @abstractmethod
    def get_accounts(self) -> List[Dict[str, Any]]:
        """Native account records.

        Raises:
            BankAPIError: If the request fails
        """
        pass

    @abstractmethod
    def get_transactions(
        self,
        account_id: str,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Native transaction records for one account."""
        pass

    @abstractmethod
    def list_recent_transactions(self) -> List[Dict[str, Any]]:
        """Native transaction records across all of the adapter's accounts."""
        pass

    @abstractmethod
    def get_beneficiaries(self) -> List[Dict[str, Any]]:
        """Native beneficiary records (only if supports_beneficiaries)."""
        pass

    @abstractmethod
    def transfer(self, request: TransferRequest) -> Dict[str, Any]:
        """Submit a transfer and return the bank's native response.

        Raises:
            BankAPIError: If the bank rejects or the call fails
        """
        pass

    # ---- Normalization (field renaming only) ----

    def _malformed(self, kind: str, exc: Exception) -> BankAPIError:
        return BankAPIError(
            f"{self.display_name} returned a malformed {kind} record: {exc!r}",
            provider=self.provider
        )

    def normalize_account(self, raw: Dict[str, Any]) -> UnifiedAccount:
        try:
            return UnifiedAccount(
                id=str(raw[self.field_map.account_id]),
                provider=self.provider,
                account_number=raw["accountNumber"],
                iban=raw.get("iban"),
                account_type=raw["accountType"],
                currency=raw["currency"],
                balance=to_decimal(raw["balance"]),
                available_balance=to_decimal(raw["availableBalance"]),
                status=raw["status"],
            )
        except (KeyError, TypeError, InvalidOperation) as e:
            raise self._malformed("account", e) from e

    def normalize_transaction(self, raw: Dict[str, Any]) -> UnifiedTransaction:
        fm = self.field_map
        try:
            return UnifiedTransaction(
                id=str(raw[fm.transaction_id]),
                provider=self.provider,
                account_id=raw["accountId"],
                type=TransactionType(raw["type"]),
                amount=to_decimal(raw["amount"]),
                currency=raw["currency"],
                description=raw["description"],
                merchant_name=raw.get(fm.merchant_name) if fm.merchant_name else None,
                category=raw.get(fm.category) if fm.category else None,
                date=parse_timestamp(raw[fm.transaction_date]),
                reference=raw["reference"],
                status=raw["status"],
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise self._malformed("transaction", e) from e

    def normalize_beneficiary(self, raw: Dict[str, Any]) -> UnifiedBeneficiary:
        try:
            return UnifiedBeneficiary(
                id=str(raw[self.field_map.beneficiary_id]),
                provider=self.provider,
                name=raw["name"],
                bank_name=raw.get("bankName"),
                account_number=raw["accountNumber"],
                iban=raw.get("iban"),
                country=raw.get("country"),
                currency=raw["currency"],
                is_verified=raw.get("isVerified"),
            )
        except (KeyError, TypeError) as e:
            raise self._malformed("beneficiary", e) from e

    def normalize_transfer_response(self, raw: Dict[str, Any]) -> TransferResponse:
        return TransferResponse(
            success=True,
            transaction_id=raw.get(self.field_map.transfer_id),
            status=raw.get("status"),
            reference=raw.get("reference"),
        )


class HttpBankAdapter(BankAdapter):
    """
    Bank adapter backed by a JSON REST API.

    Subclasses set the endpoint constants, field map, transfer payload and
    mock fixtures. Credentials are injected, never read from the environment.
    """

    SANDBOX_BASE: str = ""
    PRODUCTION_BASE: str = ""

    ACCOUNTS_PATH = "/accounts"
    TRANSACTIONS_PATH = "/accounts/{account_id}/transactions"
    BENEFICIARIES_PATH = "/beneficiaries"
    TRANSFER_PATH = "/transfers"

    def __init__(self, credentials: Optional[BankCredentials] = None, timeout: float = 10.0):
        """
        Initialize adapter.

        Args:
            credentials: API credentials (empty credentials = not configured)
            timeout: Socket timeout for each HTTP request, in seconds
        """
        self.credentials = credentials or BankCredentials()
        self.timeout = timeout
        self.base_url = self.SANDBOX_BASE if self.credentials.use_sandbox else self.PRODUCTION_BASE

        self.session = requests.Session()
        self.session.headers.update(self._headers())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        self.session.close()

    def is_configured(self) -> bool:
        return self.credentials.configured

    @property
    def environment(self) -> Environment:
        return self.credentials.environment

    def get_config_status(self) -> Dict[str, Any]:
        return {
            "configured": self.is_configured(),
            "environment": self.environment.value,
            "has_api_key": bool(self.credentials.api_key),
            "has_client_id": bool(self.credentials.client_id),
            "has_client_secret": bool(self.credentials.client_secret),
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.credentials.api_key}",
            "X-Client-ID": self.credentials.client_id,
            "X-Client-Secret": self.credentials.client_secret,
        }

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Make a request against the bank API.

        Args:
            method: HTTP method (GET/POST)
            path: Endpoint path relative to base_url
            params: Query parameters
            payload: JSON body

        Returns:
            Decoded JSON object

        Raises:
            BankAPIError: On network failure, non-2xx status or invalid JSON
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, params=params, json=payload, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.error(f"{self.display_name} API error {status_code} on {method} {path}")
            raise BankAPIError(
                f"{self.display_name} API error: {status_code}",
                provider=self.provider,
                status_code=status_code
            ) from e
        except requests.exceptions.RequestException as e:
            raise BankAPIError(
                f"{self.display_name} request failed: {e}",
                provider=self.provider
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise BankAPIError(
                f"{self.display_name} returned a malformed payload",
                provider=self.provider
            ) from e

        if not isinstance(data, dict):
            raise BankAPIError(
                f"{self.display_name} returned a malformed payload",
                provider=self.provider
            )
        return data

    def _extract_list(self, data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        items = data.get(key)
        if not isinstance(items, list):
            raise BankAPIError(
                f"{self.display_name} response is missing '{key}'",
                provider=self.provider
            )
        return items

    def get_accounts(self) -> List[Dict[str, Any]]:
        return self._extract_list(self._request("GET", self.ACCOUNTS_PATH), "accounts")

    def get_transactions(
        self,
        account_id: str,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        params = {}
        if from_date:
            params["fromDate"] = from_date.isoformat()
        if to_date:
            params["toDate"] = to_date.isoformat()
        if limit:
            params["limit"] = str(limit)

        path = self.TRANSACTIONS_PATH.format(account_id=account_id)
        return self._extract_list(self._request("GET", path, params=params or None), "transactions")

    def list_recent_transactions(self) -> List[Dict[str, Any]]:
        transactions = []
        for account in self.get_accounts():
            account_id = account.get(self.field_map.account_id)
            if account_id is None:
                raise self._malformed("account", KeyError(self.field_map.account_id))
            transactions.extend(self.get_transactions(str(account_id)))
        return transactions

    def get_beneficiaries(self) -> List[Dict[str, Any]]:
        if not self.supports_beneficiaries:
            raise BankAPIError(
                f"{self.display_name} does not support beneficiary listing",
                provider=self.provider
            )
        return self._extract_list(self._request("GET", self.BENEFICIARIES_PATH), "beneficiaries")

    def transfer(self, request: TransferRequest) -> Dict[str, Any]:
        return self._request("POST", self.TRANSFER_PATH, payload=self.build_transfer_payload(request))

    @abstractmethod
    def build_transfer_payload(self, request: TransferRequest) -> Dict[str, Any]:
        """Translate a unified transfer into this bank's request body."""
        pass

    @abstractmethod
    def get_mock_accounts(self) -> List[Dict[str, Any]]:
        """Deterministic demo accounts in the bank's native shape."""
        pass

    @abstractmethod
    def get_mock_transactions(self) -> List[Dict[str, Any]]:
        """Demo transactions in the bank's native shape, dated relative to now."""
        pass

    def get_mock_beneficiaries(self) -> List[Dict[str, Any]]:
        return []


class DemoBankAdapter(BankAdapter):
    """
    Serves an adapter's mock fixtures in place of live calls.

    Built once at startup for adapters without credentials, so the
    aggregator never has to branch on configuration.
    """

    def __init__(self, adapter: HttpBankAdapter):
        self.adapter = adapter
        self.provider = adapter.provider
        self.display_name = adapter.display_name
        self.features = adapter.features
        self.supports_beneficiaries = adapter.supports_beneficiaries
        self.field_map = adapter.field_map

    def is_configured(self) -> bool:
        return False

    @property
    def environment(self) -> Environment:
        return self.adapter.environment

    def get_config_status(self) -> Dict[str, Any]:
        status = self.adapter.get_config_status()
        status["demo"] = True
        return status

    def get_accounts(self) -> List[Dict[str, Any]]:
        return self.adapter.get_mock_accounts()

    def get_transactions(
        self,
        account_id: str,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        date_field = self.field_map.transaction_date
        selected = []
        for txn in self.adapter.get_mock_transactions():
            if txn.get("accountId") != account_id:
                continue
            booked = parse_timestamp(txn[date_field]).date()
            if from_date and booked < from_date:
                continue
            if to_date and booked > to_date:
                continue
            selected.append(txn)
        return selected[:limit] if limit else selected

    def list_recent_transactions(self) -> List[Dict[str, Any]]:
        return self.adapter.get_mock_transactions()

    def get_beneficiaries(self) -> List[Dict[str, Any]]:
        return self.adapter.get_mock_beneficiaries()

    def transfer(self, request: TransferRequest) -> Dict[str, Any]:
        raise ProviderNotConfiguredError(
            f"{self.display_name} API not configured",
            provider=self.provider
        )
