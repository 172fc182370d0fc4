"""
Wio Bank adapter.

Wio is a digital-first UAE bank with Banking-as-a-Service APIs; access
requires a partnership/business account (https://www.wio.ai/business).
All endpoints are versioned under /v1.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from maestro_hub.adapters.banks.base import FieldMap, HttpBankAdapter, iso_timestamp
from maestro_hub.core.types import BankProvider, TransferRequest


class WioAdapter(HttpBankAdapter):
    """Wio Bank partner API."""

    provider = BankProvider.WIO
    display_name = "Wio Bank"
    features = ["accounts", "transfers", "payment-links", "cards", "invoices"]
    supports_beneficiaries = True

    SANDBOX_BASE = "https://api-sandbox.wio.ae"
    PRODUCTION_BASE = "https://api.wio.ae"

    ACCOUNTS_PATH = "/v1/accounts"
    TRANSACTIONS_PATH = "/v1/accounts/{account_id}/transactions"
    BENEFICIARIES_PATH = "/v1/beneficiaries"
    TRANSFER_PATH = "/v1/transfers"

    field_map = FieldMap(category="merchantCategory", transfer_id="transferId")

    def build_transfer_payload(self, request: TransferRequest) -> Dict[str, Any]:
        return {
            "fromAccountId": request.from_account_id,
            "toBeneficiaryId": request.to_beneficiary_id,
            "amount": str(request.amount),
            "currency": request.currency,
            "purpose": request.purpose,
            "reference": request.reference,
        }

    def get_mock_accounts(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": "WIO001",
                "accountNumber": "1234567890",
                "iban": "AE380430000012345678901",
                "accountType": "BUSINESS",
                "currency": "AED",
                "balance": "125000.00",
                "availableBalance": "120000.00",
                "holdBalance": "5000.00",
                "status": "ACTIVE",
                "createdAt": "2024-01-15T00:00:00Z",
            },
        ]

    def get_mock_transactions(self) -> List[Dict[str, Any]]:
        now = datetime.now(timezone.utc)
        yesterday = now - timedelta(days=1)
        return [
            {
                "id": "WIO_TXN001",
                "accountId": "WIO001",
                "type": "CREDIT",
                "amount": "50000.00",
                "currency": "AED",
                "description": "Client Payment - Project Alpha",
                "merchantName": "Client Corp",
                "bookingDate": iso_timestamp(now),
                "valueDate": iso_timestamp(now),
                "reference": "WIO-REF-001",
                "status": "COMPLETED",
                "runningBalance": "125000.00",
            },
            {
                "id": "WIO_TXN002",
                "accountId": "WIO001",
                "type": "DEBIT",
                "amount": "3500.00",
                "currency": "AED",
                "description": "Office Supplies",
                "merchantName": "Office Depot",
                "merchantCategory": "OFFICE_SUPPLIES",
                "bookingDate": iso_timestamp(yesterday),
                "valueDate": iso_timestamp(yesterday),
                "reference": "WIO-REF-002",
                "status": "COMPLETED",
                "runningBalance": "121500.00",
            },
        ]
