"""
RAKBANK adapter.

Developer portal: https://developer.rakbank.ae/sb/api
Covers the Digital Banking accounts, beneficiaries and RAKMoneyTransfer APIs.
Requires RAKBANK_API_KEY and RAKBANK_CLIENT_ID (portal registration).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from maestro_hub.adapters.banks.base import FieldMap, HttpBankAdapter, iso_timestamp
from maestro_hub.core.types import BankProvider, TransferRequest


class RakbankAdapter(HttpBankAdapter):
    """RAKBANK Digital Banking API."""

    provider = BankProvider.RAKBANK
    display_name = "RAKBANK"
    features = ["accounts", "transfers", "beneficiaries", "card-payments", "otp"]
    supports_beneficiaries = True

    SANDBOX_BASE = "https://developer.rakbank.ae/sb/api"
    PRODUCTION_BASE = "https://api.rakbank.ae"

    # RAKBANK uses accountId/transactionId/beneficiaryId and a plain `date`
    field_map = FieldMap(
        account_id="accountId",
        transaction_id="transactionId",
        transaction_date="date",
        merchant_name=None,
        category=None,
        beneficiary_id="beneficiaryId",
        transfer_id="transactionId",
    )

    def build_transfer_payload(self, request: TransferRequest) -> Dict[str, Any]:
        return {
            "fromAccountId": request.from_account_id,
            "beneficiaryId": request.to_beneficiary_id,
            "amount": str(request.amount),
            "currency": request.currency,
            "reference": request.reference,
            "purpose": request.purpose,
        }

    def get_mock_accounts(self) -> List[Dict[str, Any]]:
        return [
            {
                "accountId": "ACC001",
                "accountNumber": "XXXX1234",
                "accountType": "Current",
                "currency": "AED",
                "balance": "25000.00",
                "availableBalance": "24500.00",
                "status": "Active",
            },
            {
                "accountId": "ACC002",
                "accountNumber": "XXXX5678",
                "accountType": "Savings",
                "currency": "AED",
                "balance": "150000.00",
                "availableBalance": "150000.00",
                "status": "Active",
            },
        ]

    def get_mock_transactions(self) -> List[Dict[str, Any]]:
        now = datetime.now(timezone.utc)
        return [
            {
                "transactionId": "TXN001",
                "accountId": "ACC001",
                "type": "DEBIT",
                "amount": "500.00",
                "currency": "AED",
                "description": "DEWA Bill Payment",
                "date": iso_timestamp(now),
                "reference": "DEWA-REF-001",
                "status": "COMPLETED",
            },
            {
                "transactionId": "TXN002",
                "accountId": "ACC001",
                "type": "CREDIT",
                "amount": "15000.00",
                "currency": "AED",
                "description": "Salary Credit",
                "date": iso_timestamp(now - timedelta(days=1)),
                "reference": "SALARY-2026-02",
                "status": "COMPLETED",
            },
        ]
