"""
Emirates NBD adapter.

Open banking sandbox: https://sandboxapi.emiratesnbd.com/neo/api/v1
Requests carry an OAuth bearer token (EMIRATES_NBD_ACCESS_TOKEN) in
addition to the API key and client credentials.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from maestro_hub.adapters.banks.base import FieldMap, HttpBankAdapter, iso_timestamp
from maestro_hub.core.types import BankProvider, TransferRequest


class EmiratesNBDAdapter(HttpBankAdapter):
    """Emirates NBD open banking API."""

    provider = BankProvider.EMIRATES_NBD
    display_name = "Emirates NBD"
    features = ["accounts", "payments", "aani-instant", "cards", "transactions", "direct-debit"]
    supports_beneficiaries = True

    SANDBOX_BASE = "https://sandboxapi.emiratesnbd.com/neo/api/v1"
    PRODUCTION_BASE = "https://api.emiratesnbd.com/neo/api/v1"
    TRANSFER_PATH = "/payments"

    field_map = FieldMap(transfer_id="paymentId")

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.credentials.access_token}",
            "X-API-Key": self.credentials.api_key,
            "X-Client-ID": self.credentials.client_id,
            "X-Client-Secret": self.credentials.client_secret,
        }

    def get_config_status(self) -> Dict[str, Any]:
        status = super().get_config_status()
        status["has_access_token"] = bool(self.credentials.access_token)
        return status

    def build_transfer_payload(self, request: TransferRequest) -> Dict[str, Any]:
        return {
            "fromAccountId": request.from_account_id,
            "beneficiaryId": request.to_beneficiary_id,
            "amount": str(request.amount),
            "currency": request.currency,
            "purpose": request.purpose,
            "reference": request.reference,
            "paymentType": "INSTANT",
        }

    def get_mock_accounts(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": "ENBD001",
                "accountNumber": "XXXX1234",
                "iban": "AE020260000000123456789",
                "accountType": "Current",
                "currency": "AED",
                "balance": "45000.00",
                "availableBalance": "44500.00",
                "status": "Active",
                "productName": "Premier Current Account",
            },
            {
                "id": "ENBD002",
                "accountNumber": "XXXX5678",
                "iban": "AE020260000000987654321",
                "accountType": "Savings",
                "currency": "AED",
                "balance": "120000.00",
                "availableBalance": "120000.00",
                "status": "Active",
                "productName": "Premium Savings Account",
            },
        ]

    def get_mock_transactions(self) -> List[Dict[str, Any]]:
        now = datetime.now(timezone.utc)
        rows = [
            ("TXN001", "DEBIT", "850.00", "Carrefour - Mall of Emirates", "Carrefour",
             "Groceries", 0, "POS-2026-001234", "44150.00"),
            ("TXN002", "CREDIT", "25000.00", "Salary - ABC Corporation", "ABC Corporation",
             "Income", 1, "SALARY-2026-02", "69150.00"),
            ("TXN003", "DEBIT", "3500.00", "Emirates Airlines - Flight Booking", "Emirates Airlines",
             "Travel", 2, "EMA-2026-789012", "65650.00"),
        ]
        return [
            {
                "id": txn_id,
                "accountId": "ENBD001",
                "type": txn_type,
                "amount": amount,
                "currency": "AED",
                "description": description,
                "merchantName": merchant,
                "category": category,
                "bookingDate": iso_timestamp(now - timedelta(days=days_ago)),
                "reference": reference,
                "status": "COMPLETED",
                "runningBalance": running_balance,
            }
            for (txn_id, txn_type, amount, description, merchant,
                 category, days_ago, reference, running_balance) in rows
        ]
