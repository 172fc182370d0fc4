"""
Mashreq Bank adapter.

API marketplace: https://developer.mashreq.com/apihub/sandbox
Account information and real-time payments; INSTANT payments settle over AANI.
Mashreq exposes no beneficiary listing, so it is skipped by beneficiary fan-out.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from maestro_hub.adapters.banks.base import FieldMap, HttpBankAdapter, iso_timestamp
from maestro_hub.core.types import BankProvider, TransferRequest


class MashreqAdapter(HttpBankAdapter):
    """Mashreq API marketplace client."""

    provider = BankProvider.MASHREQ
    display_name = "Mashreq Bank"
    features = ["accounts", "payments", "aani-instant", "cards", "transactions"]
    supports_beneficiaries = False

    SANDBOX_BASE = "https://developer.mashreq.com/apihub/sandbox"
    PRODUCTION_BASE = "https://api.mashreq.com"
    TRANSFER_PATH = "/payments"

    field_map = FieldMap(transfer_id="paymentId")

    def build_transfer_payload(self, request: TransferRequest) -> Dict[str, Any]:
        return {
            "fromAccount": request.from_account_id,
            "toAccount": request.to_beneficiary_id,
            "amount": str(request.amount),
            "currency": request.currency,
            "purpose": request.purpose,
            "reference": request.reference,
            "paymentType": "INSTANT",
        }

    def get_mock_accounts(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": "MASHREQ001",
                "accountNumber": "AE070330000012345678901",
                "accountType": "CURRENT",
                "currency": "AED",
                "balance": "75000.00",
                "availableBalance": "74000.00",
                "status": "ACTIVE",
                "iban": "AE070330000012345678901",
            },
            {
                "id": "MASHREQ002",
                "accountNumber": "AE070330000098765432109",
                "accountType": "SAVINGS",
                "currency": "AED",
                "balance": "250000.00",
                "availableBalance": "250000.00",
                "status": "ACTIVE",
                "iban": "AE070330000098765432109",
            },
        ]

    def get_mock_transactions(self) -> List[Dict[str, Any]]:
        now = datetime.now(timezone.utc)
        rows = [
            ("MASHREQ_TXN001", "DEBIT", "1200.00", "RTA Salik Toll Recharge",
             0, "SALIK-REF-001", "TRANSPORT"),
            ("MASHREQ_TXN002", "CREDIT", "35000.00", "Salary Credit - ABC Company",
             1, "SALARY-FEB-2026", "INCOME"),
            ("MASHREQ_TXN003", "DEBIT", "450.00", "DEWA Bill Payment",
             2, "DEWA-FEB-2026", "UTILITIES"),
        ]
        transactions = []
        for txn_id, txn_type, amount, description, days_ago, reference, category in rows:
            booked = iso_timestamp(now - timedelta(days=days_ago))
            transactions.append({
                "id": txn_id,
                "accountId": "MASHREQ001",
                "type": txn_type,
                "amount": amount,
                "currency": "AED",
                "description": description,
                "bookingDate": booked,
                "valueDate": booked,
                "reference": reference,
                "category": category,
                "status": "COMPLETED",
            })
        return transactions
