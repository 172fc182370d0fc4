"""Multi-bank aggregation and transfer routing."""

from maestro_hub.services.banking.aggregator import BankingAggregator
from maestro_hub.services.banking.router import TransferRouter

__all__ = [
    "BankingAggregator",
    "TransferRouter"
]
