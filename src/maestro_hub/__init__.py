"""
Maestro Hub: UAE banking and crypto price aggregation.

Usage:
    import asyncio
    from maestro_hub import Settings, build_services

    services = build_services(Settings.from_env())
    summary = asyncio.run(services.banking.get_total_balance())
    print(f"Total: {summary.total} AED")
"""

from maestro_hub.cli import Services, build_services
from maestro_hub.core.config import Settings
from maestro_hub.services.banking.aggregator import BankingAggregator
from maestro_hub.services.crypto.aggregator import CryptoPriceAggregator
from maestro_hub.services.status.reporter import StatusReporter

__version__ = "0.1.0"

__all__ = [
    "BankingAggregator",
    "CryptoPriceAggregator",
    "Services",
    "Settings",
    "StatusReporter",
    "build_services",
]
