"""
Bank adapters and the provider registry.

The registry is built once at startup: adapters with credentials talk to
the live API, the rest are wrapped in DemoBankAdapter.
"""

from typing import Dict

from loguru import logger

from maestro_hub.adapters.banks.base import (
    BankAdapter,
    BankAPIError,
    DemoBankAdapter,
    HttpBankAdapter,
    ProviderNotConfiguredError,
)
from maestro_hub.adapters.banks.emirates_nbd import EmiratesNBDAdapter
from maestro_hub.adapters.banks.mashreq import MashreqAdapter
from maestro_hub.adapters.banks.rakbank import RakbankAdapter
from maestro_hub.adapters.banks.wio import WioAdapter
from maestro_hub.core.config import Settings
from maestro_hub.core.types import BankProvider

ADAPTER_CLASSES = {
    BankProvider.RAKBANK: RakbankAdapter,
    BankProvider.MASHREQ: MashreqAdapter,
    BankProvider.WIO: WioAdapter,
    BankProvider.EMIRATES_NBD: EmiratesNBDAdapter,
}


def build_bank_registry(settings: Settings) -> Dict[str, BankAdapter]:
    """
    Build one adapter per bank, keyed by provider identifier.

    Args:
        settings: Runtime settings with per-bank credentials

    Returns:
        Ordered mapping provider id -> adapter (canonical provider order)
    """
    registry: Dict[str, BankAdapter] = {}
    for provider in BankProvider:
        adapter = ADAPTER_CLASSES[provider](
            credentials=settings.credentials_for(provider),
            timeout=settings.provider_timeout
        )
        if adapter.is_configured():
            registry[provider.value] = adapter
            logger.info(f"{adapter.display_name} adapter live ({adapter.environment.value})")
        else:
            registry[provider.value] = DemoBankAdapter(adapter)
            logger.info(f"{adapter.display_name} not configured, serving demo data")
    return registry


__all__ = [
    "ADAPTER_CLASSES",
    "BankAdapter",
    "BankAPIError",
    "DemoBankAdapter",
    "EmiratesNBDAdapter",
    "HttpBankAdapter",
    "MashreqAdapter",
    "ProviderNotConfiguredError",
    "RakbankAdapter",
    "WioAdapter",
    "build_bank_registry",
]
