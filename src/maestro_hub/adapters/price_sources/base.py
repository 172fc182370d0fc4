"""
Crypto price source interface.

Every source returns prices already shaped as UnifiedCryptoPrice (tagged
with its own `source_id`) so the aggregator only has to merge.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from maestro_hub.core.types import AedConversion, UnifiedCryptoPrice

# AED is pegged to the US dollar
USD_TO_AED = 3.6725

SYMBOL_NAMES = {
    "BTC": "Bitcoin",
    "ETH": "Ethereum",
    "USDT": "Tether",
    "USDC": "USD Coin",
    "SOL": "Solana",
    "BNB": "BNB",
    "XRP": "XRP",
    "ADA": "Cardano",
    "DOGE": "Dogecoin",
    "MATIC": "Polygon",
}


class PriceSourceError(Exception):
    """Price source API errors."""
    pass


class PriceSource(ABC):
    """
    Abstract crypto price source.

    All price adapters (Binance, CoinGecko) implement this interface.
    """

    # Display name used in status reports
    name: str = ""
    # Short identifier stamped on every price this source produces
    source_id: str = ""

    @abstractmethod
    def fetch_prices(self) -> List[UnifiedCryptoPrice]:
        """
        Fetch current prices for the supported symbols.

        Returns:
            Prices in USD and AED

        Raises:
            PriceSourceError: If the API request fails
        """
        pass

    @abstractmethod
    def convert_to_aed(self, symbol: str, amount: float) -> Optional[AedConversion]:
        """
        Convert an amount of `symbol` to AED.

        Returns:
            Conversion, or None if this source has no price for the symbol
        """
        pass

    @abstractmethod
    def validate_connection(self) -> bool:
        """
        Test connection to the source.

        Returns:
            True if connection successful
        """
        pass
