"""
Crypto price sources.

- Binance (primary, testnet by default)
- CoinGecko (fallback, adds market cap)
"""

from maestro_hub.adapters.price_sources.base import (
    SYMBOL_NAMES,
    USD_TO_AED,
    PriceSource,
    PriceSourceError,
)
from maestro_hub.adapters.price_sources.binance import BinancePriceSource
from maestro_hub.adapters.price_sources.coingecko import CoinGeckoPriceSource

__all__ = [
    "BinancePriceSource",
    "CoinGeckoPriceSource",
    "PriceSource",
    "PriceSourceError",
    "SYMBOL_NAMES",
    "USD_TO_AED",
]
