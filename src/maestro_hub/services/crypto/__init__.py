"""Crypto price aggregation (primary + fallback sources)."""

from maestro_hub.services.crypto.aggregator import CryptoPriceAggregator

__all__ = ["CryptoPriceAggregator"]
