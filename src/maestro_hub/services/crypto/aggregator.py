"""
Crypto price aggregation with primary/fallback merge.

Both sources are queried concurrently. The primary source owns every
symbol it returns; the fallback only fills in symbols the primary is
missing. A source that fails or returns nothing is reported in the
source status list and never aborts the merge.
"""

import dataclasses
from typing import Dict, List, Optional

from loguru import logger

from maestro_hub.adapters.price_sources import (
    BinancePriceSource,
    CoinGeckoPriceSource,
    PriceSource,
)
from maestro_hub.core.config import DEFAULT_PROVIDER_TIMEOUT_SECONDS, Settings
from maestro_hub.core.fanout import CallOutcome, capture, gather_outcomes
from maestro_hub.core.logging_config import ProviderEventLogger
from maestro_hub.core.types import (
    AedConversion,
    CryptoPricesResult,
    PriceSourceStatus,
    SourceHealth,
    UnifiedCryptoPrice,
)

NO_PRICES = "No prices returned"


class CryptoPriceAggregator:
    """
    Merges prices from a primary and a fallback source.

    Default wiring: Binance (testnet) primary, CoinGecko fallback.
    """

    def __init__(
        self,
        primary: PriceSource,
        fallback: PriceSource,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS
    ):
        self.primary = primary
        self.fallback = fallback
        self.timeout = timeout
        self.events = ProviderEventLogger("crypto_aggregator")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CryptoPriceAggregator":
        sources = settings.price_sources
        return cls(
            primary=BinancePriceSource(testnet=sources.binance_use_testnet, timeout=settings.provider_timeout),
            fallback=CoinGeckoPriceSource(api_key=sources.coingecko_api_key, timeout=settings.provider_timeout),
            timeout=settings.provider_timeout,
        )

    @property
    def sources(self) -> List[PriceSource]:
        return [self.primary, self.fallback]

    async def _fetch_all(self) -> List[CallOutcome]:
        return await gather_outcomes([
            capture(source.fetch_prices, timeout=self.timeout) for source in self.sources
        ])

    def _source_status(
        self,
        source: PriceSource,
        outcome: CallOutcome,
        failure: SourceHealth
    ) -> PriceSourceStatus:
        """Health of one source from its fetch outcome; latency is kept either way."""
        latency = round(outcome.latency_ms, 2)
        if not outcome.ok:
            status = PriceSourceStatus(name=source.name, status=failure, latency_ms=latency, error=outcome.error)
        elif not outcome.value:
            status = PriceSourceStatus(name=source.name, status=SourceHealth.ERROR, latency_ms=latency, error=NO_PRICES)
        else:
            status = PriceSourceStatus(name=source.name, status=SourceHealth.ONLINE, latency_ms=latency)

        self.events.price_source_checked(source.name, status.status.value, latency, status.error)
        return status

    @staticmethod
    def _tagged(source: PriceSource, prices: Optional[List[UnifiedCryptoPrice]]) -> List[UnifiedCryptoPrice]:
        """Attribute every price to the source that produced it."""
        return [
            price if price.source == source.source_id else dataclasses.replace(price, source=source.source_id)
            for price in prices or []
        ]

    async def get_unified_crypto_prices(self) -> CryptoPricesResult:
        """
        Merged price list, sorted by 24h volume (descending).

        Primary prices win on symbol collisions; fallback prices only fill
        gaps. Each source reports online, or error if it raised or was empty.
        """
        primary_outcome, fallback_outcome = await self._fetch_all()

        sources = [
            self._source_status(self.primary, primary_outcome, failure=SourceHealth.ERROR),
            self._source_status(self.fallback, fallback_outcome, failure=SourceHealth.ERROR),
        ]

        by_symbol: Dict[str, UnifiedCryptoPrice] = {}
        for price in self._tagged(self.primary, primary_outcome.value):
            by_symbol[price.symbol] = price
        for price in self._tagged(self.fallback, fallback_outcome.value):
            by_symbol.setdefault(price.symbol, price)

        prices = sorted(by_symbol.values(), key=lambda p: p.volume_24h or 0.0, reverse=True)
        logger.debug(f"Merged {len(prices)} crypto prices from {len(self.sources)} sources")
        return CryptoPricesResult(prices=prices, sources=sources)

    async def convert_crypto_to_aed(self, symbol: str, amount: float) -> Optional[AedConversion]:
        """
        Convert an amount of `symbol` to AED.

        Tries the primary source, then the fallback.

        Returns:
            Conversion tagged with the source that answered, or None if both fail
        """
        for source in self.sources:
            outcome = await capture(source.convert_to_aed, symbol, amount, timeout=self.timeout)
            if outcome.ok and outcome.value is not None:
                conversion = outcome.value
                if conversion.source != source.source_id:
                    conversion = dataclasses.replace(conversion, source=source.source_id)
                return conversion
            if not outcome.ok:
                self.events.provider_call_failed(source.source_id, "convert_to_aed", outcome.error, symbol=symbol)

        logger.warning(f"No price source could convert {symbol} to AED")
        return None

    async def get_price_sources_status(self) -> List[PriceSourceStatus]:
        """
        Probe every source with a price fetch.

        Returns:
            One status per source: online, offline if it raised, error if empty
        """
        outcomes = await self._fetch_all()
        return [
            self._source_status(source, outcome, failure=SourceHealth.OFFLINE)
            for source, outcome in zip(self.sources, outcomes)
        ]
