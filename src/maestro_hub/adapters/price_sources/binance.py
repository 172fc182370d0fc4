"""
Binance spot price source (primary).

Public endpoints only, no API key needed:
- GET /v3/ticker/24hr    (24h rolling stats)
- GET /v3/ticker/price   (last price, used for conversions)
- GET /v3/ping

Testnet (https://testnet.binance.vision/api) is the default; pass
testnet=False for mainnet.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import requests
from loguru import logger

from maestro_hub.adapters.price_sources.base import (
    SYMBOL_NAMES,
    USD_TO_AED,
    PriceSource,
    PriceSourceError,
)
from maestro_hub.core.types import AedConversion, UnifiedCryptoPrice


class BinancePriceSource(PriceSource):
    """Binance 24h ticker adapter."""

    TESTNET_BASE = "https://testnet.binance.vision/api"
    MAINNET_BASE = "https://api.binance.com/api"

    # USDT pairs used as USD equivalents
    TRADING_PAIRS = [
        "BTCUSDT", "ETHUSDT", "SOLUSDT", "BNBUSDT",
        "XRPUSDT", "ADAUSDT", "DOGEUSDT", "MATICUSDT",
    ]

    # Stablecoins pinned at $1 when the exchange does not list them
    STABLECOINS = ["USDT", "USDC"]

    source_id = "binance"

    def __init__(self, testnet: bool = True, timeout: float = 10.0):
        """
        Initialize Binance source.

        Args:
            testnet: Use the Binance spot testnet (default True)
            timeout: Request timeout in seconds
        """
        self.testnet = testnet
        self.timeout = timeout
        self.base_url = self.TESTNET_BASE if testnet else self.MAINNET_BASE
        self.name = "Binance Testnet" if testnet else "Binance"

        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "MaestroHub/1.0"})

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.session.close()
        return False

    def _get(self, endpoint: str, params: Optional[Dict] = None):
        try:
            response = self.session.get(
                f"{self.base_url}{endpoint}", params=params, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise PriceSourceError(f"Binance API error: {status}") from e
        except requests.exceptions.RequestException as e:
            raise PriceSourceError(f"Binance request failed: {e}") from e
        except ValueError as e:
            raise PriceSourceError("Binance returned invalid JSON") from e

    @staticmethod
    def pair_to_symbol(pair: str) -> str:
        """BTCUSDT -> BTC"""
        return pair[:-4] if pair.endswith("USDT") else pair

    def fetch_prices(self) -> List[UnifiedCryptoPrice]:
        """
        Fetch 24h tickers and keep the tracked pairs.

        Returns:
            Prices sorted by quote volume (descending), stablecoins last
        """
        data = self._get("/v3/ticker/24hr")
        tickers = data if isinstance(data, list) else [data]

        ranked = []
        for ticker in tickers:
            pair = ticker.get("symbol")
            if pair not in self.TRADING_PAIRS:
                continue

            try:
                symbol = self.pair_to_symbol(pair)
                price = float(ticker["lastPrice"])
                quote_volume = float(ticker.get("quoteVolume", 0))
                ranked.append((quote_volume, UnifiedCryptoPrice(
                    symbol=symbol,
                    name=SYMBOL_NAMES.get(symbol, symbol),
                    price=price,
                    price_aed=price * USD_TO_AED,
                    change_24h=float(ticker["priceChange"]),
                    change_percent_24h=float(ticker["priceChangePercent"]),
                    high_24h=float(ticker["highPrice"]),
                    low_24h=float(ticker["lowPrice"]),
                    volume_24h=float(ticker["volume"]),
                    source=self.source_id,
                    last_updated=datetime.fromtimestamp(
                        ticker["closeTime"] / 1000, timezone.utc
                    ),
                )))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed Binance ticker {pair}: {e}")

        ranked.sort(key=lambda item: item[0], reverse=True)
        prices = [price for _, price in ranked]

        present = {p.symbol for p in prices}
        now = datetime.now(timezone.utc)
        for stable in self.STABLECOINS:
            if stable not in present:
                prices.append(UnifiedCryptoPrice(
                    symbol=stable,
                    name=SYMBOL_NAMES[stable],
                    price=1.0,
                    price_aed=USD_TO_AED,
                    change_24h=0.0,
                    change_percent_24h=0.0,
                    high_24h=1.001,
                    low_24h=0.999,
                    volume_24h=0.0,
                    source=self.source_id,
                    last_updated=now,
                ))

        logger.debug(f"Fetched {len(prices)} prices from {self.name}")
        return prices

    def convert_to_aed(self, symbol: str, amount: float) -> Optional[AedConversion]:
        """
        Convert using the last traded price of SYMBOLUSDT.

        Returns:
            Conversion, or None if the pair is unknown or the call fails
        """
        pair = f"{symbol.upper()}USDT"
        try:
            data = self._get("/v3/ticker/price", params={"symbol": pair})
            price = float(data["price"])
        except (PriceSourceError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Binance conversion failed for {symbol}: {e}")
            return None

        rate = price * USD_TO_AED
        return AedConversion(
            aed_amount=amount * rate,
            rate=rate,
            symbol=symbol.upper(),
            source=self.source_id,
        )

    def validate_connection(self) -> bool:
        try:
            self._get("/v3/ping")
            return True
        except PriceSourceError as e:
            logger.error(f"Binance connection test failed: {e}")
            return False
