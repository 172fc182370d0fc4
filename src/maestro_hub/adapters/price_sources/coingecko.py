"""
CoinGecko price source (fallback).

Provides:
- Market snapshot for the tracked coins (/coins/markets)
- Single-coin market data for conversions (/coins/{id})
- Market cap, which Binance does not report

Free public API (rate limited: 10-50 calls/minute depending on plan).
No API key required; a Pro key raises the limits.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import requests
from loguru import logger

from maestro_hub.adapters.price_sources.base import (
    USD_TO_AED,
    PriceSource,
    PriceSourceError,
)
from maestro_hub.core.types import AedConversion, UnifiedCryptoPrice


class CoinGeckoPriceSource(PriceSource):
    """
    CoinGecko API adapter.

    Free tier: 10-50 calls/minute
    """

    BASE_URL = "https://api.coingecko.com/api/v3"

    # CoinGecko coin id -> ticker symbol
    COIN_IDS = {
        "bitcoin": "BTC",
        "ethereum": "ETH",
        "tether": "USDT",
        "usd-coin": "USDC",
        "solana": "SOL",
        "binancecoin": "BNB",
        "ripple": "XRP",
    }

    name = "CoinGecko"
    source_id = "coingecko"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 10.0):
        """
        Initialize CoinGecko source.

        Args:
            api_key: Optional API key for higher rate limits (Pro/Enterprise)
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": "MaestroHub/1.0"
        })

        if api_key:
            self.session.headers.update({"x-cg-pro-api-key": api_key})

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - close session."""
        self.session.close()
        return False

    def _get(self, endpoint: str, params: Optional[Dict] = None):
        try:
            response = self.session.get(
                f"{self.BASE_URL}{endpoint}", params=params, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise PriceSourceError(f"CoinGecko API error: {status}") from e
        except requests.exceptions.RequestException as e:
            raise PriceSourceError(f"CoinGecko request failed: {e}") from e
        except ValueError as e:
            raise PriceSourceError("CoinGecko returned invalid JSON") from e

    def _symbol_to_coin_id(self, symbol: str) -> Optional[str]:
        """
        Convert ticker symbol to CoinGecko coin ID.

        Args:
            symbol: Ticker symbol (e.g., "BTC", "btc")

        Returns:
            CoinGecko coin ID (e.g., "bitcoin"), or None if not tracked
        """
        symbol = symbol.upper()
        for coin_id, ticker in self.COIN_IDS.items():
            if ticker == symbol:
                return coin_id
        return None

    @staticmethod
    def _parse_updated(value: Optional[str]) -> datetime:
        if not value:
            return datetime.now(timezone.utc)
        return datetime.fromisoformat(value.replace("Z", "+00:00"))

    def fetch_prices(self) -> List[UnifiedCryptoPrice]:
        """
        Fetch market data for the tracked coins.

        Returns:
            Prices sorted by market cap (descending)
        """
        data = self._get("/coins/markets", params={
            "vs_currency": "usd",
            "ids": ",".join(self.COIN_IDS),
            "order": "market_cap_desc",
            "sparkline": "false",
        })
        if not isinstance(data, list):
            raise PriceSourceError("CoinGecko returned an unexpected markets payload")

        prices = []
        for coin in data:
            symbol = self.COIN_IDS.get(coin.get("id"))
            if not symbol:
                continue

            try:
                price = float(coin["current_price"])
                prices.append(UnifiedCryptoPrice(
                    symbol=symbol,
                    name=coin.get("name", symbol),
                    price=price,
                    price_aed=price * USD_TO_AED,
                    change_24h=float(coin.get("price_change_24h") or 0.0),
                    change_percent_24h=float(coin.get("price_change_percentage_24h") or 0.0),
                    high_24h=float(coin.get("high_24h") or price),
                    low_24h=float(coin.get("low_24h") or price),
                    volume_24h=float(coin.get("total_volume") or 0.0),
                    market_cap=float(coin.get("market_cap") or 0.0),
                    source=self.source_id,
                    last_updated=self._parse_updated(coin.get("last_updated")),
                ))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed CoinGecko entry {coin.get('id')}: {e}")

        prices.sort(key=lambda p: p.market_cap or 0.0, reverse=True)
        logger.debug(f"Fetched {len(prices)} prices from CoinGecko")
        return prices

    def convert_to_aed(self, symbol: str, amount: float) -> Optional[AedConversion]:
        """
        Convert using the coin's current USD price.

        Returns:
            Conversion, or None if the coin is not tracked or the call fails
        """
        coin_id = self._symbol_to_coin_id(symbol)
        if not coin_id:
            return None

        try:
            data = self._get(f"/coins/{coin_id}", params={
                "localization": "false",
                "tickers": "false",
                "market_data": "true",
                "community_data": "false",
                "developer_data": "false",
            })
            price = float(data["market_data"]["current_price"]["usd"])
        except (PriceSourceError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"CoinGecko conversion failed for {symbol}: {e}")
            return None

        rate = price * USD_TO_AED
        return AedConversion(
            aed_amount=amount * rate,
            rate=rate,
            symbol=symbol.upper(),
            source=self.source_id,
        )

    def validate_connection(self) -> bool:
        """
        Test CoinGecko connection.

        Returns:
            True if connection successful
        """
        try:
            self._get("/ping")
            return True
        except PriceSourceError as e:
            logger.error(f"CoinGecko connection test failed: {e}")
            return False
