"""
Runtime configuration.

Credentials and endpoints are read once at startup and injected into the
adapters. Nothing below `Settings` reads the process environment.

Usage:
    from maestro_hub.core.config import Settings

    settings = Settings.from_env()  # also loads .env if present
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from maestro_hub.core.types import BankProvider, Environment


DEFAULT_PROVIDER_TIMEOUT_SECONDS = 5.0

# Environment variable prefix per bank
ENV_PREFIXES = {
    BankProvider.RAKBANK: "RAKBANK",
    BankProvider.MASHREQ: "MASHREQ",
    BankProvider.WIO: "WIO",
    BankProvider.EMIRATES_NBD: "EMIRATES_NBD",
}


def _flag(env: Mapping[str, str], name: str) -> bool:
    """Sandbox/testnet flags default to on; only the literal 'false' turns them off."""
    return env.get(name, "").strip().lower() != "false"


@dataclass(frozen=True)
class BankCredentials:
    """API credentials for one bank. Immutable after construction."""
    api_key: str = ""
    client_id: str = ""
    client_secret: str = ""
    access_token: str = ""
    use_sandbox: bool = True

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.client_id)

    @property
    def environment(self) -> Environment:
        return Environment.SANDBOX if self.use_sandbox else Environment.PRODUCTION


@dataclass(frozen=True)
class PriceSourceSettings:
    binance_use_testnet: bool = True
    coingecko_api_key: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    banks: Dict[BankProvider, BankCredentials] = field(default_factory=dict)
    price_sources: PriceSourceSettings = field(default_factory=PriceSourceSettings)
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS

    def credentials_for(self, provider: BankProvider) -> BankCredentials:
        return self.banks.get(provider, BankCredentials())

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[str] = None
    ) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read instead of os.environ (tests)
            dotenv_path: Explicit .env file; ignored when `env` is given

        Returns:
            Settings instance

        Raises:
            ValueError: If MAESTRO_PROVIDER_TIMEOUT is not a positive number
        """
        if env is None:
            load_dotenv(dotenv_path)
            env = os.environ

        banks = {}
        for provider, prefix in ENV_PREFIXES.items():
            banks[provider] = BankCredentials(
                api_key=env.get(f"{prefix}_API_KEY", ""),
                client_id=env.get(f"{prefix}_CLIENT_ID", ""),
                client_secret=env.get(f"{prefix}_CLIENT_SECRET", ""),
                access_token=env.get(f"{prefix}_ACCESS_TOKEN", ""),
                use_sandbox=_flag(env, f"{prefix}_USE_SANDBOX"),
            )

        raw_timeout = env.get("MAESTRO_PROVIDER_TIMEOUT")
        timeout = DEFAULT_PROVIDER_TIMEOUT_SECONDS
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as e:
                raise ValueError(
                    f"MAESTRO_PROVIDER_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
                ) from e
            if timeout <= 0:
                raise ValueError(f"MAESTRO_PROVIDER_TIMEOUT must be positive, got {timeout}")

        return cls(
            banks=banks,
            price_sources=PriceSourceSettings(
                binance_use_testnet=_flag(env, "BINANCE_USE_TESTNET"),
                coingecko_api_key=env.get("COINGECKO_API_KEY") or None,
            ),
            provider_timeout=timeout,
        )
