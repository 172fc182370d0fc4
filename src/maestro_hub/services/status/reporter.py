"""
Provider status and system health.

`get_providers_status` is a cheap, synchronous configuration report (no
network). `get_system_status` adds a live probe of the price sources and
folds both into a health score with recommendations.
"""

from typing import Any, Dict, List, Optional

from maestro_hub.adapters.banks.base import BankAdapter
from maestro_hub.core.serialization import to_jsonable
from maestro_hub.core.types import (
    BankProvider,
    PriceSourceStatus,
    ProviderStatus,
    SourceHealth,
    utc_now,
)
from maestro_hub.services.crypto.aggregator import CryptoPriceAggregator

# Health score at or above this is reported as healthy
HEALTHY_THRESHOLD = 50

ALL_OPERATIONAL = "All providers configured! System is fully operational."


class StatusReporter:
    """Reports bank configuration and price source health."""

    def __init__(
        self,
        registry: Dict[str, BankAdapter],
        crypto: Optional[CryptoPriceAggregator] = None
    ):
        self.registry = registry
        self.crypto = crypto

    def get_providers_status(self) -> List[ProviderStatus]:
        """One entry per registered bank, in canonical order."""
        statuses = []
        for provider in BankProvider:
            adapter = self.registry.get(provider.value)
            if adapter is None:
                continue
            statuses.append(ProviderStatus(
                name=provider,
                display_name=adapter.display_name,
                configured=adapter.is_configured(),
                environment=adapter.environment,
                features=list(adapter.features),
            ))
        return statuses

    @staticmethod
    def _recommendations(
        providers: List[ProviderStatus],
        sources: List[PriceSourceStatus]
    ) -> List[str]:
        recommendations = []

        unconfigured = [p.display_name for p in providers if not p.configured]
        if unconfigured:
            recommendations.append(f"Configure {', '.join(unconfigured)} for live banking features")

        for source in sources:
            if source.status != SourceHealth.ONLINE:
                recommendations.append(f"{source.name} may be temporarily unavailable ({source.status.value})")

        if not recommendations:
            recommendations.append(ALL_OPERATIONAL)
        return recommendations

    async def get_system_status(self) -> Dict[str, Any]:
        """
        Health report across banks and price sources.

        Score = ready components / total components * 100, where a bank is
        ready when configured and a price source when online.

        Returns:
            JSON-ready dict with health, banking, crypto and recommendations
        """
        providers = self.get_providers_status()
        sources = await self.crypto.get_price_sources_status() if self.crypto else []

        configured = sum(1 for p in providers if p.configured)
        online = sum(1 for s in sources if s.status == SourceHealth.ONLINE)
        total = len(providers) + len(sources)
        score = round((configured + online) / total * 100) if total else 0
        healthy = score >= HEALTHY_THRESHOLD

        return {
            "success": True,
            "timestamp": utc_now().isoformat(),
            "health": {
                "score": score,
                "status": "healthy" if healthy else "degraded",
                "message": (
                    f"{configured + online} of {total} providers ready"
                    if healthy else "Some providers need configuration"
                ),
            },
            "banking": {
                "providers": to_jsonable(providers),
                "configured": configured,
                "total": len(providers),
            },
            "crypto": {
                "price_sources": to_jsonable(sources),
                "online": online,
                "total": len(sources),
            },
            "recommendations": self._recommendations(providers, sources),
        }
