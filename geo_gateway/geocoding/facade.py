"""
Geocoding facade: provider registry and cheapest-first selection.

Providers are consulted in declared priority order (free first). A provider
requested by name is used on its own, with no fallback.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from geo_gateway.core.utils.geo import haversine_distance
from geo_gateway.geocoding.base import (
    GeocodeOptions,
    GeocodeOutcome,
    GeocodingProvider,
    ProviderError,
)
from geo_gateway.geocoding.providers.census import CensusGeocoder
from geo_gateway.geocoding.providers.google import GoogleGeocoder

logger = logging.getLogger(__name__)

ALL_PROVIDERS_FAILED = ProviderError(
    code="ALL_PROVIDERS_FAILED",
    message="All geocoding providers failed or returned no results",
)


class ProviderRegistry:
    """
    Ordered set of geocoding providers.

    Usage:
        registry = ProviderRegistry([CensusGeocoder(), GoogleGeocoder()])
        outcome = await registry.resolve("1600 Pennsylvania Avenue NW, Washington, DC 20500")
        outcome = await registry.resolve("10 Downing Street, London, UK", provider="google")
    """

    def __init__(self, providers: Sequence[GeocodingProvider]):
        names = [p.name for p in providers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate provider names: {duplicates}")
        self._providers: List[GeocodingProvider] = list(providers)

    def __iter__(self):
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def names(self) -> List[str]:
        return [p.name for p in self._providers]

    def get(self, name: str) -> Optional[GeocodingProvider]:
        for provider in self._providers:
            if provider.name == name:
                return provider
        return None

    async def select_provider(
        self,
        address: str,
        explicit_name: Optional[str] = None,
    ) -> Optional[GeocodingProvider]:
        """
        Pick the provider to use for an address.

        With an explicit name, returns exactly that provider (or None when
        unknown). Otherwise returns the first provider whose availability
        probe passes, or None if none do.
        """
        if explicit_name:
            return self.get(explicit_name)

        for provider in self._providers:
            if await self._probe(provider):
                return provider
            logger.warning(f"Provider {provider.name} is not available for {address}")

        return None

    async def resolve(
        self,
        address: str,
        provider: Optional[str] = None,
        options: Optional[GeocodeOptions] = None,
    ) -> GeocodeOutcome:
        """
        Geocode an address, never raising.

        Args:
            address: Address text
            provider: Optional provider name; pins the request to that provider
            options: Optional country/language/bounds hints

        Returns:
            The first successful outcome with results, the pinned provider's
            outcome, or a failure under provider "multiple" carrying the last
            recorded error
        """
        if provider:
            return await self._resolve_explicit(address, provider, options)

        last_error: Optional[ProviderError] = None

        for candidate in self._providers:
            if not await self._probe(candidate):
                logger.warning(f"Provider {candidate.name} is not available, trying next provider")
                continue

            try:
                outcome = await candidate.geocode(address, options)
            except Exception as e:
                logger.error(f"Error with provider {candidate.name}: {e}")
                last_error = ProviderError(
                    code="PROVIDER_ERROR",
                    message=f"Provider {candidate.name} encountered an error",
                )
                continue

            if outcome.has_results:
                return outcome

            if outcome.success:
                logger.info(f"Provider {candidate.name} returned no results, trying next provider")
                continue

            last_error = outcome.error
            logger.warning(f"Provider {candidate.name} failed: {outcome.error}")

        return GeocodeOutcome(
            success=False,
            provider="multiple",
            error=last_error or ALL_PROVIDERS_FAILED,
        )

    async def probe_all(self) -> Dict[str, bool]:
        """Availability of every provider, probed concurrently."""
        statuses = await asyncio.gather(*(self._probe(p) for p in self._providers))
        return dict(zip(self.names(), statuses))

    async def _resolve_explicit(
        self,
        address: str,
        name: str,
        options: Optional[GeocodeOptions],
    ) -> GeocodeOutcome:
        selected = await self.select_provider(address, explicit_name=name)
        if selected is None:
            return GeocodeOutcome.failure(
                name,
                "PROVIDER_NOT_FOUND",
                f"Unknown provider: {name}. Choose from: {self.names()}",
            )

        if not await self._probe(selected):
            return GeocodeOutcome.failure(
                name,
                "PROVIDER_UNAVAILABLE",
                "Selected provider is not available",
            )

        try:
            return await selected.geocode(address, options)
        except Exception as e:
            logger.error(f"Error with provider {name}: {e}")
            return GeocodeOutcome.failure(
                name,
                "PROVIDER_ERROR",
                f"Provider {name} encountered an error",
            )

    @staticmethod
    async def _probe(provider: GeocodingProvider) -> bool:
        try:
            return bool(await provider.is_available())
        except Exception as e:
            logger.warning(f"Availability probe for {provider.name} raised: {e}")
            return False


def default_registry() -> ProviderRegistry:
    """Census first for cost savings on US addresses, then Google."""
    return ProviderRegistry([CensusGeocoder(), GoogleGeocoder()])


async def geocode_address(
    address: str,
    provider: Optional[str] = None,
    options: Optional[GeocodeOptions] = None,
    registry: Optional[ProviderRegistry] = None,
) -> GeocodeOutcome:
    """
    Geocode a single address with cheapest-first fallback.

    Example:
        outcome = await geocode_address("350 5th Ave, New York, NY 10118")
        if outcome.has_results:
            print(outcome.results[0].latitude)
    """
    registry = registry or default_registry()
    return await registry.resolve(address, provider=provider, options=options)


async def compare_providers(
    address: str,
    registry: Optional[ProviderRegistry] = None,
) -> Dict[str, GeocodeOutcome]:
    """
    Geocode with every provider and log the distance between top results.

    Useful for validating accuracy or finding discrepancies.
    """
    registry = registry or default_registry()

    results: Dict[str, GeocodeOutcome] = {}
    for provider in registry:
        results[provider.name] = await registry.resolve(address, provider=provider.name)

    top = {k: v.results[0] for k, v in results.items() if v.has_results}
    names = list(top.keys())
    for i, p1 in enumerate(names):
        for p2 in names[i + 1:]:
            r1, r2 = top[p1], top[p2]
            dist = haversine_distance(r1.latitude, r1.longitude, r2.latitude, r2.longitude)
            logger.info(f"Distance {p1} vs {p2}: {dist:.1f}m")

    return results
