"""Location provider abstractions."""

from util.providers.base import (
    LocationProvider,
    ProviderError,
    UpstreamParseError,
    UpstreamTransportError,
)
from util.providers.mcdonalds import TYPE_MCDONALDS, McDonaldsProvider
from util.providers.registry import ProviderRegistry, UnknownProviderError


def get_provider_registry() -> ProviderRegistry:
    """
    Factory function to build the registry of every supported provider.

    Called once per process (Lambda cold start). Registration order is the
    order used when a request doesn't name any provider types.

    Returns:
        A ProviderRegistry with one instance of each provider.
    """
    return ProviderRegistry(
        [
            McDonaldsProvider(),
        ]
    )


__all__ = [
    "LocationProvider",
    "McDonaldsProvider",
    "ProviderError",
    "ProviderRegistry",
    "TYPE_MCDONALDS",
    "UnknownProviderError",
    "UpstreamParseError",
    "UpstreamTransportError",
    "get_provider_registry",
]
