"""Registry of location providers keyed by provider type."""

from collections.abc import Iterable

from util.providers.base import LocationProvider


class UnknownProviderError(LookupError):
    """Raised when a provider type is not registered."""


class ProviderRegistry:
    """
    Ordered mapping of provider type to provider instance.

    Built once at process start and treated as read-only afterwards.
    Registration order is the default provider order for requests that
    don't name any types.
    """

    def __init__(self, providers: Iterable[LocationProvider] = ()):
        self._providers: dict[str, LocationProvider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: LocationProvider) -> None:
        key = provider.provider_type
        if key in self._providers:
            raise ValueError(f"Provider '{key}' is already registered")
        self._providers[key] = provider

    def get(self, provider_type: str) -> LocationProvider:
        """
        Look up a provider.

        Raises:
            UnknownProviderError: If no provider is registered under that type.
        """
        try:
            return self._providers[provider_type]
        except KeyError as e:
            raise UnknownProviderError(
                f"Unknown provider type '{provider_type}'. "
                f"Registered: {list(self._providers)}"
            ) from e

    @property
    def types(self) -> list[str]:
        """Registered provider types in registration order."""
        return list(self._providers)

    def __contains__(self, provider_type: object) -> bool:
        return provider_type in self._providers

    def __len__(self) -> int:
        return len(self._providers)
