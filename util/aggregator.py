"""
Provider fan-out and result aggregation.

Each requested provider is queried independently. A failing provider adds
one error message and no locations; it never aborts the others. Results are
concatenated in requested-type order without a global re-sort, so
max_results caps each provider separately.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor

from util.models import Location, SearchRequest, SearchResponse
from util.providers.base import LocationProvider, ProviderError
from util.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

AGGREGATOR_MAX_WORKERS = int(os.environ.get("AGGREGATOR_MAX_WORKERS", "4"))


def _query_provider(
    provider: LocationProvider,
    request: SearchRequest,
) -> tuple[list[Location], str | None]:
    """Run one provider, turning any failure into an error message."""
    try:
        locations = provider.get_locations(
            request.lat,
            request.lng,
            request.distance_miles,
            request.max_results,
        )
        return locations, None
    except ProviderError as e:
        logger.warning("Provider %s failed: %s", provider.provider_type, e)
        return [], str(e)
    except Exception as e:
        logger.exception("Unexpected error from provider %s", provider.provider_type)
        return [], f"{provider.provider_type}: unexpected error: {e}"


def aggregate(
    request: SearchRequest,
    registry: ProviderRegistry,
    max_workers: int | None = None,
) -> SearchResponse:
    """
    Query every provider named in the request and merge the results.

    Args:
        request: Validated search request.
        registry: Registry used to resolve request.types.
        max_workers: Thread pool size; defaults to AGGREGATOR_MAX_WORKERS.

    Returns:
        SearchResponse with the concatenated locations and per-provider errors.

    Raises:
        UnknownProviderError: If a requested type isn't registered. Requests
            validated against the registry never trigger this.
    """
    # Resolve everything up front so a bad type fails before any upstream call
    providers = [registry.get(provider_type) for provider_type in request.types]
    if not providers:
        return SearchResponse()

    workers = max(1, min(max_workers or AGGREGATOR_MAX_WORKERS, len(providers)))

    if workers == 1:
        outcomes = [_query_provider(provider, request) for provider in providers]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map preserves input order regardless of completion order
            outcomes = list(executor.map(lambda p: _query_provider(p, request), providers))

    locations = []
    errors = []
    for provider_locations, error in outcomes:
        locations.extend(provider_locations)
        if error is not None:
            errors.append(error)

    logger.info(
        "Aggregated %d location(s) from %d provider(s) with %d error(s)",
        len(locations),
        len(providers),
        len(errors),
    )
    return SearchResponse(locations=locations, errors=errors)
