"""
Find Drive-Thrus Lambda - API Gateway proxy handler.

Validates the search request, fans out to the requested location providers
and returns the merged, distance-sorted drive-thru locations.

Example request body:
{
    "lat": 40.8768,
    "lng": -73.3246,
    "distance_miles": 5.0,
    "max_results": 10,
    "types": ["mcdonalds"]
}
"""

import json
import logging
import os
from typing import Any

from util.aggregator import aggregate
from util.providers import get_provider_registry
from util.request_validation import (
    RequestValidationError,
    RequestValidator,
    parse_event_body,
)

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

# Built once per cold start and shared read-only across invocations
REGISTRY = get_provider_registry()
VALIDATOR = RequestValidator(REGISTRY.types)

JSON_HEADERS = {"Content-Type": "application/json"}


def build_response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    """Build an API Gateway proxy response."""
    return {
        "statusCode": status_code,
        "headers": dict(JSON_HEADERS),
        "body": json.dumps(body),
    }


def handler(event: dict[str, Any], _context) -> dict[str, Any]:
    """
    Lambda handler for drive-thru searches.

    Args:
        event: API Gateway proxy event with a JSON request body.
        _context: Lambda context (unused).

    Returns:
        API Gateway proxy response: 200 with {"locations": [...], "errors"?: [...]},
        400 on an invalid request, 500 on an unexpected failure.
    """
    try:
        request = VALIDATOR.validate(parse_event_body(event))
    except RequestValidationError as e:
        return build_response(400, {"errors": e.errors})

    logger.info(
        "Searching %s within %.2f mi of (%s, %s), max %d per provider",
        request.types,
        request.distance_miles,
        request.lat,
        request.lng,
        request.max_results,
    )

    try:
        result = aggregate(request, REGISTRY)
    except Exception:
        logger.exception("Search failed")
        return build_response(500, {"errors": ["internal error"]})

    if result.errors:
        logger.warning("Completed with %d provider error(s): %s", len(result.errors), result.errors)

    return build_response(200, result.to_payload())
