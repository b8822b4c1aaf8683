"""
Validation of inbound search requests.

Requests are checked against a JSON Schema whose ``types`` enum is the set
of registered provider keys, then converted to a SearchRequest with
defaults filled in.
"""

import base64
import binascii
import json
import logging
from collections.abc import Iterable
from typing import Any

from jsonschema import Draft7Validator
from pydantic import ValidationError

from util.models import (
    DEFAULT_DISTANCE_MILES,
    DEFAULT_MAX_RESULTS,
    MAX_DISTANCE_MILES,
    MAX_RESULTS_LIMIT,
    SearchRequest,
)

logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    """Refuse NaN and Infinity, which Python's json accepts but JSON does not."""
    raise ValueError(f"Invalid JSON constant '{name}'")


class RequestValidationError(Exception):
    """Raised when a request body is not valid JSON or violates the request schema."""

    def __init__(self, errors: list[str]):
        super().__init__(f"Invalid request: [{', '.join(errors)}]")
        self.errors = errors


def build_request_schema(provider_types: Iterable[str]) -> dict[str, Any]:
    """
    Build the JSON Schema for search requests.

    Args:
        provider_types: Registered provider keys allowed in ``types``.

    Returns:
        A Draft 7 JSON Schema dict.
    """
    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "required": ["lat", "lng"],
        "properties": {
            "lat": {"type": "number", "minimum": -90.0, "maximum": 90.0},
            "lng": {"type": "number", "minimum": -180.0, "maximum": 180.0},
            "distance_miles": {
                "type": "number",
                "exclusiveMinimum": 0.0,
                "maximum": MAX_DISTANCE_MILES,
            },
            "max_results": {"type": "integer", "minimum": 1, "maximum": MAX_RESULTS_LIMIT},
            "show_closed": {"type": "boolean"},
            "types": {
                "type": "array",
                "items": {"type": "string", "enum": list(provider_types)},
                "uniqueItems": True,
            },
        },
    }


class RequestValidator:
    """Compiled request schema bound to one provider registry's types."""

    def __init__(self, provider_types: Iterable[str]):
        self.provider_types = list(provider_types)
        self.schema = build_request_schema(self.provider_types)
        Draft7Validator.check_schema(self.schema)
        self._validator = Draft7Validator(self.schema)

    def validate(self, body: str | dict[str, Any] | None) -> SearchRequest:
        """
        Validate a request body and apply defaults.

        Missing distance_miles becomes 5.0, missing max_results becomes 30 and
        missing or empty types becomes every registered provider.

        Args:
            body: Raw JSON string or already-decoded dict.

        Returns:
            The normalized SearchRequest.

        Raises:
            RequestValidationError: If the body is not JSON or fails the schema.
        """
        if isinstance(body, (str, bytes)):
            try:
                data = json.loads(body, parse_constant=_reject_constant) if body else {}
            except ValueError as e:
                raise RequestValidationError([f"Invalid JSON in request body: {e}"]) from e
        else:
            data = body if body is not None else {}

        errors = sorted(
            self._validator.iter_errors(data),
            key=lambda err: (err.json_path, err.message),
        )
        if errors:
            messages = [f"{err.json_path}: {err.message}" for err in errors]
            logger.info("Rejected request: %s", messages)
            raise RequestValidationError(messages)

        try:
            return SearchRequest(
                lat=data["lat"],
                lng=data["lng"],
                distance_miles=data.get("distance_miles", DEFAULT_DISTANCE_MILES),
                max_results=data.get("max_results", DEFAULT_MAX_RESULTS),
                show_closed=data.get("show_closed", False),
                types=data.get("types") or list(self.provider_types),
            )
        except ValidationError as e:
            messages = [
                f"$.{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            logger.info("Rejected request: %s", messages)
            raise RequestValidationError(messages) from e


def parse_event_body(event: dict[str, Any]) -> str:
    """
    Extract the request body from an API Gateway proxy event.

    Args:
        event: The AWS Lambda event dictionary.

    Returns:
        The body as a string (empty when absent).

    Raises:
        RequestValidationError: If a base64-encoded body cannot be decoded.
    """
    body = event.get("body") or ""
    if event.get("isBase64Encoded", False):
        try:
            return base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise RequestValidationError([f"Invalid base64 request body: {e}"]) from e
    return body
