"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

MOCKS_DIR = Path(__file__).parent / "mocks"


def load_mock(category: str, name: str) -> dict:
    """Load a mock JSON file from tests/mocks/{category}/{name}.json"""
    path = MOCKS_DIR / category / f"{name}.json"
    with open(path) as f:
        return json.load(f)


@pytest.fixture
def mcdonalds_response():
    """Sample McDonald's locator response around Huntington, NY (40.8768, -73.3246)."""
    return load_mock("mcdonalds", "search_location")
