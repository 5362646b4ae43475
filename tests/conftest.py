"""
Pytest configuration and shared fixtures.

This configuration sets up:
- Test markers for categorization
- Settings tuned for fast tests (short pacing interval, short timeouts)
- Raw registry payloads and an httpx.MockTransport factory
- A temporary project directory holding a package.json
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from npm_helper.core.config import Settings  # noqa: E402


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """
    Register custom markers for test categorization.

    - unit: Tests for individual components
    - slow: Tests that rely on real wall-clock waits
    """
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "slow: Tests that take a long time to run")


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings with a 50ms pacing interval and sub-second network budgets.
    """
    return Settings(
        registry_url="https://registry.test",
        requests_per_second=20.0,
        search_timeout_seconds=0.5,
        versions_timeout_seconds=0.5,
        details_timeout_seconds=0.5,
        content_timeout_seconds=0.5,
        tool_timeout_seconds=1.0,
        log_json=False,
    )


# =============================================================================
# Registry Payloads
# =============================================================================


@pytest.fixture
def search_payload() -> dict[str, Any]:
    """A /-/v1/search body with 3 returned objects out of 42 matches."""
    return {
        "objects": [
            {
                "package": {
                    "name": "react",
                    "version": "18.3.1",
                    "description": "React is a JavaScript library for building user interfaces.",
                    "publisher": {"username": "react-bot"},
                    "date": "2024-04-26T16:42:19.000Z",
                    "links": {"homepage": "https://react.dev/"},
                }
            },
            {
                "package": {
                    "name": "react-dom",
                    "version": "18.3.1",
                    "description": "React package for working with the DOM.",
                    "date": "2024-04-26T16:42:21.000Z",
                }
            },
            {
                "package": {
                    "name": "@types/react",
                    "version": "18.3.3",
                }
            },
        ],
        "total": 42,
    }


def make_packument(version_count: int) -> dict[str, Any]:
    """A full packument with versions 1.0.0 .. 1.0.{version_count - 1}."""
    versions = [f"1.0.{i}" for i in range(version_count)]
    time = {"created": "2020-01-01T00:00:00.000Z", "modified": "2024-01-01T00:00:00.000Z"}
    time.update({v: f"2021-01-{(i % 28) + 1:02d}T00:00:00.000Z" for i, v in enumerate(versions)})
    return {
        "_id": "left-pad",
        "_rev": "12-abc",
        "name": "left-pad",
        "description": "String left pad",
        "dist-tags": {"latest": versions[-1]} if versions else {},
        "license": "WTFPL",
        "readme": "x" * 10000,
        "maintainers": [{"name": "stevemao"}],
        "versions": {
            v: {
                "name": "left-pad",
                "version": v,
                "main": "index.js",
                "dist": {"tarball": f"https://registry.test/left-pad/-/left-pad-{v}.tgz"},
                "scripts": {"test": "node test"},
            }
            for v in versions
        },
        "time": time,
    }


@pytest.fixture
def packument_factory() -> Callable[[int], dict[str, Any]]:
    return make_packument


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def mock_transport_factory() -> Callable[..., httpx.MockTransport]:
    """
    Build an httpx.MockTransport from a request -> response callable.

    Every request seen is appended to the transport's ``requests`` list.
    """

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.MockTransport:
        seen: list[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording)
        transport.requests = seen  # type: ignore[attr-defined]
        return transport

    return factory


# =============================================================================
# Projects
# =============================================================================


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A temporary project directory with a minimal package.json."""
    manifest = {
        "name": "demo",
        "version": "1.0.0",
        "dependencies": {"react": "^17.0.0", "lodash": "^4.17.0"},
    }
    (tmp_path / "package.json").write_text(json.dumps(manifest))
    return tmp_path
