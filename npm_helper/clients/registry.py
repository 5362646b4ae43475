"""
npm Registry Client - paced, deadline-bounded access to the registry.

Every request goes through the same three steps:
1. await the shared PacedGate (FIFO, minimum spacing between requests)
2. run the HTTP request under its network deadline
3. map failures to UpstreamHttpError / UpstreamTimeoutError /
   UpstreamRequestError

The client returns parsed payloads; shaping happens in the callers via
npm_helper.services.shaping.

Pattern: Service Proxy (thin async client over an external API)
"""

import logging
import time
from typing import Any, Optional
from urllib.parse import quote

import httpx

from npm_helper.core.config import Settings, get_settings
from npm_helper.core.exceptions import (
    UpstreamHttpError,
    UpstreamRequestError,
    UpstreamTimeoutError,
)
from npm_helper.observability.metrics import record_gate_wait, record_upstream_request
from npm_helper.resilience.deadline import DeadlineWrapper
from npm_helper.resilience.pacing import PacedGate

logger = logging.getLogger(__name__)

# Abbreviated metadata document: versions without READMEs or per-version times.
INSTALL_METADATA_ACCEPT = "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8"
HTML_ACCEPT = "text/html,application/xhtml+xml"


def package_path(package_name: str) -> str:
    """URL path segment for a package; scoped names keep '@' and escape '/'."""
    return quote(package_name, safe="@")


def _json(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as e:
        raise UpstreamRequestError(
            f"Invalid JSON from {response.request.url}: {e}", url=str(response.request.url)
        ) from e
    if not isinstance(body, dict):
        raise UpstreamRequestError(
            f"Unexpected payload from {response.request.url}", url=str(response.request.url)
        )
    return body


class NpmRegistryClient:
    """
    Client for the npm registry JSON API and npm website package pages.

    Attributes:
        http: Shared httpx.AsyncClient.
        gate: PacedGate every request waits on.
        deadline: DeadlineWrapper enforcing per-request budgets.
        settings: Endpoints and timeouts.

    Example:
        >>> client = NpmRegistryClient(http, gate, deadline)
        >>> data = await client.search("react state", size=5)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        gate: PacedGate,
        deadline: DeadlineWrapper,
        settings: Optional[Settings] = None,
    ) -> None:
        self.http = http
        self.gate = gate
        self.deadline = deadline
        self.settings = settings or get_settings()

    # =========================================================================
    # Public API
    # =========================================================================

    async def search(self, query: str, size: int) -> dict[str, Any]:
        """Query /-/v1/search and return the parsed body."""
        response = await self._get(
            "search",
            f"{self.settings.registry_url}/-/v1/search",
            self.settings.search_timeout_seconds,
            params={"text": query, "size": size},
        )
        return _json(response)

    async def get_versions_document(self, package_name: str) -> dict[str, Any]:
        """Fetch the abbreviated packument, enough to enumerate versions."""
        response = await self._get(
            "versions",
            f"{self.settings.registry_url}/{package_path(package_name)}",
            self.settings.versions_timeout_seconds,
            headers={"Accept": INSTALL_METADATA_ACCEPT},
        )
        return _json(response)

    async def get_package(self, package_name: str) -> dict[str, Any]:
        """Fetch the full packument."""
        response = await self._get(
            "details",
            f"{self.settings.registry_url}/{package_path(package_name)}",
            self.settings.details_timeout_seconds,
        )
        return _json(response)

    async def fetch_page(self, url: str) -> str:
        """Fetch an HTML page (normally a package page on the npm website)."""
        logger.info(f"Fetching content from: {url}")
        response = await self._get(
            "page",
            url,
            self.settings.content_timeout_seconds,
            headers={"Accept": HTML_ACCEPT},
        )
        return response.text

    # =========================================================================
    # Request Pipeline
    # =========================================================================

    async def _get(
        self,
        endpoint: str,
        url: str,
        timeout_seconds: float,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        waited_from = time.perf_counter()
        await self.gate.acquire()
        record_gate_wait(time.perf_counter() - waited_from)

        request_headers = {"User-Agent": self.settings.user_agent, **(headers or {})}
        started = time.perf_counter()
        status = "error"
        try:
            response = await self.deadline.run(
                self.http.get(url, params=params, headers=request_headers),
                timeout_seconds,
                label=f"Request to {url}",
            )
            status = str(response.status_code)
        except UpstreamTimeoutError:
            status = "timeout"
            raise
        except httpx.TimeoutException as e:
            status = "timeout"
            raise UpstreamTimeoutError(f"Request to {url}", timeout_seconds) from e
        except httpx.RequestError as e:
            logger.error(f"Registry connection error for {url}: {e}")
            raise UpstreamRequestError(f"Request to {url} failed: {e}", url=url) from e
        finally:
            record_upstream_request(endpoint, status, time.perf_counter() - started)

        if not response.is_success:
            logger.warning(f"Upstream returned HTTP {response.status_code} for {url}")
            raise UpstreamHttpError(response.status_code, url=url)
        return response
