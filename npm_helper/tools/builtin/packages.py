"""
Registry Tools - search, page content, versions and details.

Each handler makes exactly one paced, deadline-bounded request through
NpmRegistryClient and returns shaped, bounded text. Failures keep their
type (so the dispatcher can tell a network timeout from an HTTP error) and
gain a prefix naming the operation.

Pattern: Service Proxy (proxies to the public npm registry)
"""

import logging
from typing import Optional

from npm_helper.clients.registry import NpmRegistryClient
from npm_helper.core.config import Settings, get_settings
from npm_helper.core.exceptions import NpmHelperException, UpstreamRequestError
from npm_helper.models.domain import RegisteredTool
from npm_helper.models.tools import (
    FetchPackageContentArgs,
    GetPackageDetailsArgs,
    GetPackageVersionsArgs,
    SearchNpmArgs,
)
from npm_helper.services.shaping import (
    extract_page_content,
    format_package_details,
    format_search_results,
    format_versions,
    shape_package_details,
    shape_search_results,
    shape_versions,
)

logger = logging.getLogger(__name__)


class PackageTools:
    """
    Handlers for the four registry-backed tools.

    Example:
        >>> tools = PackageTools(registry_client)
        >>> await tools.get_package_versions(GetPackageVersionsArgs(package_name="left-pad"))
        '📦 left-pad\\nAvailable versions (newest first):\\n1.3.0, 1.2.0, ...'
    """

    def __init__(
        self, client: NpmRegistryClient, settings: Optional[Settings] = None
    ) -> None:
        self.client = client
        self.settings = settings or get_settings()

    async def search_npm(self, args: SearchNpmArgs) -> str:
        """Search the registry and list the returned sample."""
        size = min(args.max_results, self.settings.max_search_results)
        try:
            data = await self.client.search(args.query, size)
        except NpmHelperException as e:
            raise e.add_context("Error searching npm packages")
        return format_search_results(shape_search_results(data))

    async def fetch_package_content(self, args: FetchPackageContentArgs) -> str:
        """Fetch an npm website package page and extract its readable content."""
        try:
            html = await self.client.fetch_page(args.url)
        except NpmHelperException as e:
            raise e.add_context("Error fetching package content")
        return extract_page_content(html, max_chars=self.settings.max_readme_chars)

    async def get_package_versions(self, args: GetPackageVersionsArgs) -> str:
        """List published versions, newest first."""
        try:
            data = await self.client.get_versions_document(args.package_name)
        except NpmHelperException as e:
            raise e.add_context("Error fetching package versions")
        if not isinstance(data.get("versions"), dict):
            raise UpstreamRequestError(
                "registry document has no versions"
            ).add_context("Error fetching package versions")
        return format_versions(
            args.package_name,
            shape_versions(data),
            limit=self.settings.max_listed_versions,
        )

    async def get_package_details(self, args: GetPackageDetailsArgs) -> str:
        """Summarize a packument: metadata, recent versions and publish times."""
        try:
            data = await self.client.get_package(args.package_name)
        except NpmHelperException as e:
            raise e.add_context("Error fetching package details")
        details = shape_package_details(
            data,
            max_versions=self.settings.max_detail_versions,
            max_time_entries=self.settings.max_time_entries,
        )
        return format_package_details(details)

    def tools(self) -> list[RegisteredTool]:
        """RegisteredTool entries for these handlers, in advertised order."""
        return [
            RegisteredTool.create(
                name="search_npm",
                description="Search for npm packages",
                arguments_model=SearchNpmArgs,
                handler=self.search_npm,
            ),
            RegisteredTool.create(
                name="fetch_package_content",
                description="Fetch detailed content from an npm package page URL",
                arguments_model=FetchPackageContentArgs,
                handler=self.fetch_package_content,
            ),
            RegisteredTool.create(
                name="get_package_versions",
                description="Get available versions for an npm package",
                arguments_model=GetPackageVersionsArgs,
                handler=self.get_package_versions,
            ),
            RegisteredTool.create(
                name="get_package_details",
                description="Get detailed information about an npm package",
                arguments_model=GetPackageDetailsArgs,
                handler=self.get_package_details,
            ),
        ]
