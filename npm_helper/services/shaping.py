"""
Result Shaping - bounds upstream payloads before they are kept or returned.

Registry documents for popular packages run to megabytes (every version's
manifest, every publish timestamp, the full README). Each function here
takes a raw payload and returns a derivative whose size is capped by a
fixed constant, independent of the upstream size.

All functions are total: malformed upstream data degrades to omitted
optional fields or skipped entries, never to an exception.

Pattern: Pure transformation functions (no I/O, no state)
"""

import json
from datetime import datetime
from typing import Any, Iterable, Optional

from bs4 import BeautifulSoup

from npm_helper.models.packages import PackageSummary, SearchResults, UpdateReport


MAX_LISTED_VERSIONS = 15
MAX_DETAIL_VERSIONS = 10
MAX_TIME_ENTRIES = 10
MAX_README_CHARS = 4000

TRUNCATION_MARKER = "...\n[README content truncated]"
NO_CONTENT = "No extractable content found."

DETAIL_FIELDS = ("name", "description", "dist-tags", "maintainers", "homepage", "repository", "license")
VERSION_FIELDS = (
    "name",
    "version",
    "description",
    "main",
    "dependencies",
    "devDependencies",
    "peerDependencies",
)
NON_CONTENT_SELECTOR = "script, style, nav, header, footer"


# =============================================================================
# Helpers
# =============================================================================


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _pick(source: dict[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    """Copy the listed keys that are present and not null."""
    return {key: source[key] for key in fields if source.get(key) is not None}


def _publish_date(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        return None


# =============================================================================
# Search Results
# =============================================================================


def _shape_search_object(obj: Any) -> Optional[PackageSummary]:
    package = _as_dict(_as_dict(obj).get("package"))
    name = _as_str(package.get("name"))
    if name is None:
        return None

    links = _as_dict(package.get("links"))
    author = package.get("author")
    keywords = package.get("keywords")
    return PackageSummary(
        name=name,
        version=_as_str(package.get("version")) or "",
        description=_as_str(package.get("description")),
        author=_as_str(_as_dict(author).get("name")) if isinstance(author, dict) else _as_str(author),
        homepage=_as_str(links.get("homepage")),
        repository=_as_str(links.get("repository")),
        keywords=[k for k in keywords if isinstance(k, str)] if isinstance(keywords, list) else [],
        last_publish=_publish_date(package.get("date")),
    )


def shape_search_results(data: Any) -> SearchResults:
    """
    Shape a /-/v1/search response.

    Args:
        data: Parsed JSON body with "objects" and "total".

    Returns:
        SearchResults carrying the returned sample and the total hit count.
    """
    body = _as_dict(data)
    objects = body.get("objects")
    packages = []
    if isinstance(objects, list):
        for obj in objects:
            summary = _shape_search_object(obj)
            if summary is not None:
                packages.append(summary)

    total = body.get("total")
    if not isinstance(total, int) or isinstance(total, bool):
        total = len(packages)
    return SearchResults(packages=packages, total=total)


def format_search_results(results: SearchResults) -> str:
    """Render search results, one block per package."""
    if not results.packages:
        return "No packages found."

    lines = [f"Found {results.total} packages (showing {len(results.packages)}):", ""]
    for pkg in results.packages:
        lines.append(f"📦 {pkg.name}@{pkg.version}")
        if pkg.description:
            lines.append(f"   Description: {pkg.description}")
        if pkg.author:
            lines.append(f"   Author: {pkg.author}")
        if pkg.last_publish:
            lines.append(f"   Last publish: {pkg.last_publish}")
        lines.append("")
    return "\n".join(lines)


# =============================================================================
# Versions
# =============================================================================


def shape_versions(data: Any) -> list[str]:
    """
    List the version keys of a packument, newest first.

    Newest-first is the reverse of the registry's insertion order.
    """
    versions = _as_dict(data).get("versions")
    if not isinstance(versions, dict):
        return []
    return list(reversed(list(versions.keys())))


def format_versions(
    package_name: str, versions: list[str], limit: int = MAX_LISTED_VERSIONS
) -> str:
    """Show at most limit versions and count the remainder."""
    if not versions:
        return f"No versions found for {package_name}."

    output = f"📦 {package_name}\nAvailable versions (newest first):\n"
    output += ", ".join(versions[:limit])
    if len(versions) > limit:
        output += f"\n...and {len(versions) - limit} more versions"
    return output


# =============================================================================
# Package Details
# =============================================================================


def _last_entries(mapping: dict[str, Any], count: int) -> list[tuple[str, Any]]:
    if count <= 0:
        return []
    return list(mapping.items())[-count:]


def shape_package_details(
    data: Any,
    max_versions: int = MAX_DETAIL_VERSIONS,
    max_time_entries: int = MAX_TIME_ENTRIES,
) -> dict[str, Any]:
    """
    Reduce a full packument to its summary fields and most recent versions.

    Keeps the last max_versions version manifests (registry insertion order),
    each stripped to VERSION_FIELDS, and the created/modified timestamps plus
    the last max_time_entries other timestamps.
    """
    body = _as_dict(data)
    shaped = _pick(body, DETAIL_FIELDS)

    versions = body.get("versions")
    if isinstance(versions, dict):
        shaped["versions"] = {
            version: _pick(_as_dict(manifest), VERSION_FIELDS)
            for version, manifest in _last_entries(versions, max_versions)
        }

    time = body.get("time")
    if isinstance(time, dict):
        shaped_time = _pick(time, ("created", "modified"))
        others = {k: v for k, v in time.items() if k not in ("created", "modified")}
        shaped_time.update(_last_entries(others, max_time_entries))
        shaped["time"] = shaped_time

    return shaped


def format_package_details(details: dict[str, Any]) -> str:
    return json.dumps(details, indent=2, ensure_ascii=False)


# =============================================================================
# Package Page Content
# =============================================================================


def _select_text(soup: BeautifulSoup, selector: str) -> str:
    node = soup.select_one(selector)
    return node.get_text().strip() if node is not None else ""


def extract_page_content(html: str, max_chars: int = MAX_README_CHARS) -> str:
    """
    Extract name, version, description and README text from a package page.

    Non-content regions are removed first. The README body is capped at
    max_chars characters and marked when truncated.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup.select(NON_CONTENT_SELECTOR):
        tag.decompose()

    name = _select_text(soup, "#top h1")
    version = _select_text(soup, '[data-testid="version-badge"]')
    description = _select_text(soup, "#package-description")
    readme = _select_text(soup, "#readme")
    soup.decompose()

    content = ""
    if name:
        content += f"Package: {name}\n"
    if version:
        content += f"Version: {version}\n"
    if description:
        content += f"Description: {description}\n\n"
    if readme:
        if len(readme) > max_chars:
            readme = readme[:max_chars] + TRUNCATION_MARKER
        content += f"README:\n{readme}"
    return content or NO_CONTENT


# =============================================================================
# Update Reports
# =============================================================================


def format_update_report(report: UpdateReport) -> str:
    return f"{report.message}\n\n{json.dumps(report.data, indent=2)}"
