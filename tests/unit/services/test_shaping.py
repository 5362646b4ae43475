"""
Unit tests for npm_helper/services/shaping.py - bounded result shaping.

Test Categories:
1. TestSearchShaping - sample vs total, malformed entries
2. TestVersionShaping - newest-first listing capped at 15
3. TestDetailShaping - last 10 versions, stripped manifests, time entries
4. TestPageContent - HTML extraction and README truncation
5. TestUpdateReport - message plus JSON payload
"""

import json

import pytest

from npm_helper.models.packages import PackageSummary, SearchResults, UpdateReport
from npm_helper.services.shaping import (
    MAX_README_CHARS,
    NO_CONTENT,
    TRUNCATION_MARKER,
    extract_page_content,
    format_package_details,
    format_search_results,
    format_update_report,
    format_versions,
    shape_package_details,
    shape_search_results,
    shape_versions,
)


# =============================================================================
# Search
# =============================================================================


class TestSearchShaping:
    """Search results report the registry total alongside the returned sample."""

    def test_header_reports_total_and_sample_size(self, search_payload) -> None:
        text = format_search_results(shape_search_results(search_payload))
        assert text.startswith("Found 42 packages (showing 3):")

    def test_package_block_fields(self, search_payload) -> None:
        text = format_search_results(shape_search_results(search_payload))

        assert "📦 react@18.3.1" in text
        assert "   Description: React is a JavaScript library" in text
        assert "   Last publish: 2024-04-26" in text
        assert "📦 @types/react@18.3.3" in text

    def test_optional_fields_omitted(self) -> None:
        results = SearchResults(packages=[PackageSummary(name="bare", version="0.0.1")], total=1)
        text = format_search_results(results)

        assert "Description:" not in text
        assert "Author:" not in text
        assert "Last publish:" not in text

    def test_author_from_object_or_string(self) -> None:
        payload = {
            "objects": [
                {"package": {"name": "a", "version": "1.0.0", "author": {"name": "Ada"}}},
                {"package": {"name": "b", "version": "1.0.0", "author": "Bob"}},
            ],
            "total": 2,
        }
        results = shape_search_results(payload)
        assert [p.author for p in results.packages] == ["Ada", "Bob"]

    def test_entries_without_name_are_skipped(self) -> None:
        payload = {"objects": [{"package": {"version": "1.0.0"}}, {}, "junk"], "total": 3}
        results = shape_search_results(payload)
        assert results.packages == []
        assert format_search_results(results) == "No packages found."

    def test_missing_total_falls_back_to_sample_size(self, search_payload) -> None:
        del search_payload["total"]
        assert shape_search_results(search_payload).total == 3

    @pytest.mark.parametrize("payload", [None, [], "text", {"objects": "nope"}])
    def test_malformed_payload_yields_empty_results(self, payload) -> None:
        results = shape_search_results(payload)
        assert results.packages == []
        assert results.total == 0

    def test_unparseable_date_is_dropped(self) -> None:
        payload = {"objects": [{"package": {"name": "a", "date": "yesterday"}}]}
        assert shape_search_results(payload).packages[0].last_publish is None


# =============================================================================
# Versions
# =============================================================================


class TestVersionShaping:
    """Versions are listed newest first, at most 15, with a remainder count."""

    def test_reverse_of_registry_order(self) -> None:
        data = {"versions": {"1.0.0": {}, "1.1.0": {}, "2.0.0": {}}}
        assert shape_versions(data) == ["2.0.0", "1.1.0", "1.0.0"]

    def test_forty_versions_lists_fifteen_and_counts_rest(self, packument_factory) -> None:
        versions = shape_versions(packument_factory(40))
        text = format_versions("left-pad", versions)

        listed = text.split("\n")[2].split(", ")
        assert len(listed) == 15
        assert listed[0] == "1.0.39"
        assert text.endswith("...and 25 more versions")

    def test_exactly_limit_has_no_remainder_line(self) -> None:
        text = format_versions("pkg", [f"1.0.{i}" for i in range(15)])
        assert "more versions" not in text

    def test_header(self) -> None:
        text = format_versions("pkg", ["1.0.0"])
        assert text == "📦 pkg\nAvailable versions (newest first):\n1.0.0"

    def test_no_versions(self) -> None:
        assert shape_versions({"versions": "bad"}) == []
        assert format_versions("pkg", []) == "No versions found for pkg."

    def test_custom_limit(self) -> None:
        text = format_versions("pkg", ["3", "2", "1"], limit=2)
        assert "3, 2" in text
        assert text.endswith("...and 1 more versions")


# =============================================================================
# Details
# =============================================================================


class TestDetailShaping:
    """Details keep summary fields and the 10 most recent versions."""

    def test_keeps_last_ten_versions(self, packument_factory) -> None:
        details = shape_package_details(packument_factory(40))
        assert list(details["versions"]) == [f"1.0.{i}" for i in range(30, 40)]

    def test_version_manifests_are_stripped(self, packument_factory) -> None:
        details = shape_package_details(packument_factory(3))
        manifest = details["versions"]["1.0.2"]

        assert manifest == {"name": "left-pad", "version": "1.0.2", "main": "index.js"}

    def test_heavy_top_level_fields_dropped(self, packument_factory) -> None:
        details = shape_package_details(packument_factory(3))

        assert "readme" not in details
        assert "_rev" not in details
        assert details["name"] == "left-pad"
        assert details["dist-tags"] == {"latest": "1.0.2"}
        assert details["license"] == "WTFPL"

    def test_time_keeps_created_modified_and_last_entries(self, packument_factory) -> None:
        details = shape_package_details(packument_factory(40))
        time = details["time"]

        assert time["created"] == "2020-01-01T00:00:00.000Z"
        assert time["modified"] == "2024-01-01T00:00:00.000Z"
        assert len(time) == 12
        assert "1.0.39" in time
        assert "1.0.29" not in time

    def test_small_package_kept_whole(self, packument_factory) -> None:
        details = shape_package_details(packument_factory(2))
        assert list(details["versions"]) == ["1.0.0", "1.0.1"]

    def test_bounded_regardless_of_upstream_size(self, packument_factory) -> None:
        small = format_package_details(shape_package_details(packument_factory(20)))
        large = format_package_details(shape_package_details(packument_factory(2000)))
        # Same shape, only version strings differ in length
        assert abs(len(large) - len(small)) < 200

    def test_malformed_payload(self) -> None:
        assert shape_package_details(None) == {}
        assert shape_package_details({"versions": [], "time": "x"}) == {}

    def test_formatted_as_indented_json(self) -> None:
        text = format_package_details({"name": "a"})
        assert text == '{\n  "name": "a"\n}'


# =============================================================================
# Page Content
# =============================================================================


PAGE = """
<html>
  <head><style>.x {{}}</style><script>var tracking = 1;</script></head>
  <body>
    <header>npm header</header>
    <nav>menu</nav>
    <div id="top">
      <h1> express </h1>
      <span data-testid="version-badge">4.19.2</span>
    </div>
    <p id="package-description">Fast, unopinionated, minimalist web framework</p>
    <div id="readme">{readme}</div>
    <footer>npm footer</footer>
  </body>
</html>
"""


class TestPageContent:
    """Page extraction keeps name, version, description and bounded README."""

    def test_extracts_fields(self) -> None:
        text = extract_page_content(PAGE.format(readme="Install with npm."))

        assert text.startswith("Package: express\nVersion: 4.19.2\n")
        assert "Description: Fast, unopinionated, minimalist web framework\n\n" in text
        assert text.endswith("README:\nInstall with npm.")

    def test_non_content_regions_removed(self) -> None:
        text = extract_page_content(PAGE.format(readme="body"))

        assert "tracking" not in text
        assert "npm header" not in text
        assert "npm footer" not in text

    def test_long_readme_truncated_with_marker(self) -> None:
        text = extract_page_content(PAGE.format(readme="a" * 10000))

        readme = text.split("README:\n", 1)[1]
        assert readme == "a" * MAX_README_CHARS + TRUNCATION_MARKER

    def test_readme_at_limit_not_truncated(self) -> None:
        text = extract_page_content(PAGE.format(readme="b" * MAX_README_CHARS))
        assert TRUNCATION_MARKER not in text

    def test_custom_limit(self) -> None:
        text = extract_page_content(PAGE.format(readme="c" * 50), max_chars=10)
        assert text.endswith("c" * 10 + TRUNCATION_MARKER)

    @pytest.mark.parametrize("html", ["", "<html><body><p>hello</p></body></html>"])
    def test_nothing_recognised(self, html: str) -> None:
        assert extract_page_content(html) == NO_CONTENT


# =============================================================================
# Update Reports
# =============================================================================


class TestUpdateReport:
    def test_message_then_json(self) -> None:
        report = UpdateReport(message="Found 1 outdated dependencies.", data={"react": "^18.3.1"})
        text = format_update_report(report)

        message, payload = text.split("\n\n", 1)
        assert message == "Found 1 outdated dependencies."
        assert json.loads(payload) == {"react": "^18.3.1"}

    def test_count(self) -> None:
        assert UpdateReport(message="m", data={"a": "1", "b": "2"}).count == 2
