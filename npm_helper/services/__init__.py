"""
Services package - result shaping for upstream payloads.
"""

from npm_helper.services.shaping import (
    extract_page_content,
    format_package_details,
    format_search_results,
    format_update_report,
    format_versions,
    shape_package_details,
    shape_search_results,
    shape_versions,
)

__all__ = [
    "extract_page_content",
    "format_package_details",
    "format_search_results",
    "format_update_report",
    "format_versions",
    "shape_package_details",
    "shape_search_results",
    "shape_versions",
]
