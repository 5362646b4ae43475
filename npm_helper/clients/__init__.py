"""
Clients package - upstream collaborators.

- http: shared httpx client factory
- registry: npm registry / website client (paced and deadline-bounded)
- ncu: npm-check-updates runner and its options record
"""

from npm_helper.clients.http import create_http_client
from npm_helper.clients.ncu import (
    NpmCheckUpdatesRunner,
    UpdateOptions,
    merge_options,
    resolve_package_file,
)
from npm_helper.clients.registry import NpmRegistryClient

__all__ = [
    "create_http_client",
    "NpmCheckUpdatesRunner",
    "NpmRegistryClient",
    "UpdateOptions",
    "merge_options",
    "resolve_package_file",
]
