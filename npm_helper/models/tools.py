"""
Tool Argument Models - one validated model per operation.

The caller supplies an untyped argument bag; the dispatcher validates it
against the tool's model and hands the frozen instance to the handler.
Field names are camelCase on the wire and snake_case in Python.

Pattern: Pydantic validation at the protocol boundary
"""

from typing import Literal, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


Target = Literal["latest", "newest", "greatest", "minor", "patch", "semver"]
PackageManager = Literal["npm", "yarn", "pnpm", "deno", "bun", "staticRegistry"]


class ToolArguments(BaseModel):
    """Base for argument models: strict, immutable, camelCase aliases."""

    model_config = ConfigDict(
        strict=True,
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


# =============================================================================
# Registry Tools
# =============================================================================


class SearchNpmArgs(ToolArguments):
    query: str = Field(..., min_length=1, description="Search text")
    max_results: int = Field(
        default=10, ge=1, le=250, description="Maximum number of results to return"
    )


class FetchPackageContentArgs(ToolArguments):
    url: str = Field(..., description="npm package page URL")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("must be an absolute http(s) URL")
        return v


class PackageNameArgs(ToolArguments):
    package_name: str = Field(..., min_length=1, max_length=214, description="npm package name")

    @field_validator("package_name")
    @classmethod
    def validate_package_name(cls, v: str) -> str:
        v = v.strip()
        if not v or any(ch.isspace() for ch in v):
            raise ValueError("must be a package name without whitespace")
        return v


class GetPackageVersionsArgs(PackageNameArgs):
    pass


class GetPackageDetailsArgs(PackageNameArgs):
    pass


# =============================================================================
# npm-check-updates Tools
# =============================================================================


class ManifestArgs(ToolArguments):
    """Fields shared by every tool operating on a package.json."""

    package_path: Optional[str] = Field(
        default=None, description="Path to package.json (default: ./package.json)"
    )
    package_manager: Optional[PackageManager] = Field(default=None)


class CheckUpdatesArgs(ManifestArgs):
    filter: Optional[list[str]] = None
    reject: Optional[list[str]] = None
    target: Optional[Target] = None
    peer: Optional[bool] = None
    minimal: Optional[bool] = None


class UpgradePackagesArgs(ManifestArgs):
    upgrade_type: Optional[Target] = None
    peer: Optional[bool] = None
    minimal: Optional[bool] = None


class FilterUpdatesArgs(ManifestArgs):
    filter: list[str] = Field(..., min_length=1, description="Package names or patterns")
    upgrade: Optional[bool] = None
    minimal: Optional[bool] = None


class ResolveConflictsArgs(ManifestArgs):
    upgrade: Optional[bool] = None
    minimal: Optional[bool] = None


class SetVersionConstraintsArgs(ManifestArgs):
    target: Target
    remove_range: Optional[bool] = None
    upgrade: Optional[bool] = None
    minimal: Optional[bool] = None


class RunDoctorArgs(ManifestArgs):
    doctor_install: Optional[str] = None
    doctor_test: Optional[str] = None
