"""
Package Models - bounded, display-ready derivatives of upstream payloads.

Every model here is produced by npm_helper.services.shaping from a raw
registry or resolver payload; none of them holds the raw payload itself.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class PackageSummary(BaseModel):
    """One search hit."""

    name: str
    version: str = ""
    description: Optional[str] = None
    author: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    last_publish: Optional[str] = Field(default=None, description="YYYY-MM-DD")


class SearchResults(BaseModel):
    """
    A search sample plus the registry's total hit count.

    total may be larger than len(packages): the registry reports every match
    but only returns the requested page.
    """

    packages: list[PackageSummary] = Field(default_factory=list)
    total: int = 0


class UpdateReport(BaseModel):
    """
    Result of one npm-check-updates run.

    Attributes:
        message: Human-readable summary line.
        data: package name -> recommended version, or upgrade-worked flag
            in doctor mode.
    """

    message: str
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.data)
