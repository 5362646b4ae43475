"""
Models package - domain models, tool argument models and shaped payloads.
"""

from npm_helper.models.domain import (
    ContentSegment,
    InvocationOutcome,
    OutcomeKind,
    RegisteredTool,
    ResponseEnvelope,
    ToolCall,
    ToolDefinition,
)
from npm_helper.models.packages import PackageSummary, SearchResults, UpdateReport

__all__ = [
    "ContentSegment",
    "InvocationOutcome",
    "OutcomeKind",
    "RegisteredTool",
    "ResponseEnvelope",
    "ToolCall",
    "ToolDefinition",
    "PackageSummary",
    "SearchResults",
    "UpdateReport",
]
