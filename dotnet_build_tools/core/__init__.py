"""Core exception types."""

from dotnet_build_tools.core.exceptions import (
    BuildToolsError,
    ParseError,
    NoMatchError,
    HttpError,
    ProcessError,
    GitHubError,
    GitOperationError,
)

__all__ = [
    "BuildToolsError",
    "ParseError",
    "NoMatchError",
    "HttpError",
    "ProcessError",
    "GitHubError",
    "GitOperationError",
]
