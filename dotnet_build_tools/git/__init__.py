"""Git helpers for checkouts and release notes."""

from dotnet_build_tools.git.operations import (
    CommitInfo,
    GitOperations,
    checkout_source,
    generate_release_notes,
)

__all__ = [
    "CommitInfo",
    "GitOperations",
    "checkout_source",
    "generate_release_notes",
]
