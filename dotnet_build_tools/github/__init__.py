"""GitHub integration for releases and Actions metadata."""

from dotnet_build_tools.github.client import GitHubClient
from dotnet_build_tools.github.releases import (
    Release,
    ReleaseAsset,
    ReleasePublisher,
    RepositoryId,
    save_file,
)

__all__ = [
    "GitHubClient",
    "Release",
    "ReleaseAsset",
    "ReleasePublisher",
    "RepositoryId",
    "save_file",
]
