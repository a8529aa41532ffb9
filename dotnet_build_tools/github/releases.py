"""GitHub release operations."""

import mimetypes
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotnet_build_tools.core.exceptions import GitHubError
from dotnet_build_tools.github.client import GitHubClient
from dotnet_build_tools.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/x-binary"

# Largest page the assets endpoint returns
ASSETS_PAGE_SIZE = 100

_URI_TEMPLATE = re.compile(r"\{[^}]*\}$")


@dataclass(frozen=True)
class RepositoryId:
    """Owner and name of a GitHub repository."""

    owner: str
    name: str

    @classmethod
    def parse(cls, identifier: "str | RepositoryId") -> "RepositoryId":
        """
        Split an ``owner/name`` identifier.

        Raises:
            ValueError: If the identifier is empty or not owner/name
        """
        if isinstance(identifier, RepositoryId):
            return identifier
        if not identifier or not identifier.strip():
            raise ValueError("Repository identifier is required")

        parts = identifier.strip().split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Expected 'owner/name', got: {identifier!r}")
        return cls(owner=parts[0], name=parts[1])

    @property
    def api_path(self) -> str:
        return f"repos/{self.owner}/{self.name}"

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class ReleaseAsset:
    """A binary attached to a release."""

    id: int
    name: str
    content_type: str
    size: int = 0
    url: str = ""
    browser_download_url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ReleaseAsset":
        return cls(
            id=data["id"],
            name=data["name"],
            content_type=data.get("content_type") or DEFAULT_CONTENT_TYPE,
            size=data.get("size", 0),
            url=data.get("url", ""),
            browser_download_url=data.get("browser_download_url", ""),
        )


@dataclass
class Release:
    """A GitHub release."""

    id: int
    repository: RepositoryId
    tag_name: str
    name: str | None = None
    body: str = ""
    draft: bool = False
    prerelease: bool = False
    target_commitish: str | None = None
    html_url: str = ""
    upload_url: str = ""
    assets: list[ReleaseAsset] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any], repository: RepositoryId) -> "Release":
        return cls(
            id=data["id"],
            repository=repository,
            tag_name=data.get("tag_name", ""),
            name=data.get("name"),
            body=data.get("body") or "",
            draft=bool(data.get("draft", False)),
            prerelease=bool(data.get("prerelease", False)),
            target_commitish=data.get("target_commitish"),
            html_url=data.get("html_url", ""),
            upload_url=data.get("upload_url", ""),
            assets=[ReleaseAsset.from_api(a) for a in data.get("assets", [])],
        )

    @property
    def api_path(self) -> str:
        return f"{self.repository.api_path}/releases/{self.id}"


def guess_content_type(path: Path) -> str:
    """MIME type for an asset file, falling back to a generic binary type."""
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or DEFAULT_CONTENT_TYPE


class ReleasePublisher:
    """
    Drives the release workflow: create a draft, attach assets, write
    notes, publish.
    """

    def __init__(self, client: GitHubClient):
        """
        Initialize publisher.

        Args:
            client: Authenticated GitHub client
        """
        self.client = client

    def create_draft(
        self,
        repository: RepositoryId | str,
        tag_name: str,
        version: str | None,
        commit_sha: str | None = None,
        prerelease: bool = False,
    ) -> Release:
        """
        Create a draft release.

        Args:
            repository: Repository as RepositoryId or ``owner/name``
            tag_name: Tag the release is created for
            version: Version shown in the release name
            commit_sha: Commit the tag points at (default branch when None)
            prerelease: Mark the release as a prerelease

        Returns:
            The created draft
        """
        repo = RepositoryId.parse(repository)
        logger.info(f"[GITHUB] Creating release for tag {tag_name}")

        payload: dict[str, Any] = {
            "tag_name": tag_name,
            "name": f"Release version {version}",
            "body": "",
            "draft": True,
            "prerelease": prerelease,
        }
        if commit_sha:
            payload["target_commitish"] = commit_sha

        data = self.client.post(f"{repo.api_path}/releases", json=payload)
        return Release.from_api(data, repo)

    def get_release(self, repository: RepositoryId | str, tag: str | None = None) -> Release:
        """Get the release for a tag, or the latest published release."""
        repo = RepositoryId.parse(repository)
        if tag and tag.strip():
            data = self.client.get(f"{repo.api_path}/releases/tags/{tag}")
        else:
            data = self.client.get(f"{repo.api_path}/releases/latest")
        return Release.from_api(data, repo)

    def list_assets(self, release: Release) -> list[ReleaseAsset]:
        """List every asset attached to a release, following pagination."""
        assets: list[ReleaseAsset] = []
        page = 1
        while True:
            data = self.client.get(
                f"{release.api_path}/assets",
                params={"per_page": ASSETS_PAGE_SIZE, "page": page},
            )
            assets.extend(ReleaseAsset.from_api(a) for a in data)
            if len(data) < ASSETS_PAGE_SIZE:
                return assets
            page += 1

    def delete_asset(self, release: Release, asset: ReleaseAsset) -> None:
        logger.info(f"[GITHUB] Removing existing asset {asset.name}")
        self.client.delete(f"{release.repository.api_path}/releases/assets/{asset.id}")

    def _upload_endpoint(self, release: Release) -> str:
        if release.upload_url:
            return _URI_TEMPLATE.sub("", release.upload_url)
        return f"{self.client.upload_url}/{release.api_path}/assets"

    def upload_asset(self, release: Release, asset_path: Path) -> ReleaseAsset | None:
        """
        Upload a file to a release, replacing an asset with the same name.

        Args:
            release: Target release
            asset_path: File to upload

        Returns:
            The uploaded asset, or None if the file does not exist
        """
        if not asset_path.is_file():
            return None

        logger.info(f"[GITHUB] Started uploading {asset_path.name} to the release")

        for existing in self.list_assets(release):
            if existing.name == asset_path.name:
                self.delete_asset(release, existing)

        data = self.client.upload(
            self._upload_endpoint(release),
            name=asset_path.name,
            content=asset_path.read_bytes(),
            content_type=guess_content_type(asset_path),
        )
        asset = ReleaseAsset.from_api(data)
        release.assets = [a for a in release.assets if a.name != asset.name] + [asset]

        logger.info(f"[GITHUB] Done uploading {asset_path.name} to the release")
        return asset

    def upload_directory(self, release: Release, directory: Path) -> Release:
        """Upload every file at the root of a directory as a release asset."""
        entries = sorted(directory.iterdir()) if directory.is_dir() else []

        if any(entry.is_dir() for entry in entries):
            logger.warning(
                f"[GITHUB] Only files on the root of {directory} will be uploaded as release assets"
            )

        for entry in entries:
            if entry.is_file():
                self.upload_asset(release, entry)
        return release

    def _update(self, release: Release, **changes: Any) -> Release:
        data = self.client.patch(release.api_path, json=changes)
        return Release.from_api(data, release.repository)

    def edit_body(self, release: Release, body: str) -> Release:
        """Replace the release notes."""
        return self._update(release, body=body)

    def append_notes(self, release: Release, notes: str) -> Release:
        """Append markdown to the existing release notes."""
        body = f"{release.body.rstrip()}\n\n{notes}" if release.body.strip() else notes
        return self.edit_body(release, body)

    def publish(self, release: Release | None) -> Release:
        """
        Turn a draft into a published release.

        Raises:
            ValueError: If no release is given
        """
        if release is None:
            raise ValueError("A release is required")

        logger.info(f"[GITHUB] Publishing release {release.tag_name}")
        return self._update(release, draft=False)

    def get_asset(
        self,
        repository: RepositoryId | str,
        asset_name: str,
        tag: str | None = None,
    ) -> bytes:
        """
        Download an asset from the latest release or a tagged one.

        Raises:
            GitHubError: If the release or asset does not exist
        """
        repo = RepositoryId.parse(repository)
        logger.info(f"[GITHUB] Getting asset '{asset_name}' from repo {repo}")

        release = self.get_release(repo, tag)
        asset = next((a for a in release.assets if a.name == asset_name), None)
        if asset is None:
            raise GitHubError(f"Asset {asset_name} not found in release {release.tag_name}")

        content = self.client.download(asset.url)
        logger.info(f"[GITHUB] Download completed for asset {asset_name} of {release.name}")
        return content


def save_file(path: Path, content: bytes) -> bool:
    """
    Write bytes to a path that does not exist yet.

    Returns:
        True if the file was written, False if it already existed
    """
    if path.exists():
        return False

    logger.info(f"Saving file to path {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    logger.info(f"File saved to path {path}")
    return True
