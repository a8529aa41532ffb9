"""Git operations for checkouts and release notes."""

from dataclasses import dataclass
from pathlib import Path

import git
from git import GitCommandError, Repo

from dotnet_build_tools.core.exceptions import GitOperationError
from dotnet_build_tools.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CommitInfo:
    """A commit as shown in release notes."""

    sha: str
    message: str
    author: str

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


class GitOperations:
    """
    Wrapper for Git operations using GitPython.

    Provides the read-only queries the release steps need.
    """

    def __init__(self, repo_path: Path):
        """
        Open an existing repository.

        Args:
            repo_path: Path to the Git repository
        """
        self.repo_path = repo_path
        try:
            self.repo = Repo(repo_path, search_parent_directories=True)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise GitOperationError(
                f"Invalid Git repository: {repo_path}",
                stderr=str(e),
            ) from e

    def get_current_branch(self) -> str:
        """Get the current branch name."""
        try:
            return self.repo.active_branch.name
        except TypeError:
            # Detached HEAD state
            return self.repo.head.commit.hexsha[:8]

    def get_current_commit(self) -> str:
        """Get the current commit SHA."""
        return self.repo.head.commit.hexsha

    def is_on_main_or_master(self) -> bool:
        """Check whether HEAD is on the main or master branch."""
        return self.get_current_branch() in ("main", "master")

    def latest_tag(self) -> str | None:
        """Most recent tag reachable from HEAD, or None if there is none."""
        try:
            return self.repo.git.describe("--tags", "--abbrev=0")
        except GitCommandError:
            return None

    def log_since(self, ref: str | None = None) -> list[CommitInfo]:
        """
        List commits between a reference and HEAD, newest first.

        Args:
            ref: Starting reference (latest tag when None; full history
                when there are no tags)

        Returns:
            Commits after ``ref`` up to HEAD
        """
        start = ref or self.latest_tag()
        rev = f"{start}..HEAD" if start else "HEAD"

        try:
            return [
                CommitInfo(
                    sha=commit.hexsha,
                    message=commit.summary,
                    author=commit.author.name or "",
                )
                for commit in self.repo.iter_commits(rev)
            ]
        except (GitCommandError, ValueError) as e:
            raise GitOperationError(
                "Failed to get log",
                command=f"git log {rev}",
                stderr=str(getattr(e, "stderr", e)),
            ) from e


def checkout_source(path: Path | str | None, url: str | None) -> None:
    """
    Clone a source URL into a path and check out its default branch.

    Does nothing when either argument is blank.
    """
    if not path or not str(path).strip() or not url or not url.strip():
        return

    logger.info(f"[GIT] Checking out {url} to {path}")
    try:
        repo = Repo.clone_from(url, str(path), shared=True, no_checkout=True)
        repo.git.checkout("HEAD", "--", ".")
    except GitCommandError as e:
        raise GitOperationError(
            "Failed to check out source",
            command=f"git clone -s -n {url} {path}",
            stderr=str(e.stderr),
        ) from e


def generate_release_notes(
    git_ops: GitOperations | None,
    since: str | None = None,
    title: str = "What's Changed",
) -> str:
    """
    Render commits since a reference as markdown release notes.

    Args:
        git_ops: Repository to read
        since: Starting reference (latest tag when None)
        title: Heading of the notes

    Returns:
        Markdown text

    Raises:
        ValueError: If no repository is given
    """
    if git_ops is None:
        raise ValueError("A repository is required to generate release notes")

    commits = git_ops.log_since(since)
    lines = [f"## {title}", ""]
    if commits:
        lines.extend(
            f"* {c.message} by {c.author} ({c.short_sha})" for c in commits
        )
    else:
        lines.append("* No changes")

    return "\n".join(lines) + "\n"
