"""Command-line interface for the build tools."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from dotnet_build_tools import __version__
from dotnet_build_tools.config import get_settings
from dotnet_build_tools.core.exceptions import BuildToolsError, GitOperationError
from dotnet_build_tools.dotnet.installer import (
    PUBLIC_NUGET_SOURCE,
    SdkInstaller,
    update_visual_studio,
)
from dotnet_build_tools.dotnet.process import ProcessRunner
from dotnet_build_tools.dotnet.solution import (
    Solution,
    get_packable_projects,
    get_project,
    get_test_projects,
    restore_project_workload,
    restore_solution_workloads,
)
from dotnet_build_tools.github.client import GitHubClient
from dotnet_build_tools.github.releases import ReleasePublisher, save_file
from dotnet_build_tools.git.operations import (
    GitOperations,
    checkout_source,
    generate_release_notes,
)
from dotnet_build_tools.utils.json_utils import JsonHandler
from dotnet_build_tools.utils.logging import setup_logging

console = Console()


def fail(error: Exception) -> None:
    """Print an error and exit with a non-zero code."""
    console.print(f"[red][FAIL][/red] {error}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """Build automation helpers for .NET CI pipelines."""
    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.logging.level,
        log_format=settings.logging.format,
        log_file=settings.logging.file,
        rich_console=settings.logging.rich_console,
    )
    ctx.obj = settings


@main.command("nuget-source")
def nuget_source():
    """Print the public NuGet v3 feed URL."""
    click.echo(PUBLIC_NUGET_SOURCE)


@main.group()
def sdk():
    """Resolve and install .NET SDK channels."""


@sdk.command("resolve")
@click.argument("versions", nargs=-1, required=True)
@click.pass_obj
def sdk_resolve(settings, versions: tuple[str, ...]):
    """
    Show the channels VERSIONS resolve to.

    VERSIONS: Requests such as 6.x.x, 8.0.x or 9.0.100
    """
    try:
        channels = SdkInstaller(settings=settings.installer).resolve(*versions)
    except BuildToolsError as e:
        fail(e)

    for channel in channels:
        click.echo(channel)


@sdk.command("install")
@click.argument("versions", nargs=-1, required=True)
@click.pass_obj
def sdk_install(settings, versions: tuple[str, ...]):
    """
    Install the latest SDK for each of VERSIONS.

    VERSIONS: Requests such as 6.x.x, 8.0.x or 9.0.100
    """
    installer = SdkInstaller(settings=settings.installer)
    try:
        channels = installer.install_sdks(*versions)
    except BuildToolsError as e:
        fail(e)

    console.print(f"[green][OK][/green] Installed channels: {', '.join(channels)}")


@main.command()
@click.argument("version")
@click.pass_obj
def aspnetcore(settings, version: str):
    """Install the ASP.NET Core runtime for VERSION (6.0 or later)."""
    installer = SdkInstaller(settings=settings.installer)
    try:
        installer.install_aspnetcore(version)
    except (BuildToolsError, ValueError) as e:
        fail(e)

    console.print(f"[green][OK][/green] Installed ASP.NET Core {version}")


@main.command("update-vs")
@click.option("--edition", default="Enterprise", help="Visual Studio edition")
def update_vs(edition: str):
    """Update Visual Studio with the dotnet-vs tool."""
    try:
        update_visual_studio(ProcessRunner(), edition)
    except BuildToolsError as e:
        fail(e)


@main.command()
@click.argument("solution_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--project", "project_name", help="Restore a single project by name")
@click.option("--packable", is_flag=True, help="Restore every packable project")
def workloads(solution_path: str, project_name: str | None, packable: bool):
    """Restore workloads for SOLUTION_PATH or some of its projects."""
    solution = Solution.load(Path(solution_path))
    runner = ProcessRunner(cwd=solution.directory)

    try:
        if project_name:
            project = get_project(solution, project_name)
            if project is None:
                fail(click.ClickException(f"Project not found: {project_name}"))
            restore_project_workload(project, runner)
        elif packable:
            for project in get_packable_projects(solution) or []:
                restore_project_workload(project, runner)
        else:
            restore_solution_workloads(solution, runner)
    except BuildToolsError as e:
        fail(e)


@main.command()
@click.argument("solution_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--packable", "selection", flag_value="packable", help="Only packable projects")
@click.option("--test", "selection", flag_value="test", help="Only test projects")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
def projects(solution_path: str, selection: str | None, as_json: bool):
    """List the projects of SOLUTION_PATH."""
    solution = Solution.load(Path(solution_path))

    if selection == "packable":
        selected = get_packable_projects(solution) or []
    elif selection == "test":
        selected = get_test_projects(solution) or []
    else:
        selected = solution.all_projects

    if as_json:
        click.echo(
            JsonHandler.dumps(
                [
                    {
                        "name": p.name,
                        "path": str(p.path),
                        "packable": p.is_packable,
                        "test": p.is_test_project,
                    }
                    for p in selected
                ],
                pretty=True,
            )
        )
        return

    table = Table(title=f"Projects in {solution.name}", show_header=True)
    table.add_column("Project", style="cyan")
    table.add_column("Packable", style="white")
    table.add_column("Test", style="white")
    for p in selected:
        table.add_row(p.name, "Yes" if p.is_packable else "No", "Yes" if p.is_test_project else "No")
    console.print(table)


@main.command()
@click.argument("path", type=click.Path())
@click.argument("url")
def checkout(path: str, url: str):
    """Clone URL into PATH and check out its default branch."""
    try:
        checkout_source(Path(path), url)
    except BuildToolsError as e:
        fail(e)


@main.command("release-notes")
@click.option("--path", "repo_path", default=".", type=click.Path(exists=True), help="Repository path")
@click.option("--since", help="Reference to start from (latest tag by default)")
def release_notes(repo_path: str, since: str | None):
    """Print markdown release notes for the commits since a reference."""
    try:
        notes = generate_release_notes(GitOperations(Path(repo_path)), since)
    except BuildToolsError as e:
        fail(e)

    click.echo(notes)


@main.group()
def release():
    """Create, publish and download GitHub releases."""


def _release_notes(notes_from: str | None) -> str | None:
    """
    Notes for the current repository.

    Without an explicit reference, a working directory that is not a git
    repository yields no notes instead of an error.
    """
    try:
        git_ops = GitOperations(Path("."))
    except GitOperationError:
        if notes_from:
            raise
        console.print("[yellow]Not a git repository, release notes skipped[/yellow]")
        return None
    return generate_release_notes(git_ops, notes_from)


@release.command("publish")
@click.option("--repo", "repository", envvar="GITHUB_REPOSITORY", required=True, help="owner/name")
@click.option("--tag", required=True, help="Tag to release")
@click.option("--version", "version", required=True, help="Version shown in the release name")
@click.option("--commit", "commit_sha", envvar="GITHUB_SHA", help="Commit the tag points at")
@click.option("--prerelease", is_flag=True, help="Mark as a prerelease")
@click.option("--assets", "assets_dir", type=click.Path(exists=True, file_okay=False), help="Directory of assets")
@click.option("--notes-from", help="Append release notes for commits since this reference")
@click.option("--draft", "keep_draft", is_flag=True, help="Leave the release as a draft")
@click.pass_obj
def release_publish(
    settings,
    repository: str,
    tag: str,
    version: str,
    commit_sha: str | None,
    prerelease: bool,
    assets_dir: str | None,
    notes_from: str | None,
    keep_draft: bool,
):
    """Create a draft release, attach assets and notes, then publish it."""
    try:
        # Notes are built before anything is created on GitHub
        notes = _release_notes(notes_from)

        with GitHubClient.from_settings(settings.github) as client:
            publisher = ReleasePublisher(client)
            draft = publisher.create_draft(repository, tag, version, commit_sha, prerelease)

            if assets_dir:
                publisher.upload_directory(draft, Path(assets_dir))

            if notes:
                draft = publisher.append_notes(draft, notes)

            result = draft if keep_draft else publisher.publish(draft)
    except (BuildToolsError, ValueError) as e:
        fail(e)

    console.print(f"[green][OK][/green] Release {result.tag_name}: {result.html_url}")


@release.command("download")
@click.argument("asset_name")
@click.argument("destination", type=click.Path(dir_okay=False))
@click.option("--repo", "repository", envvar="GITHUB_REPOSITORY", required=True, help="owner/name")
@click.option("--tag", help="Release tag (latest release by default)")
@click.pass_obj
def release_download(settings, asset_name: str, destination: str, repository: str, tag: str | None):
    """Download ASSET_NAME from a release to DESTINATION."""
    try:
        with GitHubClient.from_settings(settings.github) as client:
            content = ReleasePublisher(client).get_asset(repository, asset_name, tag)
    except (BuildToolsError, ValueError) as e:
        fail(e)

    if save_file(Path(destination), content):
        console.print(f"[green][OK][/green] Saved {asset_name} to {destination}")
    else:
        console.print(f"[yellow]{destination} already exists, left unchanged[/yellow]")


if __name__ == "__main__":
    main()
