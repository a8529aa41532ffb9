"""Pytest fixtures for dotnet-build-tools tests."""

import json
import re
from pathlib import Path

import httpx
import pytest


RELEASES = [
    {
        "channel-version": "10.0",
        "latest-sdk": "10.0.100-rc.2.25502.107",
        "support-phase": "go-live",
        "release-type": "lts",
    },
    {
        "channel-version": "9.0",
        "latest-sdk": "9.0.305",
        "support-phase": "active",
        "release-type": "sts",
    },
    {
        "channel-version": "8.0",
        "latest-sdk": "8.0.414",
        "support-phase": "active",
        "release-type": "lts",
    },
    {
        "channel-version": "7.0",
        "latest-sdk": "7.0.410",
        "support-phase": "eol",
        "release-type": "sts",
    },
    {
        "channel-version": "6.0",
        "latest-sdk": "6.0.425",
        "support-phase": "eol",
        "release-type": "lts",
    },
    {
        "channel-version": "3.1",
        "latest-sdk": "3.1.426",
        "support-phase": "eol",
        "release-type": "lts",
    },
]


def make_index(*latest_sdks: str) -> str:
    """Build a release index document from latest-sdk strings."""
    return json.dumps({"releases-index": [{"latest-sdk": v} for v in latest_sdks]})


@pytest.fixture
def release_index_json():
    """A release index shaped like the published one."""
    return json.dumps({"releases-index": RELEASES})


@pytest.fixture
def index_fetch(release_index_json):
    """Fetch stub that records requested URLs and returns the index."""
    requested: list[str] = []

    def fetch(url: str) -> str:
        requested.append(url)
        return release_index_json

    fetch.requested = requested
    return fetch


SDK_PROJECT = """<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
{extra}
  </PropertyGroup>
{items}
</Project>
"""


def write_project(path: Path, extra: str = "", items: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SDK_PROJECT.format(extra=extra, items=items), encoding="utf-8")
    return path


@pytest.fixture
def sample_solution(tmp_path):
    """A solution with a library, an app, a test project and a solution folder."""
    write_project(tmp_path / "src" / "Lib" / "Lib.csproj")
    write_project(
        tmp_path / "src" / "App" / "App.csproj",
        extra="    <OutputType>Exe</OutputType>\n    <IsPackable>false</IsPackable>",
    )
    write_project(
        tmp_path / "tests" / "Lib.Tests" / "Lib.Tests.csproj",
        items=(
            "  <ItemGroup>\n"
            '    <PackageReference Include="Microsoft.NET.Test.Sdk" Version="17.11.1" />\n'
            '    <PackageReference Include="NUnit" Version="4.2.2" />\n'
            "  </ItemGroup>"
        ),
    )

    sln = tmp_path / "Sample.sln"
    sln.write_text(
        "Microsoft Visual Studio Solution File, Format Version 12.00\n"
        'Project("{2150E333-8FDC-42A3-9474-1A3956D46DE8}") = "src", "src", "{11111111-1111-1111-1111-111111111111}"\n'
        "EndProject\n"
        'Project("{9A19103F-16F7-4668-BE54-9A1E7A4F7556}") = "Lib", "src\\Lib\\Lib.csproj", "{22222222-2222-2222-2222-222222222222}"\n'
        "EndProject\n"
        'Project("{9A19103F-16F7-4668-BE54-9A1E7A4F7556}") = "App", "src\\App\\App.csproj", "{33333333-3333-3333-3333-333333333333}"\n'
        "EndProject\n"
        'Project("{9A19103F-16F7-4668-BE54-9A1E7A4F7556}") = "Lib.Tests", "tests\\Lib.Tests\\Lib.Tests.csproj", "{44444444-4444-4444-4444-444444444444}"\n'
        "EndProject\n",
        encoding="utf-8",
    )
    return sln


class FakeGitHub:
    """In-memory stand-in for the parts of the GitHub REST API releases use."""

    def __init__(self):
        self.releases: dict[int, dict] = {}
        self.assets: dict[int, list[dict]] = {}
        self.asset_content: dict[int, bytes] = {}
        self.requests: list[httpx.Request] = []
        self._next_id = 100

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def add_release(self, tag: str, draft: bool = False, body: str = "") -> dict:
        release_id = self._new_id()
        release = {
            "id": release_id,
            "tag_name": tag,
            "name": f"Release {tag}",
            "body": body,
            "draft": draft,
            "prerelease": False,
            "html_url": f"https://github.com/octo/repo/releases/tag/{tag}",
            "upload_url": f"https://uploads.github.com/repos/octo/repo/releases/{release_id}/assets{{?name,label}}",
        }
        self.releases[release_id] = release
        self.assets[release_id] = []
        return release

    def add_asset(self, release_id: int, name: str, content: bytes) -> dict:
        asset_id = self._new_id()
        asset = {
            "id": asset_id,
            "name": name,
            "content_type": "application/octet-stream",
            "size": len(content),
            "url": f"https://api.github.com/repos/octo/repo/releases/assets/{asset_id}",
        }
        self.assets[release_id].append(asset)
        self.asset_content[asset_id] = content
        return asset

    def _release_json(self, release_id: int) -> dict:
        return {**self.releases[release_id], "assets": list(self.assets[release_id])}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        if request.url.host == "uploads.github.com":
            release_id = int(re.search(r"/releases/(\d+)/assets$", path).group(1))
            asset = self.add_asset(release_id, request.url.params["name"], request.content)
            asset["content_type"] = request.headers["Content-Type"]
            return httpx.Response(201, json=asset)

        if method == "POST" and path == "/repos/octo/repo/releases":
            payload = json.loads(request.content)
            release = self.add_release(payload["tag_name"], draft=payload["draft"])
            release.update(payload)
            return httpx.Response(201, json=self._release_json(release["id"]))

        if method == "GET" and path == "/repos/octo/repo/releases/latest":
            published = [r for r in self.releases.values() if not r["draft"]]
            if not published:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json=self._release_json(published[-1]["id"]))

        match = re.fullmatch(r"/repos/octo/repo/releases/tags/(.+)", path)
        if method == "GET" and match:
            for release in self.releases.values():
                if release["tag_name"] == match.group(1):
                    return httpx.Response(200, json=self._release_json(release["id"]))
            return httpx.Response(404, json={"message": "Not Found"})

        match = re.fullmatch(r"/repos/octo/repo/releases/assets/(\d+)", path)
        if match:
            asset_id = int(match.group(1))
            if method == "DELETE":
                for assets in self.assets.values():
                    assets[:] = [a for a in assets if a["id"] != asset_id]
                return httpx.Response(204)
            return httpx.Response(200, content=self.asset_content[asset_id])

        match = re.fullmatch(r"/repos/octo/repo/releases/(\d+)/assets", path)
        if method == "GET" and match:
            per_page = int(request.url.params.get("per_page", 30))
            page = int(request.url.params.get("page", 1))
            assets = self.assets[int(match.group(1))]
            return httpx.Response(200, json=assets[(page - 1) * per_page:page * per_page])

        match = re.fullmatch(r"/repos/octo/repo/releases/(\d+)", path)
        if method == "PATCH" and match:
            release_id = int(match.group(1))
            self.releases[release_id].update(json.loads(request.content))
            return httpx.Response(200, json=self._release_json(release_id))

        return httpx.Response(404, json={"message": "Not Found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_github():
    """Fake GitHub API backing a MockTransport."""
    return FakeGitHub()


@pytest.fixture
def github_client(fake_github):
    """GitHub client wired to the fake API."""
    from dotnet_build_tools.github.client import GitHubClient

    with GitHubClient(token="test-token", transport=fake_github.transport) as client:
        yield client
