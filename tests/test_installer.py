"""Tests for the SDK installer."""

import logging
from unittest.mock import MagicMock

import pytest

from dotnet_build_tools.config import InstallerSettings
from dotnet_build_tools.core.exceptions import NoMatchError, ParseError
from dotnet_build_tools.dotnet.installer import (
    PUBLIC_NUGET_SOURCE,
    SdkInstaller,
    update_visual_studio,
)
from dotnet_build_tools.dotnet.process import ProcessRunner


@pytest.fixture
def runner():
    return MagicMock(spec=ProcessRunner)


@pytest.fixture
def download():
    return MagicMock(return_value=b"# install script\n")


def make_installer(tmp_path, runner, fetch, download, shell="pwsh"):
    settings = InstallerSettings(work_directory=tmp_path, shell=shell)
    return SdkInstaller(runner=runner, settings=settings, fetch=fetch, download=download)


def test_public_nuget_source():
    assert PUBLIC_NUGET_SOURCE == "https://api.nuget.org/v3/index.json"


class TestInstallSdks:
    """Tests for SDK channel installation."""

    def test_installs_each_channel(self, tmp_path, runner, index_fetch, download):
        installer = make_installer(tmp_path, runner, index_fetch, download)

        channels = installer.install_sdks("6.x.x", "7.x.x")

        assert channels == ["6.0.4xx", "7.0.4xx"]
        commands = [c.args[0] for c in runner.run.call_args_list]
        script = str((tmp_path / "dotnet-install.ps1").resolve())
        assert commands == [
            ["pwsh", "-NoProfile", "-ExecutionPolicy", "unrestricted", "-File", script, "-Channel", "6.0.4xx"],
            ["pwsh", "-NoProfile", "-ExecutionPolicy", "unrestricted", "-File", script, "-Channel", "7.0.4xx"],
        ]

    def test_downloads_script_once(self, tmp_path, runner, index_fetch, download):
        installer = make_installer(tmp_path, runner, index_fetch, download)

        installer.install_sdks("8.x.x")
        installer.install_sdks("9.x.x")

        download.assert_called_once_with("https://dot.net/v1/dotnet-install.ps1")
        assert (tmp_path / "dotnet-install.ps1").read_bytes() == b"# install script\n"

    def test_existing_script_is_reused(self, tmp_path, runner, index_fetch, download):
        (tmp_path / "dotnet-install.ps1").write_text("existing")
        installer = make_installer(tmp_path, runner, index_fetch, download)

        installer.install_sdks("8.x.x")

        download.assert_not_called()
        assert (tmp_path / "dotnet-install.ps1").read_text() == "existing"

    def test_bash_shell(self, tmp_path, runner, index_fetch, download):
        installer = make_installer(tmp_path, runner, index_fetch, download, shell="bash")

        installer.install_sdks("9.0.100")

        download.assert_called_once_with("https://dot.net/v1/dotnet-install.sh")
        script = str((tmp_path / "dotnet-install.sh").resolve())
        runner.run.assert_called_once()
        assert runner.run.call_args.args[0] == ["bash", script, "--channel", "9.0.1xx"]

    def test_no_match_is_logged_and_raised(self, tmp_path, runner, index_fetch, download, caplog):
        installer = make_installer(tmp_path, runner, index_fetch, download)

        with caplog.at_level(logging.ERROR), pytest.raises(NoMatchError):
            installer.install_sdks("10.x.x")

        assert "Error installing .NET SDKs" in caplog.text
        runner.run.assert_not_called()
        download.assert_not_called()

    def test_parse_error_is_raised(self, tmp_path, runner, download):
        installer = make_installer(tmp_path, runner, lambda url: "<html/>", download)

        with pytest.raises(ParseError):
            installer.install_sdks("8.x.x")
        runner.run.assert_not_called()

    def test_resolve_does_not_install(self, tmp_path, runner, index_fetch, download):
        installer = make_installer(tmp_path, runner, index_fetch, download)

        assert installer.resolve("8.0.x", "3.1.x") == ["8.0.4xx", "3.1"]
        runner.run.assert_not_called()
        download.assert_not_called()

    def test_uses_configured_index_url(self, tmp_path, runner, index_fetch, download):
        settings = InstallerSettings(
            work_directory=tmp_path,
            releases_index_url="https://mirror.example/releases-index.json",
        )
        installer = SdkInstaller(runner=runner, settings=settings, fetch=index_fetch, download=download)

        installer.resolve("8.x.x")

        assert index_fetch.requested == ["https://mirror.example/releases-index.json"]


class TestInstallAspNetCore:
    """Tests for ASP.NET Core runtime installation."""

    def test_installs_runtime(self, tmp_path, runner, index_fetch, download):
        installer = make_installer(tmp_path, runner, index_fetch, download)

        installer.install_aspnetcore("8.0")

        command = runner.run.call_args.args[0]
        assert command[-4:] == ["-Channel", "8.0", "-Runtime", "aspnetcore"]

    def test_bash_runtime_flags(self, tmp_path, runner, index_fetch, download):
        installer = make_installer(tmp_path, runner, index_fetch, download, shell="bash")

        installer.install_aspnetcore("6.0")

        command = runner.run.call_args.args[0]
        assert command[-4:] == ["--channel", "6.0", "--runtime", "aspnetcore"]

    @pytest.mark.parametrize("version", ["5.0", "3.1", "abc", "", "nan"])
    def test_rejects_old_or_invalid_versions(self, tmp_path, runner, index_fetch, download, version):
        installer = make_installer(tmp_path, runner, index_fetch, download)

        with pytest.raises(ValueError):
            installer.install_aspnetcore(version)
        runner.run.assert_not_called()


class TestUpdateVisualStudio:
    """Tests for the dotnet-vs update sequence."""

    def test_runs_sequence(self, runner):
        update_visual_studio(runner, "Professional")

        commands = [c.args[0] for c in runner.run.call_args_list]
        assert commands == [
            ["dotnet", "tool", "update", "-g", "dotnet-vs"],
            ["vs", "where", "release"],
            ["vs", "update", "release", "Professional"],
            ["vs", "modify", "release", "Professional", "+mobile", "+desktop", "+uwp", "+web"],
            ["vs", "where", "release"],
        ]
