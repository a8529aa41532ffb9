"""SDK and runtime installation through the dotnet-install scripts."""

from collections.abc import Callable
from pathlib import Path

from dotnet_build_tools.config import InstallerSettings
from dotnet_build_tools.core.exceptions import HttpError, NoMatchError, ParseError
from dotnet_build_tools.dotnet.process import ProcessRunner
from dotnet_build_tools.dotnet.versions import resolve_sdk_channels
from dotnet_build_tools.utils.http import fetch_bytes, fetch_text
from dotnet_build_tools.utils.logging import get_logger

logger = get_logger(__name__)

PUBLIC_NUGET_SOURCE = "https://api.nuget.org/v3/index.json"

POWERSHELL_SCRIPT = "dotnet-install.ps1"
BASH_SCRIPT = "dotnet-install.sh"

# ASP.NET Core runtimes older than this are not installed
MIN_ASPNETCORE_VERSION = 6.0


class SdkInstaller:
    """
    Installs .NET SDK channels and runtimes.

    The install script is downloaded once into the work directory and
    reused for every channel.
    """

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        settings: InstallerSettings | None = None,
        fetch: Callable[[str], str] = fetch_text,
        download: Callable[[str], bytes] = fetch_bytes,
    ):
        """
        Initialize installer.

        Args:
            runner: Process runner for the install script
            settings: Installer settings (defaults loaded from environment)
            fetch: Text fetcher used for the release index
            download: Binary fetcher used for the install script
        """
        self.runner = runner or ProcessRunner()
        self.settings = settings or InstallerSettings()
        self.fetch = fetch
        self.download = download

    @property
    def uses_powershell(self) -> bool:
        return self.settings.shell in ("pwsh", "powershell")

    @property
    def script_path(self) -> Path:
        name = POWERSHELL_SCRIPT if self.uses_powershell else BASH_SCRIPT
        return (self.settings.work_directory / name).resolve()

    def ensure_install_script(self) -> Path:
        """
        Download the install script unless it is already present.

        Returns:
            Path to the script
        """
        script = self.script_path
        if script.exists():
            logger.debug(f"[SDK] Using existing install script: {script}")
            return script

        url = f"{self.settings.script_base_url.rstrip('/')}/{script.name}"
        logger.info(f"[SDK] Downloading {url}")
        content = self.download(url)

        script.parent.mkdir(parents=True, exist_ok=True)
        script.write_bytes(content)
        return script

    def _script_command(self, channel: str, runtime: str | None = None) -> list[str]:
        script = str(self.script_path)

        if self.uses_powershell:
            cmd = [
                self.settings.shell,
                "-NoProfile",
                "-ExecutionPolicy",
                "unrestricted",
                "-File",
                script,
                "-Channel",
                channel,
            ]
            if runtime:
                cmd.extend(["-Runtime", runtime])
            return cmd

        cmd = ["bash", script, "--channel", channel]
        if runtime:
            cmd.extend(["--runtime", runtime])
        return cmd

    def resolve(self, *versions: str) -> list[str]:
        """Resolve requested versions to channels without installing."""
        return resolve_sdk_channels(
            versions,
            self.fetch,
            index_url=self.settings.releases_index_url,
        )

    def install_sdks(self, *versions: str) -> list[str]:
        """
        Install the latest SDK of each requested version.

        Args:
            versions: Requests in the form 6.x.x, 6.0.x or 6.0.100

        Returns:
            The installed channels

        Raises:
            ParseError: If the release index cannot be read
            NoMatchError: If no requested version matches a stable SDK
            ProcessError: If the install script fails
        """
        try:
            channels = self.resolve(*versions)
        except (HttpError, ParseError, NoMatchError) as e:
            logger.error(f"[SDK] Error installing .NET SDKs: {e.message}")
            raise

        self.ensure_install_script()

        for channel in channels:
            self.runner.run(
                self._script_command(channel),
                description=f"Installing .NET SDK {channel}",
            )

        return channels

    def install_aspnetcore(self, version: str) -> None:
        """
        Install the ASP.NET Core runtime for a channel such as ``8.0``.

        Raises:
            ValueError: If the version is not a number of at least 6
        """
        try:
            numeric = float(version)
        except ValueError as e:
            raise ValueError(f"Invalid ASP.NET Core version: {version!r}") from e

        if not numeric >= MIN_ASPNETCORE_VERSION:
            raise ValueError("Version must be greater than or equal to 6")

        self.ensure_install_script()
        self.runner.run(
            self._script_command(version, runtime="aspnetcore"),
            description=f"Installing ASP.NET Core runtime {version}",
        )


def update_visual_studio(runner: ProcessRunner, edition: str = "Enterprise") -> None:
    """Update a Visual Studio release installation with the dotnet-vs tool."""
    commands = [
        ["dotnet", "tool", "update", "-g", "dotnet-vs"],
        ["vs", "where", "release"],
        ["vs", "update", "release", edition],
        ["vs", "modify", "release", edition, "+mobile", "+desktop", "+uwp", "+web"],
        ["vs", "where", "release"],
    ]
    for cmd in commands:
        runner.run(cmd)
