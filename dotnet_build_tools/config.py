"""Settings for the build tools, read from environment variables and .env."""

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from dotnet_build_tools.utils.logging import DEFAULT_FORMAT


class GitHubSettings(BaseSettings):
    """GitHub REST API connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="GITHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    token: SecretStr | None = Field(
        default=None,
        description="Token used for release operations",
    )
    api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )
    upload_url: str = Field(
        default="https://uploads.github.com",
        description="Base URL for release asset uploads",
    )
    timeout: int = Field(
        default=60,
        description="Request timeout in seconds",
    )


class InstallerSettings(BaseSettings):
    """SDK installer settings."""

    model_config = SettingsConfigDict(
        env_prefix="SDK_INSTALL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    releases_index_url: str = Field(
        default="https://raw.githubusercontent.com/dotnet/core/main/release-notes/releases-index.json",
        description="Release index listing the latest SDK per release line",
    )
    script_base_url: str = Field(
        default="https://dot.net/v1",
        description="Location of the dotnet-install scripts",
    )
    shell: Literal["pwsh", "powershell", "bash"] = Field(
        default="pwsh",
        description="Shell used to run the install script",
    )
    work_directory: Path = Field(
        default=Path("."),
        description="Directory the install script is downloaded to",
    )


class LoggingSettings(BaseSettings):
    """Console and file logging for build steps."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Console level; --verbose forces DEBUG",
    )
    format: str = Field(
        default=DEFAULT_FORMAT,
        description="Format for plain console output and the log file",
    )
    file: Path | None = Field(
        default=None,
        description="Optional build log that records DEBUG output of every step",
    )
    rich_console: bool = Field(
        default=True,
        description="Rich console output when not running on a CI runner",
    )


class Settings(BaseSettings):
    """Settings for every build tool, loaded from the environment and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github: GitHubSettings = Field(default_factory=GitHubSettings)
    installer: InstallerSettings = Field(default_factory=InstallerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build every section from its own environment prefix."""
        return cls(
            github=GitHubSettings(),
            installer=InstallerSettings(),
            logging=LoggingSettings(),
        )


# Loaded on first use; CLI commands and tests can swap it
_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded from the environment on first call."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure_settings(settings: Settings) -> None:
    """Replace the process-wide settings."""
    global _settings
    _settings = settings
