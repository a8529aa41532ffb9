"""SDK channel resolution against the .NET release index.

Requested versions look like ``6.x.x``, ``8.0.x`` or ``9.0.100``. Each one is
matched against the newest stable ``latest-sdk`` of its major release line,
explicit components are laid over the match, and the result is rendered as a
``dotnet-install`` channel (``8.0.1xx``, or ``3.1`` before .NET 5).
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from dotnet_build_tools.core.exceptions import NoMatchError, ParseError
from dotnet_build_tools.utils.json_utils import JsonHandler
from dotnet_build_tools.utils.logging import get_logger

logger = get_logger(__name__)

RELEASES_INDEX_URL = (
    "https://raw.githubusercontent.com/dotnet/core/main/release-notes/releases-index.json"
)
RELEASES_INDEX_KEY = "releases-index"
LATEST_SDK_KEY = "latest-sdk"
PRERELEASE_MARKERS = ("preview", "rc")

# Channels before .NET 5 only accept major.minor
FEATURE_BAND_MIN_MAJOR = 5

_INVALID = object()


@dataclass(frozen=True)
class Fixed:
    """Version component pinned to a value."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Latest:
    """Wildcard component: take whatever the release index has."""

    def __str__(self) -> str:
        return "x"


LATEST = Latest()

Component = Fixed | Latest


def parse_component(segment: str) -> Component:
    """Parse one dot-separated segment; anything non-numeric is a wildcard."""
    segment = segment.strip()
    if segment.isascii() and segment.isdigit():
        return Fixed(int(segment))
    return LATEST


@dataclass(frozen=True, order=True)
class SdkVersion:
    """A stable three-component SDK version."""

    major: int
    minor: int
    patch: int

    @classmethod
    def from_string(cls, version: str) -> "SdkVersion":
        """
        Parse ``major.minor.patch``.

        Raises:
            ParseError: If the string is not three integers
        """
        parts = version.strip().split(".")
        if len(parts) != 3 or not all(p.isascii() and p.isdigit() for p in parts):
            raise ParseError(f"Invalid SDK version: {version!r}", payload=version)
        return cls(int(parts[0]), int(parts[1]), int(parts[2]))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class VersionPattern:
    """A requested version with optional wildcard components."""

    major: Component
    minor: Component = LATEST
    patch: Component = LATEST
    raw: str = field(default="", compare=False)

    @classmethod
    def from_string(cls, version: str) -> "VersionPattern":
        """Parse a request such as ``6.x.x``; missing segments are wildcards."""
        components = [parse_component(s) for s in version.split(".")[:3]]
        components += [LATEST] * (3 - len(components))
        return cls(*components, raw=version)

    def matches_line(self, version: SdkVersion) -> bool:
        """Check whether a version belongs to the requested major line."""
        if isinstance(self.major, Fixed):
            return self.major.value == version.major
        return True

    def overlay(self, candidate: SdkVersion) -> SdkVersion:
        """Replace the candidate's minor/patch with any pinned component."""
        minor = self.minor.value if isinstance(self.minor, Fixed) else candidate.minor
        patch = self.patch.value if isinstance(self.patch, Fixed) else candidate.patch
        return SdkVersion(candidate.major, minor, patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class ReleaseIndexEntry:
    """One release line from the release index."""

    latest_sdk: str
    channel_version: str | None = None
    support_phase: str | None = None
    release_type: str | None = None

    @property
    def is_prerelease(self) -> bool:
        """Preview and release-candidate SDKs are never installed."""
        lowered = self.latest_sdk.lower()
        return any(marker in lowered for marker in PRERELEASE_MARKERS)

    @property
    def sdk_version(self) -> SdkVersion:
        return SdkVersion.from_string(self.latest_sdk)


@dataclass(frozen=True)
class ResolvedChannel:
    """An SDK version chosen for installation."""

    major: int
    minor: int
    patch: int

    @classmethod
    def from_version(cls, version: SdkVersion) -> "ResolvedChannel":
        return cls(version.major, version.minor, version.patch)

    @property
    def band(self) -> int:
        """Hundreds band of the patch (``305`` -> ``3``)."""
        return self.patch // 100

    @property
    def channel(self) -> str:
        return format_channel(self.major, self.minor, self.patch)


def format_channel(major: int, minor: int, patch: int) -> str:
    """
    Render an installer channel.

    Band precision is lost: ``format_channel(9, 0, 305)`` is ``"9.0.3xx"``.
    """
    if major < FEATURE_BAND_MIN_MAJOR:
        return f"{major}.{minor}"
    return f"{major}.{minor}.{patch // 100}xx"


def parse_release_index(text: str | bytes) -> list[ReleaseIndexEntry]:
    """
    Parse the release index document.

    Args:
        text: Raw JSON of the release index

    Returns:
        Entries in document order

    Raises:
        ParseError: If the document is not an object with a
            ``releases-index`` array of objects carrying ``latest-sdk``
    """
    data = JsonHandler.safe_loads(text, default=_INVALID)
    snippet = text.decode("utf-8", "replace") if isinstance(text, bytes) else text

    if data is _INVALID:
        raise ParseError("Release index is not valid JSON", payload=snippet)
    if not isinstance(data, dict):
        raise ParseError("Release index must be a JSON object", payload=snippet)

    releases = data.get(RELEASES_INDEX_KEY)
    if not isinstance(releases, list):
        raise ParseError(
            f"Release index has no '{RELEASES_INDEX_KEY}' array",
            payload=snippet,
        )

    entries = []
    for position, item in enumerate(releases):
        if not isinstance(item, dict) or not isinstance(item.get(LATEST_SDK_KEY), str):
            raise ParseError(
                f"Release index entry {position} has no '{LATEST_SDK_KEY}' string",
                payload=snippet,
            )
        entries.append(
            ReleaseIndexEntry(
                latest_sdk=item[LATEST_SDK_KEY],
                channel_version=item.get("channel-version"),
                support_phase=item.get("support-phase"),
                release_type=item.get("release-type"),
            )
        )
    return entries


def select_candidate(
    pattern: VersionPattern,
    entries: Iterable[ReleaseIndexEntry],
) -> SdkVersion | None:
    """Pick the newest stable SDK of the pattern's major line."""
    candidates = [
        entry.sdk_version
        for entry in entries
        if not entry.is_prerelease
    ]
    matching = [c for c in candidates if pattern.matches_line(c)]
    return max(matching, default=None)


def resolve_channels(
    patterns: Sequence[VersionPattern],
    entries: Sequence[ReleaseIndexEntry],
) -> list[ResolvedChannel]:
    """
    Resolve patterns to distinct channels, preserving request order.

    Raises:
        NoMatchError: If nothing resolves
    """
    resolved: list[ResolvedChannel] = []
    seen: set[str] = set()

    for pattern in patterns:
        candidate = select_candidate(pattern, entries)
        if candidate is None:
            logger.warning(f"[SDK] No stable SDK found for {pattern.raw or pattern}")
            continue

        channel = ResolvedChannel.from_version(pattern.overlay(candidate))
        if channel.channel in seen:
            logger.debug(f"[SDK] {pattern.raw} duplicates channel {channel.channel}")
            continue

        logger.debug(f"[SDK] {pattern.raw} -> {candidate} -> {channel.channel}")
        seen.add(channel.channel)
        resolved.append(channel)

    if not resolved:
        raise NoMatchError(
            "No matching SDK versions found to install",
            requested=[p.raw or str(p) for p in patterns],
        )
    return resolved


def resolve_sdk_channels(
    versions: Sequence[str],
    fetch: Callable[[str], str],
    index_url: str = RELEASES_INDEX_URL,
) -> list[str]:
    """
    Turn requested SDK versions into installer channels.

    Args:
        versions: Requests such as ``"6.x.x"``, ``"8.0.x"``, ``"9.0.100"``
        fetch: Callable returning the text found at a URL
        index_url: Location of the release index

    Returns:
        Distinct channel strings in request order

    Raises:
        ParseError: If the release index cannot be interpreted
        NoMatchError: If no channel resolves
    """
    patterns = [VersionPattern.from_string(v) for v in versions]
    entries = parse_release_index(fetch(index_url))
    return [channel.channel for channel in resolve_channels(patterns, entries)]
