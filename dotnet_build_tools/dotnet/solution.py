"""Solution and project metadata for .NET builds."""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

from dotnet_build_tools.dotnet.process import ProcessRunner
from dotnet_build_tools.utils.logging import get_logger

logger = get_logger(__name__)

PROJECT_EXTENSIONS = {".csproj", ".fsproj", ".vbproj"}
DIRECTORY_BUILD_PROPS = "Directory.Build.props"
TEST_SDK_PACKAGE = "microsoft.net.test.sdk"

_PROJECT_PATTERN = re.compile(r'Project\("[^"]+"\)\s*=\s*"([^"]+)",\s*"([^"]+)"')


def _local_name(tag: str) -> str:
    """Strip the MSBuild XML namespace from a tag."""
    return tag.rsplit("}", 1)[-1]


def _read_msbuild_file(path: Path) -> tuple[dict[str, str], list[str]]:
    """
    Read static properties and package references from an MSBuild file.

    Conditions and $(...) expressions are not evaluated; the last
    definition of a property wins.
    """
    properties: dict[str, str] = {}
    packages: list[str] = []

    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as e:
        logger.warning(f"[DOTNET] Failed to parse {path}: {e}")
        return properties, packages

    for element in root.iter():
        parent_tag = _local_name(element.tag)
        if parent_tag == "PropertyGroup":
            for prop in element:
                properties[_local_name(prop.tag)] = (prop.text or "").strip()
        elif parent_tag == "PackageReference":
            include = element.get("Include") or element.get("Update")
            if include:
                packages.append(include)

    return properties, packages


@dataclass
class Project:
    """A project referenced by a solution."""

    name: str
    path: Path
    solution_directory: Path | None = None
    _properties: dict[str, str] | None = field(default=None, repr=False, compare=False)
    _package_references: list[str] = field(default_factory=list, repr=False, compare=False)

    def _find_directory_props(self) -> Path | None:
        """Find the nearest Directory.Build.props, stopping at the solution."""
        for directory in [self.path.parent, *self.path.parent.parents]:
            candidate = directory / DIRECTORY_BUILD_PROPS
            if candidate.is_file():
                return candidate
            if self.solution_directory is not None and directory == self.solution_directory:
                break
        return None

    def _load(self) -> dict[str, str]:
        if self._properties is None:
            properties: dict[str, str] = {}
            packages: list[str] = []

            props_file = self._find_directory_props()
            if props_file is not None:
                inherited, inherited_packages = _read_msbuild_file(props_file)
                properties.update(inherited)
                packages.extend(inherited_packages)

            own, own_packages = _read_msbuild_file(self.path)
            properties.update(own)
            packages.extend(own_packages)

            self._properties = properties
            self._package_references = packages
        return self._properties

    @property
    def properties(self) -> dict[str, str]:
        return dict(self._load())

    @property
    def package_references(self) -> list[str]:
        self._load()
        return list(self._package_references)

    def get_property(self, name: str) -> str | None:
        """Get a build property, or None when it is not defined."""
        value = self._load().get(name)
        if value is None:
            return self._default_property(name)
        return value

    def get_bool_property(self, name: str) -> bool:
        """Get a boolean build property; anything other than 'true' is False."""
        value = self.get_property(name)
        return value is not None and value.strip().lower() == "true"

    def _default_property(self, name: str) -> str | None:
        # SDK defaults for the properties build scripts filter on
        if name == "IsTestProject":
            references_test_sdk = any(
                p.lower() == TEST_SDK_PACKAGE for p in self.package_references
            )
            return "true" if references_test_sdk else None
        if name == "IsPackable":
            return "false" if self.is_test_project else "true"
        return None

    @property
    def is_test_project(self) -> bool:
        return self.get_bool_property("IsTestProject")

    @property
    def is_packable(self) -> bool:
        return self.get_bool_property("IsPackable")

    def __str__(self) -> str:
        return str(self.path)


@dataclass
class Solution:
    """A parsed solution file."""

    name: str
    path: Path
    all_projects: list[Project] = field(default_factory=list)

    @classmethod
    def load(cls, solution_path: Path) -> "Solution":
        """
        Parse a .sln file.

        Solution folders and non-MSBuild entries are skipped.

        Args:
            solution_path: Path to the .sln file

        Returns:
            Solution with its projects
        """
        logger.info(f"[DOTNET] Loading solution: {solution_path}")
        solution = cls(name=solution_path.stem, path=solution_path)

        content = solution_path.read_text(encoding="utf-8-sig")
        for match in _PROJECT_PATTERN.finditer(content):
            project_name = match.group(1)
            project_path = solution_path.parent / match.group(2).replace("\\", "/")

            if project_path.suffix.lower() not in PROJECT_EXTENSIONS:
                continue

            solution.all_projects.append(
                Project(
                    name=project_name,
                    path=project_path,
                    solution_directory=solution_path.parent,
                )
            )

        logger.debug(f"[DOTNET] Found {len(solution.all_projects)} projects")
        return solution

    @property
    def directory(self) -> Path:
        return self.path.parent

    def __str__(self) -> str:
        return str(self.path)


def get_packable_projects(solution: Solution | None) -> list[Project] | None:
    """Projects with IsPackable set; None when there is no solution."""
    if solution is None:
        return None
    return [p for p in solution.all_projects if p.is_packable]


def get_test_projects(solution: Solution | None) -> list[Project] | None:
    """Projects with IsTestProject set; None when there is no solution."""
    if solution is None:
        return None
    return [p for p in solution.all_projects if p.is_test_project]


def get_project(solution: Solution | None, project_name: str) -> Project | None:
    """Find a project by its exact name."""
    if solution is None:
        return None
    return next((p for p in solution.all_projects if p.name == project_name), None)


def restore_solution_workloads(solution: Solution, runner: ProcessRunner) -> None:
    """Restore the workloads every project of the solution needs."""
    runner.run(
        ["dotnet", "workload", "restore", str(solution.path)],
        description=f"Restoring workloads for {solution.name}",
    )


def restore_project_workload(project: Project, runner: ProcessRunner) -> None:
    """Restore the workloads of a single project."""
    runner.run(
        ["dotnet", "workload", "restore", "--project", str(project.path)],
        description=f"Restoring workloads for {project.name}",
    )
