""".NET SDK installation and solution operations."""

from dotnet_build_tools.dotnet.installer import (
    PUBLIC_NUGET_SOURCE,
    SdkInstaller,
    update_visual_studio,
)
from dotnet_build_tools.dotnet.process import ProcessRunner
from dotnet_build_tools.dotnet.solution import (
    Project,
    Solution,
    get_packable_projects,
    get_project,
    get_test_projects,
    restore_project_workload,
    restore_solution_workloads,
)
from dotnet_build_tools.dotnet.versions import resolve_sdk_channels

__all__ = [
    "PUBLIC_NUGET_SOURCE",
    "SdkInstaller",
    "update_visual_studio",
    "ProcessRunner",
    "Project",
    "Solution",
    "get_packable_projects",
    "get_project",
    "get_test_projects",
    "restore_project_workload",
    "restore_solution_workloads",
    "resolve_sdk_channels",
]
