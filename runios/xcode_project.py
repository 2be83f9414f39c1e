"""Locate the Xcode project or workspace an app is built from."""

import os
from dataclasses import dataclass

from runios.errors import ConfigurationError


@dataclass(frozen=True)
class XcodeProjectRef:
    """A `.xcodeproj` or `.xcworkspace` entry found in the project directory."""

    name: str
    is_workspace: bool

    @property
    def kind(self) -> str:
        return "workspace" if self.is_workspace else "project"

    @property
    def build_flag(self) -> str:
        """The xcodebuild flag that selects this entry."""
        return "-workspace" if self.is_workspace else "-project"


def find_xcode_project(files: list[str]) -> XcodeProjectRef | None:
    """Pick a project from a directory listing, or None if there is none.

    Names are sorted and scanned from the end, so the first `.xcworkspace` or
    `.xcodeproj` in reverse order wins.
    """
    for name in sorted(files, reverse=True):
        ext = os.path.splitext(name)[1]
        if ext == ".xcworkspace":
            return XcodeProjectRef(name=name, is_workspace=True)
        if ext == ".xcodeproj":
            return XcodeProjectRef(name=name, is_workspace=False)
    return None


def find_project_in_dir(directory: str) -> XcodeProjectRef:
    """List `directory` and return its Xcode project; raise if none is there."""
    try:
        files = os.listdir(directory)
    except OSError:
        files = []

    project = find_xcode_project(files)
    if project is None:
        raise ConfigurationError(
            f"Could not find Xcode project files in {directory} folder"
        )
    return project


def infer_scheme_name(project: XcodeProjectRef) -> str:
    return os.path.splitext(os.path.basename(project.name))[0]


def resolve_scheme(project: XcodeProjectRef, override: str | None = None) -> str:
    """Explicit scheme if given, otherwise the project's base name."""
    return override or infer_scheme_name(project)
