#!/usr/bin/env python3
"""MCP server wrapper for run-ios.

Exposes project discovery, simulator listing, the packager probe and the full
build-install-launch run as tools over the Model Context Protocol (stdio).

Sample client config:

    {
      "mcpServers": {
        "run-ios": {
          "command": "/path/to/app/.venv/bin/python",
          "args": ["/path/to/run-ios/mcp_server.py"],
          "cwd": "/path/to/app"
        }
      }
    }

Run standalone:  python mcp_server.py
"""

import json
import os
import subprocess
import sys

# Ensure project root is on sys.path so runios/ imports work
_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from mcp.server.fastmcp import FastMCP

from runios import packager, simulators
from runios.config import RunConfig
from runios.errors import RunIOSError
from runios.runner import run_ios
from runios.xcode_project import find_project_in_dir, resolve_scheme


def _config(**overrides) -> RunConfig:
    return RunConfig.from_env().with_overrides(**overrides)


mcp = FastMCP(
    "run-ios",
    instructions="Build an Xcode project and launch it on an iOS simulator",
)


@mcp.tool()
def ios_list_simulators(available_only: bool = False) -> str:
    """List iOS simulators known to simctl.

    Args:
        available_only: Drop simulators whose runtime is unavailable.

    Returns:
        JSON list of {name, version, udid, is_available, is_booted}.
    """
    try:
        records = simulators.list_simulators()
    except RunIOSError as exc:
        return json.dumps({"error": str(exc)})
    if available_only:
        records = [r for r in records if r.is_available]
    return json.dumps([r.to_dict() for r in records], indent=2)


@mcp.tool()
def ios_find_project(project_dir: str = "") -> str:
    """Find the Xcode project or workspace in a directory.

    Args:
        project_dir: Directory to search (default: configured project dir, usually "ios").

    Returns:
        JSON with name, is_workspace and inferred scheme, or an error.
    """
    config = _config(project_dir=project_dir or None)
    try:
        project = find_project_in_dir(config.project_dir)
    except RunIOSError as exc:
        return json.dumps({"error": str(exc)})
    return json.dumps(
        {
            "name": project.name,
            "is_workspace": project.is_workspace,
            "scheme": resolve_scheme(project, config.scheme),
        },
        indent=2,
    )


@mcp.tool()
def ios_packager_status() -> str:
    """Report whether the JS packager is running, not running, or unrecognized."""
    config = _config()
    status = packager.packager_status(config.packager_url)
    return json.dumps({"url": config.packager_url, "status": status})


@mcp.tool()
def ios_run_app(simulator: str = "", scheme: str = "", project_dir: str = "") -> str:
    """Build the app, install it on a simulator and launch it.

    Args:
        simulator: Simulator name (default: configured, usually "iPhone 6").
        scheme: Xcode scheme (default: project base name).
        project_dir: Directory holding the Xcode project (default: "ios").

    Returns:
        JSON with project, scheme, simulator, app_path and bundle_id, or an error.
    """
    config = _config(
        simulator=simulator or None,
        scheme=scheme or None,
        project_dir=project_dir or None,
    )
    try:
        # fd 1 carries the JSON-RPC stream; tool output must not reach it.
        result = run_ios(config, stdout=subprocess.DEVNULL)
    except RunIOSError as exc:
        return json.dumps({"error": str(exc), "type": type(exc).__name__})
    return json.dumps(result.to_dict(), indent=2)


if __name__ == "__main__":
    mcp.run(transport="stdio")
