"""Environment checks for run-ios.

Read-only: reports whether the tools a run needs are installed, whether a
project can be found and whether the packager is up. Nothing is booted,
built or started.
"""

from __future__ import annotations

import os
import shutil
import subprocess

from runios import packager, toolchain
from runios.config import RunConfig
from runios.errors import ConfigurationError
from runios.xcode_project import find_project_in_dir, resolve_scheme


def _run(cmd: list[str], timeout: int = 10) -> dict:
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        return {
            "ok": proc.returncode == 0,
            "returncode": proc.returncode,
            "stdout": (proc.stdout or "").strip(),
            "stderr": (proc.stderr or "").strip(),
        }
    except (OSError, subprocess.TimeoutExpired) as exc:
        return {"ok": False, "error": str(exc), "returncode": -1, "stdout": "", "stderr": ""}


def _check_tool(name: str) -> dict:
    path = shutil.which(name) or ""
    return {"ok": bool(path), "path": path}


def _check_plist_buddy() -> dict:
    exists = os.path.isfile(toolchain.PLIST_BUDDY)
    return {"ok": exists, "path": toolchain.PLIST_BUDDY if exists else ""}


def _check_instruments() -> dict:
    # Newer Xcode releases dropped instruments; boot still works through the Simulator app.
    res = _run(["xcrun", "--find", "instruments"])
    return {"ok": bool(res.get("ok")), "path": res.get("stdout", "")}


def _check_project(project_dir: str, scheme: str | None) -> dict:
    try:
        project = find_project_in_dir(project_dir)
    except ConfigurationError as exc:
        return {"ok": False, "error": str(exc)}
    return {
        "ok": True,
        "name": project.name,
        "kind": project.kind,
        "scheme": resolve_scheme(project, scheme),
    }


def _check_packager(config: RunConfig) -> dict:
    status = packager.packager_status(config.packager_url)
    return {
        "ok": status == packager.RUNNING,
        "status": status,
        "url": config.packager_url,
        "script": config.packager_script_path(),
        "script_exists": os.path.exists(config.packager_script_path()),
    }


def collect_checks(config: RunConfig | None = None) -> dict:
    config = config or RunConfig.from_env()
    checks: dict = {
        "platform": config.platform,
        "tools": {
            "xcrun": _check_tool("xcrun"),
            "xcodebuild": _check_tool("xcodebuild"),
            "plist_buddy": _check_plist_buddy(),
            "instruments": _check_instruments(),
        },
        "project": _check_project(config.project_dir, config.scheme),
        "packager": _check_packager(config),
    }
    if config.platform.startswith("linux"):
        checks["tools"]["terminal"] = _check_tool(config.open_with or "xterm")

    problems: list[str] = []
    for name in ("xcrun", "xcodebuild", "plist_buddy"):
        if not checks["tools"][name]["ok"]:
            problems.append(f"{name} not found")
    if not checks["project"]["ok"]:
        problems.append(checks["project"]["error"])
    if not checks["tools"]["instruments"]["ok"]:
        problems.append("instruments not found (simulator must be booted manually)")
    if not checks["packager"]["ok"] and not checks["packager"]["script_exists"]:
        problems.append(f"packager script missing: {checks['packager']['script']}")

    checks["problems"] = problems
    checks["ok"] = (
        all(checks["tools"][name]["ok"] for name in ("xcrun", "xcodebuild", "plist_buddy"))
        and checks["project"]["ok"]
    )
    return checks
