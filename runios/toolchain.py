"""Thin wrappers over xcodebuild, xcrun and PlistBuddy.

Every wrapper except `boot_simulator` raises ExternalToolFailure when the tool
cannot be started or exits non-zero.
"""

import os
import subprocess
import sys

from runios.errors import ExternalToolFailure
from runios.simulators import SimulatorRecord
from runios.xcode_project import XcodeProjectRef

PLIST_BUDDY = "/usr/libexec/PlistBuddy"
DERIVED_DATA_PATH = "build"
PRODUCTS_DIR = os.path.join(DERIVED_DATA_PATH, "Build", "Products", "Debug-iphonesimulator")


def _log(msg: str) -> None:
    print(f"[toolchain] {msg}", file=sys.stderr)


def _run(cmd: list[str], cwd: str | None = None, capture: bool = True, stdout=None) -> str:
    """Run a tool, raising ExternalToolFailure on failure. Returns stdout if captured.

    With capture=False the tool writes to `stdout`, or to the controlling
    terminal when that is None.
    """
    _log(f"Running: {' '.join(cmd)}")
    streams = {"capture_output": True} if capture else {"stdout": stdout}
    try:
        result = subprocess.run(cmd, cwd=cwd, text=True, **streams)
    except OSError as exc:
        raise ExternalToolFailure(cmd, -1, str(exc)) from exc

    if result.returncode != 0:
        detail = (result.stderr or "").strip() if capture else ""
        raise ExternalToolFailure(cmd, result.returncode, detail)
    return result.stdout if capture else ""


def boot_simulator(record: SimulatorRecord) -> None:
    """Force the simulator up with `instruments -w`, unless it is already booted.

    instruments always exits 255 here because it expects a template to run;
    only the side effect of launching the simulator matters, so its exit
    status and a missing instruments binary are both ignored.
    """
    if record.is_booted:
        _log(f"{record.full_name} already booted")
        return

    cmd = ["xcrun", "instruments", "-w", record.full_name]
    _log(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as exc:
        _log(f"instruments unavailable, continuing: {exc}")
        return
    if result.returncode != 0:
        _log(f"instruments exited {result.returncode} (expected), continuing")


def build_args(project: XcodeProjectRef, scheme: str, udid: str) -> list[str]:
    return [
        project.build_flag, project.name,
        "-scheme", scheme,
        "-destination", f"id={udid}",
        "-derivedDataPath", DERIVED_DATA_PATH,
    ]


def build(
    project: XcodeProjectRef, scheme: str, udid: str, cwd: str | None = None, stdout=None
) -> None:
    """Build `scheme` for the simulator; xcodebuild output goes to `stdout` or the terminal."""
    args = build_args(project, scheme, udid)
    _log(f'Building using "xcodebuild {" ".join(args)}"')
    _run(["xcodebuild"] + args, cwd=cwd, capture=False, stdout=stdout)


def app_bundle_path(scheme: str) -> str:
    """Where xcodebuild leaves the .app for `scheme`, relative to the project dir."""
    return os.path.join(PRODUCTS_DIR, f"{scheme}.app")


def install_app(udid: str, app_path: str, cwd: str | None = None, stdout=None) -> None:
    _log(f"Installing {app_path}")
    _run(["xcrun", "simctl", "install", udid, app_path], cwd=cwd, capture=False, stdout=stdout)


def read_bundle_id(app_path: str, cwd: str | None = None) -> str:
    """Read CFBundleIdentifier from the built app's Info.plist."""
    plist = os.path.join(app_path, "Info.plist")
    out = _run([PLIST_BUDDY, "-c", "Print:CFBundleIdentifier", plist], cwd=cwd)
    return out.strip()


def launch_app(udid: str, bundle_id: str, stdout=None) -> None:
    _log(f"Launching {bundle_id}")
    _run(["xcrun", "simctl", "launch", udid, bundle_id], capture=False, stdout=stdout)
