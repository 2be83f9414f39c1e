"""Build the app in the project directory and launch it on an iOS simulator.

The steps run strictly in order and the first failure aborts the run:

1. find the Xcode project/workspace in the project directory
2. resolve the scheme (explicit, else the project's base name)
3. list simulators and pick one by name
4. boot it via instruments
5. make sure the packager is running, starting it in a new window if not
6. xcodebuild, install, read the bundle id, launch
"""

import os
import sys
from dataclasses import dataclass

from runios import packager, simulators, terminal, toolchain
from runios.config import RunConfig
from runios.errors import SelectionError
from runios.simulators import SimulatorRecord
from runios.xcode_project import XcodeProjectRef, find_project_in_dir, resolve_scheme


def _log(msg: str) -> None:
    print(f"[run-ios] {msg}", file=sys.stderr)


@dataclass
class RunResult:
    project: XcodeProjectRef
    scheme: str
    simulator: SimulatorRecord
    app_path: str
    bundle_id: str

    def to_dict(self) -> dict:
        return {
            "project": self.project.name,
            "is_workspace": self.project.is_workspace,
            "scheme": self.scheme,
            "simulator": self.simulator.to_dict(),
            "app_path": self.app_path,
            "bundle_id": self.bundle_id,
        }


def select_simulator(records: list[SimulatorRecord], name: str) -> SimulatorRecord:
    """Pick the simulator called `name`, raising SelectionError if there is none."""
    selected = simulators.matching_simulator(records, name)
    if selected is not None:
        return selected

    message = f"Could not find {name} simulator"
    suggestions = simulators.suggest_simulators(records, name)
    if suggestions:
        message += f". Did you mean: {', '.join(suggestions)}?"
    raise SelectionError(message)


def ensure_packager(config: RunConfig) -> str:
    """Start the packager in a new window unless one is already answering."""
    status = packager.packager_status(config.packager_url)
    if status == packager.RUNNING:
        _log("JS server already running.")
    elif status == packager.UNRECOGNIZED:
        _log("WARNING: JS server not recognized, continuing with build...")
    else:
        _log("Starting JS server...")
        launcher = terminal.launcher_for_platform(config.platform, config.open_with)
        script = config.packager_script_path()
        if not launcher.open_script(script):
            _log(f"WARNING: could not open a packager window for {script}, continuing with build...")
    return status


def run_ios(config: RunConfig, stdout=None) -> RunResult:
    """Run every step for `config`; raises a RunIOSError subclass on the first failure.

    Build, install and launch output goes to `stdout` (a file object, fd or
    `subprocess.DEVNULL`); None leaves it on the controlling terminal.
    """
    project_dir = os.path.abspath(config.project_dir)
    project = find_project_in_dir(project_dir)
    scheme = resolve_scheme(project, config.scheme)
    _log(f"Found Xcode {project.kind} {project.name}")

    records = simulators.list_simulators()
    selected = select_simulator(records, config.simulator)

    _log(f"Launching {selected.full_name}...")
    toolchain.boot_simulator(selected)

    ensure_packager(config)

    toolchain.build(project, scheme, selected.udid, cwd=project_dir, stdout=stdout)

    app_path = toolchain.app_bundle_path(scheme)
    toolchain.install_app(selected.udid, app_path, cwd=project_dir, stdout=stdout)

    bundle_id = toolchain.read_bundle_id(app_path, cwd=project_dir)
    toolchain.launch_app(selected.udid, bundle_id, stdout=stdout)

    return RunResult(
        project=project,
        scheme=scheme,
        simulator=selected,
        app_path=os.path.join(project_dir, app_path),
        bundle_id=bundle_id,
    )
