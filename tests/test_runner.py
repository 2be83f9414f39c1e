import subprocess

import pytest

from runios import packager, runner, toolchain
from runios.config import RunConfig
from runios.errors import ConfigurationError, ExternalToolFailure, SelectionError
from runios.simulators import parse_simulators_list

SCENARIO = """\
-- iOS 9.3 --
    iPhone 6 (ABCD-1) (Booted)
-- iOS 10.0 --
    iPhone 6 (EFGH-2) (Shutdown)
"""


@pytest.fixture
def app_dir(tmp_path):
    ios = tmp_path / "ios"
    (ios / "AwesomeApp.xcodeproj").mkdir(parents=True)
    (ios / "AwesomeApp.xcworkspace").mkdir()
    return tmp_path


@pytest.fixture
def config(app_dir):
    return RunConfig(
        simulator="iPhone 6",
        project_dir=str(app_dir / "ios"),
        packager_script="/rn/packager/launchPackager.command",
        platform="darwin",
    )


@pytest.fixture
def tool_calls(monkeypatch):
    """Record every external command; fail those listed in `failures`."""
    calls: list[list[str]] = []
    failures: dict[str, int] = {}

    def fake_run(cmd, cwd=None, capture_output=False, text=False, stdout=None):
        calls.append(cmd)
        if cmd[:3] == ["xcrun", "simctl", "list"]:
            return subprocess.CompletedProcess(cmd, 0, stdout=SCENARIO, stderr="")
        if cmd[0] == toolchain.PLIST_BUDDY:
            return subprocess.CompletedProcess(cmd, 0, stdout="org.example.AwesomeApp\n", stderr="")
        key = cmd[1] if cmd[0] == "xcrun" else cmd[0]
        return subprocess.CompletedProcess(cmd, failures.get(key, 0), stdout="", stderr="")

    monkeypatch.setattr(subprocess, "run", fake_run)
    monkeypatch.setattr(packager, "packager_status", lambda url, timeout=2.0: packager.RUNNING)
    return calls, failures


def test_run_ios_full_sequence(config, tool_calls):
    calls, failures = tool_calls
    failures["instruments"] = 255

    result = runner.run_ios(config)

    assert result.project.name == "AwesomeApp.xcworkspace"
    assert result.scheme == "AwesomeApp"
    assert result.simulator.udid == "EFGH-2"
    assert result.bundle_id == "org.example.AwesomeApp"
    assert result.app_path.endswith("build/Build/Products/Debug-iphonesimulator/AwesomeApp.app")

    programs = [cmd[1] if cmd[0] == "xcrun" else cmd[0] for cmd in calls]
    assert programs == ["simctl", "instruments", "xcodebuild", "simctl", toolchain.PLIST_BUDDY, "simctl"]
    assert calls[2][:2] == ["xcodebuild", "-workspace"]
    assert calls[-1] == ["xcrun", "simctl", "launch", "EFGH-2", "org.example.AwesomeApp"]


def test_run_ios_scheme_override(config, tool_calls):
    calls, _ = tool_calls

    result = runner.run_ios(config.with_overrides(scheme="AwesomeApp-Dev"))

    assert result.scheme == "AwesomeApp-Dev"
    build = next(cmd for cmd in calls if cmd[0] == "xcodebuild")
    assert build[build.index("-scheme") + 1] == "AwesomeApp-Dev"


def test_build_failure_aborts_before_install(config, tool_calls):
    calls, failures = tool_calls
    failures["xcodebuild"] = 1

    with pytest.raises(ExternalToolFailure):
        runner.run_ios(config)

    assert not any(cmd[:3] == ["xcrun", "simctl", "install"] for cmd in calls)


def test_missing_project_is_configuration_error(tmp_path, tool_calls):
    calls, _ = tool_calls
    config = RunConfig(project_dir=str(tmp_path / "ios"))

    with pytest.raises(ConfigurationError):
        runner.run_ios(config)
    assert calls == []


def test_unknown_simulator_is_selection_error(config, tool_calls):
    calls, _ = tool_calls

    with pytest.raises(SelectionError, match="Could not find iPad Air simulator"):
        runner.run_ios(config.with_overrides(simulator="iPad Air"))
    assert not any(cmd[0] == "xcodebuild" for cmd in calls)


def test_select_simulator_suggests_close_names():
    records = parse_simulators_list(SCENARIO)

    with pytest.raises(SelectionError, match="Did you mean: iPhone 6"):
        runner.select_simulator(records, "iPhone 6s")


def test_ensure_packager_starts_server_when_not_running(config, monkeypatch):
    opened: list[tuple[str, str | None, str]] = []

    class FakeLauncher:
        def __init__(self, platform, open_with):
            self.platform = platform
            self.open_with = open_with

        def open_script(self, script_path):
            opened.append((self.platform, self.open_with, script_path))
            return True

    monkeypatch.setattr(packager, "packager_status", lambda url, timeout=2.0: packager.NOT_RUNNING)
    monkeypatch.setattr(runner.terminal, "launcher_for_platform", FakeLauncher)

    status = runner.ensure_packager(config.with_overrides(open_with="iTerm"))

    assert status == packager.NOT_RUNNING
    assert opened == [("darwin", "iTerm", "/rn/packager/launchPackager.command")]


@pytest.mark.parametrize("status", [packager.RUNNING, packager.UNRECOGNIZED])
def test_ensure_packager_leaves_existing_server_alone(config, monkeypatch, status):
    def no_launcher(*args, **kwargs):
        raise AssertionError("packager should not be started")

    monkeypatch.setattr(packager, "packager_status", lambda url, timeout=2.0: status)
    monkeypatch.setattr(runner.terminal, "launcher_for_platform", no_launcher)

    assert runner.ensure_packager(config) == status


def test_unsupported_platform_continues_with_build(config, tool_calls, monkeypatch, capsys):
    calls, _ = tool_calls
    monkeypatch.setattr(packager, "packager_status", lambda url, timeout=2.0: packager.NOT_RUNNING)

    result = runner.run_ios(config.with_overrides(platform="win32"))

    assert result.bundle_id == "org.example.AwesomeApp"
    assert "react-native start" in capsys.readouterr().err
    assert any(cmd[0] == "xcodebuild" for cmd in calls)


def test_ensure_packager_warns_when_window_fails_to_open(config, monkeypatch, capsys):
    class FailingLauncher:
        def __init__(self, platform, open_with):
            pass

        def open_script(self, script_path):
            return False

    monkeypatch.setattr(packager, "packager_status", lambda url, timeout=2.0: packager.NOT_RUNNING)
    monkeypatch.setattr(runner.terminal, "launcher_for_platform", FailingLauncher)

    assert runner.ensure_packager(config) == packager.NOT_RUNNING
    assert "could not open a packager window" in capsys.readouterr().err


def test_run_ios_sends_tool_output_to_given_target(config, monkeypatch):
    streamed: list[tuple[str, object]] = []

    def fake_run(cmd, cwd=None, capture_output=False, text=False, stdout=None):
        if cmd[:3] == ["xcrun", "simctl", "list"]:
            return subprocess.CompletedProcess(cmd, 0, stdout=SCENARIO, stderr="")
        if cmd[0] == toolchain.PLIST_BUDDY:
            return subprocess.CompletedProcess(cmd, 0, stdout="org.example.AwesomeApp\n", stderr="")
        if not capture_output:
            streamed.append((cmd[1] if cmd[0] == "xcrun" else cmd[0], stdout))
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(subprocess, "run", fake_run)
    monkeypatch.setattr(packager, "packager_status", lambda url, timeout=2.0: packager.RUNNING)

    runner.run_ios(config, stdout=subprocess.DEVNULL)

    assert streamed == [
        ("xcodebuild", subprocess.DEVNULL),
        ("simctl", subprocess.DEVNULL),
        ("simctl", subprocess.DEVNULL),
    ]
