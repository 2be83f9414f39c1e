"""Open the packager launch script in a new terminal window, per platform."""

import subprocess
import sys


def _log(msg: str) -> None:
    print(f"[terminal] {msg}", file=sys.stderr)


class TerminalLauncher:
    """Opens a shell script in a window of its own."""

    def __init__(self, open_with: str | None = None):
        self.open_with = open_with

    def open_script(self, script_path: str) -> bool:
        """Start `script_path`. Returns True if a window was requested."""
        raise NotImplementedError


class MacTerminalLauncher(TerminalLauncher):
    """`open` hands .command files to Terminal (or to the `open_with` app)."""

    def command(self, script_path: str) -> list[str]:
        if self.open_with:
            return ["open", "-a", self.open_with, script_path]
        return ["open", script_path]

    def open_script(self, script_path: str) -> bool:
        cmd = self.command(script_path)
        _log(f"Running: {' '.join(cmd)}")
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            _log(f"open failed: {result.stderr.strip()}")
            return False
        return True


class LinuxTerminalLauncher(TerminalLauncher):
    """Runs the script under the user's terminal emulator, xterm by default."""

    def command(self, script_path: str) -> list[str]:
        return [self.open_with or "xterm", "-e", "sh", script_path]

    def open_script(self, script_path: str) -> bool:
        cmd = self.command(script_path)
        _log(f"Running: {' '.join(cmd)}")
        try:
            subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            _log(f"could not start {cmd[0]}: {exc}")
            return False
        return True


class UnsupportedPlatformLauncher(TerminalLauncher):
    """Prints how to start the packager by hand; never opens anything."""

    def __init__(self, platform: str, open_with: str | None = None):
        super().__init__(open_with)
        self.platform = platform

    def guidance(self) -> str:
        if self.platform.startswith("win"):
            return (
                "Starting the packager in a new window is not supported on Windows yet.\n"
                "Please start it manually using 'react-native start'."
            )
        return (
            f"Cannot start the packager. Unknown platform {self.platform}\n"
            "Please start it manually using 'react-native start'."
        )

    def open_script(self, script_path: str) -> bool:
        print(self.guidance(), file=sys.stderr)
        return False


def launcher_for_platform(platform: str, open_with: str | None = None) -> TerminalLauncher:
    if platform == "darwin":
        return MacTerminalLauncher(open_with)
    if platform.startswith("linux"):
        return LinuxTerminalLauncher(open_with)
    return UnsupportedPlatformLauncher(platform, open_with)
