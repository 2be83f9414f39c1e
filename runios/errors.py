"""Fatal error types raised while preparing or running an app on a simulator."""

from __future__ import annotations


class RunIOSError(Exception):
    """Base class for errors that abort a run."""


class ConfigurationError(RunIOSError):
    """No Xcode project or workspace could be found."""


class SelectionError(RunIOSError):
    """No simulator matched the requested name."""


class ExternalToolFailure(RunIOSError):
    """An external tool exited with an unexpected status or could not start."""

    def __init__(self, command: list[str], returncode: int, detail: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.detail = detail
        message = f"Command failed with exit code {returncode}: {' '.join(self.command)}"
        if detail:
            message += f"\n{detail}"
        super().__init__(message)
