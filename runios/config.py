"""Run configuration assembled from the environment, `.env` files and CLI flags."""

import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_SIMULATOR = "iPhone 6"
DEFAULT_PROJECT_DIR = "ios"
DEFAULT_PACKAGER_PORT = 8081
DEFAULT_PACKAGER_SCRIPT = os.path.join(
    "node_modules", "react-native", "packager", "launchPackager.command"
)


def load_env_files() -> None:
    """Load `.env` from the working directory, then `~/.env`. Existing vars win."""
    load_dotenv(Path.cwd() / ".env")
    load_dotenv(Path.home() / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        print(f"[config] ignoring non-integer {name}={raw!r}", file=sys.stderr)
        return default


@dataclass(frozen=True)
class RunConfig:
    """Everything a single run needs to know before it starts."""

    simulator: str = DEFAULT_SIMULATOR
    scheme: str | None = None
    project_dir: str = DEFAULT_PROJECT_DIR
    open_with: str | None = None
    packager_port: int = DEFAULT_PACKAGER_PORT
    packager_script: str = DEFAULT_PACKAGER_SCRIPT
    platform: str = sys.platform

    @classmethod
    def from_env(cls, load_files: bool = True) -> "RunConfig":
        """Build a config from RUN_IOS_* variables (and RCT_METRO_PORT)."""
        if load_files:
            load_env_files()
        return cls(
            simulator=os.getenv("RUN_IOS_SIMULATOR") or DEFAULT_SIMULATOR,
            scheme=os.getenv("RUN_IOS_SCHEME") or None,
            project_dir=os.getenv("RUN_IOS_PROJECT_DIR") or DEFAULT_PROJECT_DIR,
            open_with=os.getenv("RUN_IOS_OPEN") or None,
            packager_port=_env_int("RCT_METRO_PORT", DEFAULT_PACKAGER_PORT),
            packager_script=os.getenv("RUN_IOS_PACKAGER_SCRIPT") or DEFAULT_PACKAGER_SCRIPT,
        )

    def with_overrides(self, **overrides) -> "RunConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    @property
    def app_root(self) -> str:
        """Directory holding the project dir; the packager script resolves against it."""
        return os.path.dirname(os.path.abspath(self.project_dir))

    @property
    def packager_url(self) -> str:
        return f"http://localhost:{self.packager_port}/status"

    def packager_script_path(self) -> str:
        if os.path.isabs(self.packager_script):
            return self.packager_script
        return os.path.join(self.app_root, self.packager_script)
