"""Parse `xcrun simctl list devices` output and pick a simulator by name."""

import re
import subprocess
import sys
from dataclasses import asdict, dataclass

from thefuzz import fuzz

from runios.errors import ExternalToolFailure

# -- iOS 10.0 --
_SECTION_RE = re.compile(r"^-- (.+) --$")
_IOS_RUNTIME_RE = re.compile(r"^iOS (.+)$")
#     iPhone 6 (EFGH-2) (Shutdown)
#     iPad Pro (11-inch) (EFGH-3) (Shutdown) (unavailable, runtime profile not found)
_DEVICE_RE = re.compile(
    r"^\s+(.+?) \(([^()\s]+)\)(?: \(([^()]*)\))?(?: \((unavailable[^()]*)\))?\s*$"
)


def _log(msg: str) -> None:
    print(f"[simulators] {msg}", file=sys.stderr)


@dataclass(frozen=True)
class SimulatorRecord:
    """One device line from the simulator listing."""

    name: str
    version: str
    udid: str
    is_available: bool = True
    is_booted: bool = False

    @property
    def full_name(self) -> str:
        """Name plus runtime, the form `instruments -w` expects."""
        return f"{self.name} ({self.version})"

    def to_dict(self) -> dict:
        return asdict(self)


def _marker_flags(state: str | None, availability: str | None) -> tuple[bool, bool]:
    """Map the trailing markers to (is_available, is_booted).

    Missing or unknown markers leave the device available and not booted.
    """
    state = (state or "").strip().lower()
    if availability or "unavailable" in state:
        return False, False
    return True, state == "booted"


def parse_simulators_list(text: str) -> list[SimulatorRecord]:
    """Turn a sectioned device listing into records, in listing order.

    Devices are only collected under `-- iOS <version> --` headers; any other
    section header (watchOS, tvOS, `Unavailable: ...`) stops collection until
    the next iOS header. Lines that match nothing are skipped, never raised on.
    """
    records: list[SimulatorRecord] = []
    seen: set[str] = set()
    current_version: str | None = None
    skipped = 0

    for raw_line in (text or "").splitlines():
        line = raw_line.rstrip()
        if not line.strip():
            continue

        section = _SECTION_RE.match(line)
        if section:
            runtime = _IOS_RUNTIME_RE.match(section.group(1).strip())
            current_version = runtime.group(1).strip() if runtime else None
            continue

        device = _DEVICE_RE.match(line)
        if not device or current_version is None:
            skipped += 1
            continue

        name, udid, state, availability = device.groups()
        name = name.strip()
        if udid in seen:
            skipped += 1
            continue
        seen.add(udid)

        is_available, is_booted = _marker_flags(state, availability)
        records.append(
            SimulatorRecord(
                name=name,
                version=current_version,
                udid=udid,
                is_available=is_available,
                is_booted=is_booted,
            )
        )

    if skipped:
        _log(f"Skipped {skipped} unrecognized line(s) in device list")
    return records


def matching_simulator(
    simulators: list[SimulatorRecord], simulator_name: str
) -> SimulatorRecord | None:
    """Return the last record whose name equals simulator_name exactly, or None.

    Later entries belong to newer runtimes, so scanning from the end picks the
    newest OS when several runtimes share a device name.
    """
    for record in reversed(simulators):
        if record.name == simulator_name:
            return record
    return None


def suggest_simulators(
    simulators: list[SimulatorRecord],
    simulator_name: str,
    limit: int = 3,
    threshold: int = 60,
) -> list[str]:
    """Return up to `limit` distinct device names that look like simulator_name."""
    best: dict[str, int] = {}
    for record in simulators:
        score = fuzz.ratio(simulator_name.lower(), record.name.lower())
        if score >= threshold and score > best.get(record.name, -1):
            best[record.name] = score

    ranked = sorted(best.items(), key=lambda item: item[1], reverse=True)
    return [name for name, _ in ranked[:limit]]


def list_simulators() -> list[SimulatorRecord]:
    """Run `xcrun simctl list devices` and parse its output."""
    cmd = ["xcrun", "simctl", "list", "devices"]
    _log(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as exc:
        raise ExternalToolFailure(cmd, -1, str(exc)) from exc
    if result.returncode != 0:
        raise ExternalToolFailure(cmd, result.returncode, result.stderr.strip())

    simulators = parse_simulators_list(result.stdout)
    _log(f"Found {len(simulators)} iOS simulator(s)")
    return simulators
