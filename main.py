#!/usr/bin/env python3
"""run-ios - build the app in ./ios and launch it on an iOS simulator.

Usage:
    python main.py
    python main.py --simulator "iPhone 6s" --scheme MyApp
    python main.py --open iTerm
    python main.py --list-simulators
    python main.py --doctor
"""

import argparse
import json
import sys

from runios import doctor, simulators
from runios.config import RunConfig
from runios.errors import RunIOSError
from runios.runner import run_ios


def log(msg: str) -> None:
    print(f"[main] {msg}", file=sys.stderr)


def build_parser(defaults: RunConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build an Xcode project and launch it on an iOS simulator"
    )
    parser.add_argument(
        "--simulator",
        default=defaults.simulator,
        help=f"Explicitly set simulator to use (default: {defaults.simulator})",
    )
    parser.add_argument(
        "--scheme",
        default=defaults.scheme,
        help="Explicitly set Xcode scheme to use (default: project name)",
    )
    parser.add_argument(
        "--project-dir",
        default=defaults.project_dir,
        help=f"Directory holding the Xcode project (default: {defaults.project_dir})",
    )
    parser.add_argument(
        "--open",
        dest="open_with",
        default=defaults.open_with,
        help="App (macOS) or terminal emulator (Linux) to open the packager with",
    )
    parser.add_argument(
        "--list-simulators",
        action="store_true",
        help="Print the parsed simulator list as JSON and exit",
    )
    parser.add_argument(
        "--doctor",
        action="store_true",
        help="Print environment checks as JSON and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    defaults = RunConfig.from_env()
    args = build_parser(defaults).parse_args(argv)
    config = defaults.with_overrides(
        simulator=args.simulator,
        scheme=args.scheme,
        project_dir=args.project_dir,
        open_with=args.open_with,
    )

    try:
        if args.doctor:
            payload = doctor.collect_checks(config)
            print(json.dumps(payload, indent=2))
            return 0 if payload.get("ok") else 1

        if args.list_simulators:
            records = simulators.list_simulators()
            print(json.dumps([r.to_dict() for r in records], indent=2))
            return 0

        result = run_ios(config)
    except RunIOSError as exc:
        print(f"FATAL: {exc}", file=sys.stderr)
        return 1

    log(f"Launched {result.bundle_id} on {result.simulator.full_name}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
