#!/usr/bin/env python3

import argparse
import os
import sys
from pathlib import Path

from app_config import AppConfig, ConfigError
from session_launcher import resolve_target


# Profile -> behave userdata. CLI -D values override these.
PROFILES = {
    "default": {},
    "ci": {"headless": "true"},
    "chrome": {"browser": "chromium", "channel": "chrome"},
    "edge": {"browser": "chromium", "channel": "msedge"},
    "firefox": {"browser": "firefox"},
    "bs-chrome": {
        "target": "browserstack",
        "bs_browser": "chrome",
        "bs_os": "Windows",
        "bs_os_version": "11",
        "bs_browser_version": "latest",
    },
}


def parse_userdata(pairs: list[str] | None) -> dict:
    userdata = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise SystemExit(f"Invalid -D value '{pair}', expected key=value")
        userdata[key.strip()] = value.strip()
    return userdata


def build_behave_args(
    profile: str = "default",
    paths: list[str] | None = None,
    report_dir: Path | str = "reports",
    tags: list[str] | None = None,
    userdata: dict | None = None,
    verbose: bool = False,
) -> list[str]:
    if profile not in PROFILES:
        raise SystemExit(f"Unknown profile '{profile}'. Choose from: {', '.join(PROFILES)}")
    report_dir = Path(report_dir)
    merged = {**PROFILES[profile], **(userdata or {}), "report_dir": str(report_dir)}
    if verbose:
        merged["verbose"] = "true"

    args: list[str] = []
    if profile != "ci":
        args += ["-f", "progress", "-o", "-"]
    args += ["-f", "json", "-o", str(report_dir / "behave.json")]
    for tag in tags or []:
        args += ["--tags", tag]
    for key, value in merged.items():
        args += ["-D", f"{key}={value}"]
    args += list(paths or ["features"])
    return args


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run Gherkin features against a Playwright browser")
    parser.add_argument("paths", nargs="*", help="Feature files or directories (default: features)")
    parser.add_argument("--profile", default="default", choices=sorted(PROFILES), help="Browser/target profile")
    parser.add_argument("--env", help="Application environment name (overrides ENV)")
    parser.add_argument("--tags", action="append", help="Behave tag expression, repeatable")
    parser.add_argument("--report-dir", default="reports", help="Directory for JSON report and screenshots")
    parser.add_argument("-D", "--define", action="append", metavar="KEY=VALUE", help="Extra userdata for the run")
    parser.add_argument("--verbose", action="store_true", help="Print step and session logs")
    args = parser.parse_args(argv)

    if args.env:
        os.environ["ENV"] = args.env

    userdata = parse_userdata(args.define)

    # Fail fast before any browser is launched
    try:
        config = AppConfig.load(os.environ, verbose=args.verbose or None)
        resolve_target({**PROFILES[args.profile], **userdata}, os.environ, config.app_env)
    except ConfigError as e:
        print(f"✖ Configuration error: {e}", file=sys.stderr)
        return 2

    Path(args.report_dir).mkdir(parents=True, exist_ok=True)
    behave_args = build_behave_args(
        profile=args.profile,
        paths=args.paths,
        report_dir=args.report_dir,
        tags=args.tags,
        userdata=userdata,
        verbose=config.verbose,
    )
    print(f"🏃 Running features with profile '{args.profile}' on {config.app_env} ({config.base_url})")
    if config.verbose:
        print("→ behave " + " ".join(behave_args))

    from behave.__main__ import main as behave_main

    return behave_main(behave_args)


if __name__ == "__main__":
    sys.exit(main())
