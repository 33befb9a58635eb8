
"""Behave lifecycle hooks. ``features/environment.py`` delegates here."""

import asyncio
import os
import re
from pathlib import Path

from behave.model_core import Status
from playwright.async_api import async_playwright

from app_config import AppConfig, env_flag
from scenario_world import ScenarioWorld
from session_launcher import resolve_target


# Mirrors the runner-wide default step timeout
STEP_TIMEOUT_S = 50
DEFAULT_REPORT_DIR = Path("reports")

# Userdata keys consumed by the runner, not forwarded as session parameters
RUNNER_KEYS = {"report_dir", "verbose"}


def sanitize_for_filename(text: str) -> str:
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-\s]+", "_", text)
    return text.strip("_").lower()[:100]


def screenshot_path(report_dir: Path, scenario_name: str, step_index: int, step_name: str) -> Path:
    filename = f"{sanitize_for_filename(scenario_name)}_step{step_index:02d}_{sanitize_for_filename(step_name)}.png"
    return Path(report_dir) / "screenshots" / filename


def run(context, coro):
    return context.loop.run_until_complete(coro)


def before_all(context) -> None:
    userdata = dict(context.config.userdata)
    # Fails the run before any browser work when the environment block is missing
    context.app_config = AppConfig.load(os.environ, verbose=env_flag(userdata.get("verbose")) or None)
    context.parameters = {k: v for k, v in userdata.items() if k not in RUNNER_KEYS}
    context.report_dir = Path(userdata.get("report_dir") or DEFAULT_REPORT_DIR)
    # Missing remote credentials fail here, before Playwright starts
    context.target = resolve_target(context.parameters, os.environ, context.app_config.app_env)
    context.loop = asyncio.new_event_loop()
    context.playwright = run(context, async_playwright().start())
    if context.app_config.verbose:
        print(f"→ Environment {context.app_config.app_env}, base URL {context.app_config.base_url}")


def before_scenario(context, scenario) -> None:
    target = getattr(context, "target", None)
    context.world = ScenarioWorld(context.app_config, context.parameters, os.environ, target=target)
    context.step_index = 0
    run(context, context.world.start(context.playwright))


def after_step(context, step) -> None:
    context.step_index = getattr(context, "step_index", 0) + 1
    if step.status != Status.failed:
        return
    world = getattr(context, "world", None)
    if world is None or world.page is None:
        return
    try:
        png = run(context, world.capture_failure())
    except Exception as e:
        print(f"⚠️ Failed to capture screenshot for '{step.name}': {e}")
        return
    path = screenshot_path(context.report_dir, context.scenario.name, context.step_index, step.name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(png)
    print(f"📸 Screenshot saved: {path}")
    attach = getattr(context, "attach", None)
    if callable(attach):
        attach("image/png", png)


def after_scenario(context, scenario) -> None:
    world = getattr(context, "world", None)
    if world is None:
        return
    run(context, world.teardown())
    if context.app_config.verbose:
        print(f"✓ Closed browser for '{scenario.name}'")


def after_all(context) -> None:
    playwright = getattr(context, "playwright", None)
    loop = getattr(context, "loop", None)
    if loop is None:
        return
    if playwright is not None:
        loop.run_until_complete(playwright.stop())
    loop.close()
