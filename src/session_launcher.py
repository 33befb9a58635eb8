
from dataclasses import dataclass, field
from typing import Any, Mapping

from app_config import AppConfig, env_flag
from browserstack import build_browserstack_caps, connect_browserstack


LOCAL_ENGINES = ("chromium", "firefox", "webkit")
LAUNCH_ARGS = ["--start-maximized"]


@dataclass(frozen=True)
class Target:
    mode: str
    engine: str = "chromium"
    channel: str | None = None
    headless: bool = False
    caps: dict = field(default_factory=dict)

    @property
    def is_remote(self) -> bool:
        return self.mode == "browserstack"


@dataclass
class Session:
    browser: Any
    context: Any
    page: Any


def resolve_target(parameters: Mapping | None, environ: Mapping[str, str], app_env: str) -> Target:
    """Derive the target descriptor from profile parameters and env."""
    parameters = parameters or {}
    mode = str(parameters.get("target") or environ.get("TARGET") or "local").lower()
    if mode == "browserstack":
        # Raises ConfigError on missing credentials before any connection
        return Target(mode=mode, caps=build_browserstack_caps(parameters, environ, app_env))

    engine = str(parameters.get("browser") or environ.get("BROWSER") or "chromium").lower()
    if engine not in LOCAL_ENGINES:
        engine = "chromium"
    # Branded channels ("chrome", "msedge") only exist for Chromium
    channel = parameters.get("channel") or environ.get("CHANNEL") or None
    if engine != "chromium":
        channel = None
    headless = env_flag(parameters.get("headless", environ.get("HEADLESS")))
    return Target(mode="local", engine=engine, channel=channel, headless=headless)


async def open_page(browser, verbose: bool = False, **context_options) -> Session:
    """Open one context and one page on ``browser``; close what was opened on failure."""
    context = None
    try:
        context = await browser.new_context(**context_options)
        page = await context.new_page()
    except Exception:
        print("⚠️ Session setup failed, closing browser")
        await close_session(Session(browser=browser, context=context, page=None), verbose=verbose)
        raise
    return Session(browser=browser, context=context, page=page)


async def launch_session(
    playwright,
    parameters: Mapping | None,
    environ: Mapping[str, str],
    config: AppConfig,
    target: Target | None = None,
) -> Session:
    """Open a browser, one context and one page. Does not navigate.

    ``target`` is normally resolved once per run; it is derived here only when omitted.
    """
    if target is None:
        target = resolve_target(parameters, environ, config.app_env)

    if target.is_remote:
        if config.verbose:
            print(f"→ Connecting to BrowserStack: {target.caps['browser']} {target.caps['browser_version']} on {target.caps['os']} {target.caps['os_version']}")
        browser = await connect_browserstack(playwright, target.caps)
        return await open_page(browser, verbose=config.verbose)

    browser_type = getattr(playwright, target.engine)
    launch_options: dict = {"headless": target.headless}
    if target.engine == "chromium":
        launch_options["args"] = list(LAUNCH_ARGS)
        if target.channel:
            launch_options["channel"] = target.channel
    if config.verbose:
        label = f"{target.engine} ({target.channel})" if target.channel else target.engine
        print(f"→ Launching {label}, headless={target.headless}")
    browser = await browser_type.launch(**launch_options)
    return await open_page(browser, verbose=config.verbose, viewport=None)


async def close_session(session: Session | None, verbose: bool = False) -> list[tuple[str, Exception]]:
    """Close page, then context, then browser.

    Each close is awaited before the next starts. A failing step is reported
    and does not stop the remaining ones. Returns the failures.
    """
    failures: list[tuple[str, Exception]] = []
    if session is None:
        return failures
    for name in ("page", "context", "browser"):
        handle = getattr(session, name, None)
        if handle is None:
            continue
        try:
            await handle.close()
            if verbose:
                print(f"✓ Closed {name}")
        except Exception as e:
            print(f"⚠️ Failed to close {name}: {e}")
            failures.append((name, e))
    return failures
