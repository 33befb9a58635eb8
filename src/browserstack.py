
import json
import urllib.parse
from importlib.metadata import PackageNotFoundError, version
from typing import Mapping

from app_config import ConfigError, env_flag


BROWSERSTACK_WS_URL = "wss://cdp.browserstack.com/playwright"


def client_playwright_version() -> str:
    try:
        return version("playwright")
    except PackageNotFoundError:
        return "unknown"


def _pick(parameters: Mapping, environ: Mapping[str, str], param_key: str, env_key: str, default: str) -> str:
    return parameters.get(param_key) or environ.get(env_key) or default


def build_browserstack_caps(parameters: Mapping | None, environ: Mapping[str, str], app_env: str) -> dict:
    """Build the BrowserStack capability payload.

    Profile parameters win over environment variables, which win over defaults.
    Credentials are checked first so nothing is allocated without them.
    """
    parameters = parameters or {}
    bs_user = environ.get("BROWSERSTACK_USERNAME")
    bs_key = environ.get("BROWSERSTACK_ACCESS_KEY")
    if not bs_user or not bs_key:
        raise ConfigError("Missing BrowserStack credentials. Set BROWSERSTACK_USERNAME and BROWSERSTACK_ACCESS_KEY.")

    caps = {
        "os": _pick(parameters, environ, "bs_os", "BS_OS", "Windows"),
        "os_version": _pick(parameters, environ, "bs_os_version", "BS_OS_VERSION", "11"),
        "browser": _pick(parameters, environ, "bs_browser", "BS_BROWSER", "chrome"),
        "browser_version": _pick(parameters, environ, "bs_browser_version", "BS_BROWSER_VERSION", "latest"),
        "browserstack.username": bs_user,
        "browserstack.accessKey": bs_key,
        "project": environ.get("BS_PROJECT") or "Behave Playwright",
        "build": environ.get("BS_BUILD") or f"build-{app_env}",
        "name": environ.get("BS_NAME") or "BDD run",
        "browserstack.playwrightVersion": "1.latest",
        "client.playwrightVersion": client_playwright_version(),
        # diagnostics
        "browserstack.debug": "true",
        "browserstack.console": "info",
        "browserstack.networkLogs": "true",
    }
    if env_flag(environ.get("BS_LOCAL")):
        caps["browserstack.local"] = "true"
        caps["browserstack.localIdentifier"] = environ.get("BS_LOCAL_ID") or "local-tunnel"
    return caps


def browserstack_ws_endpoint(caps: dict) -> str:
    return f"{BROWSERSTACK_WS_URL}?caps={urllib.parse.quote(json.dumps(caps), safe='')}"


async def connect_browserstack(playwright, caps: dict):
    # BrowserStack exposes Playwright over a Chromium websocket endpoint
    return await playwright.chromium.connect(browserstack_ws_endpoint(caps))
