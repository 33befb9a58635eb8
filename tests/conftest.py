"""Shared fakes standing in for Playwright page/locator objects."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from app_config import AppConfig


class FakeOptions:
    def __init__(self, count: int) -> None:
        self._count = count

    async def count(self) -> int:
        return self._count


class FakeLocator:
    """Minimal async Locator double. Records every call in ``calls``."""

    def __init__(self, selector: str = "#el", *, present: bool = True) -> None:
        self.selector = selector
        self.present = present
        self.visible = present
        self.enabled = True
        self.text: str | None = ""
        self.value = ""
        self.click_failures = 0
        self.scroll_error: Exception | None = None
        self.select_result: list[str] = ["x"]
        self.option_count = 3
        self.calls: list[tuple[str, Any]] = []

    async def wait_for(self, state: str = "visible", timeout: float | None = None) -> None:
        self.calls.append(("wait_for", state))
        satisfied = {
            "attached": self.present,
            "visible": self.present and self.visible,
            "hidden": not (self.present and self.visible),
            "detached": not self.present,
        }[state]
        if not satisfied:
            await asyncio.sleep((timeout or 0) / 1000)
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {state}")

    async def evaluate(self, expression: str, arg: Any = None, timeout: float | None = None) -> None:
        self.calls.append(("evaluate", expression))
        if self.scroll_error:
            raise self.scroll_error

    async def click(self, timeout: float | None = None) -> None:
        self.calls.append(("click", None))
        if self.click_failures > 0:
            self.click_failures -= 1
            raise RuntimeError("Element is intercepted by overlay")

    async def fill(self, value: str, timeout: float | None = None) -> None:
        self.calls.append(("fill", value))
        self.value = value

    async def press_sequentially(self, text: str, timeout: float | None = None) -> None:
        self.calls.append(("press_sequentially", text))
        self.value += text

    async def text_content(self, timeout: float | None = None) -> str | None:
        return self.text

    async def is_enabled(self, timeout: float | None = None) -> bool:
        if isinstance(self.enabled, Exception):
            raise self.enabled
        return self.enabled

    async def is_visible(self, timeout: float | None = None) -> bool:
        if isinstance(self.visible, Exception):
            raise self.visible
        return self.present and self.visible

    async def hover(self, timeout: float | None = None) -> None:
        self.calls.append(("hover", None))

    async def set_input_files(self, files: Any, timeout: float | None = None) -> None:
        self.calls.append(("set_input_files", files))

    async def select_option(self, timeout: float | None = None, **option: Any) -> list[str]:
        self.calls.append(("select_option", option))
        return self.select_result

    def locator(self, selector: str) -> FakeOptions:
        return FakeOptions(self.option_count)


class FakeKeyboard:
    def __init__(self) -> None:
        self.pressed: list[str] = []

    async def press(self, key: str) -> None:
        self.pressed.append(key)


class FakePage:
    def __init__(self) -> None:
        self.locators: dict[str, FakeLocator] = {}
        self.waits: list[int] = []
        self.url = "about:blank"
        self.keyboard = FakeKeyboard()
        self.goto_calls: list[str] = []

    def locator(self, selector: str) -> FakeLocator:
        if selector not in self.locators:
            self.locators[selector] = FakeLocator(selector, present=False)
        return self.locators[selector]

    def add(self, selector: str, **attrs: Any) -> FakeLocator:
        loc = FakeLocator(selector)
        for key, value in attrs.items():
            setattr(loc, key, value)
        self.locators[selector] = loc
        return loc

    async def wait_for_timeout(self, ms: int) -> None:
        self.waits.append(ms)
        await asyncio.sleep(ms / 1000)

    async def goto(self, url: str) -> None:
        self.goto_calls.append(url)
        self.url = url


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "common": {"url": "https://example.com", "timeout": 10},
                "tst": {"environment": "tst"},
                "stg": {"environment": "stg", "url": "https://stg.example.com"},
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(app_env="tst", base_url="https://example.com", settings={"url": "https://example.com"})
