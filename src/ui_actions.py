
import re
import time
from dataclasses import dataclass
from typing import Any, Union

from playwright.async_api import TimeoutError as PlaywrightTimeoutError


DEFAULT_WAIT_MS = 5000
POLL_INTERVAL_MS = 100


class ActionError(AssertionError):
    """A UI verb failed. Carries the action name and the locator description."""

    def __init__(self, message: str, action: str = "", description: str = ""):
        super().__init__(message)
        self.action = action
        self.description = description


class ActionTimeoutError(ActionError):
    pass


@dataclass(frozen=True)
class Selector:
    value: str


@dataclass(frozen=True)
class ResolvedHandle:
    locator: Any
    label: str = "[Locator]"


LocatorRef = Union[str, Selector, ResolvedHandle, Any]


def as_locator_ref(target: LocatorRef) -> Selector | ResolvedHandle:
    """Normalize a raw selector string or a Playwright Locator to the tagged form."""
    if isinstance(target, (Selector, ResolvedHandle)):
        return target
    if isinstance(target, str):
        return Selector(target)
    if target is None:
        raise ValueError("Locator reference cannot be None")
    return ResolvedHandle(target)


def describe(target: LocatorRef) -> str:
    ref = as_locator_ref(target)
    return ref.value if isinstance(ref, Selector) else ref.label


class UIActions:
    """Page-action facade bound to one scenario's page.

    Each verb resolves its locator fresh, waits for its precondition, acts,
    and either returns or raises a single ActionError naming the locator.
    """

    def __init__(self, page, verbose: bool = False):
        self.page = page
        self.verbose = verbose

    def _resolve(self, target: LocatorRef):
        ref = as_locator_ref(target)
        if isinstance(ref, Selector):
            return self.page.locator(ref.value), ref.value
        return ref.locator, ref.label

    def _log(self, msg: str) -> None:
        if self.verbose:
            print(f"→ {msg}")

    async def wait(self, ms: int) -> None:
        await self.page.wait_for_timeout(ms)

    async def scroll_into_center(self, target: LocatorRef, timeout: int | None = None) -> None:
        locator, _ = self._resolve(target)
        try:
            await locator.evaluate(
                "el => el.scrollIntoView({block: 'center', inline: 'center'})",
                timeout=timeout,
            )
        except Exception:
            # Non-fatal: element may be mid-transition
            pass

    async def click(self, target: LocatorRef, timeout: int | None = None) -> None:
        locator, desc = self._resolve(target)
        self._log(f"Clicking {desc}")
        try:
            await locator.wait_for(state="attached", timeout=timeout)
            await locator.wait_for(state="visible", timeout=timeout)
            await self.scroll_into_center(locator, timeout=timeout)
            await locator.click(timeout=timeout)
        except Exception as e:
            raise ActionError(f'Failed to click "{desc}": {e}', "click", desc) from e

    async def click_with_retry(self, target: LocatorRef, retries: int = 2, delay_ms: int = 300, timeout: int | None = None) -> None:
        desc = describe(target)
        last_error: Exception | None = None
        for attempt in range(retries + 1):
            try:
                await self.click(target, timeout=timeout)
                return
            except ActionError as e:
                last_error = e
                if attempt < retries:
                    self._log(f"Click attempt {attempt + 1} on {desc} failed, retrying in {delay_ms}ms")
                    await self.wait(delay_ms)
        raise ActionError(
            f'Failed to click "{desc}" after {retries + 1} attempts: {last_error}',
            "click_with_retry",
            desc,
        ) from last_error

    async def type(self, target: LocatorRef, text: str, clear: bool = False, timeout: int | None = None) -> None:
        locator, desc = self._resolve(target)
        self._log(f"Typing into {desc}")
        try:
            await locator.wait_for(state="visible", timeout=timeout)
            await self.scroll_into_center(locator, timeout=timeout)
            if clear:
                await locator.fill("", timeout=timeout)
            await locator.press_sequentially(text, timeout=timeout)
        except Exception as e:
            raise ActionError(f'Failed to type into "{desc}": {e}', "type", desc) from e

    async def set_value(self, target: LocatorRef, value: str | int | float, timeout: int | None = None) -> None:
        """Replace the field content with ``value`` (clear, then fill)."""
        locator, desc = self._resolve(target)
        self._log(f"Setting value on {desc}")
        try:
            if value is None:
                raise ValueError("Value cannot be None")
            await locator.wait_for(state="visible", timeout=timeout)
            await self.scroll_into_center(locator, timeout=timeout)
            await locator.fill("", timeout=timeout)
            await locator.fill(str(value), timeout=timeout)
        except Exception as e:
            raise ActionError(f'Failed to set value "{value}" in "{desc}": {e}', "set_value", desc) from e

    async def clear_value(self, target: LocatorRef, timeout: int | None = None) -> None:
        locator, desc = self._resolve(target)
        try:
            await locator.wait_for(state="visible", timeout=timeout)
            await self.scroll_into_center(locator, timeout=timeout)
            await locator.fill("", timeout=timeout)
        except Exception as e:
            raise ActionError(f'Failed to clear value in "{desc}": {e}', "clear_value", desc) from e

    async def get_text(self, target: LocatorRef, timeout: int | None = None) -> str:
        locator, desc = self._resolve(target)
        try:
            await locator.wait_for(state="visible", timeout=timeout)
            await self.scroll_into_center(locator, timeout=timeout)
            return (await locator.text_content(timeout=timeout)) or ""
        except Exception as e:
            raise ActionError(f'Failed to get text from "{desc}": {e}', "get_text", desc) from e

    async def _wait_for_state(self, target: LocatorRef, state: str, timeout: int) -> None:
        locator, desc = self._resolve(target)
        self._log(f"Waiting up to {timeout}ms for {desc} to be {state}")
        try:
            await locator.wait_for(state=state, timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise ActionTimeoutError(
                f'Element "{desc}" did not become {state} within {timeout}ms: {e}',
                f"wait_for_{state}",
                desc,
            ) from e
        except Exception as e:
            raise ActionError(f'Failed waiting for "{desc}" to be {state}: {e}', f"wait_for_{state}", desc) from e

    async def wait_for_visible(self, target: LocatorRef, timeout: int = DEFAULT_WAIT_MS) -> None:
        await self._wait_for_state(target, "visible", timeout)

    async def wait_for_not_visible(self, target: LocatorRef, timeout: int = DEFAULT_WAIT_MS) -> None:
        await self._wait_for_state(target, "hidden", timeout)

    async def wait_for_detached(self, target: LocatorRef, timeout: int = DEFAULT_WAIT_MS) -> None:
        await self._wait_for_state(target, "detached", timeout)

    async def _poll(self, check, timeout: int) -> bool:
        # Playwright has no enabled/disabled/text state wait; poll instead.
        # Each check is capped by the time left before the deadline.
        deadline = time.monotonic() + timeout / 1000
        while True:
            remaining_ms = max(1, (deadline - time.monotonic()) * 1000)
            if await check(remaining_ms):
                return True
            if time.monotonic() >= deadline:
                return False
            await self.wait(POLL_INTERVAL_MS)

    async def wait_for_enabled(self, target: LocatorRef, timeout: int = DEFAULT_WAIT_MS) -> None:
        locator, desc = self._resolve(target)

        async def enabled(remaining_ms: float) -> bool:
            try:
                return await locator.is_enabled(timeout=remaining_ms)
            except Exception:
                return False

        if not await self._poll(enabled, timeout):
            raise ActionTimeoutError(f'Element "{desc}" did not become enabled within {timeout}ms', "wait_for_enabled", desc)

    async def wait_for_disabled(self, target: LocatorRef, timeout: int = DEFAULT_WAIT_MS) -> None:
        locator, desc = self._resolve(target)

        async def disabled(remaining_ms: float) -> bool:
            try:
                return not await locator.is_enabled(timeout=remaining_ms)
            except Exception:
                return False

        if not await self._poll(disabled, timeout):
            raise ActionTimeoutError(f'Element "{desc}" did not become disabled within {timeout}ms', "wait_for_disabled", desc)

    async def wait_for_text(self, target: LocatorRef, expected: str | re.Pattern, timeout: int = DEFAULT_WAIT_MS) -> None:
        """Wait until the element text equals ``expected`` (trimmed) or matches the pattern."""
        locator, desc = self._resolve(target)

        async def matches(remaining_ms: float) -> bool:
            try:
                text = (await locator.text_content(timeout=remaining_ms)) or ""
            except Exception:
                text = ""
            if isinstance(expected, re.Pattern):
                return expected.search(text) is not None
            return text.strip() == expected

        if not await self._poll(matches, timeout):
            shown = expected.pattern if isinstance(expected, re.Pattern) else expected
            raise ActionTimeoutError(f'Text did not match "{shown}" on "{desc}" within {timeout}ms', "wait_for_text", desc)

    async def wait_for_url(self, url_or_pattern, timeout: int = DEFAULT_WAIT_MS) -> None:
        await self.page.wait_for_url(url_or_pattern, timeout=timeout)

    async def wait_for_load_state(self, state: str = "load", timeout: int = 10000) -> None:
        await self.page.wait_for_load_state(state, timeout=timeout)

    async def refresh_page(self, state: str = "load") -> None:
        await self.page.reload()
        await self.page.wait_for_load_state(state)

    async def navigate_to(self, url: str) -> None:
        self._log(f"Navigating to {url}")
        await self.page.goto(url)

    async def hover(self, target: LocatorRef, timeout: int | None = None) -> None:
        locator, desc = self._resolve(target)
        try:
            await locator.wait_for(state="visible", timeout=timeout)
            await locator.hover(timeout=timeout)
        except Exception as e:
            raise ActionError(f'Failed to hover "{desc}": {e}', "hover", desc) from e

    async def press_key(self, key: str) -> None:
        await self.page.keyboard.press(key)

    async def upload_file(self, target: LocatorRef, file_paths, timeout: int | None = None) -> None:
        locator, desc = self._resolve(target)
        try:
            await locator.set_input_files(file_paths, timeout=timeout)
        except Exception as e:
            raise ActionError(f'Failed to upload to "{desc}": {e}', "upload_file", desc) from e

    async def scroll_to_top(self) -> None:
        await self.page.evaluate("() => window.scrollTo({top: 0, behavior: 'smooth'})")

    async def scroll_to_bottom(self) -> None:
        await self.page.evaluate("() => window.scrollTo({top: document.body.scrollHeight, behavior: 'smooth'})")

    async def _select(self, target: LocatorRef, what: str, timeout: int | None, **option) -> list[str]:
        locator, desc = self._resolve(target)
        self._log(f"Selecting {what} on {desc}")
        try:
            result = await locator.select_option(timeout=timeout, **option)
        except Exception as e:
            raise ActionError(f'Failed to select {what} on "{desc}": {e}', "select", desc) from e
        if not result:
            raise ActionError(f'Failed to select {what} on "{desc}"', "select", desc)
        return result

    async def select_dropdown_by_value(self, target: LocatorRef, value: str, timeout: int | None = None) -> list[str]:
        return await self._select(target, f'value "{value}"', timeout, value=value)

    async def select_dropdown_by_label(self, target: LocatorRef, label: str, timeout: int | None = None) -> list[str]:
        return await self._select(target, f'label "{label}"', timeout, label=label)

    async def select_dropdown_by_index(self, target: LocatorRef, index: int, timeout: int | None = None) -> list[str]:
        locator, desc = self._resolve(target)
        try:
            count = await locator.locator("option").count()
        except Exception as e:
            raise ActionError(f'Failed to read options of "{desc}": {e}', "select", desc) from e
        if index < 0 or index >= count:
            raise ActionError(f'No option found at index {index} for "{desc}"', "select", desc)
        return await self._select(ResolvedHandle(locator, desc), f"index {index}", timeout, index=index)

    async def is_visible(self, target: LocatorRef) -> bool:
        locator, _ = self._resolve(target)
        try:
            return await locator.is_visible()
        except Exception:
            # Detached or invalid locator
            return False
