
import json
from pathlib import Path

from app_config import AppConfig
from ui_actions import UIActions


ELEMENTS_DIR = Path("data/page_elements")


def load_elements(name: str, elements_dir: Path = ELEMENTS_DIR) -> dict:
    path = Path(elements_dir) / f"{name}.json"
    return json.loads(path.read_text(encoding="utf-8"))


class BasePage:
    elements_file: str | None = None

    def __init__(self, page, ui: UIActions, config: AppConfig, elements: dict | None = None):
        self.page = page
        self.ui = ui
        self.config = config
        if elements is None and self.elements_file:
            elements = load_elements(self.elements_file)
        self.elements = elements or {}

    def el(self, key: str):
        value = self.elements[key]
        # Element maps may wrap the selector: {"locator": "..."}
        return value["locator"] if isinstance(value, dict) else value


class HomePage(BasePage):
    elements_file = "home_page"

    async def open(self) -> None:
        await self.ui.navigate_to(self.config.base_url)

    async def click_on_home_page(self) -> None:
        if self.config.verbose:
            print(f"→ Environment is {self.config.app_env}")
        await self.ui.click(self.el("primary_link"))

    async def validate_home_page(self) -> bool:
        await self.ui.wait_for_visible(self.el("header"), 5000)
        visible = await self.ui.is_visible(self.el("header"))
        if not visible:
            raise AssertionError(f'Home page header "{self.el("header")}" is not visible')
        return visible


class PageFactory:
    """Builds page objects on first request and reuses them for the scenario."""

    def __init__(self, world):
        self.world = world
        self._cache: dict[type, BasePage] = {}

    def get(self, page_cls: type[BasePage]) -> BasePage:
        if page_cls not in self._cache:
            self._cache[page_cls] = page_cls(self.world.page, self.world.ui, self.world.config)
        return self._cache[page_cls]

    def reset(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
