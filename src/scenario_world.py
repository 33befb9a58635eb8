
import enum
import os
from typing import Mapping

from app_config import AppConfig, env_flag
from monitoring import enable_monitoring
from page_objects import HomePage, PageFactory
from session_launcher import Session, Target, close_session, launch_session
from ui_actions import UIActions


class WorldState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    TORN_DOWN = "torn-down"


class ScenarioWorld:
    """Per-scenario container for the session, the action facade and page objects.

    Lifecycle: uninitialized -> active (start) -> torn-down (teardown).
    An instance is never reused for another scenario.
    """

    def __init__(
        self,
        config: AppConfig,
        parameters: Mapping | None = None,
        environ: Mapping[str, str] | None = None,
        target: Target | None = None,
    ):
        self.config = config
        self.parameters = dict(parameters or {})
        self.environ = os.environ if environ is None else environ
        self.target = target
        self.state = WorldState.UNINITIALIZED
        self.session: Session | None = None
        self.ui: UIActions | None = None
        self.pages = PageFactory(self)

    @property
    def page(self):
        return self.session.page if self.session else None

    @property
    def browser(self):
        return self.session.browser if self.session else None

    @property
    def browser_context(self):
        return self.session.context if self.session else None

    def _require_active(self) -> None:
        if self.state is not WorldState.ACTIVE:
            raise RuntimeError(f"Scenario world is {self.state.value}, expected active")

    async def start(self, playwright) -> "ScenarioWorld":
        if self.state is not WorldState.UNINITIALIZED:
            raise RuntimeError(f"Scenario world cannot start from state {self.state.value}")
        self.session = await launch_session(playwright, self.parameters, self.environ, self.config, target=self.target)
        self.ui = UIActions(self.session.page, verbose=self.config.verbose)
        self.pages.reset()
        if env_flag(self.parameters.get("monitor", self.environ.get("MONITOR"))):
            enable_monitoring(self.session.page)
        self.state = WorldState.ACTIVE
        return self

    def page_object(self, page_cls):
        self._require_active()
        return self.pages.get(page_cls)

    @property
    def home_page(self) -> HomePage:
        return self.page_object(HomePage)

    async def capture_failure(self) -> bytes:
        self._require_active()
        return await self.page.screenshot(full_page=False, type="png")

    async def teardown(self) -> list:
        failures = []
        if self.state is WorldState.ACTIVE:
            failures = await close_session(self.session, verbose=self.config.verbose)
        self.pages.reset()
        self.state = WorldState.TORN_DOWN
        return failures
