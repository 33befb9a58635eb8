from behave import given, then, when
from behave.api.async_step import async_run_until_complete

from hooks import STEP_TIMEOUT_S


@given("I open the home page")
@async_run_until_complete(loop="loop", timeout=STEP_TIMEOUT_S)
async def step_open_home_page(context):
    await context.world.home_page.open()


@when("I follow the home page link")
@async_run_until_complete(loop="loop", timeout=STEP_TIMEOUT_S)
async def step_follow_home_page_link(context):
    await context.world.home_page.click_on_home_page()
    await context.world.ui.wait_for_load_state("domcontentloaded")


@then("the home page header is visible")
@async_run_until_complete(loop="loop", timeout=STEP_TIMEOUT_S)
async def step_home_page_header_visible(context):
    await context.world.home_page.validate_home_page()


@then("the page has navigated away from the home page")
def step_navigated_away(context):
    current = context.world.page.url.rstrip("/")
    assert current != context.app_config.base_url.rstrip("/"), f"Still on {current}"
