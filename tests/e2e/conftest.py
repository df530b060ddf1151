import pytest
import pytest_asyncio

from passthenote_e2e.browser_engine import BrowserEngine
from passthenote_e2e.config import load_settings
from passthenote_e2e.pages import LoginPage, DashboardPage


@pytest.fixture
def live_settings():
    """Settings from the environment; live tests need a real password"""
    settings = load_settings()
    if not settings.has_credentials:
        pytest.skip("set PASSTHENOTE_PASSWORD to run live tests")
    return settings


@pytest_asyncio.fixture
async def browser_engine(live_settings):
    engine = BrowserEngine(live_settings)
    await engine.initialize()
    yield engine
    await engine.cleanup()


@pytest_asyncio.fixture
async def page(browser_engine, request):
    return await browser_engine.get_or_create_page(request.node.name)


@pytest.fixture
def login_page(page, live_settings):
    return LoginPage(page, live_settings)


@pytest.fixture
def dashboard_page(page):
    return DashboardPage(page)
