import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from passthenote_e2e.config import Settings


def pytest_addoption(parser):
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="run live browser tests against the PassTheNote site"
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "e2e: live browser test against the real site")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-e2e") or os.environ.get("PASSTHENOTE_RUN_E2E") == "1":
        return
    skip_e2e = pytest.mark.skip(reason="live test; use --run-e2e or PASSTHENOTE_RUN_E2E=1")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


def make_locator():
    """Locator double: sync chaining, async actions"""
    locator = MagicMock()
    for method in ("fill", "click", "press", "wait_for"):
        setattr(locator, method, AsyncMock())
    locator.first = locator
    return locator


def make_page(url="https://www.passthenote.com/auth/login"):
    """Page double whose locator factories hand out one locator per query"""
    page = MagicMock()
    page.url = url
    page.locators = {}

    def factory(kind):
        def build(*args, **kwargs):
            key = (kind, args, tuple(sorted((k, str(v)) for k, v in kwargs.items())))
            return page.locators.setdefault(key, make_locator())
        return build

    page.locator.side_effect = factory("locator")
    for kind in ("get_by_role", "get_by_placeholder", "get_by_text", "get_by_label", "get_by_test_id"):
        getattr(page, kind).side_effect = factory(kind)

    page.goto = AsyncMock(return_value=None)
    page.wait_for_load_state = AsyncMock()
    page.wait_for_url = AsyncMock()
    page.title = AsyncMock(return_value="PassTheNote")
    page.screenshot = AsyncMock(return_value=b"png-bytes")
    page.keyboard.press = AsyncMock()
    return page


@pytest.fixture
def settings(tmp_path):
    """Offline settings with credentials and a scratch artifacts dir"""
    return Settings(
        username="qa@example.com",
        password="not-a-real-secret",
        artifacts_dir=tmp_path / "artifacts",
        retry_count=1,
        retry_delay=0
    )


@pytest.fixture
def page_factory():
    return make_page


@pytest.fixture
def mock_page():
    return make_page()
