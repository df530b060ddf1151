import re
from unittest.mock import call

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from passthenote_e2e.pages import LoginPage, DashboardPage


class TestLoginPage:
    """Test suite for the login page object"""

    @pytest.fixture
    def login_page(self, mock_page, settings):
        return LoginPage(mock_page, settings)

    def test_locators(self, login_page, mock_page):
        """Locators are built once, from the form's CSS selectors"""
        selectors = [c.args[0] for c in mock_page.locator.call_args_list]

        assert selectors == [
            'input[type="email"]',
            'input[type="password"]',
            'button:has-text("Login"), button[type="submit"]',
        ]
        assert login_page.login_button is mock_page.locator(LoginPage.SUBMIT_SELECTOR).first

    @pytest.mark.asyncio
    async def test_goto_opens_login_url(self, login_page, mock_page, settings):
        await login_page.goto()

        mock_page.goto.assert_awaited_once_with(settings.login_url)

    @pytest.mark.asyncio
    async def test_login_fills_and_submits(self, login_page, mock_page):
        await login_page.login("qa@example.com", "pw")

        login_page.username_input.fill.assert_awaited_once_with("qa@example.com")
        login_page.password_input.fill.assert_awaited_once_with("pw")
        login_page.login_button.click.assert_awaited_once()
        mock_page.wait_for_load_state.assert_awaited_once_with('networkidle')

    @pytest.mark.asyncio
    async def test_login_successful_after_redirect(self, login_page, mock_page):
        mock_page.url = "https://www.passthenote.com/app/dashboard"

        assert await login_page.is_login_successful() is True

        kwargs = mock_page.wait_for_url.await_args.kwargs
        assert kwargs["timeout"] == 10000
        predicate = mock_page.wait_for_url.await_args.args[0]
        assert predicate("https://www.passthenote.com/app") is True
        assert predicate("https://www.passthenote.com/auth/login") is False

    @pytest.mark.asyncio
    async def test_login_unsuccessful_when_wait_times_out(self, login_page, mock_page):
        """A timed-out wait is not an error; the URL decides"""
        mock_page.wait_for_url.side_effect = PlaywrightTimeoutError("Timeout 100ms exceeded")

        assert await login_page.is_login_successful(timeout=100) is False
        assert mock_page.wait_for_url.await_args.kwargs["timeout"] == 100

    @pytest.mark.asyncio
    async def test_explicit_zero_timeout_is_kept(self, login_page, mock_page):
        mock_page.url = "https://www.passthenote.com/app/dashboard"

        await login_page.is_login_successful(timeout=0)

        assert mock_page.wait_for_url.await_args.kwargs["timeout"] == 0


class TestDashboardPage:

    def test_commerce_link_by_role(self, mock_page):
        DashboardPage(mock_page)

        args, kwargs = mock_page.get_by_role.call_args
        assert args == ("link",)
        assert kwargs["name"].search("COMMERCE")
        assert kwargs["name"].flags & re.IGNORECASE

    @pytest.mark.asyncio
    async def test_open_commerce_returns_new_url(self, mock_page):
        dashboard = DashboardPage(mock_page)
        mock_page.url = "https://www.passthenote.com/app"

        async def navigate():
            mock_page.url = "https://www.passthenote.com/app/commerce"

        dashboard.commerce_link.click.side_effect = navigate

        assert await dashboard.open_commerce() == "https://www.passthenote.com/app/commerce"
        assert mock_page.wait_for_load_state.await_args_list == [call('networkidle')]
