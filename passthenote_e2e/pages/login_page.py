import logging
from typing import Optional

from playwright.async_api import Page, Locator, TimeoutError as PlaywrightTimeoutError

from ..config import Settings, load_settings

logger = logging.getLogger(__name__)

LOGIN_URL_MARKER = "/login"


class LoginPage:
    """Page object for the PassTheNote sign-in form"""

    USERNAME_SELECTOR = 'input[type="email"]'
    PASSWORD_SELECTOR = 'input[type="password"]'
    SUBMIT_SELECTOR = 'button:has-text("Login"), button[type="submit"]'

    def __init__(self, page: Page, settings: Optional[Settings] = None):
        self.page = page
        self.settings = settings or load_settings()
        self.username_input: Locator = page.locator(self.USERNAME_SELECTOR)
        self.password_input: Locator = page.locator(self.PASSWORD_SELECTOR)
        # Both selector branches can match the same button
        self.login_button: Locator = page.locator(self.SUBMIT_SELECTOR).first

    async def goto(self):
        await self.page.goto(self.settings.login_url)

    async def login(self, username: str, password: str):
        await self.username_input.fill(username)
        await self.password_input.fill(password)
        await self.login_button.click()
        await self.page.wait_for_load_state('networkidle')

    async def is_login_successful(self, timeout: Optional[int] = None) -> bool:
        """Wait for a redirect away from the login page, then report where we are"""
        try:
            await self.page.wait_for_url(
                lambda url: LOGIN_URL_MARKER not in url,
                timeout=self.settings.timeout if timeout is None else timeout
            )
        except PlaywrightTimeoutError:
            logger.info("Still on login page after waiting: %s", self.page.url)

        return LOGIN_URL_MARKER not in self.page.url
