import logging
import re

from playwright.async_api import Page, Locator

logger = logging.getLogger(__name__)


class DashboardPage:
    """Landing page shown after a successful login"""

    COMMERCE_NAME = re.compile(r"Commerce", re.IGNORECASE)

    def __init__(self, page: Page):
        self.page = page
        self.commerce_link: Locator = page.get_by_role("link", name=self.COMMERCE_NAME)

    async def open_commerce(self) -> str:
        """Click the Commerce box and return the URL it leads to"""
        url_before = self.page.url
        await self.commerce_link.click()
        await self.page.wait_for_load_state('networkidle')

        logger.info("URL changed from %s to %s", url_before, self.page.url)
        return self.page.url
