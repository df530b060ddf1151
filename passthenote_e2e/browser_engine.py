import logging
from pathlib import Path
from typing import Dict, Optional, Union

from playwright.async_api import async_playwright, Browser, BrowserContext, Page

from .config import Settings, load_settings

logger = logging.getLogger(__name__)


class BrowserEngine:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.contexts: Dict[str, BrowserContext] = {}
        self.pages: Dict[str, Page] = {}

    async def initialize(self):
        """Start Playwright and launch the configured browser"""
        self.playwright = await async_playwright().start()
        browser_type = getattr(self.playwright, self.settings.browser)
        launch_args = {}
        if self.settings.browser == "chromium":
            launch_args["args"] = ['--no-sandbox', '--disable-setuid-sandbox']

        self.browser = await browser_type.launch(
            headless=self.settings.headless,
            slow_mo=self.settings.slow_mo,
            **launch_args
        )
        logger.info(
            "Launched %s (headless=%s)", self.settings.browser, self.settings.headless
        )

    async def get_or_create_page(self, context_id: str = "default") -> Page:
        """Get existing page or create a new one in its own browser context"""

        if self.browser is None:
            await self.initialize()

        if context_id not in self.pages:
            if context_id not in self.contexts:
                self.contexts[context_id] = await self.browser.new_context(
                    viewport={
                        "width": self.settings.viewport_width,
                        "height": self.settings.viewport_height,
                    },
                    base_url=self.settings.base_url,
                )

            page = await self.contexts[context_id].new_page()
            page.set_default_timeout(self.settings.timeout)
            page.set_default_navigation_timeout(self.settings.navigation_timeout)

            page.on("console", lambda msg: logger.debug("[%s] console: %s", context_id, msg.text))
            page.on("pageerror", lambda err: logger.warning("[%s] page error: %s", context_id, err))

            self.pages[context_id] = page

        return self.pages[context_id]

    async def close_context(self, context_id: str):
        """Close one context and forget its page"""
        self.pages.pop(context_id, None)
        context = self.contexts.pop(context_id, None)
        if context is not None:
            await context.close()

    async def take_screenshot(
            self,
            page: Page,
            path: Optional[Union[str, Path]] = None,
            full_page: bool = True
    ) -> bytes:
        """Take a screenshot, writing it to ``path`` when one is given"""
        if path is not None:
            path = Path(path)
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Saving screenshot to %s", path)
        return await page.screenshot(path=path, full_page=full_page)

    async def get_page_info(self, page: Page) -> Dict:
        return {
            "url": page.url,
            "title": await page.title(),
        }

    async def cleanup(self):
        """Clean up browser resources"""
        for context in list(self.contexts.values()):
            await context.close()
        self.contexts.clear()
        self.pages.clear()
        if self.browser:
            await self.browser.close()
            self.browser = None
        if self.playwright:
            await self.playwright.stop()
            self.playwright = None
