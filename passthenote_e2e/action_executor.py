import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urljoin

from playwright.async_api import Page, Locator, Error as PlaywrightError, expect

from .config import Settings, load_settings
from .exceptions import E2EError, ElementNotFoundError
from .steps import Step

logger = logging.getLogger(__name__)


class ActionExecutor:
    """Runs scenario steps against a page, retrying failed attempts"""

    def __init__(
            self,
            settings: Optional[Settings] = None,
            retry_count: Optional[int] = None,
            retry_delay: Optional[float] = None
    ):
        self.settings = settings or load_settings()
        self.retry_count = retry_count or self.settings.retry_count
        self.retry_delay = self.settings.retry_delay if retry_delay is None else retry_delay
        self.action_handlers = {
            'navigate': self._execute_navigate,
            'fill': self._execute_fill,
            'click': self._execute_click,
            'press': self._execute_press,
            'expect_url': self._execute_expect_url,
            'expect_visible': self._execute_expect_visible,
            'expect_enabled': self._execute_expect_enabled,
            'expect_title': self._execute_expect_title,
            'wait_for_load_state': self._execute_wait_for_load_state,
            'remember_url': self._execute_remember_url,
            'wait_for_url_change': self._execute_wait_for_url_change,
            'log_url': self._execute_log_url,
            'screenshot': self._execute_screenshot,
        }

    async def execute(
            self,
            page: Page,
            step: Step,
            state: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Execute a step with retry logic.

        ``state`` is shared by the steps of one scenario run (remembered URLs).
        """
        state = {} if state is None else state
        action_type = step.action.lower()

        if action_type not in self.action_handlers:
            return {
                "success": False,
                "error": f"Unknown action type: {action_type}",
                "action": step.action
            }

        handler = self.action_handlers[action_type]

        for attempt in range(self.retry_count):
            try:
                result = await handler(page, step, state)
                result["attempts"] = attempt + 1
                return result
            except (PlaywrightError, AssertionError, E2EError) as e:
                if attempt < self.retry_count - 1:
                    logger.debug("Retrying %s after: %s", step.label(), e)
                    await asyncio.sleep(self.retry_delay)
                    continue
                logger.warning("Step failed: %s: %s", step.label(), e)
                return {
                    "success": False,
                    "error": str(e),
                    "action": step.action,
                    "attempts": attempt + 1
                }

    def _locate(self, page: Page, step: Step) -> Locator:
        if step.target is None:
            raise ElementNotFoundError(f"Step '{step.label()}' has no target")
        return step.target.resolve(page)

    def _timeout(self, step: Step) -> int:
        return int(step.options.get('timeout', self.settings.timeout))

    async def _execute_navigate(self, page: Page, step: Step, state: Dict) -> Dict:
        """Navigate to a URL, relative ones resolved against base_url"""
        url = step.value
        if not url.startswith(('http://', 'https://')):
            url = urljoin(self.settings.base_url + '/', url.lstrip('/'))

        wait_until = step.options.get('wait_until', 'load')
        response = await page.goto(url, wait_until=wait_until)

        return {
            "success": response.ok if response else True,
            "url": page.url,
            "status": response.status if response else None
        }

    async def _execute_fill(self, page: Page, step: Step, state: Dict) -> Dict:
        locator = self._locate(page, step)
        await locator.fill(step.value)

        # Never echo secrets into results
        shown = "***" if step.options.get('secret') else step.value
        return {
            "success": True,
            "filled": step.target.describe(),
            "value": shown
        }

    async def _execute_click(self, page: Page, step: Step, state: Dict) -> Dict:
        locator = self._locate(page, step)
        await locator.click()

        wait_until = step.options.get('wait_until')
        if wait_until:
            await page.wait_for_load_state(wait_until)

        return {
            "success": True,
            "clicked": step.target.describe(),
            "new_url": page.url
        }

    async def _execute_press(self, page: Page, step: Step, state: Dict) -> Dict:
        if step.target is not None:
            await self._locate(page, step).press(step.value)
        else:
            await page.keyboard.press(step.value)

        return {
            "success": True,
            "pressed": step.value
        }

    async def _execute_expect_url(self, page: Page, step: Step, state: Dict) -> Dict:
        """Assert the page URL.

        Modes: exact, not_exact, contains, not_contains, regex.
        """
        mode = step.options.get('match', 'exact')
        expected = step.value
        timeout = self._timeout(step)
        assertion = expect(page)

        if mode == 'exact':
            await assertion.to_have_url(expected, timeout=timeout)
        elif mode == 'not_exact':
            await assertion.not_to_have_url(expected, timeout=timeout)
        elif mode == 'contains':
            await assertion.to_have_url(re.compile(re.escape(expected)), timeout=timeout)
        elif mode == 'not_contains':
            await assertion.not_to_have_url(re.compile(re.escape(expected)), timeout=timeout)
        elif mode == 'regex':
            await assertion.to_have_url(re.compile(expected), timeout=timeout)
        else:
            raise E2EError(f"Unknown URL match mode: {mode}")

        return {
            "success": True,
            "assertion": f"url {mode} {expected}",
            "actual": page.url
        }

    async def _execute_expect_visible(self, page: Page, step: Step, state: Dict) -> Dict:
        locator = self._locate(page, step)
        await expect(locator).to_be_visible(timeout=self._timeout(step))

        return {
            "success": True,
            "assertion": f"{step.target.describe()} is visible"
        }

    async def _execute_expect_enabled(self, page: Page, step: Step, state: Dict) -> Dict:
        locator = self._locate(page, step)
        await expect(locator).to_be_enabled(timeout=self._timeout(step))

        return {
            "success": True,
            "assertion": f"{step.target.describe()} is enabled"
        }

    async def _execute_expect_title(self, page: Page, step: Step, state: Dict) -> Dict:
        """Assert the title contains (or with ``negate``, lacks) the value"""
        pattern = re.compile(re.escape(step.value), re.IGNORECASE)
        timeout = self._timeout(step)
        negate = bool(step.options.get('negate'))

        if negate:
            await expect(page).not_to_have_title(pattern, timeout=timeout)
        else:
            await expect(page).to_have_title(pattern, timeout=timeout)

        return {
            "success": True,
            "assertion": f"title {'lacks' if negate else 'contains'} {step.value}",
            "actual": await page.title()
        }

    async def _execute_wait_for_load_state(self, page: Page, step: Step, state: Dict) -> Dict:
        load_state = step.value or 'load'
        await page.wait_for_load_state(load_state, timeout=self._timeout(step))

        return {
            "success": True,
            "waited_for": load_state
        }

    async def _execute_remember_url(self, page: Page, step: Step, state: Dict) -> Dict:
        key = step.value or 'previous'
        state.setdefault('urls', {})[key] = page.url

        return {
            "success": True,
            "remembered": key,
            "url": page.url
        }

    async def _execute_wait_for_url_change(self, page: Page, step: Step, state: Dict) -> Dict:
        """Wait until the URL differs from the one remembered under ``value``"""
        key = step.value or 'previous'
        urls = state.get('urls', {})
        if key not in urls:
            raise E2EError(f"No URL remembered under '{key}'")

        previous = urls[key]
        await page.wait_for_url(lambda url: url != previous, timeout=self._timeout(step))

        return {
            "success": True,
            "from": previous,
            "to": page.url
        }

    async def _execute_log_url(self, page: Page, step: Step, state: Dict) -> Dict:
        previous = state.get('urls', {}).get(step.value) if step.value else None

        if previous is not None:
            logger.info("URL changed from %s to %s", previous, page.url)
        else:
            logger.info("Navigated to URL: %s", page.url)

        return {
            "success": True,
            "url": page.url,
            "previous": previous
        }

    async def _execute_screenshot(self, page: Page, step: Step, state: Dict) -> Dict:
        path = Path(step.value or 'screenshot.png')
        if not path.is_absolute():
            path = self.settings.artifacts_dir / path
        path.parent.mkdir(parents=True, exist_ok=True)

        screenshot_bytes = await page.screenshot(
            path=path,
            full_page=step.options.get('full_page', True)
        )

        return {
            "success": True,
            "filename": str(path),
            "size": len(screenshot_bytes)
        }
