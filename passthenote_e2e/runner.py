import logging
import time
from typing import Dict, Iterable, List, Optional, Union

from playwright.async_api import Error as PlaywrightError

from .action_executor import ActionExecutor
from .browser_engine import BrowserEngine
from .config import Settings, load_settings
from .history import RunHistory
from .scenarios import SCENARIOS, get_scenario
from .steps import Scenario

logger = logging.getLogger(__name__)


class SuiteRunner:
    """Runs catalog scenarios in fresh browser contexts"""

    def __init__(
            self,
            settings: Optional[Settings] = None,
            browser_engine: Optional[BrowserEngine] = None,
            executor: Optional[ActionExecutor] = None,
            history: Optional[RunHistory] = None
    ):
        self.settings = settings or load_settings()
        self.browser_engine = browser_engine or BrowserEngine(self.settings)
        self.executor = executor or ActionExecutor(self.settings)
        self.history = history or RunHistory()

    async def initialize(self):
        await self.browser_engine.initialize()

    async def run_scenario(self, scenario: Union[str, Scenario]) -> Dict:
        """Run one scenario, stopping at the first failing step"""
        if isinstance(scenario, str):
            scenario = get_scenario(scenario)

        if scenario.requires_credentials and not self.settings.has_credentials:
            logger.warning("Skipping %s: no password configured", scenario.name)
            result = {
                "scenario": scenario.name,
                "title": scenario.title,
                "success": False,
                "skipped": True,
                "reason": "no password configured",
                "steps_executed": 0,
                "total_steps": len(scenario.steps),
                "results": [],
                "final_url": "",
            }
            self.history.record(scenario.name, result)
            return result

        rendered = scenario.render(self.settings.test_data())
        context_id = scenario.name
        page = await self.browser_engine.get_or_create_page(context_id)

        logger.info("Running %s", scenario.title)
        started = time.monotonic()
        state: Dict = {}
        results = []
        try:
            for step in rendered.steps:
                try:
                    step_result = await self.executor.execute(page, step, state)
                except Exception as e:
                    logger.exception("Step '%s' raised", step.label())
                    step_result = {"success": False, "error": str(e)}
                results.append({
                    "step": step.label(),
                    "result": step_result
                })

                # Stop on failure
                if not step_result.get('success'):
                    break

            success = bool(results) and all(r['result'].get('success') for r in results)
            final_url = page.url

            screenshot = None
            if not success and self.settings.screenshot_on_failure:
                path = str(self.settings.artifacts_dir / "failures" / f"{scenario.name}.png")
                try:
                    await self.browser_engine.take_screenshot(page, path)
                    screenshot = path
                except (PlaywrightError, OSError) as e:
                    logger.warning("Could not capture failure screenshot for %s: %s", scenario.name, e)
        finally:
            await self.browser_engine.close_context(context_id)

        result = {
            "scenario": scenario.name,
            "title": scenario.title,
            "success": success,
            "skipped": False,
            "steps_executed": len(results),
            "total_steps": len(rendered.steps),
            "results": results,
            "final_url": final_url,
            "duration": round(time.monotonic() - started, 3),
        }
        if screenshot:
            result["screenshot"] = screenshot

        logger.info("%s: %s", scenario.name, "passed" if success else "FAILED")
        self.history.record(scenario.name, result)
        return result

    async def run_suite(self, names: Optional[Iterable[str]] = None) -> Dict:
        """Run the named scenarios, or the whole catalog"""
        scenarios: List[Scenario] = [get_scenario(name) for name in names] if names else list(SCENARIOS.values())

        results = []
        for scenario in scenarios:
            results.append(await self.run_scenario(scenario))

        skipped = sum(1 for r in results if r.get('skipped'))
        passed = sum(1 for r in results if r['success'])
        failed = len(results) - passed - skipped

        return {
            "success": failed == 0 and passed > 0,
            "total": len(results),
            "passed": passed,
            "failed": failed,
            "skipped": skipped,
            "results": results
        }

    async def cleanup(self):
        await self.browser_engine.cleanup()
