"""Runs every catalog scenario against the live site."""
import pytest

from passthenote_e2e.runner import SuiteRunner
from passthenote_e2e.scenarios import SCENARIOS

pytestmark = [pytest.mark.e2e, pytest.mark.asyncio]


@pytest.mark.parametrize("name", list(SCENARIOS))
async def test_scenario(name, browser_engine, live_settings):
    runner = SuiteRunner(live_settings, browser_engine=browser_engine)

    result = await runner.run_scenario(name)

    failed = [r for r in result["results"] if not r["result"].get("success")]
    assert result["success"], failed
    assert result["steps_executed"] == result["total_steps"]
