"""
PassTheNote E2E

End-to-end browser tests for the PassTheNote login and Commerce flows.
"""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .browser_engine import BrowserEngine
from .action_executor import ActionExecutor
from .history import RunHistory
from .runner import SuiteRunner
from .pages import LoginPage, DashboardPage
from .scenarios import SCENARIOS, get_scenario, list_scenarios

__all__ = [
    "Settings",
    "load_settings",
    "BrowserEngine",
    "ActionExecutor",
    "RunHistory",
    "SuiteRunner",
    "LoginPage",
    "DashboardPage",
    "SCENARIOS",
    "get_scenario",
    "list_scenarios"
]
