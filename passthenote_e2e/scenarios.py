"""
The PassTheNote test cases as data.

Values use ``${login_url}``, ``${username}`` and ``${password}`` placeholders,
filled from ``Settings.test_data()`` when a scenario runs.
"""

from typing import Dict, List

from .exceptions import ScenarioNotFoundError
from .steps import Scenario, Step, Target

EMAIL_INPUT = Target(value='input[type="email"]')
PASSWORD_INPUT = Target(value='input[type="password"]')
SUBMIT_BUTTON = Target(value='button[type="submit"]')
COMMERCE_LINK = Target(by="role", value="link", name="Commerce", name_pattern=True)


def _login_steps() -> List[Step]:
    return [
        Step(action="navigate", value="${login_url}", description="Navigate to login page"),
        Step(action="expect_url", value="${login_url}", description="Verify we are on the login page"),
        Step(action="fill", target=EMAIL_INPUT, value="${username}", description="Fill in email"),
        Step(action="fill", target=PASSWORD_INPUT, value="${password}",
             options={"secret": True}, description="Fill in password"),
    ]


SIGN_IN_WITH_PLACEHOLDERS = Scenario(
    name="sign_in_with_placeholders",
    title="Sign in using placeholder and role locators",
    description="Fills the form by placeholder text, signs in and captures the app page.",
    tags=["login", "smoke"],
    steps=[
        Step(action="navigate", value="${login_url}", description="Open login page"),
        Step(action="fill", target=Target(by="placeholder", value="you@example.com"),
             value="${username}", description="Fill email by placeholder"),
        Step(action="fill", target=Target(by="placeholder", value="Enter your password"),
             value="${password}", options={"secret": True}, description="Fill password by placeholder"),
        Step(action="click", target=Target(by="role", value="button", name="Sign In"),
             description="Click Sign In"),
        Step(action="expect_url", value="app", options={"match": "regex"},
             description="Verify we landed in the app"),
        Step(action="screenshot", value="sign-in.png", description="Capture the app page"),
    ],
)

TC_001 = Scenario(
    name="tc_001_login_and_commerce_navigation",
    title="TC_001: Validate successful login and Commerce box navigation",
    tags=["login", "commerce"],
    steps=_login_steps() + [
        Step(action="remember_url", value="login", description="Remember the login URL"),
        Step(action="click", target=SUBMIT_BUTTON, description="Click login button"),
        Step(action="wait_for_url_change", value="login", description="Wait for post-login navigation"),
        Step(action="expect_visible", target=COMMERCE_LINK, description="Verify the COMMERCE box is visible"),
        Step(action="remember_url", value="dashboard", description="Remember the dashboard URL"),
        Step(action="click", target=COMMERCE_LINK, description="Click on COMMERCE box"),
        Step(action="wait_for_url_change", value="dashboard", description="Wait for navigation after COMMERCE"),
        Step(action="expect_url", value="${login_url}", options={"match": "not_exact"},
             description="Verify URL has changed"),
        Step(action="log_url", description="Log the new URL"),
    ],
)

TC_002 = Scenario(
    name="tc_002_login_dashboard_assertions",
    title="TC_002: Validate login with proper assertions on dashboard",
    tags=["login", "commerce", "dashboard"],
    steps=_login_steps() + [
        Step(action="click", target=SUBMIT_BUTTON, description="Submit login form"),
        Step(action="wait_for_load_state", value="networkidle", description="Wait for page load after login"),
        Step(action="expect_url", value="/auth/login", options={"match": "not_contains"},
             description="Verify we left the login page"),
        Step(action="expect_visible", target=COMMERCE_LINK, description="Verify COMMERCE box exists"),
        Step(action="expect_enabled", target=COMMERCE_LINK, description="Verify COMMERCE box is clickable"),
        Step(action="remember_url", value="before_click", description="Remember URL before click"),
        Step(action="click", target=COMMERCE_LINK, options={"wait_until": "networkidle"},
             description="Click COMMERCE"),
        Step(action="expect_url", value=r"^https?://\S+", options={"match": "regex"},
             description="Verify a page is loaded after COMMERCE"),
        Step(action="log_url", value="before_click", description="Log the URL change"),
    ],
)

SCENARIOS: Dict[str, Scenario] = {
    scenario.name: scenario
    for scenario in (SIGN_IN_WITH_PLACEHOLDERS, TC_001, TC_002)
}


def get_scenario(name: str) -> Scenario:
    try:
        return SCENARIOS[name]
    except KeyError:
        known = ", ".join(sorted(SCENARIOS))
        raise ScenarioNotFoundError(f"Unknown scenario '{name}' (known: {known})") from None


def list_scenarios() -> List[Dict]:
    return [scenario.summary() for scenario in SCENARIOS.values()]
