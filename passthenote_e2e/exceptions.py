class E2EError(Exception):
    """Base error for the PassTheNote end-to-end suite."""
    pass

class ConfigurationError(E2EError):
    """Settings are missing or invalid."""
    pass

class ScenarioNotFoundError(E2EError):
    """No scenario is registered under the requested name."""
    pass

class ElementNotFoundError(E2EError):
    """A step target could not be resolved on the page."""
    pass

class HookInstallError(E2EError):
    """The git pre-commit hook could not be installed."""
    pass
