import os
from pathlib import Path
from typing import Dict, Literal, Mapping, Optional
from urllib.parse import urljoin

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

ENV_PREFIX = "PASSTHENOTE_"

DEFAULT_BASE_URL = "https://www.passthenote.com"
DEFAULT_LOGIN_PATH = "/auth/login"
# Public tester account of the PassTheNote practice site
DEFAULT_USERNAME = "tester@passthenote.com"


class Settings(BaseModel):
    """Suite settings, usually loaded from PASSTHENOTE_* environment variables"""

    base_url: str = DEFAULT_BASE_URL
    login_path: str = DEFAULT_LOGIN_PATH
    username: str = DEFAULT_USERNAME
    password: Optional[str] = None

    browser: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True
    slow_mo: int = Field(default=0, ge=0)
    timeout: int = Field(default=10000, gt=0)
    navigation_timeout: int = Field(default=30000, gt=0)
    viewport_width: int = Field(default=1280, gt=0)
    viewport_height: int = Field(default=720, gt=0)

    artifacts_dir: Path = Path("test-results")
    screenshot_on_failure: bool = True

    retry_count: int = Field(default=1, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {value!r}")
        return value.rstrip("/")

    @field_validator("password")
    @classmethod
    def _blank_password_is_unset(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @property
    def login_url(self) -> str:
        return urljoin(self.base_url + "/", self.login_path.lstrip("/"))

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    def test_data(self) -> Dict[str, str]:
        """Values substituted into scenario placeholders"""
        return {
            "base_url": self.base_url,
            "login_url": self.login_url,
            "username": self.username,
            "password": self.password or "",
        }

    def require_credentials(self):
        if not self.has_credentials:
            raise ConfigurationError(
                f"No password configured; set {ENV_PREFIX}PASSWORD "
                f"(and optionally {ENV_PREFIX}USERNAME)"
            )


def env_var_name(field_name: str) -> str:
    return f"{ENV_PREFIX}{field_name.upper()}"


def load_settings(env: Optional[Mapping[str, str]] = None, **overrides) -> Settings:
    """Build Settings from the environment, with keyword overrides on top.

    Every field maps to ``PASSTHENOTE_<FIELD>``; e.g. ``PASSTHENOTE_HEADLESS=false``.
    """
    env = os.environ if env is None else env

    values = {}
    for field_name in Settings.model_fields:
        raw = env.get(env_var_name(field_name))
        if raw is not None:
            values[field_name] = raw
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
