import re
from string import Template
from typing import Any, Dict, List, Literal, Mapping, Optional

from playwright.async_api import Page, Locator
from pydantic import BaseModel, Field


class Target(BaseModel):
    """How a step locates its element.

    ``by`` picks the Playwright locator family. For ``role`` the ``value`` is
    the ARIA role and ``name`` the accessible name; ``name_pattern`` turns that
    name into a case-insensitive regular expression.
    """

    by: Literal["css", "role", "placeholder", "text", "label", "test_id"] = "css"
    value: str
    name: Optional[str] = None
    name_pattern: bool = False
    exact: bool = False
    first: bool = False

    def _name(self):
        if self.name is None:
            return None
        if self.name_pattern:
            return re.compile(self.name, re.IGNORECASE)
        return self.name

    def resolve(self, page: Page) -> Locator:
        if self.by == "css":
            locator = page.locator(self.value)
        elif self.by == "role":
            kwargs = {}
            if self.name is not None:
                kwargs["name"] = self._name()
                if self.exact and not self.name_pattern:
                    kwargs["exact"] = True
            locator = page.get_by_role(self.value, **kwargs)
        elif self.by == "placeholder":
            locator = page.get_by_placeholder(self.value, exact=self.exact)
        elif self.by == "text":
            locator = page.get_by_text(self.value, exact=self.exact)
        elif self.by == "label":
            locator = page.get_by_label(self.value, exact=self.exact)
        else:
            locator = page.get_by_test_id(self.value)

        return locator.first if self.first else locator

    def describe(self) -> str:
        if self.by == "role" and self.name:
            return f"role={self.value}[name={self.name}]"
        return f"{self.by}={self.value}"


class Step(BaseModel):
    action: str
    target: Optional[Target] = None
    value: str = ""
    description: str = ""
    options: Dict[str, Any] = Field(default_factory=dict)

    def label(self) -> str:
        return self.description or f"{self.action} {self.target.describe() if self.target else self.value}".strip()


class Scenario(BaseModel):
    name: str
    title: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    requires_credentials: bool = True
    steps: List[Step]

    def render(self, data: Mapping[str, str]) -> "Scenario":
        """Return a copy with ``${key}`` placeholders filled from ``data``.

        Unknown placeholders are left as they are.
        """
        rendered = []
        for step in self.steps:
            update = {"value": Template(step.value).safe_substitute(data)}
            if step.target is not None:
                update["target"] = step.target.model_copy(
                    update={"value": Template(step.target.value).safe_substitute(data)}
                )
            rendered.append(step.model_copy(update=update))
        return self.model_copy(update={"steps": rendered})

    def summary(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "requires_credentials": self.requires_credentials,
            "steps": len(self.steps),
        }
