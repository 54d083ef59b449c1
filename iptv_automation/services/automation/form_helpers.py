"""
Form interaction helpers for panel automation

Panel markup is not under our control, so every logical step carries an
ordered list of candidate selectors. The first selector that resolves wins.
Optional steps are skipped when nothing resolves; mandatory steps fail.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError

from ...exceptions import ElementNotFoundError, FormInteractionError


class StepRequirement(Enum):
    MANDATORY = "mandatory"
    OPTIONAL = "optional"


@dataclass(frozen=True)
class SelectorStep:
    """One logical UI step and the selectors that may implement it"""
    name: str
    selectors: tuple[str, ...]
    requirement: StepRequirement = StepRequirement.OPTIONAL

    @property
    def mandatory(self) -> bool:
        return self.requirement == StepRequirement.MANDATORY

    def for_username(self, username: str) -> "SelectorStep":
        """Fill the {username} placeholder of row-scoped selectors"""
        quoted = username.replace('"', '\\"')
        return replace(self, selectors=tuple(s.format(username=quoted) for s in self.selectors))


class PanelSelectors:
    """Selector tables for the panel's login, create and renew screens"""

    LOGIN_USERNAME = SelectorStep("login_username", (
        'input[name="username"]',
        'input[type="text"]',
    ), StepRequirement.MANDATORY)

    LOGIN_PASSWORD = SelectorStep("login_password", (
        'input[name="password"]',
        'input[type="password"]',
    ), StepRequirement.MANDATORY)

    LOGIN_SUBMIT = SelectorStep("login_submit", (
        'button[type="submit"]',
        'input[type="submit"]',
        '.login-btn',
        '#login-btn',
    ), StepRequirement.MANDATORY)

    CREATE_ENTRY = SelectorStep("create_entry", (
        'a:has-text("Add User")',
        'a:has-text("Add Line")',
        'a:has-text("Create User")',
        'a:has-text("New User")',
        'a:has-text("New Line")',
        '[href*="add"]',
        '[href*="create"]',
        'button:has-text("Add")',
    ))

    LINE_USERNAME = SelectorStep("line_username", (
        'input[name="username"]',
        'input[name="user"]',
        'input[name="login"]',
        'input[placeholder*="username"]',
        '#username',
    ))

    LINE_PASSWORD = SelectorStep("line_password", (
        'input[name="password"]',
        'input[name="pass"]',
        'input[type="password"]',
        '#password',
    ))

    CREATE_DURATION = SelectorStep("create_duration", (
        'select[name="exp_date"]',
        'select[name="duration"]',
        'select[name="months"]',
        'select[name="package"]',
        '#exp_date',
        '#duration',
    ))

    BOUQUETS = SelectorStep("bouquets", (
        'select[name="bouquet"]',
        'select[name="bouquet[]"]',
        '#bouquet',
    ))

    CREATE_SUBMIT = SelectorStep("create_submit", (
        'button:has-text("Add")',
        'button:has-text("Create")',
        'button:has-text("Save")',
        'button:has-text("Submit")',
        'input[type="submit"]',
        'button[type="submit"]',
        '.btn-primary',
        '#submit',
    ), StepRequirement.MANDATORY)

    USER_SECTION = SelectorStep("user_section", (
        'a:has-text("Users")',
        'a:has-text("Lines")',
        'a:has-text("Subscribers")',
        'a:has-text("Manage Users")',
        '[href*="user"]',
        '[href*="line"]',
    ))

    USER_SEARCH = SelectorStep("user_search", (
        'input[name="search"]',
        'input[placeholder*="search"]',
        'input[type="search"]',
        '#search',
        '.search-input',
    ))

    # formatted with the line username before use
    EDIT_ACTION = SelectorStep("edit_action", (
        'tr:has-text("{username}") button:has-text("Edit")',
        'tr:has-text("{username}") button:has-text("Extend")',
        'tr:has-text("{username}") a:has-text("Edit")',
        'tr:has-text("{username}") .edit-btn',
        'tr:has-text("{username}") .fa-edit',
        'tr:has-text("{username}") [title="Edit"]',
        '[data-username="{username}"] button',
        'text="{username}"',
    ))

    RENEW_DURATION = SelectorStep("renew_duration", (
        'select[name="duration"]',
        'select[name="exp_date"]',
        'select[name="months"]',
        'input[name="duration"]',
        '#duration',
        '.duration-select',
    ))

    RENEW_SUBMIT = SelectorStep("renew_submit", (
        'button:has-text("Save")',
        'button:has-text("Extend")',
        'button:has-text("Update")',
        'button:has-text("Apply")',
        'input[type="submit"]',
        'button[type="submit"]',
        '.save-btn',
        '#save-btn',
    ), StepRequirement.MANDATORY)


class PageDriver:
    """Resolves selector steps on a page and performs the matching action"""

    def __init__(self, page: Page, element_timeout_ms: int = 15000):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.page = page
        self.element_timeout_ms = element_timeout_ms

    async def find(self, step: SelectorStep) -> tuple[Optional[ElementHandle], Optional[str]]:
        """First element matched by the step's selectors, in priority order"""
        element, selector = await self._probe(step)
        if element or not step.mandatory:
            if not element:
                self.logger.info(f"Skipping optional step '{step.name}': no selector matched")
            return element, selector

        # mandatory steps get one bounded wait for late-rendering markup
        css = [s for s in step.selectors if not s.startswith(("text=", "xpath="))]
        try:
            await self.page.wait_for_selector(", ".join(css), timeout=self.element_timeout_ms)
        except PlaywrightError:
            raise ElementNotFoundError(step.name, step.selectors, self.element_timeout_ms)

        element, selector = await self._probe(step)
        if not element:
            raise ElementNotFoundError(step.name, step.selectors)
        return element, selector

    async def click(self, step: SelectorStep) -> bool:
        """Click the step's element; False when an optional step was skipped"""
        element, selector = await self.find(step)
        if not element:
            return False

        try:
            await element.click()
        except PlaywrightError as e:
            raise FormInteractionError("click", step.name, selector, str(e))
        self.logger.debug(f"Clicked {step.name} via {selector}")
        return True

    async def fill(self, step: SelectorStep, value: str) -> bool:
        """Fill the step's element; False when an optional step was skipped"""
        element, selector = await self.find(step)
        if not element:
            return False

        try:
            await element.fill(value)
        except PlaywrightError as e:
            raise FormInteractionError("fill", step.name, selector, str(e))
        self.logger.debug(f"Filled {step.name} via {selector}")
        return True

    async def _probe(self, step: SelectorStep) -> tuple[Optional[ElementHandle], Optional[str]]:
        for selector in step.selectors:
            try:
                element = await self.page.query_selector(selector)
            except PlaywrightError as e:
                self.logger.debug(f"Selector {selector} failed for {step.name}: {e}")
                continue
            if element:
                return element, selector
        return None, None
