"""
Provisioning state machines using the transitions framework

Create flow:
    initializing -> navigating -> logging_in -> finding_create_entry ->
    filling_username -> filling_password -> setting_duration ->
    setting_bouquet -> submitting -> verifying -> succeeded

Renew flow:
    initializing -> navigating -> logging_in -> finding_user_section ->
    searching_user -> finding_edit_action -> setting_duration ->
    submitting -> verifying -> succeeded

Any state may `fail` into `failed`. Each state's on_enter handler performs
its step and then triggers `advance`; the machine is queued so the whole
flow runs inside the first `advance()` call.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from transitions.extensions.asyncio import AsyncMachine
from playwright.async_api import Page, Error as PlaywrightError

from ...exceptions import (
    AutomationError, PageNavigationError, ProvisioningFailureError, UsernameUnavailableError
)
from ...models.panel import PanelCredentials
from ...models.provisioning import Outcome, OutcomeKind, plan_label
from .form_helpers import PageDriver, PanelSelectors
from .result_detector import classify_outcome


@dataclass
class ProvisioningTimeouts:
    """Timeouts and settle delays, in milliseconds"""
    navigation_ms: int = 30000
    element_ms: int = 15000
    settle_ms: int = 2000
    login_settle_ms: int = 3000
    submit_settle_ms: int = 3000


class ProvisioningMachine:
    """Shared states and handlers of the create and renew flows"""

    steps: list[str] = []

    def __init__(self, page: Page, panel: PanelCredentials, timeouts: Optional[ProvisioningTimeouts] = None):
        self.page = page
        self.panel = panel
        self.timeouts = timeouts or ProvisioningTimeouts()
        self.driver = PageDriver(page, self.timeouts.element_ms)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self.error: Optional[Exception] = None
        self.outcome: Optional[Outcome] = None
        self.visited: list[str] = []

        self.machine = AsyncMachine(
            model=self,
            states=['initializing', *self.steps, 'succeeded', 'failed'],
            initial='initializing',
            auto_transitions=False,
            ignore_invalid_triggers=True,
            send_event=True,
            queued=True,
        )
        self._setup_transitions()

    def _setup_transitions(self):
        chain = ['initializing', *self.steps, 'succeeded']
        transitions = [['advance', source, dest] for source, dest in zip(chain, chain[1:])]
        transitions.append(['fail', '*', 'failed'])
        self.machine.add_transitions(transitions)

    def _log(self, message: str):
        self.logger.info(message)

    async def run(self) -> Outcome:
        """Drive the flow to a terminal state; raises the step error on failure"""
        await self.advance()

        if self.state != 'succeeded':
            error = self.error or AutomationError(f"Flow stopped in state '{self.state}'")
            if not isinstance(error, AutomationError):
                error = AutomationError(f"Unexpected browser error: {error}", "BROWSER_ERROR")
            raise error
        return self.outcome

    async def _run_step(self, action: Callable):
        self.visited.append(self.state)
        try:
            await action()
        except Exception as e:
            self.error = e
            self._log(f"❌ {self.state} failed: {e}")
            await self.fail()
            return
        await self.advance()

    # =================== shared states ===================

    async def on_enter_navigating(self, event):
        await self._run_step(self._navigate)

    async def on_enter_logging_in(self, event):
        await self._run_step(self._login)

    async def on_enter_submitting(self, event):
        await self._run_step(self._submit)

    async def on_enter_verifying(self, event):
        await self._run_step(self._verify)

    async def on_enter_succeeded(self, event):
        self._log("🎉 Flow completed")

    async def on_enter_failed(self, event):
        self._log("💥 Flow failed")

    async def _navigate(self):
        url = self.panel.url()
        self._log(f"📍 Navigating to panel {url}")
        try:
            await self.page.goto(url, wait_until='networkidle', timeout=self.timeouts.navigation_ms)
        except PlaywrightError as e:
            raise PageNavigationError(url, str(e)) from e

    async def _login(self):
        self._log("🔑 Logging in")
        await self.driver.fill(PanelSelectors.LOGIN_USERNAME, self.panel.username)
        await self.driver.fill(PanelSelectors.LOGIN_PASSWORD, self.panel.password)
        await self.driver.click(PanelSelectors.LOGIN_SUBMIT)
        await self.page.wait_for_timeout(self.timeouts.login_settle_ms)

    async def _submit(self):
        raise NotImplementedError

    async def _verify(self):
        raise NotImplementedError

    async def _page_text(self) -> str:
        return await self.page.inner_text("body")


class CreateLineMachine(ProvisioningMachine):
    """Creates a new line with the given credentials"""

    steps = [
        'navigating',
        'logging_in',
        'finding_create_entry',
        'filling_username',
        'filling_password',
        'setting_duration',
        'setting_bouquet',
        'submitting',
        'verifying',
    ]

    def __init__(self, page: Page, panel: PanelCredentials, username: str, password: str, plan_months: int,
                 alternate_username: Callable[[str], str], timeouts: Optional[ProvisioningTimeouts] = None):
        self.username = username
        self.password = password
        self.plan_months = plan_months
        self.alternate_username = alternate_username
        super().__init__(page, panel, timeouts)

    async def on_enter_finding_create_entry(self, event):
        await self._run_step(self._open_create_form)

    async def on_enter_filling_username(self, event):
        await self._run_step(self._fill_username)

    async def on_enter_filling_password(self, event):
        await self._run_step(self._fill_password)

    async def on_enter_setting_duration(self, event):
        await self._run_step(self._set_duration)

    async def on_enter_setting_bouquet(self, event):
        await self._run_step(self._select_bouquets)

    async def _open_create_form(self):
        self._log("📝 Opening create form")
        if await self.driver.click(PanelSelectors.CREATE_ENTRY):
            await self.page.wait_for_timeout(self.timeouts.settle_ms)

    async def _fill_username(self):
        self._log(f"✏️  Setting username: {self.username}")
        await self.driver.fill(PanelSelectors.LINE_USERNAME, self.username)

    async def _fill_password(self):
        self._log("✏️  Setting password")
        await self.driver.fill(PanelSelectors.LINE_PASSWORD, self.password)

    async def _set_duration(self):
        self._log(f"📅 Setting duration: {self.plan_months} month(s)")
        element, selector = await self.driver.find(PanelSelectors.CREATE_DURATION)
        if not element:
            return
        try:
            await element.select_option(index=self.plan_months)
        except PlaywrightError as e:
            self.logger.warning(f"Could not select duration option {self.plan_months} via {selector}: {e}")

    async def _select_bouquets(self):
        element, selector = await self.driver.find(PanelSelectors.BOUQUETS)
        if not element:
            return
        if await element.get_attribute("multiple") is None:
            self.logger.info(f"Bouquet control {selector} is single-select, keeping panel default")
            return

        values = []
        for option in await element.query_selector_all("option"):
            value = await option.get_attribute("value")
            if value:
                values.append(value)
        if values:
            await element.select_option(values)
            self._log(f"📺 Selected {len(values)} bouquets")

    async def _submit(self):
        self._log("🚀 Submitting create form")
        await self.driver.click(PanelSelectors.CREATE_SUBMIT)
        await self.page.wait_for_timeout(self.timeouts.submit_settle_ms)

    async def _verify(self):
        self.outcome = classify_outcome(await self._page_text(), self.username)
        if self.outcome.kind == OutcomeKind.FAILURE:
            alternate = self.alternate_username(self.username)
            self._log(f"⚠️  Username may exist, could retry with: {alternate}")
            raise UsernameUnavailableError(self.username, alternate, self.outcome.marker)
        self._log(f"🔍 Verification: {self.outcome.kind.value}")


class RenewLineMachine(ProvisioningMachine):
    """Extends an existing line by a number of months"""

    steps = [
        'navigating',
        'logging_in',
        'finding_user_section',
        'searching_user',
        'finding_edit_action',
        'setting_duration',
        'submitting',
        'verifying',
    ]

    def __init__(self, page: Page, panel: PanelCredentials, username: str, plan_months: int,
                 timeouts: Optional[ProvisioningTimeouts] = None):
        self.username = username
        self.plan_months = plan_months
        super().__init__(page, panel, timeouts)

    async def on_enter_finding_user_section(self, event):
        await self._run_step(self._open_user_section)

    async def on_enter_searching_user(self, event):
        await self._run_step(self._search_user)

    async def on_enter_finding_edit_action(self, event):
        await self._run_step(self._open_edit_action)

    async def on_enter_setting_duration(self, event):
        await self._run_step(self._set_duration)

    async def _open_user_section(self):
        self._log("👥 Opening user management")
        if await self.driver.click(PanelSelectors.USER_SECTION):
            await self.page.wait_for_timeout(self.timeouts.settle_ms)

    async def _search_user(self):
        self._log(f"🔎 Searching for user: {self.username}")
        if await self.driver.fill(PanelSelectors.USER_SEARCH, self.username):
            await self.page.keyboard.press("Enter")
            await self.page.wait_for_timeout(self.timeouts.settle_ms)

    async def _open_edit_action(self):
        if await self.driver.click(PanelSelectors.EDIT_ACTION.for_username(self.username)):
            await self.page.wait_for_timeout(self.timeouts.settle_ms)

    async def _set_duration(self):
        self._log(f"📅 Setting extension: {self.plan_months} month(s)")
        element, selector = await self.driver.find(PanelSelectors.RENEW_DURATION)
        if not element:
            return
        try:
            tag_name = await element.evaluate("el => el.tagName")
            if tag_name == "SELECT":
                await element.select_option(label=plan_label(self.plan_months))
            else:
                await element.fill(str(self.plan_months))
        except PlaywrightError as e:
            self.logger.warning(f"Could not set extension via {selector}: {e}")

    async def _submit(self):
        self._log("🚀 Submitting extension")
        await self.driver.click(PanelSelectors.RENEW_SUBMIT)
        await self.page.wait_for_timeout(self.timeouts.submit_settle_ms)

    async def _verify(self):
        # the user row stays on screen, so the username is not a success marker here
        self.outcome = classify_outcome(await self._page_text())
        if self.outcome.kind == OutcomeKind.FAILURE:
            raise ProvisioningFailureError(
                f"Panel reported '{self.outcome.marker}' after renewal",
                "renew_rejected",
                {"username": self.username}
            )
        self._log(f"🔍 Verification: {self.outcome.kind.value}")
