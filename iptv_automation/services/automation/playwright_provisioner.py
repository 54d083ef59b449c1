"""
Playwright provisioner

Runs one create or renew state machine inside a disposable browser context
and records debug screenshots on both exit paths.
"""

import logging
from typing import Callable, Optional

from playwright.async_api import Page

from ...models.provisioning import CreateLineRequest, Outcome, RenewLineRequest
from .browser_manager import BrowserManager, ScreenshotRecorder
from .provisioning_state_machine import (
    CreateLineMachine, ProvisioningMachine, ProvisioningTimeouts, RenewLineMachine
)


class PlaywrightProvisioner:
    """Drives the panel UI for mutating operations"""

    def __init__(self,
                 browser_manager: BrowserManager,
                 screenshots: ScreenshotRecorder,
                 alternate_username: Callable[[str], str],
                 timeouts: Optional[ProvisioningTimeouts] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.browser_manager = browser_manager
        self.screenshots = screenshots
        self.alternate_username = alternate_username
        self.timeouts = timeouts or ProvisioningTimeouts()

    async def create_line(self, request: CreateLineRequest, username: str, password: str) -> Outcome:
        """Create a line on the request's panel"""
        return await self._drive("create", lambda page: CreateLineMachine(
            page, request.panel, username, password, request.plan_months,
            self.alternate_username, self.timeouts
        ))

    async def renew_line(self, request: RenewLineRequest) -> Outcome:
        """Extend an existing line on the request's panel"""
        return await self._drive("renewal", lambda page: RenewLineMachine(
            page, request.panel, request.username, request.plan_months, self.timeouts
        ))

    async def _drive(self, label: str, build_machine: Callable[[Page], ProvisioningMachine]) -> Outcome:
        async with self.browser_manager.isolated_context() as context:
            page = await context.new_page()
            machine = build_machine(page)
            try:
                outcome = await machine.run()
            except Exception:
                await self.screenshots.capture(page, f"{label}-error")
                raise

            await self.screenshots.capture(page, f"{label}-success")
            return outcome
