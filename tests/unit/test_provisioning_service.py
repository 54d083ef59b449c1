"""
Unit tests for create/renew coordination
"""

import random
from datetime import date

import pytest
from unittest.mock import AsyncMock, MagicMock
from pathlib import Path
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from iptv_automation.credentials import CredentialGenerator
from iptv_automation.exceptions import ElementNotFoundError, ProvisioningFailureError, UsernameUnavailableError
from iptv_automation.models.panel import PanelCredentials
from iptv_automation.models.provisioning import CreateLineRequest, Outcome, OutcomeKind, RenewLineRequest
from iptv_automation.services.provisioning_service import ProvisioningService

PANEL = PanelCredentials("https://panel.test", "admin", "secret")
USERNAME = f"janedoe{date.today().year}"


class TestProvisioningService:
    """Test suite for ProvisioningService"""

    def setup_method(self):
        self.provisioner = MagicMock()
        self.provisioner.create_line = AsyncMock(return_value=Outcome(OutcomeKind.SUCCESS, "created"))
        self.provisioner.renew_line = AsyncMock(return_value=Outcome(OutcomeKind.SUCCESS, "updated"))

        self.notifier = MagicMock()
        self.notifier.send_credentials = AsyncMock(return_value=True)
        self.notifier.push = AsyncMock()

        self.service = ProvisioningService(self.provisioner, self.notifier, CredentialGenerator(random.Random(7)))

    @pytest.mark.asyncio
    async def test_create_with_email(self):
        request = CreateLineRequest("Jane Doe", PANEL, 3, "jane@example.com")

        result = await self.service.create_line(request)

        assert result.success
        assert result.username == USERNAME
        assert len(result.password) == 10
        assert result.plan_months == 3
        assert result.success_indicators is True
        assert result.email_sent is True

        self.provisioner.create_line.assert_awaited_once_with(request, USERNAME, result.password)
        self.notifier.send_credentials.assert_awaited_once_with("jane@example.com", USERNAME, result.password, 3)
        title, _, priority = self.notifier.push.await_args.args
        assert title == "Account Created"
        assert priority == -1

    @pytest.mark.asyncio
    async def test_create_without_email(self):
        result = await self.service.create_line(CreateLineRequest("Jane Doe", PANEL))

        assert result.success
        assert result.email_sent is False
        self.notifier.send_credentials.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_email_failure_does_not_fail(self):
        self.notifier.send_credentials.return_value = False

        result = await self.service.create_line(CreateLineRequest("Jane Doe", PANEL, 1, "jane@example.com"))

        assert result.success
        assert result.email_sent is False

    @pytest.mark.asyncio
    async def test_create_inconclusive(self):
        self.provisioner.create_line.return_value = Outcome(OutcomeKind.INCONCLUSIVE)

        result = await self.service.create_line(CreateLineRequest("Jane Doe", PANEL))

        assert result.success
        assert result.success_indicators is False

    @pytest.mark.asyncio
    async def test_create_username_taken(self):
        self.provisioner.create_line.side_effect = UsernameUnavailableError(USERNAME, f"{USERNAME}99", "exists")

        result = await self.service.create_line(CreateLineRequest("Jane Doe", PANEL, 1, "jane@example.com"))

        assert not result.success
        assert result.error == "Username may already exist"
        assert result.username == USERNAME
        assert result.alternate_username == f"{USERNAME}99"
        self.notifier.send_credentials.assert_not_awaited()

        title, message, priority = self.notifier.push.await_args.args
        assert title == "Manual Creation Needed"
        assert "Jane Doe" in message and "jane@example.com" in message
        assert priority == 1

    @pytest.mark.asyncio
    async def test_create_browser_failure(self):
        self.provisioner.create_line.side_effect = ElementNotFoundError("create_submit", ("button",))

        result = await self.service.create_line(CreateLineRequest("Jane Doe", PANEL))

        assert not result.success
        assert "create_submit" in result.error
        assert result.alternate_username is None
        assert self.notifier.push.await_args.args[0] == "Manual Creation Needed"

    @pytest.mark.asyncio
    async def test_create_unexpected_error(self):
        self.provisioner.create_line.side_effect = RuntimeError("browser crashed")

        result = await self.service.create_line(CreateLineRequest("Jane Doe", PANEL))

        assert not result.success
        assert result.error == "browser crashed"

    @pytest.mark.asyncio
    async def test_renew_success(self):
        result = await self.service.renew_line(RenewLineRequest("bob2024", PANEL, 6))

        assert result.success
        assert result.username == "bob2024"
        assert result.plan_months == 6
        assert result.success_indicators is True
        self.notifier.push.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_renew_failure(self):
        self.provisioner.renew_line.side_effect = ProvisioningFailureError("Panel reported 'error' after renewal")

        result = await self.service.renew_line(RenewLineRequest("bob2024", PANEL, 2))

        assert not result.success
        assert result.username == "bob2024"
        title, message, priority = self.notifier.push.await_args.args
        assert title == "Manual Renewal Needed"
        assert "bob2024" in message and "2 Month" in message
        assert priority == 1
