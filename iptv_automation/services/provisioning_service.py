"""
Provisioning service coordinator

Turns create/renew requests into provisioner runs, derives credentials,
fires notifications and folds every failure into a ProvisioningResult.
"""

import logging
from typing import Optional

from ..credentials import CredentialGenerator
from ..exceptions import AutomationError, UsernameUnavailableError
from ..models.provisioning import CreateLineRequest, ProvisioningResult, RenewLineRequest, plan_label
from .automation.playwright_provisioner import PlaywrightProvisioner
from .notification_service import NotificationService


class ProvisioningService:
    """Coordinates create and renew operations"""

    def __init__(self,
                 provisioner: PlaywrightProvisioner,
                 notifier: NotificationService,
                 generator: Optional[CredentialGenerator] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.provisioner = provisioner
        self.notifier = notifier
        self.generator = generator or CredentialGenerator()

    async def create_line(self, request: CreateLineRequest) -> ProvisioningResult:
        """Create a line for a customer; never raises for panel or browser faults"""
        username = self.generator.generate_username(request.customer_name)
        password = self.generator.generate_password()
        self.logger.info(f"[CREATE] Creating account for: {request.customer_name} -> {username}")

        try:
            outcome = await self.provisioner.create_line(request, username, password)
        except UsernameUnavailableError as e:
            self.logger.error(f"[CREATE] Error: {e.reason} (suggested: {e.alternate_username})")
            await self._alert_manual_creation(request, e.reason)
            return ProvisioningResult(
                success=False, username=username, plan_months=request.plan_months,
                error=e.reason, alternate_username=e.alternate_username
            )
        except AutomationError as e:
            self.logger.error(f"[CREATE] Error: {e}")
            await self._alert_manual_creation(request, e.message)
            return ProvisioningResult(success=False, username=username, plan_months=request.plan_months, error=e.message)
        except Exception as e:
            self.logger.error(f"[CREATE] Unexpected error: {e}", exc_info=True)
            await self._alert_manual_creation(request, str(e))
            return ProvisioningResult(success=False, username=username, plan_months=request.plan_months, error=str(e))

        self.logger.info(f"[CREATE] Account created: {username} (confirmed: {outcome.confirmed})")

        email_sent = False
        if request.customer_email:
            email_sent = await self.notifier.send_credentials(
                request.customer_email, username, password, request.plan_months
            )

        await self.notifier.push(
            "Account Created",
            f"{request.customer_name}\nUsername: {username}\nPlan: {plan_label(request.plan_months)}",
            -1
        )

        return ProvisioningResult(
            success=True,
            username=username,
            password=password,
            plan_months=request.plan_months,
            success_indicators=outcome.confirmed,
            email_sent=email_sent,
        )

    async def renew_line(self, request: RenewLineRequest) -> ProvisioningResult:
        """Extend an existing line; never raises for panel or browser faults"""
        self.logger.info(f"[RENEW] Starting renewal for user: {request.username}")

        try:
            outcome = await self.provisioner.renew_line(request)
        except AutomationError as e:
            self.logger.error(f"[RENEW] Error: {e}")
            await self._alert_manual_renewal(request, e.message)
            return ProvisioningResult(success=False, username=request.username, plan_months=request.plan_months, error=e.message)
        except Exception as e:
            self.logger.error(f"[RENEW] Unexpected error: {e}", exc_info=True)
            await self._alert_manual_renewal(request, str(e))
            return ProvisioningResult(success=False, username=request.username, plan_months=request.plan_months, error=str(e))

        self.logger.info(f"[RENEW] Completed for {request.username}, success indicators: {outcome.confirmed}")
        return ProvisioningResult(
            success=True,
            username=request.username,
            plan_months=request.plan_months,
            success_indicators=outcome.confirmed,
        )

    async def _alert_manual_creation(self, request: CreateLineRequest, reason: str):
        contact = f"\n{request.customer_email}" if request.customer_email else ""
        await self.notifier.push(
            "Manual Creation Needed",
            f"Failed to auto-create account for:\n{request.customer_name}{contact}\n\n{reason}",
            1
        )

    async def _alert_manual_renewal(self, request: RenewLineRequest, reason: str):
        await self.notifier.push(
            "Manual Renewal Needed",
            f"Failed to renew {request.username} by {plan_label(request.plan_months)}\n\n{reason}",
            1
        )
