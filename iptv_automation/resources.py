"""
Process-wide resources shared by request handlers

Bundled in one object so the HTTP layer can receive them by dependency
injection and tests can swap in fakes.
"""

import logging
from dataclasses import dataclass

from .config import Settings
from .credentials import CredentialGenerator
from .services.automation.browser_manager import BrowserManager, ScreenshotRecorder
from .services.automation.playwright_provisioner import PlaywrightProvisioner
from .services.automation.provisioning_state_machine import ProvisioningTimeouts
from .services.notification_service import NotificationService
from .services.panel.lookup_client import LookupClient
from .services.panel.session_manager import SessionManager
from .services.provisioning_service import ProvisioningService

logger = logging.getLogger(__name__)


@dataclass
class AutomationResources:
    settings: Settings
    session_manager: SessionManager
    lookup_client: LookupClient
    browser_manager: BrowserManager
    notifier: NotificationService
    provisioning: ProvisioningService

    @classmethod
    def from_settings(cls, settings: Settings) -> "AutomationResources":
        session_manager = SessionManager(
            settings.default_panel,
            ttl_seconds=settings.session_ttl_seconds,
            timeout_seconds=settings.lookup_timeout_seconds,
        )
        browser_manager = BrowserManager(headless=settings.browser_headless)
        notifier = NotificationService(
            settings.email_service_url,
            settings.pushover_user_key,
            settings.pushover_app_token,
        )
        generator = CredentialGenerator()
        provisioner = PlaywrightProvisioner(
            browser_manager,
            ScreenshotRecorder(settings.screenshot_dir, settings.screenshots_enabled),
            generator.alternate_username,
            ProvisioningTimeouts(
                navigation_ms=int(settings.navigation_timeout_seconds * 1000),
                element_ms=int(settings.element_timeout_seconds * 1000),
            ),
        )

        return cls(
            settings=settings,
            session_manager=session_manager,
            lookup_client=LookupClient(session_manager),
            browser_manager=browser_manager,
            notifier=notifier,
            provisioning=ProvisioningService(provisioner, notifier, generator),
        )

    async def close(self):
        """Release the browser and HTTP clients"""
        logger.info("Shutting down...")
        await self.browser_manager.close()
        await self.session_manager.close()
        await self.notifier.close()
