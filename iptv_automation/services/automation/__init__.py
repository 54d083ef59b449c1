"""
Browser automation for mutating panel operations

The panel exposes no API for creating or renewing lines, so these operations
drive its web UI through Playwright.

Architecture Overview:
======================

    ProvisioningService (create/renew coordination, notifications)
                    │
                    ▼
    ┌───────────────────────────────────────────────────┐
    │            PlaywrightProvisioner                  │ ← One context per operation
    │  (isolated context + screenshots on exit)         │
    └───────────────────┬───────────────────────────────┘
                        │
          ┌─────────────┴─────────────┐
          ▼                           ▼
    ┌─────────────────────┐  ┌─────────────────────────┐
    │  CreateLineMachine  │  │    RenewLineMachine     │ ← transitions AsyncMachine
    └─────────────────────┘  └─────────────────────────┘

    Supporting Components:
    ├── BrowserManager   ← Shared browser, relaunched when disconnected
    ├── FormHelpers      ← Ordered selector fallbacks
    └── ResultDetector   ← Page text classification

Usage Patterns:
===============

manager = BrowserManager(headless=True)
provisioner = PlaywrightProvisioner(manager, ScreenshotRecorder(path), generator.alternate_username)
outcome = await provisioner.create_line(request, username, password)
"""

from .browser_manager import BrowserManager, ScreenshotRecorder
from .form_helpers import PageDriver, PanelSelectors, SelectorStep, StepRequirement
from .playwright_provisioner import PlaywrightProvisioner
from .provisioning_state_machine import (
    CreateLineMachine, ProvisioningMachine, ProvisioningTimeouts, RenewLineMachine
)
from .result_detector import ProvisioningResultDetector, classify_outcome

__all__ = [
    'BrowserManager',
    'ScreenshotRecorder',
    'PageDriver',
    'PanelSelectors',
    'SelectorStep',
    'StepRequirement',
    'PlaywrightProvisioner',
    'ProvisioningMachine',
    'ProvisioningTimeouts',
    'CreateLineMachine',
    'RenewLineMachine',
    'ProvisioningResultDetector',
    'classify_outcome',
]
