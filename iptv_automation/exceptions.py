"""
Custom exceptions for panel automation error handling
"""

from typing import Optional, Sequence


class AutomationError(Exception):
    """Base exception class for all automation-related errors"""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "AUTOMATION_ERROR"
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} (Code: {self.error_code}, Details: {self.details})"
        return f"{self.message} (Code: {self.error_code})"


class ConfigurationError(AutomationError):
    """Exception raised when a request is missing required parameters"""

    def __init__(self, message: str = "Missing required parameters", fields: Optional[list[str]] = None):
        details = {"fields": fields} if fields else None
        super().__init__(message, "CONFIGURATION_ERROR", details)
        self.fields = fields or []


class AuthenticationError(AutomationError):
    """Exception raised when the panel login cannot produce a usable session"""

    def __init__(self, reason: str, panel_url: Optional[str] = None, status_code: Optional[int] = None):
        details = {}
        if panel_url:
            details["panel_url"] = panel_url
        if status_code:
            details["status_code"] = status_code

        super().__init__(f"Panel authentication failed: {reason}", "AUTH_ERROR", details)
        self.reason = reason
        self.panel_url = panel_url
        self.status_code = status_code


class LookupFailedError(AutomationError):
    """Exception raised when a subscriber lookup fails for non-auth reasons"""

    def __init__(self, username: str, reason: str):
        super().__init__(f"Lookup failed for '{username}': {reason}", "LOOKUP_ERROR", {"username": username})
        self.username = username
        self.reason = reason


class BrowserInitializationError(AutomationError):
    """Exception raised when browser initialization fails"""

    def __init__(self, message: str, backend: str = "playwright", details: Optional[dict] = None):
        super().__init__(message, "BROWSER_INIT_ERROR", details)
        self.backend = backend


class ElementNotFoundError(AutomationError):
    """Exception raised when no selector of a mandatory panel step resolves"""

    def __init__(self, step: str, selectors: Sequence[str], timeout_ms: Optional[int] = None):
        message = f"Panel step '{step}' found no matching element"
        if timeout_ms:
            message += f" within {timeout_ms}ms"

        super().__init__(message, "ELEMENT_NOT_FOUND", {
            "step": step,
            "selectors": list(selectors),
            "timeout_ms": timeout_ms
        })
        self.step = step
        self.selectors = tuple(selectors)
        self.timeout_ms = timeout_ms


class PageNavigationError(AutomationError):
    """Exception raised when a panel page cannot be loaded"""

    def __init__(self, url: str, reason: Optional[str] = None):
        message = f"Could not load panel page {url}"
        if reason:
            message += f": {reason}"

        super().__init__(message, "NAVIGATION_ERROR", {"url": url})
        self.url = url
        self.reason = reason


class FormInteractionError(AutomationError):
    """Exception raised when a resolved panel element rejects a click or fill"""

    def __init__(self, action: str, step: str, selector: Optional[str] = None, reason: Optional[str] = None):
        message = f"Could not {action} panel step '{step}'"
        if reason:
            message += f": {reason}"

        super().__init__(message, "FORM_INTERACTION_ERROR", {"action": action, "step": step, "selector": selector})
        self.action = action
        self.step = step
        self.selector = selector
        self.reason = reason


class ProvisioningFailureError(AutomationError):
    """Exception raised when the panel reports a failed create or renew"""

    def __init__(self, reason: str, failure_type: str = "unknown", details: Optional[dict] = None):
        message = f"Provisioning failed: {reason}"
        error_details = {
            "reason": reason,
            "failure_type": failure_type
        }
        if details:
            error_details.update(details)

        super().__init__(message, "PROVISIONING_FAILURE", error_details)
        self.reason = reason
        self.failure_type = failure_type


class UsernameUnavailableError(ProvisioningFailureError):
    """Exception raised when the panel page suggests the username is taken"""

    def __init__(self, username: str, alternate_username: str, detected_marker: Optional[str] = None):
        reason = "Username may already exist"
        details = {
            "username": username,
            "alternate_username": alternate_username,
            "detected_marker": detected_marker
        }

        super().__init__(reason, "username_unavailable", details)
        self.username = username
        self.alternate_username = alternate_username
        self.detected_marker = detected_marker


class NotificationError(AutomationError):
    """Exception raised when a notification collaborator cannot be reached"""

    def __init__(self, channel: str, reason: str):
        super().__init__(f"{channel} notification failed: {reason}", "NOTIFICATION_ERROR", {"channel": channel})
        self.channel = channel
        self.reason = reason
