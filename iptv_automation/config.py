"""
Runtime configuration for the panel automation service

Values come from the process environment (optionally seeded from a .env file).
The defaults only make sense for a local development panel.
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .models.panel import PanelCredentials


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Service configuration"""
    panel_url: str = "http://127.0.0.1:8000"
    panel_user: str = "admin"
    panel_pass: str = "admin"
    host: str = "0.0.0.0"
    port: int = 3007

    session_ttl_seconds: float = 600.0
    lookup_timeout_seconds: float = 15.0
    navigation_timeout_seconds: float = 30.0
    element_timeout_seconds: float = 15.0

    browser_headless: bool = True
    screenshots_enabled: bool = True
    screenshot_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))

    email_service_url: str = "http://localhost:5002/api/send-credentials"
    pushover_user_key: Optional[str] = None
    pushover_app_token: Optional[str] = None

    @property
    def default_panel(self) -> PanelCredentials:
        """Credentials of the panel used for read-only lookups"""
        return PanelCredentials(self.panel_url, self.panel_user, self.panel_pass)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> "Settings":
        """Build settings from environment variables"""
        if environ is None:
            load_dotenv(dotenv_path)
            environ = os.environ

        defaults = cls()
        return cls(
            panel_url=environ.get("IPTV_PANEL_URL", defaults.panel_url).rstrip("/"),
            panel_user=environ.get("IPTV_PANEL_USER", defaults.panel_user),
            panel_pass=environ.get("IPTV_PANEL_PASS", defaults.panel_pass),
            host=environ.get("HOST", defaults.host),
            port=int(environ.get("PORT", defaults.port)),
            session_ttl_seconds=float(environ.get("SESSION_TTL_SECONDS", defaults.session_ttl_seconds)),
            lookup_timeout_seconds=float(environ.get("LOOKUP_TIMEOUT_SECONDS", defaults.lookup_timeout_seconds)),
            navigation_timeout_seconds=float(environ.get("NAVIGATION_TIMEOUT_SECONDS", defaults.navigation_timeout_seconds)),
            element_timeout_seconds=float(environ.get("ELEMENT_TIMEOUT_SECONDS", defaults.element_timeout_seconds)),
            browser_headless=_env_bool(environ.get("BROWSER_HEADLESS"), defaults.browser_headless),
            screenshots_enabled=_env_bool(environ.get("SCREENSHOTS_ENABLED"), defaults.screenshots_enabled),
            screenshot_dir=Path(environ.get("SCREENSHOT_DIR") or defaults.screenshot_dir),
            email_service_url=environ.get("EMAIL_SERVICE_URL", defaults.email_service_url),
            pushover_user_key=environ.get("PUSHOVER_USER_KEY") or None,
            pushover_app_token=environ.get("PUSHOVER_APP_TOKEN") or None,
        )
