"""
Unit tests for request models and configuration
"""

from pathlib import Path
import sys

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from iptv_automation.config import Settings
from iptv_automation.exceptions import ConfigurationError
from iptv_automation.models.panel import PanelCredentials, Session
from iptv_automation.models.provisioning import CreateLineRequest, RenewLineRequest, plan_label

PANEL = PanelCredentials("https://panel.test/", "admin", "secret")


class TestPanelModels:

    def test_url(self):
        assert PANEL.url() == "https://panel.test"
        assert PANEL.url("/lines/data") == "https://panel.test/lines/data"
        assert PANEL.url("lines") == "https://panel.test/lines"

    def test_password_hidden_from_repr(self):
        assert "secret" not in repr(PANEL)

    def test_credentials_are_hashable_keys(self):
        cache = {PANEL: 1}
        assert cache[PanelCredentials("https://panel.test/", "admin", "secret")] == 1

    def test_session_freshness(self):
        session = Session(cookies={"a": "1", "b": "2"}, token="t", captured_at=100.0)

        assert session.cookie_header == "a=1; b=2"
        assert session.is_fresh(699.0, 600)
        assert not session.is_fresh(700.0, 600)


class TestRequests:

    def test_create_defaults(self):
        request = CreateLineRequest("Jane Doe", PANEL)

        assert request.plan_months == 1
        assert request.customer_email is None

    def test_create_missing_fields(self):
        with pytest.raises(ConfigurationError) as exc_info:
            CreateLineRequest("  ", PanelCredentials("", "admin", ""))

        assert exc_info.value.fields == ["customer_name", "panel_url", "panel_pass"]

    def test_renew_missing_username(self):
        with pytest.raises(ConfigurationError) as exc_info:
            RenewLineRequest("", PANEL)

        assert exc_info.value.fields == ["iptv_username"]

    def test_negative_months(self):
        with pytest.raises(ConfigurationError):
            RenewLineRequest("bob", PANEL, -1)

    def test_zero_months_allowed(self):
        assert CreateLineRequest("Jane", PANEL, 0).plan_months == 0

    def test_plan_label(self):
        assert plan_label(1) == "1 Month"
        assert plan_label(12) == "12 Month"


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.port == 3007
        assert settings.session_ttl_seconds == 600
        assert settings.browser_headless is True
        assert settings.pushover_user_key is None
        assert settings.email_service_url == "http://localhost:5002/api/send-credentials"

    def test_from_environment(self, tmp_path):
        settings = Settings.from_env({
            "IPTV_PANEL_URL": "https://panel.example/",
            "IPTV_PANEL_USER": "reseller",
            "IPTV_PANEL_PASS": "pw",
            "PORT": "8080",
            "SESSION_TTL_SECONDS": "30",
            "BROWSER_HEADLESS": "false",
            "SCREENSHOTS_ENABLED": "0",
            "SCREENSHOT_DIR": str(tmp_path),
            "PUSHOVER_USER_KEY": "u",
            "PUSHOVER_APP_TOKEN": "",
        })

        assert settings.default_panel == PanelCredentials("https://panel.example", "reseller", "pw")
        assert settings.port == 8080
        assert settings.session_ttl_seconds == 30
        assert settings.browser_headless is False
        assert settings.screenshots_enabled is False
        assert settings.screenshot_dir == tmp_path
        assert settings.pushover_user_key == "u"
        assert settings.pushover_app_token is None
