"""
Unit tests for credential emails and push alerts
"""

import json

import httpx
import pytest
from pathlib import Path
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from iptv_automation.services.notification_service import PUSHOVER_URL, NotificationService

EMAIL_URL = "http://mail.test/api/send-credentials"


def make_service(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NotificationService(EMAIL_URL, client=client, **kwargs)


class TestSendCredentials:

    @pytest.mark.asyncio
    async def test_sent(self):
        received = []

        def handler(request):
            received.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True})

        sent = await make_service(handler).send_credentials("jane@example.com", "janedoe2026", "Pw12345678", 3)

        assert sent is True
        assert received == [{
            "email": "jane@example.com",
            "username": "janedoe2026",
            "password": "Pw12345678",
            "plan": "3 Month",
        }]

    @pytest.mark.asyncio
    async def test_collaborator_reports_failure(self):
        service = make_service(lambda request: httpx.Response(200, json={"success": False}))

        assert await service.send_credentials("jane@example.com", "u", "p", 1) is False

    @pytest.mark.asyncio
    async def test_http_error(self):
        service = make_service(lambda request: httpx.Response(502))

        assert await service.send_credentials("jane@example.com", "u", "p", 1) is False

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert await make_service(handler).send_credentials("jane@example.com", "u", "p", 1) is False

    @pytest.mark.asyncio
    async def test_non_json(self):
        service = make_service(lambda request: httpx.Response(200, text="OK"))

        assert await service.send_credentials("jane@example.com", "u", "p", 1) is False

    @pytest.mark.asyncio
    async def test_not_configured(self):
        service = NotificationService(None)

        assert await service.send_credentials("jane@example.com", "u", "p", 1) is False
        await service.close()


class TestPush:

    @pytest.mark.asyncio
    async def test_disabled_without_keys(self):
        calls = []
        service = make_service(lambda request: calls.append(request) or httpx.Response(200, json={}))

        await service.push("Account Created", "hello", -1)

        assert not service.push_enabled
        assert calls == []

    @pytest.mark.asyncio
    async def test_push(self):
        received = []

        def handler(request):
            received.append((str(request.url), json.loads(request.content)))
            return httpx.Response(200, json={"status": 1})

        service = make_service(handler, pushover_user_key="user-key", pushover_app_token="app-token")

        await service.push("Manual Creation Needed", "Failed to auto-create", 1)

        url, body = received[0]
        assert url == PUSHOVER_URL
        assert body == {
            "token": "app-token",
            "user": "user-key",
            "title": "Manual Creation Needed",
            "message": "Failed to auto-create",
            "priority": 1,
        }

    @pytest.mark.asyncio
    async def test_push_errors_are_dropped(self):
        service = make_service(
            lambda request: httpx.Response(500),
            pushover_user_key="user-key",
            pushover_app_token="app-token",
        )

        await service.push("Manual Renewal Needed", "Failed", 1)
