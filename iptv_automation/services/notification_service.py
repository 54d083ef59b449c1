"""
Outbound notifications: credential emails and operator push alerts

Both collaborators are best-effort. A failed notification never fails the
provisioning call that triggered it.
"""

import logging
from typing import Optional

import httpx

from ..exceptions import NotificationError
from ..models.provisioning import plan_label

PUSHOVER_URL = "https://api.pushover.net/1/messages.json"


class NotificationService:
    """Sends credential emails and Pushover alerts"""

    def __init__(self,
                 email_service_url: Optional[str],
                 pushover_user_key: Optional[str] = None,
                 pushover_app_token: Optional[str] = None,
                 client: Optional[httpx.AsyncClient] = None,
                 timeout_seconds: float = 15.0):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.email_service_url = email_service_url
        self.pushover_user_key = pushover_user_key
        self.pushover_app_token = pushover_app_token

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)

    @property
    def push_enabled(self) -> bool:
        return bool(self.pushover_user_key and self.pushover_app_token)

    async def send_credentials(self, email: str, username: str, password: str, plan_months: int) -> bool:
        """Ask the email collaborator to mail the new credentials; True when it reports success"""
        if not self.email_service_url:
            return False

        try:
            body = await self._post_json("email", self.email_service_url, {
                "email": email,
                "username": username,
                "password": password,
                "plan": plan_label(plan_months),
            })
        except NotificationError as e:
            self.logger.error(f"[CREATE] Email send error: {e.reason}")
            return False

        sent = isinstance(body, dict) and bool(body.get("success"))
        self.logger.info(f"[CREATE] Email {'sent' if sent else 'failed'} to {email}")
        return sent

    async def push(self, title: str, message: str, priority: int = 0):
        """Operator alert; errors are logged and dropped"""
        if not self.push_enabled:
            return

        try:
            await self._post_json("pushover", PUSHOVER_URL, {
                "token": self.pushover_app_token,
                "user": self.pushover_user_key,
                "title": title,
                "message": message,
                "priority": priority,
            })
        except NotificationError as e:
            self.logger.warning(f"Pushover failed: {e.reason}")

    async def _post_json(self, channel: str, url: str, payload: dict):
        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise NotificationError(channel, f"{e.__class__.__name__}: {e}") from e
        except ValueError as e:
            raise NotificationError(channel, "response was not JSON") from e

    async def close(self):
        if self._owns_client:
            await self.client.aclose()
