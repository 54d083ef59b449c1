"""
Read-only subscriber lookups against the panel's lines data table
"""

import logging
from typing import Optional, Union

import httpx

from ...exceptions import AuthenticationError, LookupFailedError
from ...models.panel import PanelCredentials
from ...models.subscriber import SubscriberRecord
from .session_manager import AUTH_FAILURE_STATUSES, USER_AGENT, SessionManager

BulkEntry = Union[SubscriberRecord, None, dict]


class LookupClient:
    """Resolves single subscriber records by exact username"""

    DATA_PATH = "/lines/data"
    PAGE_SIZE = 10

    def __init__(self, session_manager: SessionManager, credentials: Optional[PanelCredentials] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.session_manager = session_manager
        self.credentials = credentials or session_manager.default_credentials

    @classmethod
    def build_query(cls, username: str) -> dict[str, str]:
        """DataTables server-side request filtered to one username"""
        return {
            "draw": "1",
            "start": "0",
            "length": str(cls.PAGE_SIZE),
            "id": "users",
            "filter": "",
            "reseller": "",
            "search[value]": username,
            "order[0][column]": "0",
            "order[0][dir]": "desc",
            "columns[0][data]": "id",
            "columns[0][name]": "id",
            "columns[1][data]": "expired",
            "columns[1][name]": "username",
            "columns[2][data]": "password",
            "columns[2][name]": "password",
            "columns[3][data]": "exp_date_show",
            "columns[3][name]": "users.exp_date",
            "columns[4][data]": "admin_notes_show",
            "columns[4][name]": "reseller_notes",
        }

    @staticmethod
    def find_exact_match(rows: list[dict], username: str) -> Optional[SubscriberRecord]:
        """First row whose username equals the query, ignoring case"""
        wanted = username.lower()
        for row in rows:
            if str(row.get("username", "")).lower() == wanted:
                return SubscriberRecord.from_row(row)
        return None

    async def lookup(self, username: str) -> Optional[SubscriberRecord]:
        """Look up one subscriber; None when the panel has no exact match"""
        session = await self.session_manager.acquire(self.credentials)

        try:
            response = await self.session_manager.client.post(
                self.credentials.url(self.DATA_PATH),
                data=self.build_query(username),
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Cookie": session.cookie_header,
                    "X-CSRF-TOKEN": session.token,
                    "X-Requested-With": "XMLHttpRequest",
                    "User-Agent": USER_AGENT,
                },
            )
        except httpx.HTTPError as e:
            raise LookupFailedError(username, f"{e.__class__.__name__}: {e}") from e
        finally:
            self.session_manager.client.cookies.clear()

        if response.status_code in AUTH_FAILURE_STATUSES:
            raise AuthenticationError("Lines data request was rejected", self.credentials.base_url, response.status_code)
        if response.status_code >= 400:
            raise LookupFailedError(username, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            # the panel answers expired sessions with its HTML login page
            raise AuthenticationError("Lines data response was not JSON", self.credentials.base_url) from e

        rows = self._rows(payload, username)
        try:
            record = self.find_exact_match(rows, username)
        except (TypeError, ValueError) as e:
            raise LookupFailedError(username, f"unexpected row format: {e}") from e
        self.logger.debug(f"Lookup '{username}': {len(rows)} rows, match={'yes' if record else 'no'}")
        return record

    @staticmethod
    def _rows(payload, username: str) -> list[dict]:
        """The `data` rows of a DataTables response; anything else is a lookup failure"""
        data = payload.get("data") if isinstance(payload, dict) else None
        if data is None and isinstance(payload, dict):
            return []
        if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
            raise LookupFailedError(username, "unexpected response shape")
        return data

    async def bulk_lookup(self, usernames: list[str]) -> dict[str, BulkEntry]:
        """Look up usernames one after another, isolating per-entry failures"""
        results: dict[str, BulkEntry] = {}
        for username in usernames:
            try:
                results[username] = await self.lookup(username)
            except AuthenticationError as e:
                self.logger.warning(f"Bulk lookup auth failure for '{username}': {e.message}")
                self.session_manager.invalidate(self.credentials)
                results[username] = {"error": e.message}
            except LookupFailedError as e:
                self.logger.warning(f"Bulk lookup failure for '{username}': {e.reason}")
                results[username] = {"error": e.message}
        return results
