"""
Panel session management

Logs into the panel over plain HTTP, keeps the cookie jar and the anti-forgery
token, and hands out cached sessions while they are fresh. Redirects are
followed by hand so every hop carries the jar as rotated by the previous one.

Login sequence:
    1. GET  /        (no redirects)  -> cookies + hidden `_token` input
    2. POST /        (no redirects)  -> session cookies
    3. GET  /lines                   -> `csrf-token` meta used by AJAX calls
"""

import asyncio
import logging
import time
from typing import Callable, Optional

import httpx
from bs4 import BeautifulSoup

from ...exceptions import AuthenticationError
from ...models.panel import PanelCredentials, Session

USER_AGENT = "Mozilla/5.0"
MAX_REDIRECTS = 10
AUTH_FAILURE_STATUSES = (401, 403, 419)


class SessionManager:
    """Owns the per-panel session cache"""

    LISTING_PATH = "/lines"

    def __init__(self,
                 default_credentials: PanelCredentials,
                 client: Optional[httpx.AsyncClient] = None,
                 ttl_seconds: float = 600.0,
                 timeout_seconds: float = 15.0,
                 clock: Callable[[], float] = time.monotonic):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.default_credentials = default_credentials
        self.ttl_seconds = ttl_seconds
        self.clock = clock

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)

        self._sessions: dict[PanelCredentials, Session] = {}
        self._locks: dict[PanelCredentials, asyncio.Lock] = {}

    async def acquire(self, credentials: Optional[PanelCredentials] = None) -> Session:
        """Return a fresh session, logging in when the cached one is stale"""
        credentials = credentials or self.default_credentials

        session = self._fresh_session(credentials)
        if session:
            return session

        lock = self._locks.setdefault(credentials, asyncio.Lock())
        async with lock:
            # another caller may have finished the login while we waited
            session = self._fresh_session(credentials)
            if session:
                return session

            session = await self._login(credentials)
            self._sessions[credentials] = session
            return session

    def invalidate(self, credentials: Optional[PanelCredentials] = None):
        """Drop the cached session so the next call logs in again"""
        credentials = credentials or self.default_credentials
        if self._sessions.pop(credentials, None) is not None:
            self.logger.info(f"Session invalidated for {credentials.base_url}")

    async def close(self):
        if self._owns_client:
            await self.client.aclose()

    def _fresh_session(self, credentials: PanelCredentials) -> Optional[Session]:
        session = self._sessions.get(credentials)
        if session and session.is_fresh(self.clock(), self.ttl_seconds):
            return session
        return None

    async def _login(self, credentials: PanelCredentials) -> Session:
        """Run the full login sequence against the panel"""
        base_url = credentials.url()
        self.logger.debug(f"Logging into panel {base_url}")
        jar: dict[str, str] = {}

        try:
            login_page = await self._send("GET", base_url, jar)
            login_token = self._extract_form_token(login_page.text)
            if not login_token:
                raise AuthenticationError("Could not find CSRF token", base_url)

            await self._send(
                "POST", base_url, jar,
                data={"_token": login_token, "username": credentials.username, "password": credentials.password},
                headers={"Content-Type": "application/x-www-form-urlencoded", "Referer": base_url},
            )
            lines_page = await self._send("GET", credentials.url(self.LISTING_PATH), jar, follow_redirects=True)
        except httpx.HTTPError as e:
            raise AuthenticationError(f"{e.__class__.__name__}: {e}", base_url) from e

        if lines_page.status_code in AUTH_FAILURE_STATUSES:
            raise AuthenticationError("Listing page rejected the session", base_url, lines_page.status_code)
        if self._is_login_page(lines_page, base_url):
            raise AuthenticationError("Login was rejected, panel returned the login form", base_url)

        token = self._extract_meta_token(lines_page.text) or login_token
        self.logger.info(f"[PANEL] Logged in successfully to {base_url}")
        return Session(cookies=jar, token=token, captured_at=self.clock())

    async def _send(self, method: str, url: str, jar: dict[str, str],
                    follow_redirects: bool = False, **kwargs) -> httpx.Response:
        """One request with the jar as Cookie header; redirects re-send the updated jar"""
        extra_headers = kwargs.pop("headers", {})
        response = await self._request(method, url, jar, extra_headers, **kwargs)

        hops = 0
        while follow_redirects and response.is_redirect:
            hops += 1
            if hops > MAX_REDIRECTS:
                raise httpx.TooManyRedirects(f"Exceeded {MAX_REDIRECTS} redirects", request=response.request)
            location = response.url.join(response.headers["location"])
            response = await self._request("GET", str(location), jar, {"Referer": str(response.url)})
        return response

    async def _request(self, method: str, url: str, jar: dict[str, str], extra_headers: dict, **kwargs) -> httpx.Response:
        headers = {"User-Agent": USER_AGENT}
        headers.update(extra_headers)
        if jar:
            headers["Cookie"] = "; ".join(f"{name}={value}" for name, value in jar.items())

        response = await self.client.request(method, url, headers=headers, follow_redirects=False, **kwargs)
        self._absorb_cookies(response, jar)
        # cookies live in the session jar only
        self.client.cookies.clear()
        return response

    @staticmethod
    def _is_login_page(response: httpx.Response, base_url: str) -> bool:
        """Bounced back to the panel root, or the page still asks for a password"""
        if response.url.path.rstrip("/") == httpx.URL(base_url).path.rstrip("/"):
            return True
        soup = BeautifulSoup(response.text, "html.parser")
        return soup.select_one('input[type="password"], input[name="password"]') is not None

    @staticmethod
    def _absorb_cookies(response: httpx.Response, jar: dict[str, str]):
        """Merge Set-Cookie directives into the jar, last write wins"""
        for directive in response.headers.get_list("set-cookie"):
            name_value = directive.split(";", 1)[0]
            name, sep, value = name_value.partition("=")
            if sep and name.strip():
                jar[name.strip()] = value

    @staticmethod
    def _extract_form_token(html: str) -> Optional[str]:
        soup = BeautifulSoup(html, "html.parser")
        token_input = soup.select_one('input[name="_token"]')
        if token_input and token_input.get("value"):
            return token_input["value"]
        return None

    @staticmethod
    def _extract_meta_token(html: str) -> Optional[str]:
        soup = BeautifulSoup(html, "html.parser")
        meta = soup.select_one('meta[name="csrf-token"]')
        if meta and meta.get("content"):
            return meta["content"]
        return None
