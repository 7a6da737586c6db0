import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import requests

from auth import (
    AUTH_TOKEN_COOKIE_NAME,
    IdentityServiceError,
    InvalidCredentialsError,
    StorageUnavailableError,
)
from use_cases.session_models import Identity

log = logging.getLogger(__name__)


class HttpIdentityService:
    """Identity checks against a JSON backend (`/api/me`, `/api/login`, `/api/logout`)."""

    def __init__(self, storage, base_url: str, timeout: float = 10.0, key: str = AUTH_TOKEN_COOKIE_NAME, http=None):
        self.storage = storage
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.key = key
        self.http = http or requests.Session()

    def _cookies(self) -> Dict[str, str]:
        try:
            token = self.storage.get(self.key)
        except StorageUnavailableError as e:
            log.warning(f"Sending request without stored credential: {e}")
            token = None
        return {self.key: token} if token else {}

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return self.http.request(method, url, cookies=self._cookies(), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            log.error(f"❌ Network error calling {method} {path}: {e}")
            raise IdentityServiceError(f"Network error: {e}") from e

    @staticmethod
    def _json(resp: requests.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise IdentityServiceError(f"Malformed response from identity service (HTTP {resp.status_code})") from e
        if not isinstance(data, dict):
            raise IdentityServiceError("Malformed response from identity service")
        return data

    @classmethod
    def _identity(cls, resp: requests.Response) -> Identity:
        try:
            return Identity.from_payload(cls._json(resp))
        except ValueError as e:
            raise IdentityServiceError(str(e)) from e

    def _fetch_current_identity(self) -> Optional[Identity]:
        resp = self._request("GET", "/api/me")
        if resp.status_code in (204, 401, 403):
            return None
        if resp.status_code != 200:
            raise IdentityServiceError(f"Identity service error: HTTP {resp.status_code}")
        return self._identity(resp)

    def _login(self) -> Tuple[Identity, Optional[str]]:
        resp = self._request("POST", "/api/login")
        if resp.status_code in (401, 403):
            detail = None
            try:
                detail = self._json(resp).get("detail")
            except IdentityServiceError:
                pass
            raise InvalidCredentialsError(detail or "Bad username")
        if resp.status_code != 200:
            raise IdentityServiceError(f"Login failed: HTTP {resp.status_code}")

        payload = self._json(resp)
        token = payload.get("token")
        try:
            return Identity.from_payload(payload), (str(token) if token else None)
        except ValueError as e:
            raise IdentityServiceError(str(e)) from e

    def _logout(self) -> None:
        resp = self._request("POST", "/api/logout")
        if not 200 <= resp.status_code < 300:
            raise IdentityServiceError(f"Logout failed: HTTP {resp.status_code}")

    async def fetch_current_identity(self) -> Optional[Identity]:
        return await asyncio.to_thread(self._fetch_current_identity)

    # Storage writes stay on the caller's thread: the browser cookie hook needs the script context.
    async def login(self) -> Identity:
        identity, token = await asyncio.to_thread(self._login)
        if token:
            self.storage.set(self.key, token)
        return identity

    async def logout(self) -> None:
        await asyncio.to_thread(self._logout)
        self.storage.clear(self.key)
