import asyncio
import logging
from typing import Optional

from auth import (
    AUTH_TOKEN_COOKIE_NAME,
    DEMO_USERNAME,
    INVALID_TOKEN_VALUE,
    InvalidCredentialsError,
)
from use_cases.session_models import Identity

log = logging.getLogger(__name__)


class DemoIdentityService:
    """
    Stand-in for a backend identity API.

    The "server" keeps its session in the same credential storage the client
    reads: login writes a credential, logout overwrites it with "invalid",
    and the current user is whatever name the credential holds.
    """

    def __init__(self, storage, latency: float = 0.25, username: str = DEMO_USERNAME, key: str = AUTH_TOKEN_COOKIE_NAME):
        self.storage = storage
        self.latency = latency
        self.username = username
        self.key = key
        self._next_login_failure: Optional[str] = None

    def fail_next_login(self, reason: str = "Bad username") -> None:
        self._next_login_failure = reason

    async def _round_trip(self):
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def fetch_current_identity(self) -> Optional[Identity]:
        await self._round_trip()
        value = self.storage.get(self.key)
        if not value or value == INVALID_TOKEN_VALUE:
            return None
        return Identity(username=value, is_admin=False)

    async def login(self) -> Identity:
        await self._round_trip()
        if self._next_login_failure is not None:
            reason, self._next_login_failure = self._next_login_failure, None
            raise InvalidCredentialsError(reason)

        self.storage.set(self.key, self.username)
        identity = await self.fetch_current_identity()
        if identity is None:
            raise InvalidCredentialsError("User is not logged-in")
        return identity

    async def logout(self) -> None:
        await self._round_trip()
        self.storage.set(self.key, INVALID_TOKEN_VALUE)
