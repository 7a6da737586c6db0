import asyncio

import pytest

from auth import IdentityServiceError, StorageUnavailableError
from use_cases.identity_slot import IdentitySlot
from use_cases.login_machine import LoginAttemptMachine
from use_cases.session_models import Identity


class FakeStorage:
    def __init__(self, values=None, fail=False):
        self.values = dict(values or {})
        self.fail = fail

    def get(self, key):
        if self.fail:
            raise StorageUnavailableError("storage is down")
        return self.values.get(key)

    def set(self, key, value):
        if self.fail:
            raise StorageUnavailableError("storage is down")
        self.values[key] = value

    def clear(self, key):
        if self.fail:
            raise StorageUnavailableError("storage is down")
        self.values.pop(key, None)


class FakeIdentityService:
    """Scriptable identity capability; set ``*_error`` to make a call raise."""

    def __init__(self, identity=None, current=None):
        self.identity = identity or Identity(username="alice", is_admin=False)
        self.current = current
        self.login_error = None
        self.logout_error = None
        self.fetch_error = None
        self.login_calls = 0
        self.logout_calls = 0
        self.fetch_calls = 0
        # When set, login/logout wait on it so tests can act mid-flight.
        self.gate = None

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()

    async def fetch_current_identity(self):
        self.fetch_calls += 1
        if self.fetch_error:
            raise self.fetch_error
        return self.current

    async def login(self):
        self.login_calls += 1
        await self._wait()
        if self.login_error:
            raise self.login_error
        return self.identity

    async def logout(self):
        self.logout_calls += 1
        await self._wait()
        if self.logout_error:
            raise self.logout_error


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def identity_service():
    return FakeIdentityService()


@pytest.fixture
def slot():
    return IdentitySlot()


@pytest.fixture
def machine(identity_service, slot, storage):
    return LoginAttemptMachine(identity_service, slot, storage=storage)


@pytest.fixture
def make_gate():
    def _make():
        return asyncio.Event()
    return _make


@pytest.fixture
def network_error():
    return IdentityServiceError("Network error: connection refused")
