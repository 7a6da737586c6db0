"""Capabilities the login core consumes.

Concrete adapters live under ``infrastructure``; tests inject fakes.
"""

from typing import Optional, Protocol

from .session_models import Identity


class CredentialStorage(Protocol):
    """Named credential entries. Failures raise ``auth.StorageUnavailableError``."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self, key: str) -> None: ...


class IdentityService(Protocol):
    """Remote identity checks. Failures raise ``auth.IdentityServiceError``."""

    async def fetch_current_identity(self) -> Optional[Identity]: ...

    async def login(self) -> Identity: ...

    async def logout(self) -> None: ...
