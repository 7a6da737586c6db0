"""Identity DTOs shared across application layers."""

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class Identity:
    username: str
    is_admin: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Identity":
        """Build from the remote service payload (`{"username": ..., "admin": ...}`)."""
        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise ValueError("identity payload has no username")
        return cls(username=username, is_admin=bool(payload.get("admin", False)))


def is_admin(identity: Identity) -> bool:
    return identity.is_admin
