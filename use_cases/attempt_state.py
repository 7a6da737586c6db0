"""Login attempt states and the pure transition table.

Every state is a frozen dataclass carrying a ``tag``. ``transition`` never
performs I/O: it returns the next state plus the effect (``"login"`` or
``"logout"``) the driver must run, and unknown (state, event) pairs fall
through unchanged.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, Union

from .session_models import Identity

AttemptTag = Literal["INITIAL", "NO_USER", "NEEDS_LOGIN", "NEEDS_LOGOUT", "FAILED", "SUCCEEDED"]
Effect = Literal["login", "logout"]
Command = Literal["request_login", "request_logout", "reset"]

COMMANDS = ("request_login", "request_logout", "reset")


@dataclass(frozen=True)
class Initial:
    tag: AttemptTag = field(default="INITIAL", init=False)

    @property
    def label(self) -> str:
        return "Checking for a previous session..."


@dataclass(frozen=True)
class NoUser:
    tag: AttemptTag = field(default="NO_USER", init=False)

    @property
    def label(self) -> str:
        return "Nothing to do"


@dataclass(frozen=True)
class NeedsLogin:
    tag: AttemptTag = field(default="NEEDS_LOGIN", init=False)

    @property
    def label(self) -> str:
        return "Waiting to trigger login..."


@dataclass(frozen=True)
class NeedsLogout:
    tag: AttemptTag = field(default="NEEDS_LOGOUT", init=False)

    @property
    def label(self) -> str:
        return "Waiting to trigger logout..."


@dataclass(frozen=True)
class Failed:
    reason: str
    tag: AttemptTag = field(default="FAILED", init=False)

    @property
    def label(self) -> str:
        return f"Failed with '{self.reason}'"


@dataclass(frozen=True)
class Succeeded:
    identity: Identity
    tag: AttemptTag = field(default="SUCCEEDED", init=False)

    @property
    def label(self) -> str:
        return f"Succeeded for '{self.identity.username}'"


AttemptState = Union[Initial, NoUser, NeedsLogin, NeedsLogout, Failed, Succeeded]

RESTING_TAGS = frozenset({"NO_USER", "FAILED", "SUCCEEDED"})
TRANSIENT_TAGS = frozenset({"NEEDS_LOGIN", "NEEDS_LOGOUT"})


def is_resting(state: AttemptState) -> bool:
    return state.tag in RESTING_TAGS


def is_transient(state: AttemptState) -> bool:
    return state.tag in TRANSIENT_TAGS


def projected_identity(state: AttemptState) -> Optional[Identity]:
    """Identity the projection slot must hold while ``state`` is current."""
    if isinstance(state, Succeeded):
        return state.identity
    return None


# --- events ---

@dataclass(frozen=True)
class Seeded:
    """Reconciliation outcome; only ``NoUser`` or ``Succeeded`` are meaningful."""

    outcome: AttemptState


@dataclass(frozen=True)
class Requested:
    command: Command


@dataclass(frozen=True)
class LoginSettled:
    identity: Optional[Identity] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class LogoutSettled:
    error: Optional[str] = None


Event = Union[Seeded, Requested, LoginSettled, LogoutSettled]


@dataclass(frozen=True)
class Transition:
    state: AttemptState
    effect: Optional[Effect] = None

    def changed(self, previous: AttemptState) -> bool:
        return self.state != previous


def transition(state: AttemptState, event: Event) -> Transition:
    if isinstance(event, Seeded):
        if isinstance(state, Initial) and isinstance(event.outcome, (NoUser, Succeeded)):
            return Transition(event.outcome)
        return Transition(state)

    if isinstance(event, Requested):
        if event.command == "request_login" and isinstance(state, (NoUser, Failed)):
            return Transition(NeedsLogin(), effect="login")
        if event.command == "request_logout" and isinstance(state, Succeeded):
            return Transition(NeedsLogout(), effect="logout")
        if event.command == "reset" and isinstance(state, Failed):
            return Transition(NoUser())
        return Transition(state)

    if isinstance(event, LoginSettled):
        if not isinstance(state, NeedsLogin):
            return Transition(state)
        if event.identity is not None:
            return Transition(Succeeded(event.identity))
        return Transition(Failed(event.error or "Login failed"))

    if isinstance(event, LogoutSettled):
        if isinstance(state, NeedsLogout):
            return Transition(NoUser())
        return Transition(state)

    return Transition(state)
