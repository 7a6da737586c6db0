"""Login attempt state machine (application layer).

The machine owns the current ``AttemptState`` and the writer side of the
``IdentitySlot``. Commands are synchronous and never raise; effects produced
by the transition table are executed by ``settle``, one at a time.
"""

import logging
from typing import Callable, List, Optional

from auth import describe_error

from .attempt_state import (
    COMMANDS,
    AttemptState,
    Effect,
    Event,
    Initial,
    LoginSettled,
    LogoutSettled,
    NoUser,
    Requested,
    Seeded,
    projected_identity,
    transition,
)
from .identity_slot import IdentitySlot
from .ports import CredentialStorage, IdentityService
from .session_reconciler import reconcile_session

log = logging.getLogger(__name__)

StateListener = Callable[[AttemptState], None]


class LoginAttemptMachine:
    def __init__(
        self,
        identity_service: IdentityService,
        slot: IdentitySlot,
        storage: Optional[CredentialStorage] = None,
    ) -> None:
        self._identity_service = identity_service
        self._storage = storage
        self._slot = slot
        self._slot_writer = slot.claim_writer()
        self._state: AttemptState = Initial()
        self._generation = 0
        self._pending: Optional[tuple[Effect, int]] = None
        self._listeners: List[StateListener] = []
        self._reconciled = False

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def slot(self) -> IdentitySlot:
        return self._slot

    @property
    def has_pending_effect(self) -> bool:
        return self._pending is not None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- commands (event sink) ---

    def request_login(self) -> None:
        self._apply(Requested("request_login"))

    def request_logout(self) -> None:
        self._apply(Requested("request_logout"))

    def reset(self) -> None:
        self._apply(Requested("reset"))

    def dispatch(self, command: str) -> bool:
        """Apply a command by name; returns False when it was ignored."""
        if command not in COMMANDS:
            log.warning(f"Ignoring unknown login command {command!r}")
            return False
        return self._apply(Requested(command))

    def seed(self, outcome: AttemptState) -> bool:
        """Apply the reconciliation outcome if nothing has moved us off ``Initial``."""
        if not isinstance(self._state, Initial):
            log.info(f"Reconciliation result discarded, state already {self._state.tag}")
            return False
        return self._apply(Seeded(outcome))

    def deliver(self, event: Event) -> bool:
        """Fold an already-settled event into the state, e.g. one produced by another driver."""
        return self._apply(event)

    # --- driver ---

    async def reconcile(self, storage: Optional[CredentialStorage] = None) -> AttemptState:
        """Run startup reconciliation once per machine lifetime."""
        if self._reconciled:
            return self._state
        self._reconciled = True
        storage = storage if storage is not None else self._storage
        if storage is None:
            log.warning("No credential storage configured; assuming no previous session")
            outcome: AttemptState = NoUser()
        else:
            outcome = await reconcile_session(storage, self._identity_service)
        self.seed(outcome)
        return self._state

    async def settle(self) -> AttemptState:
        """Execute the pending effect, if any, and fold its result into the state."""
        if self._pending is None:
            return self._state
        effect, generation = self._pending
        self._pending = None

        if effect == "login":
            event = await self._run_login()
        else:
            event = await self._run_logout()

        if generation != self._generation:
            log.warning(f"Discarding stale {effect} result; state moved on to {self._state.tag}")
            return self._state
        self._apply(event)
        return self._state

    async def submit(self, command: str) -> AttemptState:
        self.dispatch(command)
        return await self.settle()

    async def _run_login(self) -> Event:
        log.info("Logging in")
        try:
            identity = await self._identity_service.login()
        except Exception as e:
            log.warning(f"Login attempt failed: {describe_error(e)}")
            return LoginSettled(error=describe_error(e))
        if identity is None:
            return LoginSettled(error="User is not logged-in")
        return LoginSettled(identity=identity)

    async def _run_logout(self) -> Event:
        log.info("Logging out")
        try:
            await self._identity_service.logout()
        except Exception as e:
            log.warning(f"Logout action failed, treating user as logged out: {describe_error(e)}")
            return LogoutSettled(error=describe_error(e))
        return LogoutSettled()

    def _apply(self, event: Event) -> bool:
        result = transition(self._state, event)
        if not result.changed(self._state):
            log.debug(f"Ignoring {type(event).__name__} in state {self._state.tag}")
            return False

        previous = self._state
        # State and projection are written together before anyone is notified.
        self._state = result.state
        self._generation += 1
        identity_changed = self._slot_writer.store(projected_identity(result.state))
        self._pending = (result.effect, self._generation) if result.effect else None
        log.info(f"Login state {previous.tag} -> {result.state.tag}")

        if identity_changed:
            self._slot_writer.notify()
        for listener in list(self._listeners):
            try:
                listener(result.state)
            except Exception:
                log.exception("Login state listener failed")
        return True
