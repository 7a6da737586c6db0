"""Startup orchestration: build the login core and reconcile with storage."""

import asyncio
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

import auth

from .attempt_state import Initial
from .identity_slot import IdentitySlot
from .login_machine import LoginAttemptMachine
from .ports import CredentialStorage, IdentityService

StartupStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]
    machine: Optional[LoginAttemptMachine] = None
    slot: Optional[IdentitySlot] = None


async def start_session(
    storage: CredentialStorage,
    identity_service: Optional[IdentityService] = None,
    slot: Optional[IdentitySlot] = None,
) -> StartupResult:
    """Build the slot and machine, then run reconciliation once."""
    executed_steps = []

    if identity_service is None:
        identity_service = auth.get_identity_service(storage)
        executed_steps.append("build_identity_service")

    slot = slot or IdentitySlot()
    machine = LoginAttemptMachine(identity_service, slot, storage=storage)
    executed_steps.append("build_login_machine")

    await machine.reconcile()
    executed_steps.append("reconcile_session")

    status: StartupStatus = "STOP" if isinstance(machine.state, Initial) else "CONTINUE"
    return StartupResult(status=status, planned_steps=tuple(executed_steps), machine=machine, slot=slot)


def run_startup(
    storage: CredentialStorage,
    identity_service: Optional[IdentityService] = None,
    slot: Optional[IdentitySlot] = None,
) -> StartupResult:
    """Synchronous entry for scripts and Streamlit reruns."""
    return asyncio.run(start_session(storage, identity_service, slot))
