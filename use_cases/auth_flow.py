"""Authentication command orchestration (application layer)."""

import asyncio
from dataclasses import dataclass
from typing import Literal

from .attempt_state import COMMANDS, AttemptTag
from .login_machine import LoginAttemptMachine

AuthFlowStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class AuthFlowResult:
    """Result contract for auth flow orchestration."""

    status: AuthFlowStatus
    reason: str
    state: AttemptTag


def run_command(machine: LoginAttemptMachine, command: str) -> AuthFlowResult:
    """Apply a UI command and drive any resulting action to completion."""
    if command not in COMMANDS:
        return AuthFlowResult(status="STOP", reason="unknown_command", state=machine.state.tag)

    applied = machine.dispatch(command)
    if machine.has_pending_effect:
        asyncio.run(machine.settle())

    reason = "applied" if applied else "ignored"
    return AuthFlowResult(status="CONTINUE", reason=reason, state=machine.state.tag)
