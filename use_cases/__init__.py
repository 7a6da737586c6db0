"""Application layer contracts for the login-attempt core."""

from .attempt_state import (
    AttemptState,
    Failed,
    Initial,
    NeedsLogin,
    NeedsLogout,
    NoUser,
    Succeeded,
    is_resting,
    is_transient,
    transition,
)
from .auth_flow import AuthFlowResult, AuthFlowStatus, run_command
from .bootstrap import StartupResult, StartupStatus, run_startup, start_session
from .identity_slot import IdentitySlot
from .login_machine import LoginAttemptMachine
from .session_models import Identity, is_admin
from .session_reconciler import reconcile_session

__all__ = [
    "AttemptState",
    "AuthFlowResult",
    "AuthFlowStatus",
    "Failed",
    "Identity",
    "IdentitySlot",
    "Initial",
    "LoginAttemptMachine",
    "NeedsLogin",
    "NeedsLogout",
    "NoUser",
    "StartupResult",
    "StartupStatus",
    "Succeeded",
    "is_admin",
    "is_resting",
    "is_transient",
    "reconcile_session",
    "run_command",
    "run_startup",
    "start_session",
    "transition",
]
