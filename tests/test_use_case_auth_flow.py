from unittest.mock import patch

from auth import InvalidCredentialsError
from use_cases import auth_flow
from use_cases.attempt_state import NoUser, Succeeded


def test_run_command_login_settles(machine, identity_service, slot):
    machine.seed(NoUser())
    result = auth_flow.run_command(machine, "request_login")

    assert result.status == "CONTINUE"
    assert result.reason == "applied"
    assert result.state == "SUCCEEDED"
    assert slot.get() == identity_service.identity


def test_run_command_reports_ignored(machine):
    machine.seed(NoUser())
    with patch("use_cases.auth_flow.asyncio.run") as mock_run:
        result = auth_flow.run_command(machine, "request_logout")

    assert result.reason == "ignored"
    assert result.state == "NO_USER"
    mock_run.assert_not_called()


def test_run_command_unknown(machine):
    result = auth_flow.run_command(machine, "drop_tables")
    assert result.status == "STOP"
    assert result.reason == "unknown_command"


def test_run_command_failed_login_surfaces_reason(machine, identity_service):
    identity_service.login_error = InvalidCredentialsError("Bad username")
    machine.seed(NoUser())

    result = auth_flow.run_command(machine, "request_login")
    assert result.state == "FAILED"
    assert machine.state.reason == "Bad username"

    result = auth_flow.run_command(machine, "reset")
    assert result.state == "NO_USER"


def test_run_command_logout(machine, identity_service, slot):
    machine.seed(Succeeded(identity_service.identity))
    result = auth_flow.run_command(machine, "request_logout")

    assert result.state == "NO_USER"
    assert slot.get() is None
    assert identity_service.logout_calls == 1
