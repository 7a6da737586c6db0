import streamlit as st

from use_cases.attempt_state import Failed, Initial, NeedsLogin, NeedsLogout, NoUser, Succeeded

def _request_failing_login(machine, identity_service):
    # Demo backend only: arm a rejection so the failure path can be exercised from the UI.
    identity_service.fail_next_login("Bad username")
    machine.request_login()

def _render_no_user(machine, identity_service):
    c1, c2 = st.columns(2)
    c1.button("Log In (good)", key="login_good", on_click=machine.request_login)
    if hasattr(identity_service, "fail_next_login"):
        c2.button(
            "Log In (fail)",
            key="login_fail",
            on_click=_request_failing_login,
            args=(machine, identity_service),
        )

def _render_needs_login():
    st.button("Login in Progress...", key="login_progress", disabled=True)

def _render_needs_logout():
    st.button("Logout in Progress...", key="logout_progress", disabled=True)

def _render_failed(machine, state):
    st.button("Reset", key="reset_failed", on_click=machine.reset)
    st.write(f"Failed: {state.reason}")

def _render_succeeded(machine, state):
    st.button("Log Out", key="logout", on_click=machine.request_logout)
    st.write(f"Logged in as: {state.identity.username}")

def _render_initial(machine):
    st.button("Reset", key="reset_initial", on_click=machine.reset, disabled=True)
    st.write("None")

def render_control_area(machine, identity_service=None):
    state = machine.state
    st.caption(state.label)
    with st.container():
        if isinstance(state, NoUser):
            _render_no_user(machine, identity_service)
        elif isinstance(state, NeedsLogin):
            _render_needs_login()
        elif isinstance(state, NeedsLogout):
            _render_needs_logout()
        elif isinstance(state, Failed):
            _render_failed(machine, state)
        elif isinstance(state, Succeeded):
            _render_succeeded(machine, state)
        elif isinstance(state, Initial):
            _render_initial(machine)
