import json
import logging

import streamlit as st
import streamlit.components.v1 as components

import auth
from infrastructure.storage.cookie_storage import CookieJarStorage
from use_cases import bootstrap

log = logging.getLogger(__name__)

"""
SESSION STATE CONTRACT

Keys in st.session_state (one browser session each):

credential_storage: CookieJarStorage | None
    cookie jar seeded from the request cookies, mirrored back to the browser
    default: None
    owner: session_manager

identity_service: DemoIdentityService | HttpIdentityService | None
    remote identity capability bound to credential_storage
    default: None
    owner: session_manager

login_machine: LoginAttemptMachine | None
    login attempt state machine, reconciled once per session
    default: None
    owner: session_manager

identity_slot: IdentitySlot | None
    resolved identity projection read by the display area
    default: None
    owner: login_machine (writer), views (readers)

startup_steps: tuple
    steps executed by the last bootstrap run
    default: ()
    owner: system
"""

def init_session_state():
    if "credential_storage" not in st.session_state:
        st.session_state.credential_storage = None
    if "identity_service" not in st.session_state:
        st.session_state.identity_service = None
    if "login_machine" not in st.session_state:
        st.session_state.login_machine = None
    if "identity_slot" not in st.session_state:
        st.session_state.identity_slot = None
    if "startup_steps" not in st.session_state:
        st.session_state.startup_steps = ()

def _request_cookies():
    try:
        return dict(st.context.cookies)
    except Exception:
        # During some tests contexts might not be fully available
        return {}

def sync_browser_cookie(key, value):
    if value is None:
        script = f'document.cookie = {json.dumps(key + "=")} + "; path=/; max-age=0; SameSite=Lax";'
    else:
        script = (
            f"var cookieStr = {json.dumps(key + '=')} + encodeURIComponent({json.dumps(value)})"
            ' + "; path=/; SameSite=Lax";'
            "document.cookie = cookieStr;"
            "try { window.parent.document.cookie = cookieStr; } catch (e) {}"
        )
    components.html(f"<script>{script}</script>", height=0)

def get_storage():
    init_session_state()
    if st.session_state.credential_storage is None:
        st.session_state.credential_storage = CookieJarStorage(
            _request_cookies(),
            on_write=sync_browser_cookie,
        )
    return st.session_state.credential_storage

def get_identity_service():
    init_session_state()
    if st.session_state.identity_service is None:
        st.session_state.identity_service = auth.get_identity_service(get_storage())
    return st.session_state.identity_service

def ensure_session():
    init_session_state()
    if st.session_state.login_machine is None:
        result = bootstrap.run_startup(get_storage(), get_identity_service())
        st.session_state.login_machine = result.machine
        st.session_state.identity_slot = result.slot
        st.session_state.startup_steps = result.planned_steps
        log.info(f"Login session started ({result.machine.state.tag})")
    return st.session_state.login_machine

def drop_session():
    st.session_state.login_machine = None
    st.session_state.identity_slot = None
    st.session_state.identity_service = None
    st.session_state.credential_storage = None
    st.session_state.startup_steps = ()
