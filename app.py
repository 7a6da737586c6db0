import asyncio
import streamlit as st
from datetime import datetime, timezone

from infrastructure.observability import setup_observability
setup_observability()

import ui
from utils import session_manager
from views import control_view, display_view

# --- НАСТРОЙКИ СТРАНИЦЫ ---
st.set_page_config(page_title="Login Tracker", layout="centered")

# Health Check (Basic load-balancer heartbeat)
if st.query_params.get("health") == "1":
    st.write({"status": "ok", "version": "1.0", "time": datetime.now(timezone.utc).isoformat()})
    st.stop()

ui.setup_style()

# --- STARTUP ORCHESTRATION ---
# Reconciliation with the stored credential runs once per browser session.
machine = session_manager.ensure_session()
identity_service = st.session_state.identity_service
slot = st.session_state.identity_slot

# --- CONTROL AREA ---
st.markdown('<div id="control-area"></div>', unsafe_allow_html=True)
control_view.render_control_area(machine, identity_service)

st.divider()

# --- DISPLAY AREA ---
st.markdown('<div id="display-area"></div>', unsafe_allow_html=True)
display_view.render_display_area(slot)

# A button callback may have moved the machine into a transient state. The
# "in progress" controls are already on screen; run the action, then redraw.
if machine.has_pending_effect:
    asyncio.run(machine.settle())
    st.rerun()
