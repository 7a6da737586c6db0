import streamlit as st

def greeting(identity):
    if identity is None:
        return "You're a mystery. Please log-in"
    return f"Hello there, {identity.username}!"

def render_display_area(slot):
    identity = slot.get() if slot is not None else None
    st.write(greeting(identity))
    if identity is not None and identity.is_admin:
        st.caption("Administrator")
