import streamlit as st

def setup_style():
    st.markdown("""
    <style>
        :root {
            --text-main: #f3f8ff;
            --text-soft: rgba(234, 244, 255, 0.72);
            --accent: #73c3ff;
        }

        .stApp {
            font-family: 'Manrope', 'Plus Jakarta Sans', sans-serif;
            background: linear-gradient(180deg, #08101d 0%, #0a1422 48%, #0b1420 100%);
            color: var(--text-main);
        }

        .stButton > button {
            border-radius: 10px;
            border: 1px solid var(--accent);
        }

        .stButton > button:disabled {
            opacity: 0.6;
            cursor: progress;
        }

        [data-testid="stCaptionContainer"] {
            color: var(--text-soft);
        }
    </style>
    """, unsafe_allow_html=True)
