import streamlit as st
from typing import Optional

def init_session():
    """Initialize session state variables."""
    if "day" not in st.session_state:
        st.session_state["day"] = None
    if "session_id" not in st.session_state:
        st.session_state["session_id"] = None

def get_day() -> Optional[str]:
    """Get the selected day (YYYY-MM-DD) or None for all days."""
    return st.session_state.get("day")

def get_session_filter() -> Optional[str]:
    """Get the selected tracker session or None for all sessions."""
    return st.session_state.get("session_id")

def set_selection(day: Optional[str], session_id: Optional[str]):
    st.session_state["day"] = day
    st.session_state["session_id"] = session_id
