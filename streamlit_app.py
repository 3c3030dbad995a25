import streamlit as st
from pastewatch.ui.validation import run_all_checks, validate_config
from pastewatch.ui.state import init_session

# Page configuration
st.set_page_config(
    page_title="Pastewatch",
    page_icon="🛡️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Run pre-flight checks
errors = run_all_checks()

if errors:
    st.error("🚨 System Configuration Errors")
    for err in errors:
        st.write(f"- {err}")
    st.stop()

for warning in validate_config():
    st.sidebar.warning(warning)

# Initialize State
init_session()

# Navigation
st.sidebar.title("Pastewatch")

pg = st.navigation([
    st.Page("src/pastewatch/ui/pages/1_sessions.py", title="Sessions", icon="📸"),
    st.Page("src/pastewatch/ui/pages/2_findings.py", title="Findings", icon="⚠️"),
])

pg.run()
