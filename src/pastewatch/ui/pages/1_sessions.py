import pandas as pd
import streamlit as st
from pastewatch.config import settings
from pastewatch.storage.records import summarize_storage
from pastewatch.ui.state import get_day, get_session_filter, set_selection

st.title("Snapshot Sessions")

rows = summarize_storage(settings.STORAGE_DIR)

if not rows:
    st.info(f"No persisted snapshots under {settings.STORAGE_DIR}. Run `pastewatch watch` first.")
    st.stop()

df = pd.DataFrame(rows)

c1, c2, c3 = st.columns(3)
c1.metric("Days", df["day"].nunique())
c2.metric("Sessions", df["session_id"].nunique())
c3.metric("Records", int(df["records"].sum()))

st.divider()
st.dataframe(df, use_container_width=True, hide_index=True)

st.subheader("Filter")
days = ["All"] + sorted(df["day"].unique().tolist(), reverse=True)
current_day = get_day()
day = st.selectbox("Day", days, index=days.index(current_day) if current_day in days else 0)

day_rows = df if day == "All" else df[df["day"] == day]
sessions = ["All"] + day_rows["session_id"].tolist()
current_session = get_session_filter()
session = st.selectbox(
    "Session", sessions, index=sessions.index(current_session) if current_session in sessions else 0
)

if st.button("Apply"):
    set_selection(None if day == "All" else day, None if session == "All" else session)
    st.success("Selection saved. Open the Findings page.")
