import pandas as pd
import streamlit as st
from pastewatch.classifier import format_finding_details, replay_findings
from pastewatch.config import ClassifierThresholds, settings
from pastewatch.storage.records import load_records
from pastewatch.ui.state import get_day, get_session_filter

st.title("Suspicious Changes")

day = get_day()
session_id = get_session_filter()
st.caption(f"Day: {day or 'all'} | Session: {session_id or 'all'}")

snapshots = load_records(settings.STORAGE_DIR, day=day, session_id=session_id)
if not snapshots:
    st.info("No snapshots for this selection.")
    st.stop()

findings = replay_findings(snapshots, ClassifierThresholds.from_settings(settings))

c1, c2 = st.columns(2)
c1.metric("Snapshots", len(snapshots))
c2.metric("Findings", len(findings))

if not findings:
    st.success("✅ No suspicious changes.")
    st.stop()

df = pd.DataFrame([
    {
        "time": current.timestamp,
        "file": finding.logical_key,
        "category": finding.category.value,
        "severity": finding.severity.value,
        "lines": finding.line_delta,
        "chars": finding.char_delta,
        "interval_ms": finding.time_delta_ms,
    }
    for finding, _, current in findings
])
st.dataframe(df, use_container_width=True, hide_index=True)

st.divider()
for finding, previous, current in findings:
    with st.expander(f"⚠️ {finding.logical_key} @ {current.timestamp:%H:%M:%S}"):
        st.text(format_finding_details(previous, current, finding))
