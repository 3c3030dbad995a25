"""
Suspicious-change classification.

Compares two chronologically ordered snapshots of the same file:

- rapid-increase: more than ``line_threshold`` lines added within
  ``time_threshold_ms``.
- content-replacement: content hash changed and the character count moved by
  more than ``char_threshold``.

The rapid-increase rule is checked first and wins when both match. A
negative elapsed time (clock skew, out-of-order events) never yields a finding.
"""
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

from pastewatch.config import ClassifierThresholds
from pastewatch.models.finding import Finding, FindingCategory, Severity
from pastewatch.models.snapshot import Snapshot


def classify(
    previous: Snapshot,
    current: Snapshot,
    thresholds: Optional[ClassifierThresholds] = None,
) -> Optional[Finding]:
    thresholds = thresholds or ClassifierThresholds()

    elapsed = current.timestamp - previous.timestamp
    if elapsed < timedelta(0):
        return None

    time_delta_ms = int(elapsed / timedelta(milliseconds=1))
    line_delta = current.line_count - previous.line_count
    char_delta = abs(current.character_count - previous.character_count)

    category = None
    if line_delta > thresholds.line_threshold and time_delta_ms < thresholds.time_threshold_ms:
        category = FindingCategory.RAPID_INCREASE
    elif previous.hash != current.hash and char_delta > thresholds.char_threshold:
        category = FindingCategory.CONTENT_REPLACEMENT

    if category is None:
        return None

    return Finding(
        category=category,
        severity=Severity.HIGH,
        logical_key=current.relative_path,
        line_delta=line_delta,
        char_delta=char_delta,
        time_delta_ms=time_delta_ms,
    )


def format_finding_details(previous: Snapshot, current: Snapshot, finding: Finding) -> str:
    """Multi-line description of a finding for display."""
    signed_chars = current.character_count - previous.character_count
    return "\n".join([
        f"Suspicious change: {finding.category.value} ({finding.severity.value})",
        "",
        f"File: {current.relative_path}",
        f"Time: {current.timestamp.isoformat()}",
        f"Session: {current.session_id}",
        "",
        f"- Lines: {previous.line_count} -> {current.line_count} ({finding.line_delta:+d})",
        f"- Characters: {previous.character_count} -> {current.character_count} ({signed_chars:+d})",
        f"- Interval: {finding.time_delta_ms}ms",
        f"- Content hash: {current.hash}",
        "",
        f"Language: {current.metadata.language}",
        f"File size: {current.metadata.file_size} bytes",
    ])


def replay_findings(
    snapshots: List[Snapshot],
    thresholds: Optional[ClassifierThresholds] = None,
) -> List[Tuple[Finding, Snapshot, Snapshot]]:
    """Classify every consecutive pair of snapshots per logical key."""
    by_key: Dict[str, List[Snapshot]] = {}
    for snapshot in sorted(snapshots, key=lambda s: s.timestamp):
        by_key.setdefault(snapshot.relative_path, []).append(snapshot)

    results = []
    for history in by_key.values():
        for previous, current in zip(history, history[1:]):
            finding = classify(previous, current, thresholds)
            if finding is not None:
                results.append((finding, previous, current))
    results.sort(key=lambda r: r[2].timestamp)
    return results
