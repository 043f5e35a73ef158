"""
SecretHunter GitHub Actions Integration

Provides helpers for running SecretHunter in GitHub Actions:
- Workflow annotations on the offending lines
- Step summary output
- Environment detection
"""

from __future__ import annotations

import logging
import os
from collections import Counter

from secrethunter.core.finding import Risk, ScanResult

logger = logging.getLogger(__name__)


def is_github_actions() -> bool:
    """Check if currently running inside GitHub Actions."""
    return os.environ.get("GITHUB_ACTIONS") == "true"


def format_annotation(detection) -> str:
    """Format one detection as a workflow command."""
    level = "error" if detection.risk is Risk.HIGH else "warning"
    # ::error file={name},line={line},title={title}::{message}
    params = f"file={detection.file_path},line={detection.line},title={detection.service} secret"
    return f"::{level} {params}::{detection.service} secret detected ({detection.match})"


def emit_annotations(result: ScanResult) -> None:
    """
    Emit GitHub Actions workflow annotations for each detection.
    High-risk secrets show as errors, the rest as warnings.
    """
    if not is_github_actions():
        return

    for detection in result.detections:
        print(format_annotation(detection))


def write_step_summary(result: ScanResult, target: str) -> None:
    """
    Write a summary to the GitHub Actions step summary.
    This appears on the workflow run page.
    """
    if not is_github_actions():
        return

    summary_file = os.environ.get("GITHUB_STEP_SUMMARY")
    if not summary_file:
        return

    counter = Counter(d.risk for d in result.detections)
    lines = [
        "## SecretHunter Scan Results\n",
        f"**Target:** `{target}`  ",
        f"**Files scanned:** {result.files_scanned}\n",
        "| Risk | Count |",
        "|------|-------|",
    ]
    for risk in Risk:
        lines.append(f"| {risk.value} | {counter.get(risk, 0)} |")
    lines.append("")

    if result.detections:
        lines.append("### Status: FAILED")
        lines.append("Hard-coded secrets must be removed and rotated before merging.")
        lines.append("")
        for i, d in enumerate(result.detections[:20], start=1):
            lines.append(f"{i}. **{d.risk.value}** - {d.service} at `{d.file_path}:{d.line}` ({d.match})")
    else:
        lines.append("### Status: PASSED")
        lines.append("No secrets found.")

    try:
        with open(summary_file, "a", encoding="utf-8") as fh:
            fh.write("\n".join(lines) + "\n")
    except OSError as exc:
        logger.warning("Could not write step summary to %s: %s", summary_file, exc)
