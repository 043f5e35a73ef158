"""
SecretHunter JSON Reporter

Generates machine-readable JSON output format:
{
    "version": "1.0",
    "summary": {
        "total_secrets": N,
        "scanned_files": N,
        "by_risk": {"high": n, "medium": n, "low": n}
    },
    "secrets": [...],
    "errors": [...]
}
"""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Optional

from secrethunter import __version__
from secrethunter.core.finding import Risk, ScanResult


class JSONReporter:
    """Generates JSON-formatted scan reports."""

    def __init__(self, target: str, verified: bool = False) -> None:
        self.target = target
        self.verified = verified

    def report(
        self,
        result: ScanResult,
        output_file: Optional[str] = None,
    ) -> str:
        """
        Render the scan result as an indented JSON document.

        Args:
            result: The scan result to render.
            output_file: Optional file path to write the report to.

        Returns:
            The JSON string.
        """
        counter = Counter(d.risk.value for d in result.detections)

        report_data = {
            "version": "1.0",
            "tool": {
                "name": "SecretHunter",
                "version": __version__,
            },
            "target": self.target,
            "summary": {
                "total_secrets": len(result.detections),
                "scanned_files": result.files_scanned,
                "by_risk": {risk.value: counter.get(risk.value, 0) for risk in Risk},
                "verified": self.verified,
            },
            "secrets": [d.to_dict() for d in result.detections],
            "errors": list(result.errors),
            "cancelled": result.cancelled,
        }

        json_str = json.dumps(report_data, indent=2, default=str)

        if output_file:
            Path(output_file).write_text(json_str, encoding="utf-8")

        return json_str
