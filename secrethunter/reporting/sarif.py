"""
SecretHunter SARIF Reporter

Generates SARIF 2.1.0 (Static Analysis Results Interchange Format) output
for GitHub Code Scanning and other SARIF consumers.
"""

from __future__ import annotations

import hashlib
import json
import re
from pathlib import Path
from typing import Optional

from secrethunter import __version__
from secrethunter.core.finding import Detection, Risk, ScanResult


# SARIF severity level mapping
SARIF_LEVEL_MAP = {
    Risk.HIGH: "error",
    Risk.MEDIUM: "warning",
    Risk.LOW: "note",
}


def rule_id_for(service: str) -> str:
    """Stable SARIF rule id for a service, e.g. "GitHub PAT" -> "secret/github-pat"."""
    return "secret/" + re.sub(r"[^a-z0-9]+", "-", service.lower()).strip("-")


class SARIFReporter:
    """Generates SARIF 2.1.0-formatted scan reports."""

    def __init__(self, target: str) -> None:
        self.target = target

    def report(
        self,
        result: ScanResult,
        output_file: Optional[str] = None,
    ) -> str:
        """
        Build the SARIF log for one scan. Scan errors and cancellation
        are reported as tool execution notifications.

        Args:
            result: The scan result to render.
            output_file: Optional file path to write the report to.

        Returns:
            The SARIF JSON string.
        """
        rules_map: dict[str, dict] = {}
        results: list[dict] = []

        for detection in result.detections:
            rule_id = rule_id_for(detection.service)
            if rule_id not in rules_map:
                rules_map[rule_id] = {
                    "id": rule_id,
                    "name": detection.service,
                    "shortDescription": {"text": f"{detection.service} credential"},
                    "defaultConfiguration": {
                        "level": SARIF_LEVEL_MAP.get(detection.risk, "warning")
                    },
                    "properties": {
                        "security-severity": self._severity_score(detection.risk),
                        "tags": ["secret"],
                    },
                }

            results.append(
                {
                    "ruleId": rule_id,
                    "ruleIndex": list(rules_map).index(rule_id),
                    "level": SARIF_LEVEL_MAP.get(detection.risk, "warning"),
                    "message": {"text": f"{detection.service} secret detected: {detection.match}"},
                    "partialFingerprints": {"secretLocation/v1": _fingerprint(rule_id, detection)},
                    "locations": [
                        {
                            "physicalLocation": {
                                "artifactLocation": {
                                    "uri": str(detection.file_path).replace("\\", "/"),
                                    "uriBaseId": "%SRCROOT%",
                                },
                                "region": {"startLine": max(1, detection.line)},
                            }
                        }
                    ],
                }
            )

        sarif = {
            "$schema": "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/main/sarif-2.1/schema/sarif-schema-2.1.0.json",
            "version": "2.1.0",
            "runs": [
                {
                    "tool": {
                        "driver": {
                            "name": "SecretHunter",
                            "version": __version__,
                            "rules": list(rules_map.values()),
                        }
                    },
                    "results": results,
                    "invocations": [self._invocation(result)],
                    "columnKind": "utf16CodeUnits",
                }
            ],
        }

        sarif_str = json.dumps(sarif, indent=2, default=str)

        if output_file:
            Path(output_file).write_text(sarif_str, encoding="utf-8")

        return sarif_str

    @staticmethod
    def _invocation(result: ScanResult) -> dict:
        notifications = [
            {"level": "warning", "message": {"text": error}} for error in result.errors
        ]
        if result.cancelled:
            notifications.append({"level": "error", "message": {"text": "Scan cancelled, results are partial"}})
        return {
            "executionSuccessful": not result.cancelled,
            "toolExecutionNotifications": notifications,
        }

    @staticmethod
    def _severity_score(risk: Risk) -> str:
        """Map risk to a numeric score string for SARIF properties."""
        scores = {
            Risk.HIGH: "8.0",
            Risk.MEDIUM: "5.0",
            Risk.LOW: "2.5",
        }
        return scores.get(risk, "5.0")


def _fingerprint(rule_id: str, detection: Detection) -> str:
    # Stable across runs; built from the location, never from the secret itself
    key = f"{rule_id}:{detection.file_path}:{detection.line}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]
