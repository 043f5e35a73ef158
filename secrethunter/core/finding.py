"""
SecretHunter Detection Model

A Detection represents one signature match at a specific file and line.
A ScanResult aggregates the detections, the number of files scanned and
the non-fatal errors met along the way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

MASK_PLACEHOLDER = "***"
MASK_ELLIPSIS = "..."


class Risk(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, HIGH first."""
        return _RISK_ORDER.index(self)


_RISK_ORDER = [Risk.HIGH, Risk.MEDIUM, Risk.LOW]


def mask_secret(secret: str) -> str:
    """Mask a secret for display, keeping only its first and last 4 characters."""
    if len(secret) <= 8:
        return MASK_PLACEHOLDER
    return secret[:4] + MASK_ELLIPSIS + secret[-4:]


@dataclass(frozen=True)
class Detection:
    file_path: Path
    line: int
    service: str
    match: str
    original_match: str = field(repr=False)
    risk: Risk
    context: str
    priority: bool = False

    @property
    def masked_context(self) -> str:
        """The source line with the secret replaced by its masked form."""
        return self.context.replace(self.original_match, self.match)

    def sort_key(self) -> tuple[int, str, int, str]:
        return (self.risk.rank, str(self.file_path), self.line, self.service)

    def to_dict(self) -> dict[str, Any]:
        """Convert detection to a dictionary for JSON serialization.

        The unmasked secret is never included.
        """
        return {
            "file": str(self.file_path),
            "line": self.line,
            "service": self.service,
            "match": self.match,
            "risk": self.risk.value,
            "context": self.masked_context,
            "priority": self.priority,
        }


@dataclass
class ScanResult:
    """Aggregated outcome of one scan."""

    detections: list[Detection] = field(default_factory=list)
    files_scanned: int = 0
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False

    def sort(self) -> None:
        """Order detections by risk tier, then path, line and service."""
        self.detections.sort(key=Detection.sort_key)

