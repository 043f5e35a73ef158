"""
SecretHunter Base Scanner

A scanner selects candidate files under a target, runs the file scanner
over them and returns a ScanResult.

Scanners:
- DirectoryScanner (recursive walk)
- GitDiffScanner (working-tree changes only)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from secrethunter.core.cancellation import CancellationToken
from secrethunter.core.config import ScanOptions
from secrethunter.core.finding import ScanResult
from secrethunter.core.signatures import Signature, list_signatures


class BaseScanner(ABC):
    """
    Minimal scanner interface.
    Each scanner must implement scan().
    """

    name: str = "base"

    def __init__(
        self,
        options: Optional[ScanOptions] = None,
        signatures: Optional[Sequence[Signature]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self.options = options or ScanOptions()
        self.signatures = signatures if signatures is not None else list_signatures()
        self.cancel_token = cancel_token or CancellationToken()

    @property
    def cancelled(self) -> bool:
        return self.cancel_token.is_set()

    @abstractmethod
    def scan(self, target: Path) -> ScanResult:
        """
        Run the scan and return its result.
        """
        raise NotImplementedError
