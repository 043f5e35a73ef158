"""
SecretHunter Exceptions

Only NotAGitRepositoryError and ConfigError reach the caller of a scan.
File-level failures are collected into ScanResult.errors instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union


class SecretHunterError(Exception):
    """Base class for all SecretHunter errors."""


class FileReadError(SecretHunterError, OSError):
    """Raised when a file cannot be opened, read or decoded."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


class NotAGitRepositoryError(SecretHunterError):
    """Raised when diff-only mode targets a directory without .git metadata."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(f"not a git repository: {self.path}")


class GitCommandError(SecretHunterError):
    """Raised when a git subcommand exits with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        msg = f"'{' '.join(self.args_list)}' exited with status {returncode}"
        if self.stderr:
            msg += f": {self.stderr}"
        super().__init__(msg)


class ConfigError(SecretHunterError):
    """Raised when the configuration file is present but invalid."""

    def __init__(self, message: str, config_path: Optional[Path] = None) -> None:
        self.config_path = config_path
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.config_path:
            msg += f" (config: {self.config_path})"
        return msg


class ScanCancelled(SecretHunterError):
    """Raised inside workers when the scan's cancellation token is set."""
