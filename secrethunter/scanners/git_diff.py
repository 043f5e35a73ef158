"""
SecretHunter Git-Diff Resolver

Restricts a scan to lines added in the git working tree (staged and
unstaged). Each changed file is scanned in full, then detections are
filtered down to the added line numbers recovered from a zero-context
unified diff. Scanning the whole file keeps line numbers and context
exact; scanning only the diff hunks would not.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

from secrethunter.core.cancellation import CancellationToken
from secrethunter.core.config import ScanOptions
from secrethunter.core.errors import GitCommandError, NotAGitRepositoryError, ScanCancelled
from secrethunter.core.finding import ScanResult
from secrethunter.core.scanner import BaseScanner
from secrethunter.core.signatures import Signature
from secrethunter.scanners.directory import DirectoryScanner

logger = logging.getLogger(__name__)

# @@ -a,b +c,d @@ ; only the new-file start line is needed
HUNK_HEADER_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")

# Seconds between cancellation checks while a git command runs
POLL_INTERVAL = 0.1


def is_git_repo(path: Union[str, Path]) -> bool:
    """Check whether ``path`` is the root of a git working tree."""
    return (Path(path) / ".git").exists()


def parse_changed_lines(diff_text: str) -> set[int]:
    """
    Recover the new-file line numbers added by a unified diff.

    Every hunk header resets the running counter to the hunk's new-file
    start line. Added lines are recorded and advance the counter, context
    lines only advance it, removed lines do neither.
    """
    lines: set[int] = set()
    current: Optional[int] = None

    for raw in diff_text.splitlines():
        if raw.startswith("@@"):
            header = HUNK_HEADER_RE.match(raw)
            current = int(header.group(1)) if header else None
            continue
        if current is None:
            # File headers before the first hunk
            continue
        if raw.startswith("\\"):
            # "\ No newline at end of file"
            continue
        if raw.startswith("+") and not raw.startswith("+++"):
            lines.add(current)
            current += 1
        elif not raw.startswith("-"):
            current += 1

    return lines


class GitRunner:
    """Runs git subcommands in a working tree, honouring a cancellation token."""

    def __init__(self, repo_path: Path, cancel_token: Optional[CancellationToken] = None) -> None:
        self.repo_path = repo_path
        self.cancel_token = cancel_token or CancellationToken()

    def run(self, *args: str) -> str:
        """Run ``git <args>`` and return its stdout.

        Raises:
            GitCommandError: git exited with a non-zero status.
            ScanCancelled: the token was set while git was running.
        """
        cmd = ["git", "-c", "core.quotePath=false", *args]
        logger.debug("Running %s in %s", " ".join(cmd), self.repo_path)
        self.cancel_token.raise_if_cancelled()

        try:
            proc = subprocess.Popen(
                cmd,
                cwd=self.repo_path,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise GitCommandError(cmd, -1, str(exc)) from exc

        while True:
            try:
                stdout, stderr = proc.communicate(timeout=POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if self.cancel_token.is_set():
                    proc.kill()
                    proc.communicate()
                    raise ScanCancelled("git command cancelled")

        if proc.returncode != 0:
            raise GitCommandError(cmd, proc.returncode, stderr)
        return stdout

    def changed_files(self) -> list[str]:
        """Added, copied, modified or renamed files, unstaged then staged, deduplicated."""
        files: list[str] = []
        seen: set[str] = set()

        for extra in ((), ("--cached",)):
            try:
                output = self.run("diff", *extra, "--name-only", "--diff-filter=ACMR")
            except GitCommandError as exc:
                logger.warning("Could not list changed files: %s", exc)
                continue
            for line in output.splitlines():
                name = line.strip()
                if name and name not in seen:
                    seen.add(name)
                    files.append(name)

        return files

    def file_diff(self, file_path: str) -> str:
        """Zero-context diff for one file; the staged diff wins when it is not empty."""
        try:
            staged = self.run("diff", "--cached", "--unified=0", "--", file_path)
        except GitCommandError as exc:
            logger.debug("No staged diff for %s: %s", file_path, exc)
            staged = ""
        if staged.strip():
            return staged

        try:
            return self.run("diff", "--unified=0", "--", file_path)
        except GitCommandError as exc:
            logger.warning("Could not diff %s: %s", file_path, exc)
            return ""


class GitDiffScanner(BaseScanner):
    """Scans only the lines added in a git working tree."""

    name = "git-diff"

    def scan(self, target: Path) -> ScanResult:
        repo = Path(target).resolve()
        if not is_git_repo(repo):
            raise NotAGitRepositoryError(repo)

        result = ScanResult()
        git = GitRunner(repo, self.cancel_token)
        changed: dict[Path, set[int]] = {}

        try:
            for name in git.changed_files():
                full_path = repo / name
                if self.options.should_ignore(name) or not self.options.is_text_file(name):
                    logger.debug("Skipped %s", name)
                    continue
                lines = parse_changed_lines(git.file_diff(name))
                if lines:
                    changed[full_path] = lines
        except ScanCancelled:
            result.cancelled = True

        if not result.cancelled and changed:
            walker = DirectoryScanner(self.options, self.signatures, self.cancel_token)
            scanned = ScanResult()
            per_file = walker.scan_paths(list(changed), scanned)
            result.errors.extend(scanned.errors)
            result.files_scanned = scanned.files_scanned
            result.cancelled = scanned.cancelled
            for path, detections in per_file.items():
                result.detections.extend(d for d in detections if d.line in changed[path])

        result.sort()
        return result


def scan_changed_lines(
    repo_path: Union[str, Path],
    options: Optional[ScanOptions] = None,
    signatures: Optional[Sequence[Signature]] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> ScanResult:
    """Scan the lines added in the working tree of ``repo_path``.

    Raises:
        NotAGitRepositoryError: ``repo_path`` has no .git metadata.
    """
    scanner = GitDiffScanner(options, signatures, cancel_token)
    return scanner.scan(Path(repo_path))
