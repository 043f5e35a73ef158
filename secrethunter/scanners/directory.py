"""
SecretHunter Directory Walker

Walks a directory tree in pre-order, prunes ignored directories without
listing them, and scans every eligible text file on a thread pool.
Results are merged on the calling thread and sorted, so the outcome
does not depend on worker scheduling.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Union

from secrethunter.core.cancellation import CancellationToken
from secrethunter.core.config import ScanOptions
from secrethunter.core.errors import FileReadError, ScanCancelled
from secrethunter.core.finding import Detection, ScanResult
from secrethunter.core.scanner import BaseScanner
from secrethunter.core.signatures import Signature
from secrethunter.scanners.secrets import scan_file

logger = logging.getLogger(__name__)

# Seconds between cancellation checks while waiting on workers
POLL_INTERVAL = 0.1


class DirectoryScanner(BaseScanner):
    """Recursive scanner for a directory tree (or a single file)."""

    name = "directory"

    def scan(self, target: Path) -> ScanResult:
        root = Path(target)
        result = ScanResult()

        if root.is_file():
            files: Iterable[Path] = [root]
        else:
            # Files are submitted while the walk is still running
            files = self._iter_files(root, root, result.errors)

        self.scan_paths(files, result)
        result.sort()
        return result

    def _iter_files(self, root: Path, directory: Path, errors: list[str]) -> Iterator[Path]:
        """Yield eligible files under ``directory`` in pre-order.

        Ignore rules match the path relative to ``root``; ignored
        directories are pruned before they are listed.
        """
        self.cancel_token.raise_if_cancelled()
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            errors.append(f"Error accessing {directory}: {exc.strerror or exc}")
            return

        for entry in entries:
            self.cancel_token.raise_if_cancelled()
            path = entry.path
            rel_path = os.path.relpath(path, root)
            try:
                if entry.is_dir(follow_symlinks=False):
                    if self.options.should_ignore(rel_path):
                        logger.debug("Pruned %s", path)
                        continue
                    yield from self._iter_files(root, Path(path), errors)
                    continue

                if not entry.is_file():
                    if entry.is_symlink():
                        if not os.path.exists(path):
                            errors.append(f"Error accessing {path}: broken symbolic link")
                        else:
                            # Directory symlinks are not followed
                            logger.debug("Skipped symlink %s", path)
                    continue
            except OSError as exc:
                errors.append(f"Error accessing {path}: {exc.strerror or exc}")
                continue

            if self.options.should_ignore(rel_path) or not self.options.is_text_file(entry.name):
                continue
            yield Path(path)

    def scan_paths(self, files: Iterable[Path], result: ScanResult) -> dict[Path, list[Detection]]:
        """
        Scan ``files`` on a worker pool and merge the outcome into ``result``.

        ``files`` may be a lazy walk; a ScanCancelled raised by it stops
        further submissions. Files already handed to a worker keep their
        outcome, so a cancelled scan returns what finished.

        Returns the detections per scanned file, in submission order.
        Detections are appended to ``result`` unsorted; callers sort.
        """
        paths: list[Path] = []
        futures: dict[Future, int] = {}
        outcomes: dict[int, Union[list[Detection], FileReadError]] = {}

        pool = ThreadPoolExecutor(max_workers=max(1, self.options.max_workers))
        try:
            try:
                for path in files:
                    futures[pool.submit(self._scan_one, path)] = len(paths)
                    paths.append(path)
            except ScanCancelled:
                result.cancelled = True

            pending = set(futures)
            while pending and not result.cancelled:
                _, pending = wait(pending, timeout=POLL_INTERVAL, return_when=FIRST_COMPLETED)
                if self.cancelled:
                    result.cancelled = True
        finally:
            # Queued work is dropped, running work finishes
            pool.shutdown(wait=True, cancel_futures=True)

        for future, idx in futures.items():
            if future.cancelled():
                continue
            try:
                outcomes[idx] = future.result()
            except FileReadError as exc:
                outcomes[idx] = exc
            except ScanCancelled:
                result.cancelled = True

        per_file: dict[Path, list[Detection]] = {}
        for idx, path in enumerate(paths):
            if idx not in outcomes:
                continue
            result.files_scanned += 1
            outcome = outcomes[idx]
            if isinstance(outcome, FileReadError):
                result.errors.append(f"Error scanning {path}: {outcome.reason}")
                continue
            per_file[path] = outcome
            result.detections.extend(outcome)

        return per_file

    def _scan_one(self, path: Path) -> list[Detection]:
        self.cancel_token.raise_if_cancelled()
        return scan_file(path, self.options, self.signatures)


def scan_directory(
    root_path: Union[str, Path],
    options: Optional[ScanOptions] = None,
    signatures: Optional[Sequence[Signature]] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> ScanResult:
    """Recursively scan ``root_path`` and return the aggregated result."""
    scanner = DirectoryScanner(options, signatures, cancel_token)
    return scanner.scan(Path(root_path))
