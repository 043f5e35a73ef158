"""
SecretHunter File Scanner

Reads one text file line by line and applies every signature to every
line. Accepted matches become Detection records.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from secrethunter.core.config import ScanOptions
from secrethunter.core.errors import FileReadError
from secrethunter.core.finding import Detection, mask_secret
from secrethunter.core.signatures import Signature, list_signatures
from secrethunter.scanners.heuristics import is_likely_credential

logger = logging.getLogger(__name__)


def scan_line(
    line: str,
    line_no: int,
    file_path: Path,
    signatures: Sequence[Signature],
    smart_mode: bool = False,
) -> list[Detection]:
    """Apply every signature to a single line."""
    detections: list[Detection] = []
    context = line.strip()

    for signature in signatures:
        for match in signature.pattern.finditer(line):
            secret = match.group(0)
            if not is_likely_credential(secret, line, signature.service, smart_mode):
                logger.debug(
                    "Discarded %s candidate %s at %s:%d",
                    signature.service, mask_secret(secret), file_path, line_no,
                )
                continue
            detections.append(
                Detection(
                    file_path=file_path,
                    line=line_no,
                    service=signature.service,
                    match=mask_secret(secret),
                    original_match=secret,
                    risk=signature.risk,
                    context=context,
                    priority=signature.priority,
                )
            )

    return detections


def scan_file(
    path: Union[str, Path],
    options: Optional[ScanOptions] = None,
    signatures: Optional[Sequence[Signature]] = None,
) -> list[Detection]:
    """
    Scan a file for hard-coded credentials.

    Args:
        path: File to scan.
        options: Scan options; only smart mode matters here.
        signatures: Signature table, the registry by default.

    Returns:
        Detections in line order.

    Raises:
        FileReadError: The file cannot be opened, read or decoded as UTF-8.
    """
    file_path = Path(path)
    options = options or ScanOptions()
    if signatures is None:
        signatures = list_signatures()

    detections: list[Detection] = []
    try:
        # Only "\n" ends a line; a lone "\r" stays part of it
        with open(file_path, encoding="utf-8", newline="\n") as fh:
            for line_no, line in enumerate(fh, start=1):
                detections.extend(
                    scan_line(line.rstrip("\r\n"), line_no, file_path, signatures, options.smart_mode)
                )
    except UnicodeDecodeError as exc:
        raise FileReadError(file_path, f"cannot decode as UTF-8: {exc.reason}") from exc
    except OSError as exc:
        raise FileReadError(file_path, exc.strerror or str(exc)) from exc

    return detections
