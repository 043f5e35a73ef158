"""
SecretHunter Console Reporter

Generates human-readable colored console output.
"""

from __future__ import annotations

import sys
from collections import Counter

import click

from secrethunter import __version__
from secrethunter.core.finding import Detection, Risk, ScanResult


def _safe_echo(text: str = "", **kwargs) -> None:
    """Echo text, handling Unicode issues on Windows consoles."""
    try:
        click.echo(text, **kwargs)
    except UnicodeEncodeError:
        safe = text.encode(sys.stdout.encoding or "utf-8", errors="replace").decode(
            sys.stdout.encoding or "utf-8", errors="replace"
        )
        click.echo(safe, **kwargs)


# Risk colors
RISK_COLORS = {
    Risk.HIGH: "red",
    Risk.MEDIUM: "yellow",
    Risk.LOW: "cyan",
}

CONTEXT_WIDTH = 80


def truncate(text: str, max_len: int = CONTEXT_WIDTH) -> str:
    """Shorten ``text`` to ``max_len`` characters with a trailing ellipsis."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


class ConsoleReporter:
    """Prints a formatted secret scan report to the console."""

    def __init__(self, target: str, verified: bool = False, elapsed: float = 0.0) -> None:
        self.target = target
        self.verified = verified
        self.elapsed = elapsed

    def report(self, result: ScanResult) -> None:
        """Print the full scan report."""
        self._print_header()
        self._print_summary(result)

        if result.detections:
            self._print_detailed_detections(result.detections)

        if result.errors:
            self._print_errors(result.errors)

        self._print_footer(result)

    def _print_header(self) -> None:
        _safe_echo("")
        _safe_echo(click.style("=" * 55, fg="bright_blue"))
        _safe_echo(click.style("  SecretHunter Scan Report", fg="bright_white", bold=True))
        _safe_echo(click.style(f"  Version: {__version__}", fg="white"))
        _safe_echo(click.style(f"  Target: {self.target}", fg="white"))
        _safe_echo(click.style("=" * 55, fg="bright_blue"))

    def _print_summary(self, result: ScanResult) -> None:
        _safe_echo("")
        _safe_echo(click.style("  Summary:", fg="bright_white", bold=True))
        _safe_echo(
            click.style("     Files scanned: ", fg="white")
            + click.style(str(result.files_scanned), fg="white")
            + click.style(f" in {self.elapsed:.2f}s", fg="bright_black")
        )
        counter = Counter(d.risk for d in result.detections)
        for risk in Risk:
            _safe_echo(
                click.style(f"     {risk.value.upper():10s}: ", fg=RISK_COLORS[risk])
                + click.style(str(counter.get(risk, 0)), fg="white")
            )
        if self.verified:
            _safe_echo(click.style("     (high-risk secrets live-verified)", fg="bright_black"))

    def _print_detailed_detections(self, detections: list[Detection]) -> None:
        _safe_echo("")
        _safe_echo(click.style("  Detected Secrets:", fg="bright_white", bold=True))
        _safe_echo(click.style("-" * 55, fg="bright_black"))

        for idx, detection in enumerate(detections, start=1):
            color = RISK_COLORS.get(detection.risk, "white")
            _safe_echo("")
            _safe_echo(
                click.style(f"  {idx}. ", fg="white")
                + click.style(f" {detection.risk.value.upper()} ", fg=color, bold=True)
                + click.style(f" {detection.service}", fg="bright_white")
            )
            _safe_echo(
                click.style(f"      Location: {detection.file_path}:{detection.line}", fg="bright_black")
            )
            _safe_echo(click.style(f"      Match: {detection.match}", fg="white"))
            _safe_echo(click.style(f"      Context: {truncate(detection.masked_context)}", fg="bright_black"))

    def _print_errors(self, errors: list[str]) -> None:
        _safe_echo("")
        _safe_echo(click.style(f"  Errors ({len(errors)}):", fg="yellow", bold=True))
        for error in errors:
            _safe_echo(click.style(f"    [!] {error}", fg="yellow"))

    def _print_footer(self, result: ScanResult) -> None:
        _safe_echo("")
        _safe_echo(click.style("=" * 55, fg="bright_blue"))

        if result.cancelled:
            _safe_echo(click.style("  [!] CANCELLED - Partial results shown", fg="yellow", bold=True))
        if result.detections:
            _safe_echo(
                click.style(
                    f"  [X] {len(result.detections)} secret(s) found - Rotate and remove them",
                    fg="bright_red",
                    bold=True,
                )
            )
        else:
            _safe_echo(click.style("  [OK] No secrets found", fg="green", bold=True))

        _safe_echo(click.style("=" * 55, fg="bright_blue"))
        _safe_echo("")
