"""
SecretHunter CLI

Command-line interface for running secret scans.

Commands:
    secrethunter scan [PATH]   - Scan a directory, a file or the git diff
    secrethunter init          - Create a default .secrethunter.yaml
"""

from __future__ import annotations

import logging
import signal
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import click

from secrethunter import __version__
from secrethunter.core.cancellation import CancellationToken
from secrethunter.core.config import (
    CONFIG_FILENAME,
    OUTPUT_FORMATS,
    ScanOptions,
    SecretHunterConfig,
    generate_default_config,
)
from secrethunter.core.errors import SecretHunterError
from secrethunter.core.finding import ScanResult
from secrethunter.integrations.github import (
    emit_annotations,
    is_github_actions,
    write_step_summary,
)
from secrethunter.reporting.console import ConsoleReporter, _safe_echo
from secrethunter.reporting.json_reporter import JSONReporter
from secrethunter.reporting.sarif import SARIFReporter
from secrethunter.scanners.directory import scan_directory
from secrethunter.scanners.git_diff import scan_changed_lines
from secrethunter.verify.live import verify_detections

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="SecretHunter")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging on stderr.")
def cli(verbose: bool) -> None:
    """
    SecretHunter - Hard-coded secret scanner

    Detect leaked API keys and tokens in your codebase.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


# ═══════════════════════════════════════════════════════
#  secrethunter scan
# ═══════════════════════════════════════════════════════
@cli.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option("--smart", "-s", is_flag=True,
              help="Reduce false positives (entropy checks, skip tests/docs/examples).")
@click.option("--verify-light", is_flag=True,
              help="Check up to 15 high-risk secrets with a minimal HEAD request.")
@click.option("--diff-only", "-d", is_flag=True,
              help="Only report secrets on lines changed in the git working tree.")
@click.option("--iac-support", is_flag=True,
              help="Also scan Dockerfiles, docker-compose, terraform and kubernetes files.")
@click.option("--ignore-dirs", "-i", multiple=True,
              help="Directories to ignore (comma-separated, repeatable).")
@click.option("--output", "-o", "output_format", type=click.Choice(OUTPUT_FORMATS),
              default=None, help="Output format (default: terminal).")
@click.option("--report-file", "-f", type=click.Path(), default=None,
              help="Write the JSON/SARIF report to a file.")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None,
              help="Number of file-scanning workers (default: CPU count).")
@click.option("--ci", is_flag=True, help="Emit GitHub Actions annotations and step summary.")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to .secrethunter.yaml configuration file.")
def scan(
    path: str,
    smart: bool,
    verify_light: bool,
    diff_only: bool,
    iac_support: bool,
    ignore_dirs: tuple,
    output_format: Optional[str],
    report_file: Optional[str],
    workers: Optional[int],
    ci: bool,
    config_path: Optional[str],
) -> None:
    """Scan a directory or file for hard-coded secrets.

    Examples:

        secrethunter scan

        secrethunter scan ./src --smart --verify-light

        secrethunter scan --diff-only --output sarif --report-file results.sarif --ci
    """
    target = Path(path).resolve()

    # ── Load configuration ──
    if config_path:
        cfg_path = Path(config_path)
    else:
        cfg_path = (target if target.is_dir() else target.parent) / CONFIG_FILENAME
    try:
        config = SecretHunterConfig.load(cfg_path)
    except SecretHunterError as exc:
        raise click.ClickException(str(exc)) from exc

    # CLI flags override config
    options = _build_options(config.to_options(), smart, verify_light, diff_only,
                             iac_support, ignore_dirs, workers)
    fmt = output_format or config.output.format
    out_file = report_file or config.output.file

    if fmt == "terminal":
        _safe_echo(click.style(f"\n  SecretHunter v{__version__} - scanning {target}", fg="cyan"))
        if options.diff_only and target.is_dir():
            _safe_echo(click.style("  Diff-only mode: scanning git working-tree changes", fg="yellow"))

    # ── Run the scan ──
    token = CancellationToken()
    t0 = time.time()
    with _cancel_on_interrupt(token):
        try:
            if options.diff_only and target.is_dir():
                result = scan_changed_lines(target, options, cancel_token=token)
            else:
                result = scan_directory(target, options, cancel_token=token)
        except SecretHunterError as exc:
            raise click.ClickException(str(exc)) from exc

        if options.verify_light and result.detections and not result.cancelled:
            if fmt == "terminal":
                _safe_echo(click.style("  Verifying high-risk secrets...", fg="yellow"))
            result.detections = verify_detections(
                result.detections,
                limit=options.verify_limit,
                max_workers=options.verify_workers,
                cancel_token=token,
            )
    elapsed = time.time() - t0
    logger.debug("Scan finished in %.2fs: %d detection(s)", elapsed, len(result.detections))

    # ── Report ──
    _render(result, fmt, out_file, str(target), options.verify_light, elapsed)

    # ── CI integrations ──
    if ci or is_github_actions():
        emit_annotations(result)
        write_step_summary(result, str(target))

    # ── Exit code ──
    if result.detections:
        sys.exit(1)


# ═══════════════════════════════════════════════════════
#  secrethunter init
# ═══════════════════════════════════════════════════════
@cli.command()
@click.option("--path", "-p", "target_path", type=click.Path(), default=".",
              help="Directory to create the config file in.")
def init(target_path: str) -> None:
    """Create a default .secrethunter.yaml."""
    target = Path(target_path).resolve()
    target.mkdir(parents=True, exist_ok=True)

    config_file = target / CONFIG_FILENAME
    if config_file.exists():
        _safe_echo(click.style(f"  [!] {config_file} already exists, skipping.", fg="yellow"))
        return

    config_file.write_text(generate_default_config(), encoding="utf-8")
    _safe_echo(click.style(f"  [+] Created {config_file}", fg="green"))
    _safe_echo("")
    _safe_echo("  Run 'secrethunter scan' to start scanning.")


# ── Helpers ──

def _build_options(
    base: ScanOptions,
    smart: bool,
    verify_light: bool,
    diff_only: bool,
    iac_support: bool,
    ignore_dirs: tuple,
    workers: Optional[int],
) -> ScanOptions:
    """Apply command-line flags on top of the configured options."""
    changes: dict = {
        "smart_mode": base.smart_mode or smart,
        "verify_light": base.verify_light or verify_light,
        "diff_only": base.diff_only or diff_only,
        "iac_support": base.iac_support or iac_support,
    }
    if ignore_dirs:
        changes["ignore_dirs"] = tuple(
            part.strip() for value in ignore_dirs for part in value.split(",") if part.strip()
        )
    if workers:
        changes["max_workers"] = workers
    return base.replace(**changes)


def _render(
    result: ScanResult,
    fmt: str,
    out_file: Optional[str],
    target: str,
    verified: bool,
    elapsed: float,
) -> None:
    if fmt == "json":
        json_str = JSONReporter(target=target, verified=verified).report(result, output_file=out_file)
        if not out_file:
            _safe_echo(json_str)
    elif fmt == "sarif":
        sarif_str = SARIFReporter(target=target).report(result, output_file=out_file)
        if not out_file:
            _safe_echo(sarif_str)
    else:
        ConsoleReporter(target=target, verified=verified, elapsed=elapsed).report(result)
        if out_file:
            # Also write JSON when terminal + report file
            JSONReporter(target=target, verified=verified).report(result, output_file=out_file)


@contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn the first Ctrl-C into a cancellation so partial results are kept."""
    def _handler(signum, frame):
        _safe_echo(click.style("\n  Interrupted, finishing with partial results...", fg="yellow"), err=True)
        token.cancel()
        signal.signal(signal.SIGINT, previous)

    try:
        previous = signal.signal(signal.SIGINT, _handler)
    except ValueError:
        # Not in the main thread
        yield
        return

    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
