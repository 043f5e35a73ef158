"""
SecretHunter Configuration Management

ScanOptions is the immutable option set every scan receives.
SecretHunterConfig loads defaults for it from .secrethunter.yaml files.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from secrethunter.core.errors import ConfigError


CONFIG_FILENAME = ".secrethunter.yaml"

DEFAULT_IGNORE_DIRS = (
    ".git",
    "node_modules",
    "vendor",
    "dist",
    "build",
    ".next",
    ".venv",
    "__pycache__",
)

DEFAULT_TEXT_EXTENSIONS = frozenset({
    ".go", ".js", ".ts", ".jsx", ".tsx",
    ".py", ".java", ".rb", ".php", ".cs",
    ".env", ".yaml", ".yml", ".json", ".toml",
    ".tf", ".tfvars", ".hcl",
    ".dockerfile", ".sh", ".bash", ".zsh",
    ".md", ".txt", ".conf", ".config",
    ".xml", ".html", ".css", ".scss",
})

# Path substrings skipped in smart mode (tests, fixtures, docs)
SMART_IGNORE_MARKERS = ("test", "spec", "example", "sample", "demo", "mock")
SMART_IGNORE_DOCS = ("readme", "changelog", "license", "contributing")

# File name markers picked up when IaC support is enabled
IAC_FILE_MARKERS = ("dockerfile", "docker-compose", "terraform", "kubernetes", "k8s")

DEFAULT_VERIFY_LIMIT = 15
DEFAULT_VERIFY_WORKERS = 4

OUTPUT_FORMATS = ("terminal", "json", "sarif")


def _default_workers() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class ScanOptions:
    """Options shared by every scan operation."""

    smart_mode: bool = False
    verify_light: bool = False
    diff_only: bool = False
    iac_support: bool = False
    ignore_dirs: tuple[str, ...] = DEFAULT_IGNORE_DIRS
    text_extensions: frozenset[str] = DEFAULT_TEXT_EXTENSIONS
    max_workers: int = field(default_factory=_default_workers)
    verify_workers: int = DEFAULT_VERIFY_WORKERS
    verify_limit: int = DEFAULT_VERIFY_LIMIT

    def replace(self, **changes: Any) -> "ScanOptions":
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def should_ignore(self, path: str) -> bool:
        """Check whether a file or directory path is excluded from the scan."""
        if any(ignore_dir in path for ignore_dir in self.ignore_dirs):
            return True

        if self.smart_mode:
            lower_path = path.lower()
            if any(marker in lower_path for marker in SMART_IGNORE_MARKERS):
                return True
            if any(doc in lower_path for doc in SMART_IGNORE_DOCS):
                return True

        return False

    def is_text_file(self, filename: str) -> bool:
        """Check whether a file name is eligible for scanning."""
        lower_name = os.path.basename(filename).lower()
        ext = os.path.splitext(lower_name)[1]
        if not ext and lower_name.startswith("."):
            # ".env" is its own extension
            ext = lower_name
        if ext in self.text_extensions:
            return True

        if self.iac_support:
            if any(marker in lower_name for marker in IAC_FILE_MARKERS):
                return True

        return False


@dataclass
class OutputConfig:
    format: str = "terminal"
    file: Optional[str] = None


@dataclass
class SecretHunterConfig:
    """Root configuration object loaded from .secrethunter.yaml."""

    smart: bool = False
    verify_light: bool = False
    diff_only: bool = False
    iac_support: bool = False
    ignore_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_DIRS))
    extra_extensions: list[str] = field(default_factory=list)
    max_workers: Optional[int] = None
    verify_limit: int = DEFAULT_VERIFY_LIMIT
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "SecretHunterConfig":
        """Load configuration from a YAML file, falling back to defaults."""
        if config_path is None:
            config_path = Path.cwd() / CONFIG_FILENAME

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"cannot read configuration: {exc}", config_path) from exc

        if not isinstance(raw, dict):
            raise ConfigError("configuration must be a mapping", config_path)

        return cls._from_dict(raw, config_path)

    @classmethod
    def _from_dict(cls, data: dict[str, Any], config_path: Optional[Path] = None) -> "SecretHunterConfig":
        """Build config from a parsed YAML dictionary."""
        output_data = data.get("output") or {}
        if not isinstance(output_data, dict):
            raise ConfigError("'output' must be a mapping", config_path)
        if output_data.get("format", "terminal") not in OUTPUT_FORMATS:
            raise ConfigError(
                f"'output.format' must be one of: {', '.join(OUTPUT_FORMATS)}", config_path
            )
        output = OutputConfig(
            format=output_data.get("format", "terminal"),
            file=output_data.get("file"),
        )

        ignore_dirs = data.get("ignore_dirs", list(DEFAULT_IGNORE_DIRS))
        extra_extensions = data.get("extra_extensions", [])
        for key, value in (("ignore_dirs", ignore_dirs), ("extra_extensions", extra_extensions)):
            if not isinstance(value, list):
                raise ConfigError(f"'{key}' must be a list", config_path)

        verify_limit = data.get("verify_limit", DEFAULT_VERIFY_LIMIT)
        if isinstance(verify_limit, bool) or not isinstance(verify_limit, int) or verify_limit < 0:
            raise ConfigError("'verify_limit' must be a non-negative integer", config_path)

        max_workers = data.get("max_workers")
        if max_workers is not None and (
            isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1
        ):
            raise ConfigError("'max_workers' must be a positive integer", config_path)

        return cls(
            smart=bool(data.get("smart", False)),
            verify_light=bool(data.get("verify_light", False)),
            diff_only=bool(data.get("diff_only", False)),
            iac_support=bool(data.get("iac_support", False)),
            ignore_dirs=[str(d) for d in ignore_dirs],
            extra_extensions=[str(e) for e in extra_extensions],
            max_workers=max_workers,
            verify_limit=verify_limit,
            output=output,
        )

    def to_options(self) -> ScanOptions:
        """Build the ScanOptions described by this configuration."""
        extensions = set(DEFAULT_TEXT_EXTENSIONS)
        for ext in self.extra_extensions:
            extensions.add(ext.lower() if ext.startswith(".") else f".{ext.lower()}")

        options = ScanOptions(
            smart_mode=self.smart,
            verify_light=self.verify_light,
            diff_only=self.diff_only,
            iac_support=self.iac_support,
            ignore_dirs=tuple(self.ignore_dirs),
            text_extensions=frozenset(extensions),
            verify_limit=self.verify_limit,
        )
        if self.max_workers:
            options = options.replace(max_workers=self.max_workers)
        return options


def generate_default_config() -> str:
    """Generate a default .secrethunter.yaml configuration file content."""
    return """\
# SecretHunter Configuration

# Reduce false positives (entropy checks, skip tests/docs/examples)
smart: false

# Check up to verify_limit high-risk secrets against their provider
verify_light: false
verify_limit: 15

# Only report secrets on lines changed in the git working tree
diff_only: false

# Also scan Dockerfiles, docker-compose, terraform and kubernetes files
iac_support: false

# Directories (path substrings) that are never descended into
ignore_dirs:
  - .git
  - node_modules
  - vendor
  - dist
  - build
  - .next
  - .venv
  - __pycache__

# Extra file extensions to scan
extra_extensions: []

# Output settings
output:
  format: terminal  # terminal, json, sarif
  # file: secrethunter-report.json
"""
