"""
Pytest Configuration and Fixtures

Shared fixtures for SecretHunter tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from secrethunter.core.config import ScanOptions
from secrethunter.core.finding import Detection, Risk, mask_secret

# Mixed case so no lowercase-only generic signature also matches
GITHUB_PAT = "ghp_" + "aB3dE5fG7hJ9kL1mN3pQ5rS7tU9vW1xY3z5A"
OPENAI_KEY = "sk-" + "A1b2C3d4E5" * 4 + "F6g7H8i9"
AWS_KEY = "AKIA" + "ABCDEFGHIJ234567"
STRIPE_KEY = "sk_live_" + "Xy12Zw34Vu56Ts78Rq90Po12"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def options() -> ScanOptions:
    """Default options with a small, fixed worker pool."""
    return ScanOptions(max_workers=2)


@pytest.fixture
def make_detection():
    """Factory for Detection records."""

    def _make(
        secret: str = GITHUB_PAT,
        service: str = "GitHub PAT",
        priority: bool = True,
        risk: Risk = Risk.HIGH,
        file_path: str = "app/config.py",
        line: int = 1,
    ) -> Detection:
        return Detection(
            file_path=Path(file_path),
            line=line,
            service=service,
            match=mask_secret(secret),
            original_match=secret,
            risk=risk,
            context=f'TOKEN = "{secret}"',
            priority=priority,
        )

    return _make


@pytest.fixture
def secrets_test_file(temp_dir: Path) -> Path:
    """Create a test file with a GitHub token on line 7."""
    test_file = temp_dir / "settings.py"
    test_file.write_text(
        "# Application settings\n"
        "import os\n"
        "\n"
        "DEBUG = False\n"
        "ALLOWED_HOSTS = ['*']\n"
        "\n"
        f'GITHUB_TOKEN = "{GITHUB_PAT}"\n'
        "\n"
        "# Nothing else here\n",
        encoding="utf-8",
    )
    return test_file


@pytest.fixture
def project_tree(temp_dir: Path) -> Path:
    """Create a small project with secrets in scanned and ignored places."""
    (temp_dir / "src").mkdir()
    (temp_dir / "src" / "app.py").write_text(f'OPENAI_API_KEY = "{OPENAI_KEY}"\n', encoding="utf-8")
    (temp_dir / "src" / "deploy.sh").write_text(f"export AWS_ACCESS_KEY_ID={AWS_KEY}\n", encoding="utf-8")
    (temp_dir / "README.md").write_text("# Demo project\n", encoding="utf-8")
    (temp_dir / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n" + AWS_KEY.encode())

    deep = temp_dir / "node_modules" / "pkg" / "lib"
    deep.mkdir(parents=True)
    (deep / "sentinel.js").write_text(f'const key = "{STRIPE_KEY}";\n', encoding="utf-8")
    return temp_dir
