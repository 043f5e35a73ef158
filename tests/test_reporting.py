"""
Tests for Report Generation and CI Integration
"""

import json
from pathlib import Path

import pytest

from conftest import AWS_KEY, GITHUB_PAT
from secrethunter.core.finding import Risk, ScanResult, mask_secret
from secrethunter.integrations.github import (
    emit_annotations,
    format_annotation,
    write_step_summary,
)
from secrethunter.reporting.console import ConsoleReporter, truncate
from secrethunter.reporting.json_reporter import JSONReporter
from secrethunter.reporting.sarif import SARIFReporter, rule_id_for


@pytest.fixture
def sample_result(make_detection) -> ScanResult:
    result = ScanResult(
        detections=[
            make_detection(secret=GITHUB_PAT, line=3),
            make_detection(
                secret="p8e-" + "ad0be" * 6 + "ab",
                service="Adobe",
                risk=Risk.MEDIUM,
                priority=False,
                file_path="web/app.js",
                line=9,
            ),
        ],
        files_scanned=4,
        errors=["Error scanning bad.txt: invalid utf-8"],
    )
    result.sort()
    return result


class TestJSONReporter:
    """Tests for the JSON report."""

    def test_structure(self, sample_result):
        data = json.loads(JSONReporter(target="/repo", verified=True).report(sample_result))

        assert data["target"] == "/repo"
        assert data["tool"]["name"] == "SecretHunter"
        assert data["summary"]["total_secrets"] == 2
        assert data["summary"]["scanned_files"] == 4
        assert data["summary"]["by_risk"] == {"high": 1, "medium": 1, "low": 0}
        assert data["summary"]["verified"] is True
        assert data["errors"] == ["Error scanning bad.txt: invalid utf-8"]
        assert data["cancelled"] is False

        first = data["secrets"][0]
        assert first["service"] == "GitHub PAT"
        assert first["line"] == 3
        assert first["risk"] == "high"
        assert first["match"] == mask_secret(GITHUB_PAT)
        assert first["context"] == f'TOKEN = "{mask_secret(GITHUB_PAT)}"'

    def test_plaintext_secret_never_written(self, sample_result, temp_dir: Path):
        out = temp_dir / "report.json"
        text = JSONReporter(target="/repo").report(sample_result, output_file=str(out))

        assert out.read_text(encoding="utf-8") == text
        assert GITHUB_PAT not in text

    def test_empty_result(self):
        data = json.loads(JSONReporter(target=".").report(ScanResult()))
        assert data["secrets"] == []
        assert data["summary"]["total_secrets"] == 0


class TestSARIFReporter:
    """Tests for the SARIF report."""

    def test_rule_ids(self):
        assert rule_id_for("GitHub PAT") == "secret/github-pat"
        assert rule_id_for("Grok xAI") == "secret/grok-xai"
        assert rule_id_for("Slack Token") == "secret/slack-token"

    def test_structure(self, sample_result):
        text = SARIFReporter(target="/repo").report(sample_result)
        sarif = json.loads(text)

        assert sarif["version"] == "2.1.0"
        run = sarif["runs"][0]
        rules = run["tool"]["driver"]["rules"]
        assert [r["id"] for r in rules] == ["secret/github-pat", "secret/adobe"]

        high, medium = run["results"]
        assert high["level"] == "error"
        assert high["ruleIndex"] == 0
        assert high["locations"][0]["physicalLocation"]["region"]["startLine"] == 3
        assert high["locations"][0]["physicalLocation"]["artifactLocation"]["uri"] == "app/config.py"
        assert medium["level"] == "warning"
        assert medium["ruleIndex"] == 1
        assert GITHUB_PAT not in text

    def test_errors_and_cancellation_become_notifications(self, sample_result):
        sample_result.cancelled = True
        run = json.loads(SARIFReporter(target="/repo").report(sample_result))["runs"][0]

        invocation = run["invocations"][0]
        assert invocation["executionSuccessful"] is False
        texts = [n["message"]["text"] for n in invocation["toolExecutionNotifications"]]
        assert texts[0] == "Error scanning bad.txt: invalid utf-8"
        assert "cancelled" in texts[-1]

    def test_fingerprints_are_stable(self, sample_result):
        first = json.loads(SARIFReporter(target="/repo").report(sample_result))
        second = json.loads(SARIFReporter(target="/other").report(sample_result))

        prints = [r["partialFingerprints"] for r in first["runs"][0]["results"]]
        assert prints == [r["partialFingerprints"] for r in second["runs"][0]["results"]]
        assert prints[0] != prints[1]


class TestConsoleReporter:
    """Tests for the terminal report."""

    def test_truncate(self):
        assert truncate("short") == "short"
        long_line = "x" * 200
        assert len(truncate(long_line)) == 80
        assert truncate(long_line).endswith("...")

    def test_report_lists_detections(self, sample_result, capsys):
        ConsoleReporter(target="/repo", elapsed=0.5).report(sample_result)
        out = capsys.readouterr().out

        assert "GitHub PAT" in out
        assert "app/config.py:3" in out
        assert mask_secret(GITHUB_PAT) in out
        assert GITHUB_PAT not in out
        assert "Error scanning bad.txt" in out
        assert "2 secret(s) found" in out

    def test_clean_report(self, capsys):
        ConsoleReporter(target="/repo").report(ScanResult(files_scanned=3))
        assert "No secrets found" in capsys.readouterr().out

    def test_cancelled_banner(self, capsys):
        ConsoleReporter(target="/repo").report(ScanResult(cancelled=True))
        assert "CANCELLED" in capsys.readouterr().out


class TestGitHubIntegration:
    """Tests for GitHub Actions annotations and step summary."""

    def test_annotation_format(self, make_detection):
        high = format_annotation(make_detection(line=12))
        assert high.startswith("::error file=app/config.py,line=12,")
        assert mask_secret(GITHUB_PAT) in high
        assert GITHUB_PAT not in high

        medium = format_annotation(make_detection(service="Asana", risk=Risk.MEDIUM, priority=False))
        assert medium.startswith("::warning ")

    def test_nothing_emitted_outside_actions(self, sample_result, monkeypatch, capsys):
        monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
        emit_annotations(sample_result)
        assert capsys.readouterr().out == ""

    def test_annotations_and_summary(self, sample_result, temp_dir: Path, monkeypatch, capsys):
        summary = temp_dir / "summary.md"
        monkeypatch.setenv("GITHUB_ACTIONS", "true")
        monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(summary))

        emit_annotations(sample_result)
        write_step_summary(sample_result, "/repo")

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("::error ")
        text = summary.read_text(encoding="utf-8")
        assert "Status: FAILED" in text
        assert "| high | 1 |" in text
        assert AWS_KEY not in text and GITHUB_PAT not in text
