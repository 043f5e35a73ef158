"""
Tests for the Live Verifier
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import AWS_KEY, GITHUB_PAT, OPENAI_KEY
from secrethunter.core.cancellation import CancellationToken
from secrethunter.core.finding import Risk
from secrethunter.verify.live import (
    USER_AGENT,
    VERIFY_TIMEOUT,
    get_verification_url,
    interpret_status,
    verify_detections,
    verify_light,
)


def _response(status_code: int) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    return resp


class TestInterpretStatus:
    """Tests for interpret_status()."""

    @pytest.mark.parametrize("status", [200, 204, 401, 403])
    def test_recognised_credentials_are_kept(self, status):
        assert interpret_status(status) is True

    @pytest.mark.parametrize("status", [301, 400, 404, 429, 500, 503])
    def test_other_statuses_are_dropped(self, status):
        assert interpret_status(status) is False


class TestVerifyLight:
    """Tests for verify_light() with HTTP mocked."""

    def test_endpoint_lookup_is_case_insensitive(self):
        assert get_verification_url("GitHub PAT") == "https://api.github.com/user"
        assert get_verification_url("github pat") == "https://api.github.com/user"
        assert get_verification_url("Anthropic") is None

    def test_non_priority_is_not_checked(self, make_detection):
        detection = make_detection(service="Slack Token", priority=False, risk=Risk.HIGH)

        with patch("secrethunter.verify.live.requests.head") as head:
            assert verify_light(detection) is True

        head.assert_not_called()

    def test_service_without_endpoint_is_not_checked(self, make_detection):
        detection = make_detection(secret="sk-ant-" + "x" * 40, service="Anthropic")

        with patch("secrethunter.verify.live.requests.head") as head:
            assert verify_light(detection) is True

        head.assert_not_called()

    def test_request_shape(self, make_detection):
        detection = make_detection()

        with patch("secrethunter.verify.live.requests.head", return_value=_response(200)) as head:
            verify_light(detection)

        head.assert_called_once()
        args, kwargs = head.call_args
        assert args[0] == "https://api.github.com/user"
        assert kwargs["headers"]["Authorization"] == f"Bearer {GITHUB_PAT}"
        assert kwargs["headers"]["User-Agent"] == USER_AGENT
        assert kwargs["timeout"] == VERIFY_TIMEOUT == 2.0
        assert kwargs["allow_redirects"] is False

    @pytest.mark.parametrize("status,expected", [(200, True), (401, True), (403, True), (404, False)])
    def test_status_decides(self, make_detection, status, expected):
        with patch("secrethunter.verify.live.requests.head", return_value=_response(status)):
            assert verify_light(make_detection()) is expected

    @pytest.mark.parametrize("error", [
        requests.Timeout("timed out"),
        requests.ConnectionError("refused"),
    ])
    def test_network_failure_keeps_detection(self, make_detection, error):
        with patch("secrethunter.verify.live.requests.head", side_effect=error):
            assert verify_light(make_detection()) is True

    def test_uses_given_session(self, make_detection):
        session = MagicMock()
        session.head.return_value = _response(404)

        assert verify_light(make_detection(), session=session) is False
        session.head.assert_called_once()


class TestVerifyDetections:
    """Tests for verify_detections()."""

    def test_rejected_detections_are_removed(self, make_detection):
        live = make_detection(secret=GITHUB_PAT, line=1)
        dead = make_detection(secret=OPENAI_KEY, service="OpenAI", line=2)
        other = make_detection(service="Slack Token", priority=False, line=3)

        def fake_head(url, **kwargs):
            return _response(404 if "openai" in url else 200)

        with patch("secrethunter.verify.live.requests.head", side_effect=fake_head):
            kept = verify_detections([live, dead, other], max_workers=2)

        assert kept == [live, other]

    def test_only_first_priority_detections_are_checked(self, make_detection):
        detections = [
            make_detection(secret=AWS_KEY, service="AWS Access Key", line=n) for n in range(1, 21)
        ]

        with patch("secrethunter.verify.live.requests.head", return_value=_response(404)) as head:
            kept = verify_detections(detections)

        assert head.call_count == 15
        # Over-limit detections were never checked and are kept, in order
        assert kept == detections[15:]

    def test_over_limit_is_reported(self, make_detection, caplog):
        detections = [make_detection(line=n) for n in range(1, 4)]

        with patch("secrethunter.verify.live.requests.head", return_value=_response(200)), \
                caplog.at_level(logging.WARNING, logger="secrethunter.verify.live"):
            verify_detections(detections, limit=2)

        assert "limited to 2" in caplog.text

    def test_no_warning_under_limit(self, make_detection, caplog):
        with patch("secrethunter.verify.live.requests.head", return_value=_response(200)), \
                caplog.at_level(logging.WARNING, logger="secrethunter.verify.live"):
            verify_detections([make_detection()], limit=2)

        assert caplog.text == ""

    def test_limit_is_configurable(self, make_detection):
        detections = [make_detection(line=n) for n in range(1, 6)]

        with patch("secrethunter.verify.live.requests.head", return_value=_response(200)) as head:
            kept = verify_detections(detections, limit=2)

        assert head.call_count == 2
        assert kept == detections

    def test_cancelled_token_skips_requests(self, make_detection):
        token = CancellationToken()
        token.cancel()
        detections = [make_detection(line=n) for n in range(1, 4)]

        with patch("secrethunter.verify.live.requests.head") as head:
            kept = verify_detections(detections, cancel_token=token)

        head.assert_not_called()
        assert kept == detections

    def test_empty_input(self):
        assert verify_detections([]) == []
