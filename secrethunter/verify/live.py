"""
SecretHunter Live Verifier

Sends one minimal HEAD request per high-risk detection to the issuing
service to see whether the credential is recognised.

Interpretation:
- 2xx, 401, 403: the service knows the credential -> keep
- any other status: definitive rejection -> drop
- timeout, network error, unbuildable request: inconclusive -> keep

Only a definitive rejection ever removes a detection.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

import requests

from secrethunter import __version__
from secrethunter.core.cancellation import CancellationToken
from secrethunter.core.config import DEFAULT_VERIFY_LIMIT, DEFAULT_VERIFY_WORKERS
from secrethunter.core.finding import Detection

logger = logging.getLogger(__name__)

VERIFY_TIMEOUT = 2.0
USER_AGENT = f"SecretHunter/{__version__}"

# Lower-cased service name -> verification endpoint.
# Grok xAI and Anthropic have no public endpoint and are never checked.
VERIFICATION_ENDPOINTS = {
    "openai": "https://api.openai.com/v1/models",
    "github pat": "https://api.github.com/user",
    "aws access key": "https://sts.amazonaws.com/",
    "stripe": "https://api.stripe.com/v1/charges",
    "azure ad": "https://graph.microsoft.com/v1.0/me",
    "alibaba": "https://ecs.aliyuncs.com/",
    "cloudflare": "https://api.cloudflare.com/client/v4/user/tokens/verify",
}


def get_verification_url(service: str) -> Optional[str]:
    """Return the verification endpoint for ``service``, if it has one."""
    return VERIFICATION_ENDPOINTS.get(service.lower())


def interpret_status(status_code: int) -> bool:
    """Map an HTTP status to keep (True) or drop (False)."""
    if 200 <= status_code < 300:
        return True
    # Recognised but refused: expired, revoked or missing scopes
    if status_code in (401, 403):
        return True
    return False


def verify_light(
    detection: Detection,
    session: Optional[requests.Session] = None,
    timeout: float = VERIFY_TIMEOUT,
) -> bool:
    """
    Check whether a detection still looks like a live credential.

    Non-priority detections and services without an endpoint are not
    checked and always return True.
    """
    if not detection.priority:
        return True

    url = get_verification_url(detection.service)
    if not url:
        return True

    headers = {
        "User-Agent": USER_AGENT,
        "Authorization": f"Bearer {detection.original_match}",
    }
    http = session or requests

    try:
        resp = http.head(url, headers=headers, timeout=timeout, allow_redirects=False)
    except (requests.RequestException, ValueError) as exc:
        logger.debug("Verification of %s %s inconclusive: %s", detection.service, detection.match, exc)
        return True

    keep = interpret_status(resp.status_code)
    logger.debug(
        "Verification of %s %s returned %d (%s)",
        detection.service, detection.match, resp.status_code, "kept" if keep else "dropped",
    )
    return keep


def verify_detections(
    detections: Sequence[Detection],
    limit: int = DEFAULT_VERIFY_LIMIT,
    max_workers: int = DEFAULT_VERIFY_WORKERS,
    cancel_token: Optional[CancellationToken] = None,
    session: Optional[requests.Session] = None,
) -> list[Detection]:
    """
    Verify up to ``limit`` priority detections and drop the rejected ones.

    Detections that are not submitted (non-priority, over the limit, or
    not yet started when the token is cancelled) are kept. Input order
    is preserved.
    """
    cancel_token = cancel_token or CancellationToken()
    candidates = [d for d in detections if d.priority][: max(0, limit)]
    if len(candidates) < sum(1 for d in detections if d.priority):
        logger.warning(
            "Verification limited to %d high-risk secrets; the rest are kept unverified", limit
        )

    def _check(detection: Detection) -> bool:
        if cancel_token.is_set():
            return True
        return verify_light(detection, session=session)

    rejected: set[int] = set()
    if candidates:
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
            for detection, keep in zip(candidates, pool.map(_check, candidates)):
                if not keep:
                    rejected.add(id(detection))

    return [d for d in detections if id(d) not in rejected]
