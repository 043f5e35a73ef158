"""
SecretHunter Signature Registry

The fixed table of credential signatures. Patterns are compiled once at
import time; a malformed pattern is an import error, never a scan error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from secrethunter.core.finding import Risk


@dataclass(frozen=True)
class Signature:
    """One class of detectable credential."""

    service: str
    pattern: re.Pattern
    risk: Risk
    priority: bool = False


def _sig(service: str, pattern: str, risk: Risk, priority: bool = False) -> Signature:
    return Signature(service, re.compile(pattern, re.ASCII), risk, priority)


# (service, pattern, risk, priority)
SIGNATURES: tuple[Signature, ...] = (
    # ── AI providers ──
    _sig("OpenAI", r"\bsk-[a-zA-Z0-9]{48}\b", Risk.HIGH, True),
    _sig("Grok xAI", r"\bsk-grok-[a-zA-Z0-9_\-]{93}AA\b", Risk.HIGH, True),
    _sig("Anthropic", r"\bsk-ant-api03-[a-zA-Z0-9_\-]{93}AA\b", Risk.HIGH, True),

    # ── Cloud & version control ──
    _sig("AWS Access Key", r"\b(?:AKIA|ASIA|ABIA|ACCA)[A-Z0-9]{16}\b", Risk.HIGH, True),
    _sig("GitHub PAT", r"\bghp_[a-zA-Z0-9]{36}\b", Risk.HIGH, True),
    _sig("Vercel", r"\bvercel_[a-zA-Z0-9]{32}\b", Risk.HIGH),
    _sig("Supabase", r"\beyJ[a-zA-Z0-9._-]{100,}\b", Risk.HIGH),
    _sig("Fly.io", r"\bflyv1_[a-zA-Z0-9]{40}\b", Risk.HIGH),

    # ── Payment & messaging ──
    _sig("Stripe", r"\bsk_live_[a-zA-Z0-9]{24}\b", Risk.HIGH, True),
    _sig("Slack Bot", r"\bxoxb-[0-9]{11}-[0-9]{12}-[a-zA-Z0-9]{24}\b", Risk.HIGH),
    _sig("Discord Bot", r"\b[a-zA-Z0-9]{24}\.[a-zA-Z0-9]{6}\.[a-zA-Z0-9_\-]{27}\b", Risk.HIGH),

    # ── SaaS ──
    _sig("Adobe", r"\bp8e-[a-z0-9]{32}\b", Risk.MEDIUM),
    _sig("Airtable PAT", r"\bpat[a-zA-Z0-9]{14}\.[a-f0-9]{64}\b", Risk.HIGH),
    # Generic shape, only kept with "algolia" in context when smart mode is on
    _sig("Algolia", r"\b[a-z0-9]{32}\b", Risk.MEDIUM),
    _sig("Alibaba", r"\bLTAI[a-z0-9]{20}\b", Risk.HIGH, True),
    # Generic shape, only kept with "asana" in context when smart mode is on
    _sig("Asana", r"\b[a-z0-9]{32}\b", Risk.MEDIUM),
    _sig("Cloudflare", r"\b[a-z0-9_-]{40}\b", Risk.HIGH, True),
    _sig("Bitbucket", r"\b[a-z0-9=_\-]{64}\b", Risk.HIGH),
    _sig("Atlassian", r"\bATATT3[A-Za-z0-9_\-=]{186}\b", Risk.HIGH),
    _sig("Azure AD", r"\b[a-zA-Z0-9_~.]{3}\dQ~[a-zA-Z0-9_~.-]{31,34}\b", Risk.HIGH, True),
)

# Services whose pattern is too generic to trust without a mention in the line
CONTEXT_REQUIRED_SERVICES = frozenset({"Algolia", "Asana"})


def list_signatures() -> Sequence[Signature]:
    """Return every registered signature, in table order."""
    return SIGNATURES


def get_signature(service: str) -> Signature:
    """Look up a signature by its service name."""
    for signature in SIGNATURES:
        if signature.service == service:
            return signature
    raise KeyError(service)
