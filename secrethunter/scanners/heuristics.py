"""
SecretHunter Heuristic Filter

Entropy and context checks applied to raw signature matches in smart
mode. Generic patterns (32-char lowercase hex and the like) collide with
hashes, UUIDs and unrelated identifiers; these checks suppress the most
common collisions without any network access.
"""

from __future__ import annotations

import math
import re
from collections import Counter

from secrethunter.core.signatures import CONTEXT_REQUIRED_SERVICES

HIGH_ENTROPY_THRESHOLD = 4.0
HIGH_ENTROPY_MIN_LENGTH = 20
HASH_ENTROPY_CEILING = 3.5

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")
HEX_HASH_RE = re.compile(r"^[a-f0-9]{32,64}$")


def shannon_entropy(text: str) -> float:
    """Shannon entropy of ``text`` in bits per character."""
    if not text:
        return 0.0

    length = len(text)
    entropy = 0.0
    for count in Counter(text).values():
        p = count / length
        entropy -= p * math.log2(p)
    return entropy


def is_likely_credential(
    candidate: str,
    context: str,
    service: str,
    heuristics_enabled: bool,
) -> bool:
    """Decide whether a raw match should be reported."""
    if not heuristics_enabled:
        return True

    lowered = candidate.lower()
    # A well-spread UUID can pass the entropy bar, so it is checked first
    if UUID_RE.match(lowered):
        return False

    entropy = shannon_entropy(candidate)
    if entropy > HIGH_ENTROPY_THRESHOLD and len(candidate) > HIGH_ENTROPY_MIN_LENGTH:
        return True

    if HEX_HASH_RE.match(lowered) and entropy < HASH_ENTROPY_CEILING:
        return False

    if service in CONTEXT_REQUIRED_SERVICES and service.lower() not in context.lower():
        return False

    return True
