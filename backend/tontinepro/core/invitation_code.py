"""Invitation Codes — generation, normalization and shareable links.

Invariants:
    - Codes are INVITATION_CODE_LENGTH characters drawn from INVITATION_CODE_ALPHABET
    - Codes are stored upper-case; resolution is case-insensitive via normalize_code
    - Uniqueness is NOT guaranteed here: the store's unique index is the source of truth

Design Decisions:
    - Random source injected (random.Random-like): deterministic in tests, SystemRandom in prod
"""

import random
from urllib.parse import urlencode

from tontinepro.core.domain_types import (
    INVITATION_CODE_ALPHABET,
    INVITATION_CODE_LENGTH,
)

_system_random = random.SystemRandom()


def generate_code(rng: random.Random | None = None) -> str:
    """Draw a fresh candidate code. Caller handles collisions."""
    source = rng or _system_random
    return "".join(
        source.choice(INVITATION_CODE_ALPHABET)
        for _ in range(INVITATION_CODE_LENGTH)
    )


def normalize_code(raw: str) -> str | None:
    """Canonical form of user-entered code, or None if it cannot be a valid code."""
    code = raw.strip().upper()
    if len(code) != INVITATION_CODE_LENGTH:
        return None
    if any(ch not in INVITATION_CODE_ALPHABET for ch in code):
        return None
    return code


def build_invitation_link(base_url: str, code: str) -> str:
    """Shareable link: base URL plus a `code` query parameter."""
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{urlencode({'code': code})}"
