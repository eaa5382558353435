"""PKCE helpers: random verifier/state strings and the S256 code challenge."""

import base64
import hashlib
import secrets
from dataclasses import dataclass
from typing import Optional

CODE_VERIFIER_LENGTH = 128
STATE_LENGTH = 16


class RandomSource:
    """Source of cryptographically secure random bytes."""

    def token_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)


@dataclass(frozen=True)
class PkcePair:
    code_verifier: str
    code_challenge: str


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def generate_random_string(length: int, random_source: Optional[RandomSource] = None) -> str:
    """
    Return `length` characters of base64url text built from `length` random bytes.

    Every character belongs to [A-Za-z0-9_-], which is valid both as a PKCE
    verifier and as a URL query value.
    """
    source = random_source or RandomSource()
    return _b64url(source.token_bytes(length))[:length]


def generate_code_challenge(code_verifier: str) -> str:
    """base64url(SHA-256(verifier)) without padding (RFC 7636, method S256)."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return _b64url(digest)


def new_pkce_pair(random_source: Optional[RandomSource] = None) -> PkcePair:
    verifier = generate_random_string(CODE_VERIFIER_LENGTH, random_source)
    return PkcePair(code_verifier=verifier, code_challenge=generate_code_challenge(verifier))
