# playergate/app/security/hashing.py
"""
Verifier tokens for passwords and security answers.

Two schemes:
- Sha256Verifier: lowercase hex SHA-256 of the UTF-8 secret. Unsalted
  and fast, which is a known weakness, but tokens are byte-for-byte
  compatible with data already stored by the game server.
- BcryptVerifier: salted, slow. Tokens differ on every hash, so
  equality must go through matches(). Secrets are pre-hashed to a
  64-char SHA-256 hex digest first, since bcrypt only takes 72 bytes.
  Switching to it invalidates every stored sha256 token (no migration
  path).

Callers only use hash() and matches(); they never compare tokens
themselves.
"""
import hashlib
import secrets
from abc import ABC, abstractmethod

import bcrypt


def constant_time_compare(a: str, b: str) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks.

    Args:
        a: Expected token
        b: Provided token

    Returns:
        True if strings match, False otherwise
    """
    if len(a) != len(b):
        # Still do the comparison to keep the timing shape
        secrets.compare_digest(a, a)
        return False
    return secrets.compare_digest(a, b)


class Verifier(ABC):
    """Turns a secret into a token and checks secrets against tokens."""

    scheme: str = ""

    @abstractmethod
    def hash(self, secret: str) -> str:
        ...

    @abstractmethod
    def matches(self, secret: str, token: str) -> bool:
        ...

    @property
    @abstractmethod
    def dummy_token(self) -> str:
        """A token no real secret maps to, used to keep failures uniform."""


class Sha256Verifier(Verifier):
    scheme = "sha256"

    def hash(self, secret: str) -> str:
        return hashlib.sha256(secret.encode("utf-8")).hexdigest()

    def matches(self, secret: str, token: str) -> bool:
        return constant_time_compare(token, self.hash(secret))

    @property
    def dummy_token(self) -> str:
        return "0" * 64


class BcryptVerifier(Verifier):
    scheme = "bcrypt"

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy = None

    @staticmethod
    def _prehash(secret: str) -> bytes:
        # Fixed 64 bytes, under bcrypt's 72-byte input limit
        return hashlib.sha256(secret.encode("utf-8")).hexdigest().encode("ascii")

    def hash(self, secret: str) -> str:
        return bcrypt.hashpw(
            self._prehash(secret), bcrypt.gensalt(rounds=self.rounds)
        ).decode("utf-8")

    def matches(self, secret: str, token: str) -> bool:
        try:
            return bcrypt.checkpw(self._prehash(secret), token.encode("utf-8"))
        except ValueError:
            # Malformed token (e.g. a leftover sha256 hex digest)
            return False

    @property
    def dummy_token(self) -> str:
        # Real bcrypt hash so a miss costs the same as a hit
        if self._dummy is None:
            self._dummy = self.hash(secrets.token_hex(16))
        return self._dummy


def get_verifier(scheme: str = "sha256", bcrypt_rounds: int = 12) -> Verifier:
    """
    Select the verifier implementation for a scheme name.

    Raises:
        ValueError: unknown scheme (fail at startup, not per request)
    """
    if scheme == Sha256Verifier.scheme:
        return Sha256Verifier()
    if scheme == BcryptVerifier.scheme:
        return BcryptVerifier(rounds=bcrypt_rounds)
    raise ValueError(f"Unknown verifier scheme: {scheme!r}")
