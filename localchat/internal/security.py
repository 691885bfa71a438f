"""
Credential and session primitives.

Responsibilities:
- Hash and verify user passwords (salted PBKDF2-SHA256)
- Issue, resolve and revoke opaque session tokens

Sessions live in memory only; restarting the service logs everybody out.
"""

import hashlib
import hmac
import secrets
from typing import Optional

from localchat.internal.logging import get_logger

logger = get_logger(__name__)


TOKEN_BYTES = 32
SALT_BYTES = 16
PBKDF2_ITERATIONS = 200_000
MAX_SESSIONS_PER_USER = 5


def generate_token() -> str:
    """
    Generate a new cryptographically secure session token.
    """
    return secrets.token_hex(TOKEN_BYTES)


def hash_password(password: str, salt: Optional[str] = None) -> tuple[str, str]:
    """
    Hash a password.

    Returns:
        (hex digest, hex salt). A fresh salt is generated when none is given.
    """
    salt = salt or secrets.token_hex(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        bytes.fromhex(salt),
        PBKDF2_ITERATIONS,
    )
    return digest.hex(), salt


def verify_password(password: str, password_hash: str, salt: str) -> bool:
    candidate, _ = hash_password(password, salt)
    return hmac.compare_digest(candidate, password_hash)


class SessionRegistry:
    """
    Maps opaque session tokens to user ids.
    The HTTP layer stores the token in an httponly cookie.

    Each user keeps at most `max_per_user` sessions; issuing one more drops
    that user's oldest token.
    """

    def __init__(self, max_per_user: int = MAX_SESSIONS_PER_USER):
        self.max_per_user = max_per_user
        self._sessions: dict[str, str] = {}

    def issue(self, user_id: str) -> str:
        owned = [t for t, uid in self._sessions.items() if uid == user_id]
        # dicts keep insertion order, so the first tokens are the oldest
        for stale in owned[:max(len(owned) - self.max_per_user + 1, 0)]:
            del self._sessions[stale]

        token = generate_token()
        self._sessions[token] = user_id
        logger.info("Session issued", user_id=user_id)
        return token

    def resolve(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        return self._sessions.get(token)

    def revoke(self, token: Optional[str]) -> None:
        if token and self._sessions.pop(token, None) is not None:
            logger.info("Session revoked")

    def __len__(self) -> int:
        return len(self._sessions)
