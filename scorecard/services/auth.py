"""Admin authentication: shared password login and bearer tokens.

Tokens live in process memory and are lost on restart, which logs every
admin out. Run a single worker process.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from scorecard.config import get_settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class AdminTokenStore:
    """Issued admin tokens."""

    def __init__(self):
        self._tokens: set[str] = set()

    def login(self, password: str, expected: str) -> Optional[str]:
        """Issue a token if the password matches, else return None."""
        if not secrets.compare_digest(password.encode(), expected.encode()):
            logger.warning("Rejected admin login attempt")
            return None
        token = secrets.token_urlsafe(32)
        self._tokens.add(token)
        logger.info("Admin token issued")
        return token

    def is_valid(self, token: Optional[str]) -> bool:
        if not token:
            return False
        candidate = token.encode()
        return any(secrets.compare_digest(candidate, known.encode()) for known in self._tokens)

    def revoke(self, token: str) -> None:
        self._tokens.discard(token)

    def clear(self) -> None:
        self._tokens.clear()


admin_tokens = AdminTokenStore()


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """FastAPI dependency rejecting requests without a valid admin token.

    Returns:
        The caller's token
    """
    token = credentials.credentials if credentials else None
    if not admin_tokens.is_valid(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def admin_password() -> str:
    return get_settings().admin_password
