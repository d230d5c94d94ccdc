"""JWT access and refresh tokens."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Self

from jose import JWTError, jwt

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class AuthConfig:
    """Token secrets and lifetimes, read once from Django settings at startup."""

    access_secret: str
    refresh_secret: str
    access_token_minutes: int
    refresh_token_days: int
    algorithm: str = "HS256"
    secure_cookies: bool = False

    @classmethod
    def from_settings(cls, settings) -> Self:
        return cls(
            access_secret=settings.JWT_ACCESS_SECRET,
            refresh_secret=settings.JWT_REFRESH_SECRET,
            access_token_minutes=settings.JWT_ACCESS_TOKEN_MINUTES,
            refresh_token_days=settings.JWT_REFRESH_TOKEN_DAYS,
            algorithm=settings.JWT_ALGORITHM,
            secure_cookies=settings.SECURE_AUTH_COOKIES,
        )

    @property
    def access_lifetime(self) -> timedelta:
        return timedelta(minutes=self.access_token_minutes)

    @property
    def refresh_lifetime(self) -> timedelta:
        return timedelta(days=self.refresh_token_days)


class TokenService:
    """Issues and verifies HS256 tokens; access and refresh tokens use separate secrets."""

    def __init__(self, config: AuthConfig) -> None:
        self.config = config

    def issue_access_token(self, user) -> str:
        return self._issue(user, ACCESS, self.config.access_secret, self.config.access_lifetime)

    def issue_refresh_token(self, user) -> str:
        return self._issue(
            user, REFRESH, self.config.refresh_secret, self.config.refresh_lifetime
        )

    def decode_access_token(self, token: str) -> dict[str, Any] | None:
        return self._decode(token, ACCESS, self.config.access_secret)

    def decode_refresh_token(self, token: str) -> dict[str, Any] | None:
        return self._decode(token, REFRESH, self.config.refresh_secret)

    def _issue(self, user, token_type: str, secret: str, lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user.id),
            "user": user.user_name,
            "type": token_type,
            "iat": now,
            "exp": now + lifetime,
        }
        return jwt.encode(claims, secret, algorithm=self.config.algorithm)

    def _decode(self, token: str, token_type: str, secret: str) -> dict[str, Any] | None:
        """Return the token's claims, or None if it is invalid, expired or of the wrong type."""
        try:
            payload = jwt.decode(token, secret, algorithms=[self.config.algorithm])
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            return None
        if payload.get("type") != token_type:
            logger.warning(f"Rejected {payload.get('type')} token used as {token_type} token")
            return None
        return payload
