from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from jose import JWTError, jwt

from floorsvc.application.ports.security import AccessClaims, TokenService
from floorsvc.domain.common.errors import AuthenticationError
from floorsvc.domain.common.ids import UserId
from floorsvc.domain.user.entities import UserRole


class InvalidTokenError(AuthenticationError):
    code = "INVALID_TOKEN"


def _secret_key() -> str:
    secret = os.getenv("JWT_SECRET_KEY")
    if not secret:
        raise RuntimeError("JWT_SECRET_KEY is not set")
    return secret


class JwtTokenService(TokenService):
    """HS256 access tokens whose claims decode into a typed ``AccessClaims``."""

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expire_minutes: int | None = None,
    ) -> None:
        self._secret_key = secret_key or _secret_key()
        self._algorithm = algorithm or os.getenv("JWT_ALGORITHM", "HS256")
        self._expire_minutes = expire_minutes or int(os.getenv("JWT_EXPIRE_MINUTES", "1440"))

    def issue(self, user_id: UserId, role: UserRole) -> tuple[str, AccessClaims]:
        expires_at = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(
            minutes=self._expire_minutes
        )
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "role": role.value,
            "exp": expires_at,
            "jti": str(uuid4()),
        }
        token = jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
        return token, AccessClaims(user_id=user_id, role=role, expires_at=expires_at)

    def decode(self, token: str) -> AccessClaims:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidTokenError("invalid or expired token") from exc

        try:
            user_id = UserId(int(payload["sub"]))
            role = UserRole(payload["role"])
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("token claims are malformed") from exc
        return AccessClaims(user_id=user_id, role=role, expires_at=expires_at)
