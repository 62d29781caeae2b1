from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from floorsvc.domain.common.ids import UserId
from floorsvc.domain.user.entities import UserRole


@dataclass(frozen=True)
class AccessClaims:
    user_id: UserId
    role: UserRole
    expires_at: datetime

    @property
    def is_staff(self) -> bool:
        return self.role.is_staff


class PasswordHasher(Protocol):
    def hash(self, plain: str) -> str: ...

    def verify(self, plain: str, hashed: str) -> bool: ...


class TokenService(Protocol):
    def issue(self, user_id: UserId, role: UserRole) -> tuple[str, AccessClaims]: ...

    def decode(self, token: str) -> AccessClaims: ...
