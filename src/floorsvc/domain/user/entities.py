from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from floorsvc.domain.common.ids import UserId


class UserRole(str, Enum):
    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"

    @property
    def is_staff(self) -> bool:
        return self in (UserRole.MANAGER, UserRole.ADMIN)


@dataclass(frozen=True)
class User:
    user_id: UserId | None
    name: str
    email: str
    password_hash: str
    role: UserRole
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if "@" not in self.email:
            raise ValueError("email must contain '@'")
