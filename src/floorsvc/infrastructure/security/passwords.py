from __future__ import annotations

from passlib.context import CryptContext

from floorsvc.application.ports.security import PasswordHasher


class BcryptPasswordHasher(PasswordHasher):
    def __init__(self) -> None:
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    def hash(self, plain: str) -> str:
        return self._context.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        try:
            return self._context.verify(plain, hashed)
        except ValueError:
            # Unrecognised or malformed stored hash.
            return False
