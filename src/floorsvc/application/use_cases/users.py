from __future__ import annotations

import logging

from floorsvc.application.ports.repositories import DuplicateEmailError, UserRepository
from floorsvc.application.ports.security import AccessClaims, PasswordHasher, TokenService
from floorsvc.domain.common.errors import AuthenticationError, ConflictError, InvalidInputError, NotFoundError
from floorsvc.domain.common.ids import UserId
from floorsvc.domain.user.entities import User, UserRole

logger = logging.getLogger(__name__)


class EmailAlreadyRegisteredError(ConflictError):
    code = "EMAIL_TAKEN"


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"


class InvalidUserInputError(InvalidInputError):
    code = "INVALID_USER"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class RegisterUser:
    def __init__(self, user_repository: UserRepository, password_hasher: PasswordHasher) -> None:
        self._user_repository = user_repository
        self._password_hasher = password_hasher

    def execute(self, name: str, email: str, password: str, role: UserRole = UserRole.USER) -> User:
        normalized = _normalize_email(email)
        if self._user_repository.get_by_email(normalized) is not None:
            raise EmailAlreadyRegisteredError(f"email {normalized} is already registered")

        try:
            user = User(
                user_id=None,
                name=name.strip(),
                email=normalized,
                password_hash=self._password_hasher.hash(password),
                role=role,
            )
        except ValueError as exc:
            raise InvalidUserInputError(str(exc)) from exc

        try:
            created = self._user_repository.add(user)
        except DuplicateEmailError as exc:
            raise EmailAlreadyRegisteredError(f"email {normalized} is already registered") from exc
        logger.info("user_registered", extra={"user_id": created.user_id})
        return created


class LoginUser:
    def __init__(
        self,
        user_repository: UserRepository,
        password_hasher: PasswordHasher,
        token_service: TokenService,
    ) -> None:
        self._user_repository = user_repository
        self._password_hasher = password_hasher
        self._token_service = token_service

    def execute(self, email: str, password: str) -> tuple[str, AccessClaims, User]:
        user = self._user_repository.get_by_email(_normalize_email(email))
        if user is None or user.user_id is None:
            raise InvalidCredentialsError("invalid email or password")
        if not self._password_hasher.verify(password, user.password_hash):
            logger.info("login_rejected", extra={"user_id": user.user_id})
            raise InvalidCredentialsError("invalid email or password")

        token, claims = self._token_service.issue(user.user_id, user.role)
        logger.info("user_logged_in", extra={"user_id": user.user_id})
        return token, claims, user


class GetUser:
    def __init__(self, user_repository: UserRepository) -> None:
        self._user_repository = user_repository

    def execute(self, user_id: UserId) -> User:
        user = self._user_repository.get(user_id)
        if user is None:
            raise UserNotFoundError(f"user {user_id} not found")
        return user
