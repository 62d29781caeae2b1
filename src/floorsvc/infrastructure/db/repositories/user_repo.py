from __future__ import annotations

from datetime import timezone

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError

from floorsvc.application.ports.repositories import DuplicateEmailError, UserRepository
from floorsvc.domain.common.ids import UserId
from floorsvc.domain.user.entities import User, UserRole
from floorsvc.infrastructure.db.models.user import UserModel
from floorsvc.infrastructure.db.session import get_engine, session_scope


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, user: User) -> User:
        model = UserModel(
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            role=user.role.value,
        )
        with session_scope(self._engine, "user insert") as session:
            session.add(model)
            try:
                session.flush()
            except IntegrityError as exc:
                raise DuplicateEmailError(user.email) from exc
            session.refresh(model)
            return self._to_domain(model)

    def get(self, user_id: UserId) -> User | None:
        with session_scope(self._engine, "user lookup") as session:
            model = session.get(UserModel, user_id)
            return self._to_domain(model) if model is not None else None

    def get_by_email(self, email: str) -> User | None:
        statement = select(UserModel).where(UserModel.email == email)
        with session_scope(self._engine, "user lookup") as session:
            model = session.execute(statement).scalar_one_or_none()
            return self._to_domain(model) if model is not None else None

    def _to_domain(self, model: UserModel) -> User:
        created_at = model.created_at
        if created_at and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return User(
            user_id=UserId(model.id),
            name=model.name,
            email=model.email,
            password_hash=model.password_hash,
            role=UserRole(model.role),
            created_at=created_at,
        )
