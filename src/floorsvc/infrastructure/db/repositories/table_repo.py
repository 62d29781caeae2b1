from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, exists, select, update
from sqlalchemy.orm import Session

from floorsvc.application.ports.repositories import TableRepository, TableReservedConflict
from floorsvc.domain.common.ids import TableId, UserId
from floorsvc.domain.order.entities import OrderStatus
from floorsvc.domain.table.entities import Table, TableStatus
from floorsvc.infrastructure.db.models.order import OrderModel
from floorsvc.infrastructure.db.models.table import TableModel
from floorsvc.infrastructure.db.session import get_engine, session_scope


class SqlAlchemyTableRepository(TableRepository):
    """Table rows change only through conditional UPDATE statements.

    Each method runs in the ambient transaction when one is open, otherwise
    in its own short transaction.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, table_id: TableId) -> Table | None:
        with session_scope(self._engine, "table lookup") as session:
            model = self._load(session, table_id)
            return self._to_domain(model) if model is not None else None

    def lock(self, table_id: TableId) -> Table | None:
        statement = (
            select(TableModel)
            .where(TableModel.id == table_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        with session_scope(self._engine, "table lock") as session:
            model = session.execute(statement).scalar_one_or_none()
            return self._to_domain(model) if model is not None else None

    def list_by_status(self, status: TableStatus | None = None) -> list[Table]:
        statement = select(TableModel).order_by(TableModel.id).execution_options(populate_existing=True)
        if status is not None:
            statement = statement.where(TableModel.status == status.value)
        with session_scope(self._engine, "table listing") as session:
            return [self._to_domain(model) for model in session.execute(statement).scalars().all()]

    def try_reserve(self, table_id: TableId, user_id: UserId) -> Table | None:
        statement = (
            update(TableModel)
            .where(
                TableModel.id == table_id,
                TableModel.status == TableStatus.AVAILABLE.value,
            )
            .values(
                status=TableStatus.RESERVED.value,
                occupant_id=user_id,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(TableModel.id)
            .execution_options(synchronize_session=False)
        )
        with session_scope(self._engine, "table reservation") as session:
            reserved_id = session.execute(statement).scalar_one_or_none()
            model = self._load(session, table_id)
            if model is None:
                return None
            if reserved_id is None:
                raise TableReservedConflict(self._to_domain(model))
            return self._to_domain(model)

    def release(self, table_id: TableId) -> Table | None:
        statement = (
            update(TableModel)
            .where(TableModel.id == table_id)
            .values(
                status=TableStatus.AVAILABLE.value,
                occupant_id=None,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(TableModel.id)
            .execution_options(synchronize_session=False)
        )
        with session_scope(self._engine, "table release") as session:
            if session.execute(statement).scalar_one_or_none() is None:
                return None
            model = self._load(session, table_id)
            return self._to_domain(model) if model is not None else None

    def release_if_held(self, table_id: TableId, user_id: UserId) -> bool:
        pending_order = exists().where(
            OrderModel.table_id == table_id,
            OrderModel.status == OrderStatus.PENDING.value,
        )
        statement = (
            update(TableModel)
            .where(
                TableModel.id == table_id,
                TableModel.status == TableStatus.RESERVED.value,
                TableModel.occupant_id == user_id,
                ~pending_order,
            )
            .values(
                status=TableStatus.AVAILABLE.value,
                occupant_id=None,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(TableModel.id)
            .execution_options(synchronize_session=False)
        )
        with session_scope(self._engine, "conditional table release") as session:
            return session.execute(statement).scalar_one_or_none() is not None

    def _load(self, session: Session, table_id: TableId) -> TableModel | None:
        statement = (
            select(TableModel)
            .where(TableModel.id == table_id)
            .execution_options(populate_existing=True)
        )
        return session.execute(statement).scalar_one_or_none()

    def _to_domain(self, model: TableModel) -> Table:
        created_at = model.created_at
        updated_at = model.updated_at
        if created_at and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        if updated_at and updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=timezone.utc)
        return Table(
            table_id=TableId(model.id),
            name=model.name,
            seats=model.seats,
            status=TableStatus(model.status),
            occupant_id=UserId(model.occupant_id) if model.occupant_id is not None else None,
            created_at=created_at,
            updated_at=updated_at,
        )
