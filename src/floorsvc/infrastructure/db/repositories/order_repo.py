from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, Select, select, update
from sqlalchemy.orm import Session, selectinload

from floorsvc.application.ports.repositories import OrderRepository, OrderStatusConflict
from floorsvc.domain.common.ids import MenuItemId, OrderId, TableId, UserId
from floorsvc.domain.common.money import Money
from floorsvc.domain.order.entities import Order, OrderItem, OrderStatus
from floorsvc.infrastructure.db.models.order import OrderItemModel, OrderModel
from floorsvc.infrastructure.db.session import get_engine, session_scope


def _orders() -> Select[tuple[OrderModel]]:
    return (
        select(OrderModel)
        .options(selectinload(OrderModel.items))
        .execution_options(populate_existing=True)
    )


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, order: Order) -> Order:
        order_model = self._to_model(order)
        with session_scope(self._engine, "order insert") as session:
            session.add(order_model)
            session.flush()
            return self._to_domain(order_model)

    def get(self, order_id: OrderId) -> Order | None:
        with session_scope(self._engine, "order lookup") as session:
            model = session.execute(_orders().where(OrderModel.id == order_id)).scalar_one_or_none()
            return self._to_domain(model) if model is not None else None

    def list_all(self) -> list[Order]:
        statement = _orders().order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        return self._list(statement, "order listing")

    def list_for_user(self, user_id: UserId) -> list[Order]:
        statement = (
            _orders()
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return self._list(statement, "user order listing")

    def list_pending_for_table(self, table_id: TableId) -> list[Order]:
        statement = (
            _orders()
            .where(
                OrderModel.table_id == table_id,
                OrderModel.status == OrderStatus.PENDING.value,
            )
            .order_by(OrderModel.created_at, OrderModel.id)
        )
        return self._list(statement, "pending order listing")

    def append_items(self, order_id: OrderId, items: list[OrderItem]) -> Order | None:
        statement = _orders().where(OrderModel.id == order_id).with_for_update()
        with session_scope(self._engine, "order item append") as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            current = self._to_domain(model)
            if current.status != OrderStatus.PENDING:
                raise OrderStatusConflict(current)

            updated = current.with_items(items, now=datetime.now(timezone.utc))
            model.items.extend(self._to_item_models(items))
            model.total_cents = updated.total.amount_cents
            model.updated_at = updated.updated_at
            session.flush()
            return self._to_domain(model)

    def update_status_if(
        self,
        order_id: OrderId,
        expected_status: OrderStatus,
        new_status: OrderStatus,
    ) -> Order | None:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.status == expected_status.value,
            )
            .values(status=new_status.value, updated_at=datetime.now(timezone.utc))
            .returning(OrderModel.id)
            .execution_options(synchronize_session=False)
        )
        with session_scope(self._engine, "order status update") as session:
            updated_id = session.execute(statement).scalar_one_or_none()
            model = session.execute(_orders().where(OrderModel.id == order_id)).scalar_one_or_none()
            if model is None:
                return None
            if updated_id is None:
                raise OrderStatusConflict(self._to_domain(model))
            return self._to_domain(model)

    def complete_pending_for_table(self, table_id: TableId) -> int:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.table_id == table_id,
                OrderModel.status == OrderStatus.PENDING.value,
            )
            .values(status=OrderStatus.COMPLETED.value, updated_at=datetime.now(timezone.utc))
            .returning(OrderModel.id)
            .execution_options(synchronize_session=False)
        )
        with session_scope(self._engine, "order completion") as session:
            return len(session.execute(statement).scalars().all())

    def _list(self, statement: Select[tuple[OrderModel]], operation: str) -> list[Order]:
        with session_scope(self._engine, operation) as session:
            return [self._to_domain(model) for model in session.execute(statement).scalars().all()]

    def _to_item_models(self, items: list[OrderItem]) -> list[OrderItemModel]:
        return [
            OrderItemModel(
                menu_item_id=item.menu_item_id,
                quantity=item.quantity,
                unit_price_cents=item.unit_price.amount_cents,
                currency=item.unit_price.currency,
            )
            for item in items
        ]

    def _to_model(self, order: Order) -> OrderModel:
        order_model = OrderModel(
            user_id=order.user_id,
            table_id=order.table_id,
            status=order.status.value,
            total_cents=order.total.amount_cents,
            currency=order.currency,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        order_model.items = self._to_item_models(order.items)
        return order_model

    def _to_domain(self, model: OrderModel) -> Order:
        created_at = model.created_at
        updated_at = model.updated_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        if updated_at and updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=timezone.utc)

        items = [
            OrderItem(
                menu_item_id=MenuItemId(item.menu_item_id),
                quantity=item.quantity,
                unit_price=Money(amount_cents=item.unit_price_cents, currency=item.currency),
            )
            for item in model.items
        ]
        return Order(
            order_id=OrderId(model.id),
            user_id=UserId(model.user_id),
            table_id=TableId(model.table_id),
            status=OrderStatus(model.status),
            items=items,
            created_at=created_at,
            updated_at=updated_at,
            currency=model.currency,
        )
