from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from floorsvc.application.ports.repositories import (
    MenuRepository,
    OrderRepository,
    OrderStatusConflict,
)
from floorsvc.domain.common.errors import EmptyResultError, InvalidStateError
from floorsvc.domain.common.ids import MenuItemId, OrderId, TableId, UserId
from floorsvc.domain.order.entities import (
    MAX_STORED_INT,
    InvalidOrderInputError,
    Order,
    OrderItem,
    OrderNotFoundError,
    OrderStatus,
    create_pending_order,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemRequest:
    menu_item_id: MenuItemId
    quantity: int


class OrderNotPendingError(InvalidStateError):
    code = "ORDER_NOT_PENDING"


class NoOrdersFoundError(EmptyResultError):
    code = "NO_ORDERS"


class OrderLifecycleManager:
    """Sole owner of order status mutation.

    Totals are always derived from the stored items, never accepted from a
    caller. Status writes are conditional on the expected current status.
    """

    def __init__(self, order_repository: OrderRepository, menu_repository: MenuRepository) -> None:
        self._order_repository = order_repository
        self._menu_repository = menu_repository

    def price_items(self, requests: list[ItemRequest]) -> list[OrderItem]:
        if not requests:
            raise InvalidOrderInputError("order must contain at least one item")
        for request in requests:
            if request.quantity < 1:
                raise InvalidOrderInputError(
                    f"quantity for menu item {request.menu_item_id} must be >= 1"
                )

        menu_items = self._menu_repository.get_items(
            sorted({request.menu_item_id for request in requests})
        )
        items: list[OrderItem] = []
        for request in requests:
            menu_item = menu_items.get(request.menu_item_id)
            if menu_item is None:
                raise InvalidOrderInputError(f"menu item {request.menu_item_id} does not exist")
            if not menu_item.is_available:
                raise InvalidOrderInputError(f"menu item {request.menu_item_id} is unavailable")
            items.append(
                OrderItem(
                    menu_item_id=menu_item.item_id,
                    quantity=request.quantity,
                    unit_price=menu_item.price,
                )
            )
        if sum(item.line_total.amount_cents for item in items) > MAX_STORED_INT:
            raise InvalidOrderInputError(f"order total exceeds {MAX_STORED_INT} cents")
        return items

    def create(self, user_id: UserId, table_id: TableId, items: list[OrderItem]) -> Order:
        order = create_pending_order(
            user_id=user_id,
            table_id=table_id,
            items=items,
            now=datetime.now(timezone.utc),
        )
        persisted = self._order_repository.add(order)
        logger.info(
            "order_created",
            extra={"order_id": persisted.order_id, "table_id": table_id, "user_id": user_id},
        )
        return persisted

    def add_items(self, order_id: OrderId, items: list[OrderItem]) -> Order:
        if not items:
            raise InvalidOrderInputError("order must contain at least one item")
        try:
            updated = self._order_repository.append_items(order_id, items)
        except OrderStatusConflict as exc:
            raise OrderNotPendingError(
                f"cannot add items to order {order_id} in status={exc.order.status.value}"
            ) from exc
        if updated is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        logger.info("order_items_added", extra={"order_id": order_id, "count": len(items)})
        return updated

    def get_by_id(self, order_id: OrderId) -> Order:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return order

    def get_all(self) -> list[Order]:
        orders = self._order_repository.list_all()
        if not orders:
            raise NoOrdersFoundError("no orders found")
        return orders

    def get_all_for_user(self, user_id: UserId) -> list[Order]:
        orders = self._order_repository.list_for_user(user_id)
        if not orders:
            raise NoOrdersFoundError(f"no orders found for user {user_id}")
        return orders

    def get_all_pending_for_table(self, table_id: TableId) -> list[Order]:
        orders = self._order_repository.list_pending_for_table(table_id)
        if not orders:
            raise NoOrdersFoundError(f"no pending orders for table {table_id}")
        return orders

    def find_pending_for_table(self, table_id: TableId) -> Order | None:
        orders = self._order_repository.list_pending_for_table(table_id)
        if len(orders) > 1:
            logger.warning(
                "multiple_pending_orders", extra={"table_id": table_id, "count": len(orders)}
            )
        return orders[0] if orders else None

    def complete_all_for_table(self, table_id: TableId) -> int:
        count = self._order_repository.complete_pending_for_table(table_id)
        logger.info("orders_completed", extra={"table_id": table_id, "count": count})
        return count

    def cancel(self, order_id: OrderId) -> Order:
        try:
            cancelled = self._order_repository.update_status_if(
                order_id=order_id,
                expected_status=OrderStatus.PENDING,
                new_status=OrderStatus.CANCELLED,
            )
        except OrderStatusConflict as exc:
            raise OrderNotPendingError(
                f"cannot cancel order {order_id} from status={exc.order.status.value}"
            ) from exc
        if cancelled is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        logger.info("order_cancelled", extra={"order_id": order_id, "table_id": cancelled.table_id})
        return cancelled
