from __future__ import annotations

from typing import Protocol

from floorsvc.domain.common.ids import MenuItemId, OrderId, TableId, UserId
from floorsvc.domain.menu.entities import MenuItem
from floorsvc.domain.order.entities import Order, OrderItem, OrderStatus
from floorsvc.domain.table.entities import Table, TableStatus
from floorsvc.domain.user.entities import User


class TableRepository(Protocol):
    def get(self, table_id: TableId) -> Table | None: ...

    def lock(self, table_id: TableId) -> Table | None: ...

    def list_by_status(self, status: TableStatus | None = None) -> list[Table]: ...

    def try_reserve(self, table_id: TableId, user_id: UserId) -> Table | None: ...

    def release(self, table_id: TableId) -> Table | None: ...

    def release_if_held(self, table_id: TableId, user_id: UserId) -> bool: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> Order: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def list_all(self) -> list[Order]: ...

    def list_for_user(self, user_id: UserId) -> list[Order]: ...

    def list_pending_for_table(self, table_id: TableId) -> list[Order]: ...

    def append_items(self, order_id: OrderId, items: list[OrderItem]) -> Order | None: ...

    def update_status_if(
        self,
        order_id: OrderId,
        expected_status: OrderStatus,
        new_status: OrderStatus,
    ) -> Order | None: ...

    def complete_pending_for_table(self, table_id: TableId) -> int: ...


class MenuRepository(Protocol):
    def list_items(self) -> list[MenuItem]: ...

    def get_items(self, item_ids: list[MenuItemId]) -> dict[MenuItemId, MenuItem]: ...


class UserRepository(Protocol):
    def add(self, user: User) -> User: ...

    def get(self, user_id: UserId) -> User | None: ...

    def get_by_email(self, email: str) -> User | None: ...


class TableReservedConflict(Exception):
    """Conditional reservation matched an existing row that was not available."""

    def __init__(self, table: Table) -> None:
        super().__init__(f"table {table.table_id} is {table.status.value}")
        self.table = table


class OrderStatusConflict(Exception):
    """Conditional order update matched a row whose status no longer held."""

    def __init__(self, order: Order) -> None:
        super().__init__(f"order {order.order_id} is {order.status.value}")
        self.order = order


class DuplicateEmailError(Exception):
    pass
