from __future__ import annotations

import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from floorsvc.application.ports.repositories import OrderStatusConflict, TableReservedConflict
from floorsvc.application.use_cases.order_lifecycle import OrderLifecycleManager
from floorsvc.application.use_cases.reservation import ReservationCoordinator
from floorsvc.application.use_cases.table_state import TableStateManager
from floorsvc.domain.common.ids import MenuItemId, OrderId, TableId, UserId
from floorsvc.domain.common.money import Money
from floorsvc.domain.menu.entities import MenuItem
from floorsvc.domain.order.entities import Order, OrderItem, OrderStatus
from floorsvc.domain.table.entities import Table, TableStatus

PIZZA = MenuItemId(1)
SALAD = MenuItemId(2)
TIRAMISU = MenuItemId(3)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStore:
    """Thread-safe stand-in for the database shared by the fake repositories."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.tables: dict[TableId, Table] = {}
        self.orders: dict[OrderId, Order] = {}
        self.menu: dict[MenuItemId, MenuItem] = {}
        self.next_order_id = 1

    def add_table(self, table_id: int, seats: int = 4) -> Table:
        table = Table(
            table_id=TableId(table_id),
            name=f"T{table_id}",
            seats=seats,
            status=TableStatus.AVAILABLE,
            occupant_id=None,
        )
        self.tables[table.table_id] = table
        return table

    def snapshot(self) -> tuple[dict, dict, int]:
        return dict(self.tables), dict(self.orders), self.next_order_id

    def restore(self, snapshot: tuple[dict, dict, int]) -> None:
        tables, orders, next_order_id = snapshot
        self.tables = tables
        self.orders = orders
        self.next_order_id = next_order_id

    def pending_for_table(self, table_id: TableId) -> list[Order]:
        return [
            order
            for order in sorted(self.orders.values(), key=lambda order: order.order_id or 0)
            if order.table_id == table_id and order.status == OrderStatus.PENDING
        ]


class FakeTableRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self.fail_release_if_held: Exception | None = None

    def get(self, table_id: TableId) -> Table | None:
        with self._store.lock:
            return self._store.tables.get(table_id)

    def lock(self, table_id: TableId) -> Table | None:
        return self.get(table_id)

    def list_by_status(self, status: TableStatus | None = None) -> list[Table]:
        with self._store.lock:
            tables = sorted(self._store.tables.values(), key=lambda table: table.table_id)
        return [table for table in tables if status is None or table.status == status]

    def try_reserve(self, table_id: TableId, user_id: UserId) -> Table | None:
        with self._store.lock:
            table = self._store.tables.get(table_id)
            if table is None:
                return None
            if table.status != TableStatus.AVAILABLE:
                raise TableReservedConflict(table)
            reserved = table.reserve(user_id, now=_now())
            self._store.tables[table_id] = reserved
            return reserved

    def release(self, table_id: TableId) -> Table | None:
        with self._store.lock:
            table = self._store.tables.get(table_id)
            if table is None:
                return None
            released = table.release(now=_now())
            self._store.tables[table_id] = released
            return released

    def release_if_held(self, table_id: TableId, user_id: UserId) -> bool:
        if self.fail_release_if_held is not None:
            raise self.fail_release_if_held
        with self._store.lock:
            table = self._store.tables.get(table_id)
            if table is None or not table.is_held_by(user_id):
                return False
            if self._store.pending_for_table(table_id):
                return False
            self._store.tables[table_id] = table.release(now=_now())
            return True


class FakeOrderRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self.fail_on_add: Exception | None = None

    def add(self, order: Order) -> Order:
        if self.fail_on_add is not None:
            raise self.fail_on_add
        with self._store.lock:
            persisted = replace(order, order_id=OrderId(self._store.next_order_id))
            self._store.next_order_id += 1
            self._store.orders[persisted.order_id] = persisted
            return persisted

    def get(self, order_id: OrderId) -> Order | None:
        with self._store.lock:
            return self._store.orders.get(order_id)

    def list_all(self) -> list[Order]:
        with self._store.lock:
            return list(self._store.orders.values())

    def list_for_user(self, user_id: UserId) -> list[Order]:
        with self._store.lock:
            return [order for order in self._store.orders.values() if order.user_id == user_id]

    def list_pending_for_table(self, table_id: TableId) -> list[Order]:
        with self._store.lock:
            return self._store.pending_for_table(table_id)

    def append_items(self, order_id: OrderId, items: list[OrderItem]) -> Order | None:
        with self._store.lock:
            order = self._store.orders.get(order_id)
            if order is None:
                return None
            if order.status != OrderStatus.PENDING:
                raise OrderStatusConflict(order)
            updated = order.with_items(items, now=_now())
            self._store.orders[order_id] = updated
            return updated

    def update_status_if(
        self,
        order_id: OrderId,
        expected_status: OrderStatus,
        new_status: OrderStatus,
    ) -> Order | None:
        with self._store.lock:
            order = self._store.orders.get(order_id)
            if order is None:
                return None
            if order.status != expected_status:
                raise OrderStatusConflict(order)
            updated = replace(order, status=new_status, updated_at=_now())
            self._store.orders[order_id] = updated
            return updated

    def complete_pending_for_table(self, table_id: TableId) -> int:
        with self._store.lock:
            pending = self._store.pending_for_table(table_id)
            for order in pending:
                self._store.orders[order.order_id] = order.complete(now=_now())
            return len(pending)


class FakeMenuRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self.calls = 0

    def list_items(self) -> list[MenuItem]:
        self.calls += 1
        return sorted(self._store.menu.values(), key=lambda item: item.item_id)

    def get_items(self, item_ids: list[MenuItemId]) -> dict[MenuItemId, MenuItem]:
        return {item_id: self._store.menu[item_id] for item_id in item_ids if item_id in self._store.menu}


class RollbackTransactionManager:
    """Serialises transactions on the store lock and restores a snapshot on failure."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._store.lock:
            snapshot = self._store.snapshot()
            try:
                yield
            except BaseException:
                self._store.restore(snapshot)
                raise


class AutocommitTransactionManager:
    """A store without multi-statement transactions: every write sticks."""

    @contextmanager
    def transaction(self) -> Iterator[None]:
        yield


class FakePublisher:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []
        self.fail = False

    def publish(self, channel: str, message: str) -> int:
        if self.fail:
            raise ConnectionError("redis down")
        self.messages.append((channel, message))
        return 1


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    store.menu = {
        PIZZA: MenuItem(
            item_id=PIZZA,
            name="Margherita Pizza",
            description="Tomato, mozzarella, basil",
            price=Money(amount_cents=950, currency="USD"),
            category="mains",
        ),
        SALAD: MenuItem(
            item_id=SALAD,
            name="Caesar Salad",
            description=None,
            price=Money(amount_cents=300, currency="USD"),
            category="starters",
        ),
        TIRAMISU: MenuItem(
            item_id=TIRAMISU,
            name="Tiramisu",
            description=None,
            price=Money(amount_cents=850, currency="USD"),
            category="desserts",
            is_available=False,
        ),
    }
    for table_id in (1, 2, 3):
        store.add_table(table_id)
    return store


@pytest.fixture
def table_repository(store: InMemoryStore) -> FakeTableRepository:
    return FakeTableRepository(store)


@pytest.fixture
def order_repository(store: InMemoryStore) -> FakeOrderRepository:
    return FakeOrderRepository(store)


@pytest.fixture
def menu_repository(store: InMemoryStore) -> FakeMenuRepository:
    return FakeMenuRepository(store)


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def table_state(table_repository: FakeTableRepository) -> TableStateManager:
    return TableStateManager(table_repository=table_repository)


@pytest.fixture
def order_lifecycle(
    order_repository: FakeOrderRepository,
    menu_repository: FakeMenuRepository,
) -> OrderLifecycleManager:
    return OrderLifecycleManager(order_repository=order_repository, menu_repository=menu_repository)


@pytest.fixture
def coordinator(
    store: InMemoryStore,
    table_state: TableStateManager,
    order_lifecycle: OrderLifecycleManager,
    publisher: FakePublisher,
) -> ReservationCoordinator:
    return ReservationCoordinator(
        table_state=table_state,
        order_lifecycle=order_lifecycle,
        transactions=RollbackTransactionManager(store),
        publisher=publisher,
    )


@pytest.fixture
def autocommit_coordinator(
    table_state: TableStateManager,
    order_lifecycle: OrderLifecycleManager,
    publisher: FakePublisher,
) -> ReservationCoordinator:
    return ReservationCoordinator(
        table_state=table_state,
        order_lifecycle=order_lifecycle,
        transactions=AutocommitTransactionManager(),
        publisher=publisher,
    )
