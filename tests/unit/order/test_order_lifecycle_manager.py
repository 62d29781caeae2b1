from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from floorsvc.application.use_cases.order_lifecycle import (
    ItemRequest,
    NoOrdersFoundError,
    OrderNotPendingError,
)
from floorsvc.domain.common.errors import EmptyResultError, InvalidStateError, NotFoundError
from floorsvc.domain.common.ids import MenuItemId, OrderId, TableId, UserId
from floorsvc.domain.common.money import Money
from floorsvc.domain.order.entities import InvalidOrderInputError, OrderStatus

ALICE = UserId(10)


def _requests(*pairs: tuple[int, int]) -> list[ItemRequest]:
    return [ItemRequest(menu_item_id=MenuItemId(item_id), quantity=qty) for item_id, qty in pairs]


def test_price_items_snapshots_menu_prices(order_lifecycle) -> None:
    items = order_lifecycle.price_items(_requests((1, 2), (2, 1)))

    assert [item.unit_price.amount_cents for item in items] == [950, 300]
    assert [item.quantity for item in items] == [2, 1]


def test_later_menu_price_change_does_not_alter_placed_order(order_lifecycle, store) -> None:
    order = order_lifecycle.create(
        ALICE, TableId(1), order_lifecycle.price_items(_requests((1, 2), (2, 1)))
    )
    menu_item = store.menu[MenuItemId(1)]
    store.menu[MenuItemId(1)] = type(menu_item)(
        item_id=menu_item.item_id,
        name=menu_item.name,
        description=menu_item.description,
        price=Money(amount_cents=5000, currency="USD"),
        category=menu_item.category,
    )

    stored = order_lifecycle.get_by_id(order.order_id)

    assert stored.total == Money(amount_cents=2200, currency="USD")


@pytest.mark.parametrize(
    "pairs, message",
    [
        ((), "at least one item"),
        (((1, 0),), "must be >= 1"),
        (((1, -2),), "must be >= 1"),
        (((42, 1),), "does not exist"),
        (((3, 1),), "unavailable"),
    ],
)
def test_price_items_rejects_invalid_requests(order_lifecycle, pairs, message) -> None:
    with pytest.raises(InvalidOrderInputError, match=message):
        order_lifecycle.price_items(_requests(*pairs))


def test_create_persists_pending_order(order_lifecycle) -> None:
    items = order_lifecycle.price_items(_requests((1, 2), (2, 1)))

    order = order_lifecycle.create(ALICE, TableId(1), items)

    assert order.order_id == OrderId(1)
    assert order.status == OrderStatus.PENDING
    assert order.total.amount_cents == 2200


def test_get_by_id_unknown_is_not_found(order_lifecycle) -> None:
    with pytest.raises(NotFoundError):
        order_lifecycle.get_by_id(OrderId(99))


def test_get_all_for_user_without_orders_is_empty_result(order_lifecycle) -> None:
    with pytest.raises(NoOrdersFoundError) as exc_info:
        order_lifecycle.get_all_for_user(ALICE)
    assert isinstance(exc_info.value, EmptyResultError)


def test_get_all_pending_for_table_only_returns_pending(order_lifecycle) -> None:
    items = order_lifecycle.price_items(_requests((1, 1)))
    first = order_lifecycle.create(ALICE, TableId(1), items)
    order_lifecycle.cancel(first.order_id)
    second = order_lifecycle.create(ALICE, TableId(1), items)

    pending = order_lifecycle.get_all_pending_for_table(TableId(1))

    assert [order.order_id for order in pending] == [second.order_id]


def test_complete_all_for_table_with_nothing_pending_returns_zero(order_lifecycle) -> None:
    assert order_lifecycle.complete_all_for_table(TableId(1)) == 0


def test_cancel_twice_is_invalid_state(order_lifecycle) -> None:
    order = order_lifecycle.create(ALICE, TableId(1), order_lifecycle.price_items(_requests((1, 1))))
    order_lifecycle.cancel(order.order_id)

    with pytest.raises(OrderNotPendingError) as exc_info:
        order_lifecycle.cancel(order.order_id)
    assert isinstance(exc_info.value, InvalidStateError)


def test_add_items_rederives_total(order_lifecycle) -> None:
    order = order_lifecycle.create(ALICE, TableId(1), order_lifecycle.price_items(_requests((1, 1))))

    updated = order_lifecycle.add_items(order.order_id, order_lifecycle.price_items(_requests((2, 3))))

    assert updated.total.amount_cents == 950 + 900
    assert len(updated.items) == 2


def test_add_items_to_completed_order_is_invalid_state(order_lifecycle) -> None:
    order = order_lifecycle.create(ALICE, TableId(1), order_lifecycle.price_items(_requests((1, 1))))
    order_lifecycle.complete_all_for_table(TableId(1))

    with pytest.raises(OrderNotPendingError):
        order_lifecycle.add_items(order.order_id, order_lifecycle.price_items(_requests((2, 1))))


def test_find_pending_for_table_returns_none_when_free(order_lifecycle) -> None:
    assert order_lifecycle.find_pending_for_table(TableId(2)) is None


def test_cancelled_order_keeps_created_at(order_lifecycle) -> None:
    before = datetime.now(timezone.utc)
    order = order_lifecycle.create(ALICE, TableId(1), order_lifecycle.price_items(_requests((1, 1))))

    cancelled = order_lifecycle.cancel(order.order_id)

    assert cancelled.created_at == order.created_at
    assert cancelled.created_at >= before
    assert cancelled.updated_at is not None


def test_price_items_rejects_line_total_beyond_storable_range(order_lifecycle) -> None:
    with pytest.raises(InvalidOrderInputError):
        order_lifecycle.price_items(_requests((1, 10**9)))


def test_price_items_rejects_order_total_beyond_storable_range(order_lifecycle) -> None:
    with pytest.raises(InvalidOrderInputError, match="order total"):
        order_lifecycle.price_items(_requests((1, 1_200_000), (1, 1_200_000)))


def test_add_items_rejects_merged_total_beyond_storable_range(order_lifecycle, store) -> None:
    order = order_lifecycle.create(
        ALICE, TableId(1), order_lifecycle.price_items(_requests((1, 2_000_000)))
    )
    extra = order_lifecycle.price_items(_requests((1, 300_000)))

    with pytest.raises(InvalidOrderInputError, match="order total"):
        order_lifecycle.add_items(order.order_id, extra)

    assert store.orders[order.order_id].total.amount_cents == 950 * 2_000_000
