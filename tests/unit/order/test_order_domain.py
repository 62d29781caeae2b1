from __future__ import annotations

import sys
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from floorsvc.domain.common.ids import MenuItemId, OrderId, TableId, UserId
from floorsvc.domain.common.money import Money
from floorsvc.domain.order.entities import (
    MAX_STORED_INT,
    InvalidOrderInputError,
    Order,
    OrderItem,
    OrderStatus,
    OrderTransitionError,
    create_pending_order,
)


def _item(item_id: int, cents: int, quantity: int, currency: str = "USD") -> OrderItem:
    return OrderItem(
        menu_item_id=MenuItemId(item_id),
        quantity=quantity,
        unit_price=Money(amount_cents=cents, currency=currency),
    )


def _pending_order() -> Order:
    return create_pending_order(
        user_id=UserId(1),
        table_id=TableId(1),
        items=[_item(1, 950, 2), _item(2, 300, 1)],
        now=datetime.now(timezone.utc),
    )


def test_order_item_quantity_must_be_gte_one() -> None:
    with pytest.raises(InvalidOrderInputError):
        _item(1, 100, 0)


def test_total_is_derived_from_items() -> None:
    order = _pending_order()

    assert order.total == Money(amount_cents=2200, currency="USD")
    assert order.currency == "USD"


def test_total_cannot_be_supplied() -> None:
    order = _pending_order()

    with pytest.raises(TypeError):
        Order(  # type: ignore[call-arg]
            order_id=OrderId(1),
            user_id=UserId(1),
            table_id=TableId(1),
            status=OrderStatus.PENDING,
            items=order.items,
            created_at=order.created_at,
            total=Money(amount_cents=1, currency="USD"),
        )
    with pytest.raises((AttributeError, FrozenInstanceError)):
        order.total = Money(amount_cents=1, currency="USD")  # type: ignore[misc]


def test_order_requires_items() -> None:
    with pytest.raises(InvalidOrderInputError):
        create_pending_order(UserId(1), TableId(1), [], datetime.now(timezone.utc))


def test_order_items_must_share_one_currency() -> None:
    with pytest.raises(InvalidOrderInputError):
        create_pending_order(
            UserId(1),
            TableId(1),
            [_item(1, 100, 1), _item(2, 100, 1, currency="EUR")],
            datetime.now(timezone.utc),
        )


def test_pending_transitions_to_completed_or_cancelled() -> None:
    now = datetime.now(timezone.utc)
    order = _pending_order()

    assert order.complete(now).status == OrderStatus.COMPLETED
    assert order.cancel(now).status == OrderStatus.CANCELLED


@pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
def test_terminal_orders_do_not_transition(status: OrderStatus) -> None:
    now = datetime.now(timezone.utc)
    order = _pending_order()
    terminal = order.complete(now) if status == OrderStatus.COMPLETED else order.cancel(now)

    assert terminal.status.is_terminal
    with pytest.raises(OrderTransitionError):
        terminal.complete(now)
    with pytest.raises(OrderTransitionError):
        terminal.cancel(now)
    with pytest.raises(OrderTransitionError):
        terminal.with_items([_item(3, 100, 1)], now)


def test_with_items_appends_and_rederives_total() -> None:
    order = _pending_order()

    merged = order.with_items([_item(3, 500, 2)], datetime.now(timezone.utc))

    assert len(merged.items) == 3
    assert merged.total.amount_cents == 3200
    assert order.total.amount_cents == 2200


def test_quantity_beyond_storable_range_is_rejected() -> None:
    with pytest.raises(InvalidOrderInputError, match="quantity"):
        _item(1, 0, MAX_STORED_INT + 1)


def test_line_total_beyond_storable_range_is_rejected() -> None:
    with pytest.raises(InvalidOrderInputError, match="line total"):
        _item(1, 950, 10**9)


def test_order_total_beyond_storable_range_is_rejected() -> None:
    with pytest.raises(InvalidOrderInputError, match="order total"):
        create_pending_order(
            user_id=UserId(1),
            table_id=TableId(1),
            items=[_item(1, 950, 1_200_000), _item(2, 950, 1_200_000)],
            now=datetime.now(timezone.utc),
        )


def test_with_items_rejects_total_beyond_storable_range() -> None:
    order = create_pending_order(
        user_id=UserId(1),
        table_id=TableId(1),
        items=[_item(1, 950, 2_000_000)],
        now=datetime.now(timezone.utc),
    )

    with pytest.raises(InvalidOrderInputError, match="order total"):
        order.with_items([_item(1, 950, 300_000)], now=datetime.now(timezone.utc))
