from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from floorsvc.domain.common.errors import InvalidInputError, InvalidStateError, NotFoundError
from floorsvc.domain.common.ids import MenuItemId, OrderId, TableId, UserId
from floorsvc.domain.common.money import Money

# Quantities and cent amounts are stored in 32-bit integer columns.
MAX_STORED_INT = 2**31 - 1


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self != OrderStatus.PENDING


@dataclass(frozen=True)
class OrderItem:
    menu_item_id: MenuItemId
    quantity: int
    unit_price: Money

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise InvalidOrderInputError("quantity must be >= 1")
        if self.quantity > MAX_STORED_INT:
            raise InvalidOrderInputError(f"quantity must be <= {MAX_STORED_INT}")
        if self.line_total.amount_cents > MAX_STORED_INT:
            raise InvalidOrderInputError(
                f"line total for menu item {self.menu_item_id} exceeds {MAX_STORED_INT} cents"
            )

    @property
    def line_total(self) -> Money:
        return self.unit_price.times(self.quantity)


@dataclass(frozen=True)
class Order:
    order_id: OrderId | None
    user_id: UserId
    table_id: TableId
    status: OrderStatus
    items: list[OrderItem]
    created_at: datetime
    updated_at: datetime | None = None
    currency: str = field(default="")

    def __post_init__(self) -> None:
        if not self.items:
            raise InvalidOrderInputError("order must contain at least one item")
        currencies = {item.unit_price.currency for item in self.items}
        if len(currencies) != 1:
            raise InvalidOrderInputError("order items must share one currency")
        if not self.currency:
            object.__setattr__(self, "currency", currencies.pop())
        elif self.currency not in currencies:
            raise InvalidOrderInputError("order currency must match item currency")
        if self.total.amount_cents > MAX_STORED_INT:
            raise InvalidOrderInputError(f"order total exceeds {MAX_STORED_INT} cents")

    @property
    def total(self) -> Money:
        total = Money.zero(self.currency)
        for item in self.items:
            total = total + item.line_total
        return total

    def with_items(self, items: list[OrderItem], now: datetime) -> Order:
        if self.status != OrderStatus.PENDING:
            raise OrderTransitionError(f"cannot add items to order in status={self.status.value}")
        return replace(self, items=[*self.items, *items], updated_at=now)

    def complete(self, now: datetime) -> Order:
        if self.status != OrderStatus.PENDING:
            raise OrderTransitionError(f"cannot complete order from status={self.status.value}")
        return replace(self, status=OrderStatus.COMPLETED, updated_at=now)

    def cancel(self, now: datetime) -> Order:
        if self.status != OrderStatus.PENDING:
            raise OrderTransitionError(f"cannot cancel order from status={self.status.value}")
        return replace(self, status=OrderStatus.CANCELLED, updated_at=now)


def create_pending_order(
    user_id: UserId,
    table_id: TableId,
    items: list[OrderItem],
    now: datetime,
) -> Order:
    if not items:
        raise InvalidOrderInputError("order must contain at least one item")
    return Order(
        order_id=None,
        user_id=user_id,
        table_id=table_id,
        status=OrderStatus.PENDING,
        items=list(items),
        created_at=now,
        updated_at=now,
    )


class InvalidOrderInputError(InvalidInputError):
    code = "INVALID_ORDER"


class OrderTransitionError(InvalidStateError):
    code = "INVALID_ORDER_TRANSITION"


class OrderNotFoundError(NotFoundError):
    code = "ORDER_NOT_FOUND"
