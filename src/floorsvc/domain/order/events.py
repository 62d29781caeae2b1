from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from floorsvc.domain.common.ids import OrderId, TableId, UserId
from floorsvc.domain.common.money import Money


@dataclass(frozen=True)
class OrderPlaced:
    order_id: OrderId
    user_id: UserId
    table_id: TableId
    total: Money
    merged: bool
    occurred_at: datetime


@dataclass(frozen=True)
class OrderCancelled:
    order_id: OrderId
    table_id: TableId
    table_released: bool
    occurred_at: datetime


@dataclass(frozen=True)
class TableReset:
    table_id: TableId
    completed_orders: int
    occurred_at: datetime
