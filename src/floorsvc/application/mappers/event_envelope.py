from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from floorsvc.application.use_cases.context import TraceContext
from floorsvc.domain.common.money import Money
from floorsvc.domain.order.entities import Order
from floorsvc.domain.order.events import OrderCancelled, OrderPlaced, TableReset


def _money(value: Money) -> dict[str, Any]:
    return {"amountCents": value.amount_cents, "currency": value.currency}


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    payload: dict[str, Any],
    trace_ctx: TraceContext,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": trace_ctx.request_id,
        "trace_id": trace_ctx.trace_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def serialize_order_placed_event(*, event: OrderPlaced, order: Order, trace_ctx: TraceContext) -> str:
    return _serialize_event(
        event_type="order.updated" if event.merged else "order.placed",
        occurred_at=event.occurred_at,
        trace_ctx=trace_ctx,
        payload={
            "orderId": event.order_id,
            "userId": event.user_id,
            "tableId": event.table_id,
            "status": order.status.value,
            "total": _money(event.total),
            "items": [
                {
                    "menuItemId": item.menu_item_id,
                    "quantity": item.quantity,
                    "unitPrice": _money(item.unit_price),
                }
                for item in order.items
            ],
        },
    )


def serialize_order_cancelled_event(*, event: OrderCancelled, trace_ctx: TraceContext) -> str:
    return _serialize_event(
        event_type="order.cancelled",
        occurred_at=event.occurred_at,
        trace_ctx=trace_ctx,
        payload={
            "orderId": event.order_id,
            "tableId": event.table_id,
            "tableReleased": event.table_released,
        },
    )


def serialize_table_reset_event(*, event: TableReset, trace_ctx: TraceContext) -> str:
    return _serialize_event(
        event_type="table.reset",
        occurred_at=event.occurred_at,
        trace_ctx=trace_ctx,
        payload={
            "tableId": event.table_id,
            "completedOrders": event.completed_orders,
        },
    )
