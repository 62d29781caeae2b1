from __future__ import annotations

from floorsvc.application.dto.responses import (
    MoneyResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
)
from floorsvc.domain.common.money import Money
from floorsvc.domain.order.entities import Order


def _to_money_response(value: Money) -> MoneyResponse:
    return MoneyResponse(amountCents=value.amount_cents, currency=value.currency)


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=int(order.order_id or 0),
        userId=order.user_id,
        tableId=order.table_id,
        status=order.status.value,
        items=[
            OrderItemResponse(
                menuItemId=item.menu_item_id,
                quantity=item.quantity,
                unitPrice=_to_money_response(item.unit_price),
                lineTotal=_to_money_response(item.line_total),
            )
            for item in order.items
        ],
        total=_to_money_response(order.total),
        createdAt=order.created_at,
        updatedAt=order.updated_at,
    )


def to_order_list_response(orders: list[Order]) -> OrderListResponse:
    return OrderListResponse(orders=[to_order_response(order) for order in orders])
