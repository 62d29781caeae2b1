from __future__ import annotations

from prometheus_client import Counter, Histogram

from floorsvc.domain.order.entities import Order, OrderStatus

ORDERS_TOTAL = Counter(
    "floorsvc_orders_total",
    "Total number of orders observed by status.",
    ["status"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "floorsvc_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDER_TOTAL_CENTS = Histogram(
    "floorsvc_order_total_cents",
    "Order totals at placement, in minor currency units.",
    buckets=(500, 1000, 2500, 5000, 10000, 25000, 50000, 100000),
)

RESERVATION_CONFLICTS_TOTAL = Counter(
    "floorsvc_reservation_conflicts_total",
    "Total number of reservation attempts that found the table already reserved.",
)

RESERVATION_COMPENSATIONS_TOTAL = Counter(
    "floorsvc_reservation_compensations_total",
    "Total number of compensating releases after a failed order placement.",
    ["outcome"],
)

TABLES_RESET_TOTAL = Counter(
    "floorsvc_tables_reset_total",
    "Total number of table resets.",
)


def record_order_status(order: Order) -> None:
    ORDERS_TOTAL.labels(status=order.status.value).inc()
    if order.status == OrderStatus.PENDING:
        ORDER_TOTAL_CENTS.observe(order.total.amount_cents)


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_reservation_conflict() -> None:
    RESERVATION_CONFLICTS_TOTAL.inc()


def record_compensation(outcome: str) -> None:
    RESERVATION_COMPENSATIONS_TOTAL.labels(outcome=outcome).inc()


def record_table_reset() -> None:
    TABLES_RESET_TOTAL.inc()
