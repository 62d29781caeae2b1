from __future__ import annotations

import logging
from datetime import datetime, timezone

from floorsvc.application.mappers.event_envelope import (
    serialize_order_cancelled_event,
    serialize_order_placed_event,
    serialize_table_reset_event,
)
from floorsvc.application.metrics.order_lifecycle import (
    record_compensation,
    record_order_status,
    record_reservation_conflict,
    record_table_reset,
    record_transition,
)
from floorsvc.application.ports.publisher import EventPublisher
from floorsvc.application.ports.security import AccessClaims
from floorsvc.application.ports.transactions import TransactionManager
from floorsvc.application.use_cases.context import Deadline, TraceContext, deadline_scope
from floorsvc.application.use_cases.order_lifecycle import ItemRequest, OrderLifecycleManager
from floorsvc.application.use_cases.table_state import TableStateManager
from floorsvc.domain.common.errors import ConflictError, PermissionDeniedError
from floorsvc.domain.common.ids import OrderId, TableId, UserId
from floorsvc.domain.order.entities import Order, OrderItem, OrderStatus
from floorsvc.domain.order.events import OrderCancelled, OrderPlaced, TableReset
from floorsvc.domain.table.entities import TableAlreadyReservedError

logger = logging.getLogger(__name__)

EVENTS_CHANNEL = "events:floor"
_MAX_RESERVATION_ATTEMPTS = 3


class TableAlreadyBookedError(ConflictError):
    code = "TABLE_ALREADY_BOOKED"


class _TableFreedConcurrently(Exception):
    pass


class ReservationCoordinator:
    """Keeps "table reserved <=> a pending order exists" across both managers.

    Reservation and order creation run in one store transaction. If anything
    fails after a fresh reservation, the transaction rolls back and the
    coordinator still issues a compensating conditional release, so stores
    without multi-statement transactions end in the same state.

    A user who already holds the pending order at a table may order again:
    the new items are merged into that pending order instead of opening a
    second one.
    """

    def __init__(
        self,
        table_state: TableStateManager,
        order_lifecycle: OrderLifecycleManager,
        transactions: TransactionManager,
        publisher: EventPublisher,
    ) -> None:
        self._tables = table_state
        self._orders = order_lifecycle
        self._transactions = transactions
        self._publisher = publisher

    def place_order(
        self,
        user_id: UserId,
        table_id: TableId,
        requests: list[ItemRequest],
        trace_ctx: TraceContext,
        deadline: Deadline | None = None,
    ) -> Order:
        items = self._orders.price_items(requests)

        with deadline_scope(deadline):
            for attempt in range(1, _MAX_RESERVATION_ATTEMPTS + 1):
                try:
                    order, merged = self._place_once(user_id, table_id, items, deadline)
                except _TableFreedConcurrently:
                    logger.info(
                        "reservation_retry",
                        extra={"table_id": table_id, "user_id": user_id, "attempt": attempt},
                    )
                    continue
                if not merged:
                    record_order_status(order)
                self._publish_order_placed(order, merged, trace_ctx)
                return order

        record_reservation_conflict()
        raise TableAlreadyBookedError(
            f"table {table_id} changed hands too often, try again",
            details={"tableId": table_id},
        )

    def reset_table(
        self,
        table_id: TableId,
        trace_ctx: TraceContext,
        deadline: Deadline | None = None,
    ) -> int:
        with deadline_scope(deadline):
            with self._transactions.transaction():
                self._tables.lock(table_id)
                completed = self._orders.complete_all_for_table(table_id)
                self._tables.release(table_id)

        for _ in range(completed):
            record_transition(OrderStatus.PENDING, OrderStatus.COMPLETED)
        record_table_reset()
        logger.info("table_reset", extra={"table_id": table_id, "count": completed})
        event = TableReset(
            table_id=table_id,
            completed_orders=completed,
            occurred_at=datetime.now(timezone.utc),
        )
        self._publish(serialize_table_reset_event(event=event, trace_ctx=trace_ctx))
        return completed

    def cancel_order(
        self,
        order_id: OrderId,
        actor: AccessClaims,
        trace_ctx: TraceContext,
        deadline: Deadline | None = None,
    ) -> Order:
        with deadline_scope(deadline):
            order = self._orders.get_by_id(order_id)
            if not actor.is_staff and order.user_id != actor.user_id:
                raise PermissionDeniedError(f"order {order_id} belongs to another user")

            with self._transactions.transaction():
                if deadline is not None:
                    deadline.check("order cancellation")
                self._tables.lock(order.table_id)
                cancelled = self._orders.cancel(order_id)
                released = self._orders.find_pending_for_table(order.table_id) is None
                if released:
                    self._tables.release(order.table_id)

        record_transition(OrderStatus.PENDING, OrderStatus.CANCELLED)
        record_order_status(cancelled)
        event = OrderCancelled(
            order_id=order_id,
            table_id=cancelled.table_id,
            table_released=released,
            occurred_at=datetime.now(timezone.utc),
        )
        self._publish(serialize_order_cancelled_event(event=event, trace_ctx=trace_ctx))
        return cancelled

    def _place_once(
        self,
        user_id: UserId,
        table_id: TableId,
        items: list[OrderItem],
        deadline: Deadline | None,
    ) -> tuple[Order, bool]:
        reserved = False
        try:
            with self._transactions.transaction():
                if deadline is not None:
                    deadline.check("table reservation")
                try:
                    self._tables.try_reserve(table_id, user_id)
                except TableAlreadyReservedError:
                    return self._reorder_at_held_table(user_id, table_id, items), True
                reserved = True

                if deadline is not None:
                    deadline.check("order creation")
                return self._orders.create(user_id, table_id, items), False
        except Exception:
            if reserved:
                self._compensate(table_id, user_id)
            raise

    def _reorder_at_held_table(
        self,
        user_id: UserId,
        table_id: TableId,
        items: list[OrderItem],
    ) -> Order:
        table = self._tables.lock(table_id)
        if table.is_available:
            raise _TableFreedConcurrently()

        pending = self._orders.find_pending_for_table(table_id)
        if pending is None or pending.user_id != user_id or pending.order_id is None:
            record_reservation_conflict()
            raise TableAlreadyBookedError(
                f"table {table_id} is already booked",
                details={"tableId": table_id},
            )
        return self._orders.add_items(pending.order_id, items)

    def _compensate(self, table_id: TableId, user_id: UserId) -> None:
        # Runs without the caller's deadline: an expired budget must not block the release.
        with deadline_scope(None):
            try:
                released = self._tables.release_if_held(table_id, user_id)
            except Exception:
                record_compensation("failed")
                logger.exception(
                    "reservation_compensation_failed",
                    extra={"table_id": table_id, "user_id": user_id},
                )
                return
        record_compensation("released" if released else "noop")
        logger.warning(
            "reservation_compensated",
            extra={"table_id": table_id, "user_id": user_id, "released": released},
        )

    def _publish_order_placed(self, order: Order, merged: bool, trace_ctx: TraceContext) -> None:
        if order.order_id is None:
            return
        event = OrderPlaced(
            order_id=order.order_id,
            user_id=order.user_id,
            table_id=order.table_id,
            total=order.total,
            merged=merged,
            occurred_at=order.updated_at or order.created_at,
        )
        self._publish(serialize_order_placed_event(event=event, order=order, trace_ctx=trace_ctx))

    def _publish(self, message: str) -> None:
        try:
            self._publisher.publish(channel=EVENTS_CHANNEL, message=message)
        except Exception:
            logger.warning("event_publish_failed", exc_info=True)
