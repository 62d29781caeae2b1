from __future__ import annotations

from fastapi import APIRouter, Depends

from floorsvc.api.dependencies import request_deadline, require_admin, require_staff, trace_context
from floorsvc.application.dto.responses import OrderListResponse, TableListResponse, TableResetResponse
from floorsvc.application.mappers.order_mapper import to_order_list_response
from floorsvc.application.mappers.table_mapper import to_table_list_response
from floorsvc.application.ports.security import AccessClaims
from floorsvc.application.use_cases.order_lifecycle import OrderLifecycleManager
from floorsvc.application.use_cases.reservation import ReservationCoordinator
from floorsvc.application.use_cases.table_state import TableStateManager
from floorsvc.domain.common.ids import TableId
from floorsvc.domain.table.entities import TableStatus
from floorsvc.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from floorsvc.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from floorsvc.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from floorsvc.infrastructure.db.session import SqlAlchemyTransactionManager
from floorsvc.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter(prefix="/v1/admin", tags=["admin"])


def _table_state() -> TableStateManager:
    return TableStateManager(table_repository=SqlAlchemyTableRepository())


def _order_lifecycle() -> OrderLifecycleManager:
    return OrderLifecycleManager(
        order_repository=SqlAlchemyOrderRepository(),
        menu_repository=SqlAlchemyMenuRepository(),
    )


def _reservation_coordinator() -> ReservationCoordinator:
    return ReservationCoordinator(
        table_state=_table_state(),
        order_lifecycle=_order_lifecycle(),
        transactions=SqlAlchemyTransactionManager(),
        publisher=RedisEventPublisher(),
    )


@router.get("/orders", response_model=OrderListResponse)
def list_all_orders(_: AccessClaims = Depends(require_admin)) -> OrderListResponse:
    return to_order_list_response(_order_lifecycle().get_all())


@router.get("/tables", response_model=TableListResponse)
def list_all_tables(_: AccessClaims = Depends(require_staff)) -> TableListResponse:
    return to_table_list_response(_table_state().list_all())


@router.get("/tables/{table_id}/orders", response_model=OrderListResponse)
def list_pending_orders_for_table(
    table_id: int,
    _: AccessClaims = Depends(require_staff),
) -> OrderListResponse:
    return to_order_list_response(_order_lifecycle().get_all_pending_for_table(TableId(table_id)))


@router.post("/tables/{table_id}/reset", response_model=TableResetResponse)
def reset_table(table_id: int, _: AccessClaims = Depends(require_staff)) -> TableResetResponse:
    completed = _reservation_coordinator().reset_table(
        table_id=TableId(table_id),
        trace_ctx=trace_context(),
        deadline=request_deadline(),
    )
    return TableResetResponse(
        tableId=table_id,
        completedOrders=completed,
        status=TableStatus.AVAILABLE.value,
    )
