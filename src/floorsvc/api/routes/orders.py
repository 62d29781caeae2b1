from __future__ import annotations

from fastapi import APIRouter, Depends, status

from floorsvc.api.dependencies import current_claims, request_deadline, trace_context
from floorsvc.application.dto.requests import PlaceOrderRequest
from floorsvc.application.dto.responses import OrderListResponse, OrderResponse
from floorsvc.application.mappers.order_mapper import to_order_list_response, to_order_response
from floorsvc.application.ports.security import AccessClaims
from floorsvc.application.use_cases.order_lifecycle import ItemRequest, OrderLifecycleManager
from floorsvc.application.use_cases.reservation import ReservationCoordinator
from floorsvc.application.use_cases.table_state import TableStateManager
from floorsvc.domain.common.errors import PermissionDeniedError
from floorsvc.domain.common.ids import MenuItemId, OrderId, TableId
from floorsvc.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from floorsvc.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from floorsvc.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from floorsvc.infrastructure.db.session import SqlAlchemyTransactionManager
from floorsvc.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter(tags=["orders"])


def _order_lifecycle() -> OrderLifecycleManager:
    return OrderLifecycleManager(
        order_repository=SqlAlchemyOrderRepository(),
        menu_repository=SqlAlchemyMenuRepository(),
    )


def _reservation_coordinator() -> ReservationCoordinator:
    return ReservationCoordinator(
        table_state=TableStateManager(table_repository=SqlAlchemyTableRepository()),
        order_lifecycle=_order_lifecycle(),
        transactions=SqlAlchemyTransactionManager(),
        publisher=RedisEventPublisher(),
    )


@router.post(
    "/v1/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
def place_order(
    request_dto: PlaceOrderRequest,
    claims: AccessClaims = Depends(current_claims),
) -> OrderResponse:
    order = _reservation_coordinator().place_order(
        user_id=claims.user_id,
        table_id=TableId(request_dto.table_id),
        requests=[
            ItemRequest(menu_item_id=MenuItemId(item.menu_item_id), quantity=item.quantity)
            for item in request_dto.items
        ],
        trace_ctx=trace_context(),
        deadline=request_deadline(),
    )
    return to_order_response(order)


@router.get("/v1/orders", response_model=OrderListResponse)
def list_my_orders(claims: AccessClaims = Depends(current_claims)) -> OrderListResponse:
    return to_order_list_response(_order_lifecycle().get_all_for_user(claims.user_id))


@router.get("/v1/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, claims: AccessClaims = Depends(current_claims)) -> OrderResponse:
    order = _order_lifecycle().get_by_id(OrderId(order_id))
    if not claims.is_staff and order.user_id != claims.user_id:
        raise PermissionDeniedError(f"order {order_id} belongs to another user")
    return to_order_response(order)


@router.post("/v1/orders/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: int, claims: AccessClaims = Depends(current_claims)) -> OrderResponse:
    order = _reservation_coordinator().cancel_order(
        order_id=OrderId(order_id),
        actor=claims,
        trace_ctx=trace_context(),
        deadline=request_deadline(),
    )
    return to_order_response(order)
