from __future__ import annotations

from fastapi import APIRouter

from floorsvc.application.dto.responses import TableAvailabilityResponse, TableListResponse
from floorsvc.application.mappers.table_mapper import to_table_list_response
from floorsvc.application.use_cases.table_state import TableStateManager
from floorsvc.domain.common.ids import TableId
from floorsvc.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

router = APIRouter(tags=["tables"])


def _table_state() -> TableStateManager:
    return TableStateManager(table_repository=SqlAlchemyTableRepository())


@router.get("/v1/tables", response_model=TableListResponse)
def list_available_tables() -> TableListResponse:
    return to_table_list_response(_table_state().list_available())


@router.get("/v1/tables/{table_id}/availability", response_model=TableAvailabilityResponse)
def table_availability(table_id: int) -> TableAvailabilityResponse:
    available = _table_state().is_available(TableId(table_id))
    return TableAvailabilityResponse(tableId=table_id, available=available)
