from __future__ import annotations

from floorsvc.application.dto.responses import TableListResponse, TableResponse
from floorsvc.domain.table.entities import Table


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        tableId=table.table_id,
        name=table.name,
        seats=table.seats,
        status=table.status.value,
        occupantId=table.occupant_id,
        updatedAt=table.updated_at,
    )


def to_table_list_response(tables: list[Table]) -> TableListResponse:
    return TableListResponse(tables=[to_table_response(table) for table in tables])
