from __future__ import annotations

import logging

from floorsvc.application.ports.repositories import TableRepository, TableReservedConflict
from floorsvc.domain.common.errors import EmptyResultError
from floorsvc.domain.common.ids import TableId, UserId
from floorsvc.domain.table.entities import (
    Table,
    TableAlreadyReservedError,
    TableNotFoundError,
    TableStatus,
)

logger = logging.getLogger(__name__)


class NoTablesFoundError(EmptyResultError):
    code = "NO_TABLES"


class TableStateManager:
    """Sole owner of table status and occupant mutation.

    Every write is a single conditional statement in the store; status is
    never cached between calls.
    """

    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def get(self, table_id: TableId) -> Table:
        table = self._table_repository.get(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")
        return table

    def lock(self, table_id: TableId) -> Table:
        table = self._table_repository.lock(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")
        return table

    def is_available(self, table_id: TableId) -> bool:
        return self.get(table_id).is_available

    def list_available(self) -> list[Table]:
        tables = self._table_repository.list_by_status(TableStatus.AVAILABLE)
        if not tables:
            raise NoTablesFoundError("no available tables")
        return tables

    def list_all(self) -> list[Table]:
        tables = self._table_repository.list_by_status(None)
        if not tables:
            raise NoTablesFoundError("no tables configured")
        return tables

    def try_reserve(self, table_id: TableId, user_id: UserId) -> Table:
        try:
            table = self._table_repository.try_reserve(table_id, user_id)
        except TableReservedConflict as exc:
            raise TableAlreadyReservedError(
                f"table {table_id} is already reserved",
                occupant_id=exc.table.occupant_id,
            ) from exc
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")
        logger.info("table_reserved", extra={"table_id": table_id, "user_id": user_id})
        return table

    def release(self, table_id: TableId) -> Table:
        table = self._table_repository.release(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")
        logger.info("table_released", extra={"table_id": table_id})
        return table

    def release_if_held(self, table_id: TableId, user_id: UserId) -> bool:
        """Release only while ``user_id`` still holds the table and no pending order backs it."""
        released = self._table_repository.release_if_held(table_id, user_id)
        if released:
            logger.info("table_released", extra={"table_id": table_id, "user_id": user_id})
        return released
