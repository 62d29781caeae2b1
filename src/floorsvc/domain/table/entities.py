from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from floorsvc.domain.common.errors import ConflictError, NotFoundError
from floorsvc.domain.common.ids import TableId, UserId


class TableStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"


@dataclass(frozen=True)
class Table:
    table_id: TableId
    name: str
    seats: int
    status: TableStatus
    occupant_id: UserId | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.seats < 1:
            raise ValueError("seats must be >= 1")
        if self.status == TableStatus.RESERVED and self.occupant_id is None:
            raise ValueError("occupant_id must be set when table status is reserved")
        if self.status == TableStatus.AVAILABLE and self.occupant_id is not None:
            raise ValueError("occupant_id must be empty when table status is available")

    @property
    def is_available(self) -> bool:
        return self.status == TableStatus.AVAILABLE

    def is_held_by(self, user_id: UserId) -> bool:
        return self.status == TableStatus.RESERVED and self.occupant_id == user_id

    def reserve(self, user_id: UserId, now: datetime) -> Table:
        if self.status != TableStatus.AVAILABLE:
            raise TableAlreadyReservedError(
                f"table {self.table_id} is already reserved",
                occupant_id=self.occupant_id,
            )
        return replace(self, status=TableStatus.RESERVED, occupant_id=user_id, updated_at=now)

    def release(self, now: datetime) -> Table:
        if self.status == TableStatus.AVAILABLE:
            return self
        return replace(self, status=TableStatus.AVAILABLE, occupant_id=None, updated_at=now)


class TableNotFoundError(NotFoundError):
    code = "TABLE_NOT_FOUND"


class TableAlreadyReservedError(ConflictError):
    code = "TABLE_RESERVED"

    def __init__(self, message: str, occupant_id: UserId | None = None) -> None:
        super().__init__(message)
        self.occupant_id = occupant_id
