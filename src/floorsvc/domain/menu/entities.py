from __future__ import annotations

from dataclasses import dataclass

from floorsvc.domain.common.ids import MenuItemId
from floorsvc.domain.common.money import Money


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    name: str
    description: str | None
    price: Money
    category: str | None
    image_url: str | None = None
    is_available: bool = True

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
