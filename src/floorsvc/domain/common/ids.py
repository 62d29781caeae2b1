from __future__ import annotations

from typing import NewType

UserId = NewType("UserId", int)
TableId = NewType("TableId", int)
OrderId = NewType("OrderId", int)
MenuItemId = NewType("MenuItemId", int)
