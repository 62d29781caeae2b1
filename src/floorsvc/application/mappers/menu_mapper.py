from __future__ import annotations

from floorsvc.application.dto.responses import MenuItemResponse, MenuResponse, MoneyResponse
from floorsvc.domain.menu.entities import MenuItem


def to_menu_response(items: list[MenuItem]) -> MenuResponse:
    return MenuResponse(
        items=[
            MenuItemResponse(
                itemId=item.item_id,
                name=item.name,
                description=item.description,
                price=MoneyResponse(
                    amountCents=item.price.amount_cents,
                    currency=item.price.currency,
                ),
                category=item.category,
                imageUrl=item.image_url,
                isAvailable=item.is_available,
            )
            for item in items
        ]
    )
