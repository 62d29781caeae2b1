from __future__ import annotations

from sqlalchemy import Engine, select

from floorsvc.application.ports.repositories import MenuRepository
from floorsvc.domain.common.ids import MenuItemId
from floorsvc.domain.common.money import Money
from floorsvc.domain.menu.entities import MenuItem
from floorsvc.infrastructure.db.models.menu import MenuItemModel
from floorsvc.infrastructure.db.session import get_engine, session_scope


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_items(self) -> list[MenuItem]:
        statement = select(MenuItemModel).order_by(MenuItemModel.category, MenuItemModel.id)
        with session_scope(self._engine, "menu listing") as session:
            return [self._to_domain(model) for model in session.execute(statement).scalars().all()]

    def get_items(self, item_ids: list[MenuItemId]) -> dict[MenuItemId, MenuItem]:
        if not item_ids:
            return {}
        statement = select(MenuItemModel).where(MenuItemModel.id.in_(item_ids))
        with session_scope(self._engine, "menu item lookup") as session:
            models = session.execute(statement).scalars().all()
            return {MenuItemId(model.id): self._to_domain(model) for model in models}

    def _to_domain(self, model: MenuItemModel) -> MenuItem:
        return MenuItem(
            item_id=MenuItemId(model.id),
            name=model.name,
            description=model.description,
            price=Money(amount_cents=model.price_cents, currency=model.currency),
            category=model.category,
            image_url=model.image_url,
            is_available=model.is_available,
        )
