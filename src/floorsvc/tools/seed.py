from __future__ import annotations

import os

from sqlalchemy import inspect
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from floorsvc.domain.user.entities import UserRole
from floorsvc.infrastructure.db.models.menu import MenuItemModel
from floorsvc.infrastructure.db.models.table import TableModel
from floorsvc.infrastructure.db.models.user import UserModel
from floorsvc.infrastructure.db.session import get_engine
from floorsvc.infrastructure.security.passwords import BcryptPasswordHasher

MENU_ITEMS = [
    {
        "name": "Margherita Pizza",
        "description": "Tomato, mozzarella, basil",
        "price_cents": 950,
        "currency": "USD",
        "category": "mains",
        "is_available": True,
    },
    {
        "name": "Chicken Alfredo",
        "description": "Fettuccine, creamy parmesan sauce",
        "price_cents": 1690,
        "currency": "USD",
        "category": "mains",
        "is_available": True,
    },
    {
        "name": "Caesar Salad",
        "description": "Romaine, croutons, parmesan",
        "price_cents": 300,
        "currency": "USD",
        "category": "starters",
        "is_available": True,
    },
    {
        "name": "Tiramisu",
        "description": "Espresso-soaked ladyfingers",
        "price_cents": 850,
        "currency": "USD",
        "category": "desserts",
        "is_available": False,
    },
]

TABLES = [
    {"name": "T1", "seats": 2},
    {"name": "T2", "seats": 2},
    {"name": "T3", "seats": 4},
    {"name": "T4", "seats": 4},
    {"name": "T5", "seats": 6},
    {"name": "T6", "seats": 8},
]


def _staff_accounts() -> list[dict[str, str]]:
    return [
        {
            "name": "Floor Admin",
            "email": os.getenv("SEED_ADMIN_EMAIL", "admin@floorsvc.local"),
            "password": os.getenv("SEED_ADMIN_PASSWORD", "admin-password"),
            "role": UserRole.ADMIN.value,
        },
        {
            "name": "Floor Manager",
            "email": os.getenv("SEED_MANAGER_EMAIL", "manager@floorsvc.local"),
            "password": os.getenv("SEED_MANAGER_PASSWORD", "manager-password"),
            "role": UserRole.MANAGER.value,
        },
    ]


def main() -> None:
    engine = get_engine(timeout_seconds=2.0)
    inspector = inspect(engine)
    required_tables = {"users", "menu_items", "tables", "orders", "order_items"}
    if not required_tables.issubset(set(inspector.get_table_names(schema="public"))):
        print("no schema yet")
        return

    hasher = BcryptPasswordHasher()
    with Session(engine) as session:
        for item in MENU_ITEMS:
            session.execute(
                insert(MenuItemModel)
                .values(**item)
                .on_conflict_do_update(
                    index_elements=[MenuItemModel.name],
                    set_={
                        "description": item["description"],
                        "price_cents": item["price_cents"],
                        "currency": item["currency"],
                        "category": item["category"],
                        "is_available": item["is_available"],
                    },
                )
            )

        for table in TABLES:
            session.execute(
                insert(TableModel)
                .values(status="available", occupant_id=None, **table)
                .on_conflict_do_update(
                    index_elements=[TableModel.name],
                    set_={"seats": table["seats"]},
                )
            )

        for account in _staff_accounts():
            session.execute(
                insert(UserModel)
                .values(
                    name=account["name"],
                    email=account["email"],
                    password_hash=hasher.hash(account["password"]),
                    role=account["role"],
                )
                .on_conflict_do_update(
                    index_elements=[UserModel.email],
                    set_={"role": account["role"]},
                )
            )

        session.commit()
        print("seed complete")


if __name__ == "__main__":
    main()
