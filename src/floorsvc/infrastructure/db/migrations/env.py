from __future__ import annotations

from alembic import context
from sqlalchemy import create_engine, pool

import floorsvc.infrastructure.db.models.order  # noqa: F401
import floorsvc.infrastructure.db.models.table  # noqa: F401
import floorsvc.infrastructure.db.models.user  # noqa: F401
from floorsvc.infrastructure.db.models.menu import Base
from floorsvc.infrastructure.db.session import _database_url

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(_database_url(), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
