from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import floorsvc.api.routes.admin as admin_route
import floorsvc.api.routes.orders as orders_route
import floorsvc.api.routes.tables as tables_route
from floorsvc.api.dependencies import current_claims
from floorsvc.api.main import app
from floorsvc.application.ports.security import AccessClaims
from floorsvc.domain.common.ids import UserId
from floorsvc.domain.user.entities import UserRole


def claims_for(user_id: int, role: UserRole = UserRole.USER) -> AccessClaims:
    return AccessClaims(
        user_id=UserId(user_id),
        role=role,
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )


@pytest.fixture
def client() -> Iterator[TestClient]:
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login_as() -> Callable[[int, UserRole], None]:
    def _login(user_id: int, role: UserRole = UserRole.USER) -> None:
        claims = claims_for(user_id, role)
        app.dependency_overrides[current_claims] = lambda: claims

    return _login


@pytest.fixture
def wired_routes(monkeypatch, coordinator, order_lifecycle, table_state) -> None:
    """Point the route factories at the in-memory managers."""
    monkeypatch.setattr(orders_route, "_reservation_coordinator", lambda: coordinator)
    monkeypatch.setattr(orders_route, "_order_lifecycle", lambda: order_lifecycle)
    monkeypatch.setattr(admin_route, "_reservation_coordinator", lambda: coordinator)
    monkeypatch.setattr(admin_route, "_order_lifecycle", lambda: order_lifecycle)
    monkeypatch.setattr(admin_route, "_table_state", lambda: table_state)
    monkeypatch.setattr(tables_route, "_table_state", lambda: table_state)
