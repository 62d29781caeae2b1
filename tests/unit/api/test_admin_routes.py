from __future__ import annotations

import pytest

from floorsvc.domain.user.entities import UserRole

pytestmark = pytest.mark.usefixtures("wired_routes")


def _place(client, login_as, user_id: int, table_id: int) -> None:
    login_as(user_id)
    response = client.post(
        "/v1/orders",
        json={"tableId": table_id, "items": [{"menuItemId": 1, "quantity": 1}]},
    )
    assert response.status_code == 201


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/v1/admin/orders"),
        ("get", "/v1/admin/tables"),
        ("get", "/v1/admin/tables/1/orders"),
        ("post", "/v1/admin/tables/1/reset"),
    ],
)
def test_admin_routes_reject_regular_users(client, login_as, method, path) -> None:
    login_as(7)

    response = getattr(client, method)(path)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_manager_cannot_list_every_order(client, login_as) -> None:
    _place(client, login_as, 7, 1)
    login_as(2, UserRole.MANAGER)

    assert client.get("/v1/admin/orders").status_code == 403


def test_admin_lists_every_order(client, login_as) -> None:
    _place(client, login_as, 7, 1)
    _place(client, login_as, 8, 2)
    login_as(1, UserRole.ADMIN)

    response = client.get("/v1/admin/orders")

    assert response.status_code == 200
    assert sorted(order["userId"] for order in response.json()["orders"]) == [7, 8]


def test_staff_sees_reserved_tables_with_occupant(client, login_as) -> None:
    _place(client, login_as, 7, 2)
    login_as(2, UserRole.MANAGER)

    tables = client.get("/v1/admin/tables").json()["tables"]

    reserved = [table for table in tables if table["status"] == "reserved"]
    assert [(table["tableId"], table["occupantId"]) for table in reserved] == [(2, 7)]


def test_reset_completes_pending_orders_and_frees_table(client, login_as, store) -> None:
    _place(client, login_as, 7, 1)
    _place(client, login_as, 7, 1)
    login_as(2, UserRole.MANAGER)

    assert len(client.get("/v1/admin/tables/1/orders").json()["orders"]) == 1

    response = client.post("/v1/admin/tables/1/reset")

    assert response.status_code == 200
    assert response.json() == {"tableId": 1, "completedOrders": 1, "status": "available"}
    assert store.tables[1].occupant_id is None
    assert client.get("/v1/admin/tables/1/orders").status_code == 404


def test_reset_unknown_table_is_not_found(client, login_as) -> None:
    login_as(1, UserRole.ADMIN)

    response = client.post("/v1/admin/tables/99/reset")

    assert response.status_code == 404
