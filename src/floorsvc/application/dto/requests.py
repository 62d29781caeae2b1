from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class PlaceOrderItemRequest(CamelBaseModel):
    menu_item_id: int
    quantity: int


class PlaceOrderRequest(CamelBaseModel):
    table_id: int
    items: list[PlaceOrderItemRequest]


class RegisterUserRequest(CamelBaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8, max_length=128)


class LoginRequest(CamelBaseModel):
    email: str
    password: str
