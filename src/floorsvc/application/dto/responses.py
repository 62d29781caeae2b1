from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str


class MenuItemResponse(BaseModel):
    itemId: int
    name: str
    description: str | None = None
    price: MoneyResponse
    category: str | None = None
    imageUrl: str | None = None
    isAvailable: bool


class MenuResponse(BaseModel):
    items: list[MenuItemResponse] = Field(default_factory=list)


class OrderItemResponse(BaseModel):
    menuItemId: int
    quantity: int
    unitPrice: MoneyResponse
    lineTotal: MoneyResponse


class OrderResponse(BaseModel):
    orderId: int
    userId: int
    tableId: int
    status: str
    items: list[OrderItemResponse] = Field(default_factory=list)
    total: MoneyResponse
    createdAt: datetime
    updatedAt: datetime | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)


class TableResponse(BaseModel):
    tableId: int
    name: str
    seats: int
    status: str
    occupantId: int | None = None
    updatedAt: datetime | None = None


class TableListResponse(BaseModel):
    tables: list[TableResponse] = Field(default_factory=list)


class TableAvailabilityResponse(BaseModel):
    tableId: int
    available: bool


class TableResetResponse(BaseModel):
    tableId: int
    completedOrders: int
    status: str


class UserResponse(BaseModel):
    userId: int
    name: str
    email: str
    role: str
    createdAt: datetime | None = None


class TokenResponse(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
    expiresAt: datetime
    user: UserResponse
