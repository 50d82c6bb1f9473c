"""Order API schemas."""

from datetime import date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OrderItemPayload(BaseModel):
    """Single cart line."""

    product_id: int
    quantity: Decimal = Field(default=Decimal("1"), gt=0)


class OrderCreate(BaseModel):
    """Storefront order submission."""

    customer_name: str = Field(min_length=1, max_length=255)
    customer_phone: str = Field(min_length=1, max_length=32)
    pickup_date: date
    pickup_time: time
    customer_comment: str | None = None
    items: list[OrderItemPayload]


class OrderUpdate(BaseModel):
    """Back-office edit of an order."""

    status: str | None = None
    staff_comment: str | None = None
    pickup_date: date | None = None
    pickup_time: time | None = None

    @model_validator(mode="after")
    def _reject_null_required_fields(self) -> "OrderUpdate":
        # staff_comment is the only field that may be cleared
        for field in ("status", "pickup_date", "pickup_time"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class OrderItemResponse(BaseModel):
    product_id: int | None
    product_name: str
    quantity: Decimal
    unit: str
    unit_price_ttc: Decimal
    subtotal_ttc: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Serialized order."""

    id: int
    order_number: str
    customer_name: str
    customer_phone: str
    pickup_date: date
    pickup_time: time
    customer_comment: str | None
    staff_comment: str | None
    status: str
    total_ttc: Decimal
    created_at: datetime
    items: list[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)


class OrderStatusCreate(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    color: str = Field(default="#FCD34D", pattern=r"^#[0-9A-Fa-f]{6}$")
    is_active: bool = True


class OrderStatusResponse(BaseModel):
    id: int
    name: str
    sort_order: int
    is_active: bool
    color: str

    model_config = ConfigDict(from_attributes=True)


class ProductionLineResponse(BaseModel):
    product_name: str
    category_name: str
    unit: str
    total_quantity: Decimal
    pickup_date: date


class OrderStatusUpdate(BaseModel):
    """Rename, recolor or (de)activate a status."""

    name: str | None = Field(default=None, min_length=1, max_length=64)
    color: str | None = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    is_active: bool | None = None

    @model_validator(mode="after")
    def _reject_null_fields(self) -> "OrderStatusUpdate":
        for field in ("name", "color", "is_active"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class DashboardStatsResponse(BaseModel):
    total_orders: int
    pending_orders: int
    active_products: int
    today_revenue: Decimal
