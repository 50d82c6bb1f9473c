"""Schema exports."""

from farine.schemas.calendar import (
    EarliestPickupResponse,
    OverrideResponse,
    OverrideUpsert,
    PickupDateCheckResponse,
    ResolvedDayResponse,
)
from farine.schemas.catalog import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from farine.schemas.order import (
    DashboardStatsResponse,
    OrderCreate,
    OrderItemPayload,
    OrderItemResponse,
    OrderResponse,
    OrderStatusCreate,
    OrderStatusResponse,
    OrderStatusUpdate,
    OrderUpdate,
    ProductionLineResponse,
)
from farine.schemas.settings import WeekdayHoursPayload, WelcomeMessagePayload

__all__ = [
    "EarliestPickupResponse",
    "OverrideResponse",
    "OverrideUpsert",
    "PickupDateCheckResponse",
    "ResolvedDayResponse",
    "CategoryCreate",
    "CategoryResponse",
    "CategoryUpdate",
    "ProductCreate",
    "ProductResponse",
    "ProductUpdate",
    "DashboardStatsResponse",
    "OrderCreate",
    "OrderItemPayload",
    "OrderItemResponse",
    "OrderResponse",
    "OrderStatusCreate",
    "OrderStatusResponse",
    "OrderStatusUpdate",
    "OrderUpdate",
    "ProductionLineResponse",
    "WeekdayHoursPayload",
    "WelcomeMessagePayload",
]
