"""Application models package."""

from farine.models.app_setting import AppSetting
from farine.models.calendar_override import CalendarOverride
from farine.models.catalog import Category, Product
from farine.models.order import Order, OrderItem, OrderStatus

__all__ = ["AppSetting", "CalendarOverride", "Category", "Product", "Order", "OrderItem", "OrderStatus"]
