"""API v1 router composition."""

from fastapi import APIRouter

from farine.api.v1.endpoints import calendar, catalog, orders, shop_settings

api_router: APIRouter = APIRouter()
api_router.include_router(calendar.router, prefix="/calendar", tags=["calendar"])
api_router.include_router(shop_settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
