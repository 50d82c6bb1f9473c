"""Catalog API schemas."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class CategoryUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class CategoryResponse(BaseModel):
    id: int
    name: str
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    """Payload for creating a product."""

    category_id: int
    name: str = Field(min_length=1, max_length=255)
    unit: Literal["unité", "kg"] = "unité"
    price_ttc: Decimal = Field(ge=0, decimal_places=2)
    description: str | None = None
    photo_url: str | None = None
    is_active: bool = True


class ProductUpdate(BaseModel):
    """Partial product update; omitted fields stay unchanged."""

    category_id: int | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    unit: Literal["unité", "kg"] | None = None
    price_ttc: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    description: str | None = None
    photo_url: str | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def _reject_null_required_fields(self) -> "ProductUpdate":
        # only description and photo_url may be cleared
        for field in ("category_id", "name", "unit", "price_ttc", "is_active"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class ProductResponse(BaseModel):
    id: int
    category_id: int
    category_name: str
    name: str
    unit: str
    price_ttc: Decimal
    description: str | None
    photo_url: str | None
    is_active: bool
