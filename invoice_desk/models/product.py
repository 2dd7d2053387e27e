from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from .common import ApiModel, Money, TimeStamped, parse_number


class Category(TimeStamped):
    id: str
    name: str
    deleted_at: Optional[str] = None

    @property
    def is_deleted(self) -> bool:
        return bool(self.deleted_at)


class Product(TimeStamped):
    id: str
    name: str
    description: Optional[str] = None
    unit_price: Money = Decimal(0)
    unit: Optional[str] = None
    category_id: Optional[str] = None
    category: Optional[Category] = None
    deleted_at: Optional[str] = None

    @property
    def is_deleted(self) -> bool:
        return bool(self.deleted_at)

    @property
    def category_name(self) -> Optional[str]:
        return self.category.name if self.category else None


class CategoryDraft(ApiModel):
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def _name_required(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Category name is required")
        return v


class ProductDraft(ApiModel):
    name: str = Field(max_length=120)
    description: Optional[str] = Field(default=None, max_length=500)
    unit_price: Money
    unit: Optional[str] = Field(default=None, max_length=30)
    category_id: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_required(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("description", "unit", "category_id", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("unit_price", mode="before")
    @classmethod
    def _price_number(cls, v):
        return parse_number(v, "Price must be a number")

    @field_validator("unit_price")
    @classmethod
    def _price_valid(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price must be 0 or more")
        return v
