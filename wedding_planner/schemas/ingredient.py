from datetime import datetime
from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator


class IngredientBase(BaseModel):
    ingredient_name: str = Field(..., min_length=1, max_length=100, description="Name of the ingredient")
    unit: str = Field(..., min_length=1, max_length=20, description="Unit of measure, e.g. kg")
    stock_quantity: Decimal = Field(..., ge=0, description="Quantity currently in stock")
    re_order_level: Decimal = Field(..., ge=0, description="Stock level at which to reorder")


class IngredientCreate(IngredientBase):
    """Schema for creating a new ingredient"""
    pass


class IngredientUpdate(BaseModel):
    ingredient_name: Optional[str] = Field(None, min_length=1, max_length=100)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    stock_quantity: Optional[Decimal] = Field(None, ge=0)
    re_order_level: Optional[Decimal] = Field(None, ge=0)


class IngredientRestock(BaseModel):
    delta: Decimal = Field(..., description="Amount to add (positive) or remove (negative)")

    @field_validator("delta")
    @classmethod
    def delta_not_zero(cls, v: Decimal) -> Decimal:
        if v == 0:
            raise ValueError("delta must be a non-zero number")
        return v


class IngredientMenuUsage(BaseModel):
    menu_item_id: int
    menu_name: str
    menu_type: str
    quantity_needed: float
    makeable_quantity: Optional[int] = None


class IngredientResponse(BaseModel):
    ingredient_id: int
    ingredient_name: str
    unit: str
    stock_quantity: float
    re_order_level: float
    usage_count: int = Field(0, description="Distinct menu items using the ingredient")
    needs_reorder: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    menu_items: Optional[List[IngredientMenuUsage]] = None
