from datetime import datetime
from typing import Optional
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict


class InventoryItemCreate(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=100, description="Name of the rental item")
    category: str = Field(..., min_length=1, max_length=50, description="e.g. Furniture, Lighting")
    item_condition: str = Field(..., min_length=1, max_length=30, description="e.g. Excellent, Needs Repair")
    quantity_available: int = Field(..., ge=0)
    rental_cost: Decimal = Field(..., ge=0, description="Rental cost per unit")


class InventoryItemUpdate(BaseModel):
    item_name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    item_condition: Optional[str] = Field(None, min_length=1, max_length=30)
    quantity_available: Optional[int] = Field(None, ge=0)
    rental_cost: Optional[Decimal] = Field(None, ge=0)


class InventoryItemResponse(BaseModel):
    inventory_id: int
    item_name: str
    category: str
    item_condition: str
    quantity_available: int
    rental_cost: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AllocationCreate(BaseModel):
    wedding_id: int
    inventory_id: int
    quantity_used: int = Field(..., ge=1)
    table_id: Optional[int] = None
    unit_rental_cost: Optional[Decimal] = Field(None, ge=0, description="Defaults to the item's rental cost")


class AllocationUpdate(BaseModel):
    quantity_used: Optional[int] = Field(None, ge=1)
    table_id: Optional[int] = None
    unit_rental_cost: Optional[Decimal] = Field(None, ge=0)


class AllocationResponse(BaseModel):
    allocation_id: int
    wedding_id: int
    table_id: Optional[int] = None
    inventory_id: int
    item_name: str
    category: str
    item_condition: str
    quantity_used: int
    unit_rental_cost: float
    total_cost: float = Field(..., description="quantity_used * unit_rental_cost")
