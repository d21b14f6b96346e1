from typing import Optional, List, Union
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict, AliasChoices


class PackageItemInput(BaseModel):
    menu_item_id: int = Field(..., description="Menu item included in the package")
    quantity: int = Field(1, ge=1, description="Servings of the item per package")


# Items may be sent as bare ids or as {menu_item_id, quantity}
PackageItemEntry = Union[int, PackageItemInput]


class PackageCreate(BaseModel):
    """Schema for creating a package with optional menu items"""
    model_config = ConfigDict(populate_by_name=True)

    package_name: str = Field(..., min_length=1, max_length=100, description="Name of the package")
    package_type: str = Field(..., min_length=1, max_length=50, description="Package tier or style")
    selling_price: Decimal = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("selling_price", "package_price"),
        description="Price charged per table",
    )
    default_markup_percentage: Optional[Decimal] = Field(None, ge=0)
    menu_item_ids: Optional[List[PackageItemEntry]] = Field(None, description="Menu items in the package")


class PackageUpdate(BaseModel):
    """Schema for updating a package; menu_item_ids replaces the item list when present"""
    model_config = ConfigDict(populate_by_name=True)

    package_name: Optional[str] = Field(None, min_length=1, max_length=100)
    package_type: Optional[str] = Field(None, min_length=1, max_length=50)
    selling_price: Optional[Decimal] = Field(
        None, ge=0, validation_alias=AliasChoices("selling_price", "package_price")
    )
    default_markup_percentage: Optional[Decimal] = Field(None, ge=0)
    menu_item_ids: Optional[List[PackageItemEntry]] = None


class PackageMenuItemResponse(BaseModel):
    menu_item_id: int
    menu_name: str
    menu_type: str
    unit_cost: float
    selling_price: float
    quantity: int


class PackageResponse(BaseModel):
    package_id: int
    package_name: str
    package_type: str
    unit_cost: float
    selling_price: float
    default_markup_percentage: float
    profit_margin: float
    suggested_price: float
    total_items: int = Field(..., description="Distinct menu items in the package")
    usage_count: int = Field(..., description="Tables the package is assigned to")
    menu_items: List[PackageMenuItemResponse] = []


class PackageAssignmentCreate(BaseModel):
    # Optional so a missing id surfaces as the explicit 400 message
    table_id: Optional[int] = Field(None, description="Seating table receiving the package")
    package_id: Optional[int] = Field(None, description="Package being assigned")


class PackageAssignmentResponse(BaseModel):
    assignment_id: int
    table_id: int
    package_id: int
    table_number: str
    table_category: str
    package_name: str
    package_type: str
    selling_price: float
