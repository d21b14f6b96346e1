from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict, AliasChoices


class RecipeLineInput(BaseModel):
    ingredient_id: int = Field(..., description="Ingredient used by the menu item")
    quantity_needed: Decimal = Field(..., gt=0, description="Amount of the ingredient per serving")


class MenuItemCreate(BaseModel):
    """Schema for creating a menu item together with its recipe"""
    model_config = ConfigDict(populate_by_name=True)

    menu_name: str = Field(..., min_length=1, max_length=100, description="Name of the menu item")
    menu_type: str = Field(..., min_length=1, max_length=50, description="Course or category, e.g. starter")
    unit_cost: Decimal = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("unit_cost", "menu_cost"),
        description="Cost to produce one serving",
    )
    selling_price: Optional[Decimal] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("selling_price", "menu_price"),
        description="Price charged per serving; defaults to the suggested price",
    )
    default_markup_percentage: Optional[Decimal] = Field(None, ge=0, description="Markup used for the suggested price")
    cost_override: bool = Field(False, description="Whether unit_cost was set by hand")
    restriction_id: Optional[int] = Field(None, description="Dietary restriction the item satisfies")
    recipe: List[RecipeLineInput] = Field(..., min_length=1, description="Ingredients required to make the item")


class MenuItemUpdate(BaseModel):
    """Schema for updating a menu item; a supplied recipe replaces every existing line"""
    model_config = ConfigDict(populate_by_name=True)

    menu_name: Optional[str] = Field(None, min_length=1, max_length=100)
    menu_type: Optional[str] = Field(None, min_length=1, max_length=50)
    unit_cost: Optional[Decimal] = Field(None, ge=0, validation_alias=AliasChoices("unit_cost", "menu_cost"))
    selling_price: Optional[Decimal] = Field(None, ge=0, validation_alias=AliasChoices("selling_price", "menu_price"))
    default_markup_percentage: Optional[Decimal] = Field(None, ge=0)
    cost_override: Optional[bool] = None
    restriction_id: Optional[int] = None
    recipe: Optional[List[RecipeLineInput]] = Field(None, min_length=1)


class RecipeLineResponse(BaseModel):
    recipe_id: int
    ingredient_id: int
    ingredient_name: str
    unit: str
    quantity_needed: float
    stock_quantity: float
    re_order_level: float


class MenuItemResponse(BaseModel):
    """Menu item with its derived pricing and stock fields"""
    menu_item_id: int
    menu_name: str
    menu_type: str
    unit_cost: float
    selling_price: float
    default_markup_percentage: float
    cost_override: bool
    restriction_id: Optional[int] = None
    restriction_name: Optional[str] = None
    restriction_type: Optional[str] = None
    severity_level: Optional[str] = None
    profit_margin: float = Field(..., description="selling_price - unit_cost")
    suggested_price: float = Field(..., description="unit_cost marked up by default_markup_percentage")
    makeable_quantity: Optional[int] = Field(None, description="Servings the current stock can produce")
    usage_count: Optional[int] = Field(None, description="Tables served by this item, only for wedding filtered lists")
    recipe: Optional[List[RecipeLineResponse]] = None
