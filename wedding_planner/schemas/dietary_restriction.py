from datetime import date
from typing import Optional, List
from pydantic import BaseModel, Field


class DietaryRestrictionCreate(BaseModel):
    restriction_name: str = Field(..., min_length=1, max_length=100, description="e.g. Peanut allergy")
    severity_level: str = Field(..., min_length=1, max_length=30, description="e.g. Low, Medium, High")
    restriction_type: str = Field(..., min_length=1, max_length=50, description="e.g. Allergy, Religious")


class DietaryRestrictionUpdate(BaseModel):
    restriction_name: Optional[str] = Field(None, min_length=1, max_length=100)
    severity_level: Optional[str] = Field(None, min_length=1, max_length=30)
    restriction_type: Optional[str] = Field(None, min_length=1, max_length=50)


class AffectedGuest(BaseModel):
    guest_id: int
    guest_name: str
    wedding_id: int
    wedding_date: date
    partner1_name: str
    partner2_name: str


class AffectedMenuItem(BaseModel):
    menu_item_id: int
    menu_name: str
    menu_type: str
    selling_price: float


class DietaryRestrictionResponse(BaseModel):
    restriction_id: int
    restriction_name: str
    severity_level: str
    restriction_type: str
    affected_guests: int = 0
    menu_items_count: int = 0
    affected_guests_list: Optional[List[AffectedGuest]] = None
    affected_menu_items: Optional[List[AffectedMenuItem]] = None
