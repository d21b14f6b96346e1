from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class CoupleBase(BaseModel):
    partner1_name: str = Field(..., min_length=1, max_length=100, description="First partner's full name")
    partner2_name: str = Field(..., min_length=1, max_length=100, description="Second partner's full name")
    partner1_phone: Optional[str] = Field(None, max_length=30)
    partner2_phone: Optional[str] = Field(None, max_length=30)
    partner1_email: Optional[str] = Field(None, max_length=255)
    partner2_email: Optional[str] = Field(None, max_length=255)
    planner_contact: Optional[str] = Field(None, max_length=255, description="Wedding planner reachable for this couple")


class CoupleCreate(CoupleBase):
    pass


class CoupleUpdate(BaseModel):
    partner1_name: Optional[str] = Field(None, min_length=1, max_length=100)
    partner2_name: Optional[str] = Field(None, min_length=1, max_length=100)
    partner1_phone: Optional[str] = Field(None, max_length=30)
    partner2_phone: Optional[str] = Field(None, max_length=30)
    partner1_email: Optional[str] = Field(None, max_length=255)
    partner2_email: Optional[str] = Field(None, max_length=255)
    planner_contact: Optional[str] = Field(None, max_length=255)


class CoupleResponse(CoupleBase):
    couple_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    wedding_count: Optional[int] = None
    last_wedding: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)
