from datetime import date, time, datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class WeddingBase(BaseModel):
    couple_id: int = Field(..., description="Couple getting married")
    wedding_date: date = Field(..., description="Date of the ceremony")
    wedding_time: Optional[time] = Field(None, description="Start time of the ceremony")
    venue: str = Field(..., min_length=1, max_length=255, description="Venue name or address")
    guest_count: Optional[int] = Field(0, ge=0, description="Expected number of guests")
    payment_status: str = Field("pending", max_length=30, description="pending, partial or paid")


class WeddingCreate(WeddingBase):
    """Schema for creating a wedding; cost fields are derived and never accepted"""
    pass


class WeddingUpdate(BaseModel):
    couple_id: Optional[int] = None
    wedding_date: Optional[date] = None
    wedding_time: Optional[time] = None
    venue: Optional[str] = Field(None, min_length=1, max_length=255)
    guest_count: Optional[int] = Field(None, ge=0)
    payment_status: Optional[str] = Field(None, max_length=30)


class WeddingResponse(BaseModel):
    wedding_id: int
    couple_id: int
    wedding_date: date
    wedding_time: Optional[time] = None
    venue: str
    guest_count: Optional[int] = None
    payment_status: str
    equipment_rental_cost: float
    food_cost: float
    total_cost: float
    partner1_name: Optional[str] = None
    partner2_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WeddingCosts(BaseModel):
    """Totals written back to a wedding by the cost aggregator"""
    wedding_id: int
    equipment_rental_cost: float
    food_cost: float
    total_invoice_amount: float
    total_cost: float
