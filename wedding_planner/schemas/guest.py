from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class GuestCreate(BaseModel):
    wedding_id: int = Field(..., description="Wedding the guest is invited to")
    guest_name: str = Field(..., min_length=1, max_length=150)
    table_id: Optional[int] = Field(None, description="Seating table, if already placed")
    restriction_id: Optional[int] = Field(None, description="Dietary restriction of the guest")
    rsvp_status: str = Field("pending", max_length=20, description="pending, accepted or declined")


class GuestUpdate(BaseModel):
    guest_name: Optional[str] = Field(None, min_length=1, max_length=150)
    table_id: Optional[int] = None
    restriction_id: Optional[int] = None
    rsvp_status: Optional[str] = Field(None, max_length=20)


class GuestResponse(BaseModel):
    guest_id: int
    wedding_id: int
    guest_name: str
    table_id: Optional[int] = None
    restriction_id: Optional[int] = None
    rsvp_status: str
    restriction_name: Optional[str] = None
    table_number: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
