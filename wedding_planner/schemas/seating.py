from typing import Optional, List
from pydantic import BaseModel, Field


class GuestTableCreate(BaseModel):
    # Range is checked by the service so the configured bounds appear in the error
    capacity: int = Field(..., description="Seats at the table")


class GuestAssignment(BaseModel):
    guest_ids: List[int] = Field(..., min_length=1, description="Guests to seat at the table")


class SeatingTableUpdate(BaseModel):
    table_number: Optional[str] = Field(None, min_length=1, max_length=10)
    capacity: Optional[int] = None


class SeatingTableResponse(BaseModel):
    table_id: int
    wedding_id: int
    table_number: str
    table_category: str
    capacity: Optional[int] = None
    guest_count: int = 0
