from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.wedding import WeddingCreate, WeddingUpdate
from wedding_planner.services.wedding import AsyncWeddingService

router = APIRouter()


@router.get("/", response_model=ApiResponse)
@router.get("", response_model=ApiResponse)
async def list_weddings(
    couple_id: Optional[int] = Query(None, description="Filter by couple"),
    db: AsyncSession = Depends(get_async_db)
):
    """Get weddings, most recent date first."""
    return ApiResponse.listing(await AsyncWeddingService.get_weddings(db, couple_id))


@router.get("/{wedding_id}", response_model=ApiResponse)
async def get_wedding(wedding_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.ok(await AsyncWeddingService.get_wedding(db, wedding_id))


@router.post("/", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_wedding(wedding_data: WeddingCreate, db: AsyncSession = Depends(get_async_db)):
    """Create a wedding; its cost fields start at zero and are maintained by the system."""
    wedding = await AsyncWeddingService.create_wedding(db, wedding_data)
    return ApiResponse.ok(wedding, "Wedding created successfully")


@router.put("/{wedding_id}", response_model=ApiResponse)
async def update_wedding(wedding_id: int, wedding_data: WeddingUpdate, db: AsyncSession = Depends(get_async_db)):
    wedding = await AsyncWeddingService.update_wedding(db, wedding_id, wedding_data)
    return ApiResponse.ok(wedding, "Wedding updated successfully")


@router.post("/{wedding_id}/recalculate-costs", response_model=ApiResponse)
async def recalculate_wedding_costs(wedding_id: int, db: AsyncSession = Depends(get_async_db)):
    """Recompute equipment, food and total cost from current allocations and packages."""
    costs = await AsyncWeddingService.recalculate_costs(db, wedding_id)
    return ApiResponse.ok(costs, "Wedding costs recalculated")


@router.delete("/{wedding_id}", response_model=ApiResponse)
async def delete_wedding(wedding_id: int, db: AsyncSession = Depends(get_async_db)):
    """Delete a wedding with its guests, tables, package assignments and allocations."""
    await AsyncWeddingService.delete_wedding(db, wedding_id)
    return ApiResponse.ok(message="Wedding deleted successfully")
