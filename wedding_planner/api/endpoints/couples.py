from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.couple import CoupleCreate, CoupleUpdate
from wedding_planner.services.couple import AsyncCoupleService

router = APIRouter()


@router.get("/", response_model=ApiResponse)
@router.get("", response_model=ApiResponse)
async def list_couples(db: AsyncSession = Depends(get_async_db)):
    """Get couples with their wedding count and most recent wedding date."""
    return ApiResponse.listing(await AsyncCoupleService.get_couples(db))


@router.get("/{couple_id}", response_model=ApiResponse)
async def get_couple(couple_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.ok(await AsyncCoupleService.get_couple(db, couple_id))


@router.get("/{couple_id}/weddings", response_model=ApiResponse)
async def list_couple_weddings(couple_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.listing(await AsyncCoupleService.get_couple_weddings(db, couple_id))


@router.post("/", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_couple(couple_data: CoupleCreate, db: AsyncSession = Depends(get_async_db)):
    couple = await AsyncCoupleService.create_couple(db, couple_data)
    return ApiResponse.ok(couple, "Couple created successfully")


@router.put("/{couple_id}", response_model=ApiResponse)
async def update_couple(couple_id: int, couple_data: CoupleUpdate, db: AsyncSession = Depends(get_async_db)):
    couple = await AsyncCoupleService.update_couple(db, couple_id, couple_data)
    return ApiResponse.ok(couple, "Couple updated successfully")


@router.delete("/{couple_id}", response_model=ApiResponse)
async def delete_couple(couple_id: int, db: AsyncSession = Depends(get_async_db)):
    """Delete a couple that has no weddings."""
    await AsyncCoupleService.delete_couple(db, couple_id)
    return ApiResponse.ok(message="Couple deleted successfully")
