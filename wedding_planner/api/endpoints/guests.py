from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.guest import GuestCreate, GuestUpdate
from wedding_planner.services.guest import AsyncGuestService

router = APIRouter()


@router.get("/", response_model=ApiResponse)
@router.get("", response_model=ApiResponse)
async def list_guests(
    wedding_id: Optional[int] = Query(None, description="Filter by wedding"),
    db: AsyncSession = Depends(get_async_db)
):
    return ApiResponse.listing(await AsyncGuestService.get_guests(db, wedding_id))


@router.get("/{guest_id}", response_model=ApiResponse)
async def get_guest(guest_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.ok(await AsyncGuestService.get_guest(db, guest_id))


@router.post("/", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_guest(guest_data: GuestCreate, db: AsyncSession = Depends(get_async_db)):
    guest = await AsyncGuestService.create_guest(db, guest_data)
    return ApiResponse.ok(guest, "Guest created successfully")


@router.put("/{guest_id}", response_model=ApiResponse)
async def update_guest(guest_id: int, guest_data: GuestUpdate, db: AsyncSession = Depends(get_async_db)):
    guest = await AsyncGuestService.update_guest(db, guest_id, guest_data)
    return ApiResponse.ok(guest, "Guest updated successfully")


@router.delete("/{guest_id}", response_model=ApiResponse)
async def delete_guest(guest_id: int, db: AsyncSession = Depends(get_async_db)):
    await AsyncGuestService.delete_guest(db, guest_id)
    return ApiResponse.ok(message="Guest deleted successfully")
