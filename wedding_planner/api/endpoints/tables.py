from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.seating import GuestTableCreate, GuestAssignment, SeatingTableUpdate
from wedding_planner.services.seating import AsyncSeatingService

router = APIRouter()


@router.get("/seating/{wedding_id}", response_model=ApiResponse)
async def list_tables(wedding_id: int, db: AsyncSession = Depends(get_async_db)):
    """Get a wedding's seating tables, couple table first."""
    return ApiResponse.listing(await AsyncSeatingService.get_tables(db, wedding_id))


@router.post("/seating/{wedding_id}/couple", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_couple_table(wedding_id: int, db: AsyncSession = Depends(get_async_db)):
    table = await AsyncSeatingService.create_couple_table(db, wedding_id)
    return ApiResponse.ok(table, "Couple table created")


@router.post("/seating/{wedding_id}/guest", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_guest_table(
    wedding_id: int,
    table_data: GuestTableCreate,
    db: AsyncSession = Depends(get_async_db)
):
    table = await AsyncSeatingService.create_guest_table(db, wedding_id, table_data)
    return ApiResponse.ok(table, "Guest table created")


@router.post("/seating/{wedding_id}/guest/{table_id}/assign", response_model=ApiResponse)
async def assign_guests(
    wedding_id: int,
    table_id: int,
    assignment: GuestAssignment,
    db: AsyncSession = Depends(get_async_db)
):
    """Seat guests at a guest table; refused when the table would overflow."""
    table = await AsyncSeatingService.assign_guests(db, wedding_id, table_id, assignment)
    return ApiResponse.ok(table, "Guests assigned to table")


@router.put("/seating/{table_id}", response_model=ApiResponse)
async def update_table(table_id: int, table_data: SeatingTableUpdate, db: AsyncSession = Depends(get_async_db)):
    table = await AsyncSeatingService.update_table(db, table_id, table_data)
    return ApiResponse.ok(table, "Table updated")


@router.delete("/seating/{table_id}", response_model=ApiResponse)
async def delete_table(table_id: int, db: AsyncSession = Depends(get_async_db)):
    await AsyncSeatingService.delete_table(db, table_id)
    return ApiResponse.ok(message="Table deleted")
