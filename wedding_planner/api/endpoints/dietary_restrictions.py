from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.dietary_restriction import DietaryRestrictionCreate, DietaryRestrictionUpdate
from wedding_planner.services.dietary_restriction import AsyncDietaryRestrictionService

router = APIRouter()


@router.get("/", response_model=ApiResponse)
@router.get("", response_model=ApiResponse)
async def list_restrictions(db: AsyncSession = Depends(get_async_db)):
    """Get dietary restrictions with affected guest and menu item counts."""
    return ApiResponse.listing(await AsyncDietaryRestrictionService.get_restrictions(db))


@router.get("/{restriction_id}", response_model=ApiResponse)
async def get_restriction(restriction_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.ok(await AsyncDietaryRestrictionService.get_restriction(db, restriction_id))


@router.post("/", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_restriction(data: DietaryRestrictionCreate, db: AsyncSession = Depends(get_async_db)):
    restriction = await AsyncDietaryRestrictionService.create_restriction(db, data)
    return ApiResponse.ok(restriction, "Dietary restriction created successfully")


@router.put("/{restriction_id}", response_model=ApiResponse)
async def update_restriction(
    restriction_id: int,
    data: DietaryRestrictionUpdate,
    db: AsyncSession = Depends(get_async_db)
):
    restriction = await AsyncDietaryRestrictionService.update_restriction(db, restriction_id, data)
    return ApiResponse.ok(restriction, "Dietary restriction updated successfully")


@router.delete("/{restriction_id}", response_model=ApiResponse)
async def delete_restriction(restriction_id: int, db: AsyncSession = Depends(get_async_db)):
    await AsyncDietaryRestrictionService.delete_restriction(db, restriction_id)
    return ApiResponse.ok(message="Dietary restriction deleted successfully")
