from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.ingredient import IngredientCreate, IngredientUpdate, IngredientRestock
from wedding_planner.services.ingredient import AsyncIngredientService

router = APIRouter()


@router.get("/", response_model=ApiResponse)
@router.get("", response_model=ApiResponse)
async def list_ingredients(db: AsyncSession = Depends(get_async_db)):
    """Get ingredients with usage counts and reorder flags."""
    return ApiResponse.listing(await AsyncIngredientService.get_ingredients(db))


@router.get("/low-stock", response_model=ApiResponse)
async def list_low_stock_ingredients(db: AsyncSession = Depends(get_async_db)):
    """Get ingredients at or below their reorder level."""
    return ApiResponse.listing(await AsyncIngredientService.get_ingredients(db, low_stock_only=True))


@router.get("/{ingredient_id}", response_model=ApiResponse)
async def get_ingredient(ingredient_id: int, db: AsyncSession = Depends(get_async_db)):
    """Get an ingredient with the menu items that use it."""
    return ApiResponse.ok(await AsyncIngredientService.get_ingredient(db, ingredient_id))


@router.post("/", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_ingredient(ingredient_data: IngredientCreate, db: AsyncSession = Depends(get_async_db)):
    ingredient = await AsyncIngredientService.create_ingredient(db, ingredient_data)
    return ApiResponse.ok(ingredient, "Ingredient created successfully")


@router.put("/{ingredient_id}/restock", response_model=ApiResponse)
async def restock_ingredient(
    ingredient_id: int,
    restock: IngredientRestock,
    db: AsyncSession = Depends(get_async_db)
):
    """Adjust stock by a signed delta; the result never drops below zero."""
    ingredient = await AsyncIngredientService.restock_ingredient(db, ingredient_id, restock)
    return ApiResponse.ok(ingredient, "Stock updated successfully")


@router.put("/{ingredient_id}", response_model=ApiResponse)
async def update_ingredient(
    ingredient_id: int,
    ingredient_data: IngredientUpdate,
    db: AsyncSession = Depends(get_async_db)
):
    ingredient = await AsyncIngredientService.update_ingredient(db, ingredient_id, ingredient_data)
    return ApiResponse.ok(ingredient, "Ingredient updated successfully")


@router.delete("/{ingredient_id}", response_model=ApiResponse)
async def delete_ingredient(ingredient_id: int, db: AsyncSession = Depends(get_async_db)):
    await AsyncIngredientService.delete_ingredient(db, ingredient_id)
    return ApiResponse.ok(message="Ingredient deleted successfully")
