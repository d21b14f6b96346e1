from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemUpdate,
    AllocationCreate,
    AllocationUpdate
)
from wedding_planner.services.inventory import AsyncInventoryService

router = APIRouter()


@router.get("/", response_model=ApiResponse)
@router.get("", response_model=ApiResponse)
async def list_items(
    category: Optional[str] = Query(None, description="Filter by category, 'all' for no filter"),
    item_condition: Optional[str] = Query(None, description="Filter by condition, 'all' for no filter"),
    db: AsyncSession = Depends(get_async_db)
):
    return ApiResponse.listing(await AsyncInventoryService.get_items(db, category, item_condition))


# Allocation routes

@router.get("/allocations/{wedding_id}", response_model=ApiResponse)
async def list_allocations(wedding_id: int, db: AsyncSession = Depends(get_async_db)):
    """Get the equipment allocated to a wedding."""
    return ApiResponse.listing(await AsyncInventoryService.get_allocations(db, wedding_id))


@router.post("/allocations", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_allocation(data: AllocationCreate, db: AsyncSession = Depends(get_async_db)):
    """Allocate equipment to a wedding and recompute its costs."""
    allocation = await AsyncInventoryService.create_allocation(db, data)
    return ApiResponse.ok(allocation, "Inventory allocated successfully")


@router.put("/allocations/{allocation_id}", response_model=ApiResponse)
async def update_allocation(allocation_id: int, data: AllocationUpdate, db: AsyncSession = Depends(get_async_db)):
    allocation = await AsyncInventoryService.update_allocation(db, allocation_id, data)
    return ApiResponse.ok(allocation, "Allocation updated successfully")


@router.delete("/allocations/{allocation_id}", response_model=ApiResponse)
async def delete_allocation(allocation_id: int, db: AsyncSession = Depends(get_async_db)):
    await AsyncInventoryService.delete_allocation(db, allocation_id)
    return ApiResponse.ok(message="Allocation removed successfully")


# Item routes

@router.get("/{inventory_id}", response_model=ApiResponse)
async def get_item(inventory_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.ok(await AsyncInventoryService.get_item(db, inventory_id))


@router.post("/", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_item(item_data: InventoryItemCreate, db: AsyncSession = Depends(get_async_db)):
    item = await AsyncInventoryService.create_item(db, item_data)
    return ApiResponse.ok(item, "Inventory item created successfully")


@router.put("/{inventory_id}", response_model=ApiResponse)
async def update_item(inventory_id: int, item_data: InventoryItemUpdate, db: AsyncSession = Depends(get_async_db)):
    item = await AsyncInventoryService.update_item(db, inventory_id, item_data)
    return ApiResponse.ok(item, "Inventory item updated successfully")


@router.delete("/{inventory_id}", response_model=ApiResponse)
async def delete_item(inventory_id: int, db: AsyncSession = Depends(get_async_db)):
    await AsyncInventoryService.delete_item(db, inventory_id)
    return ApiResponse.ok(message="Inventory item deleted successfully")
