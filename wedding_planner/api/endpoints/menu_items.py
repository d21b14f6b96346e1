from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.menu_item import MenuItemCreate, MenuItemUpdate
from wedding_planner.services.menu_item import AsyncMenuItemService

router = APIRouter()


@router.get("/", response_model=ApiResponse)
@router.get("", response_model=ApiResponse)
async def list_menu_items(
    menu_type: Optional[str] = Query(None, description="Filter by menu type"),
    restriction_id: Optional[int] = Query(None, description="Filter by dietary restriction"),
    wedding_id: Optional[int] = Query(None, description="Only items served at this wedding, with usage counts"),
    db: AsyncSession = Depends(get_async_db)
):
    """Get menu items with their derived costing fields."""
    items = await AsyncMenuItemService.get_menu_items(db, menu_type, restriction_id, wedding_id)
    return ApiResponse.listing(items)


@router.get("/{menu_item_id}", response_model=ApiResponse)
async def get_menu_item(menu_item_id: int, db: AsyncSession = Depends(get_async_db)):
    """Get a menu item with its recipe."""
    return ApiResponse.ok(await AsyncMenuItemService.get_menu_item(db, menu_item_id))


@router.post("/", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_menu_item(item_data: MenuItemCreate, db: AsyncSession = Depends(get_async_db)):
    """Create a menu item together with its recipe lines."""
    item = await AsyncMenuItemService.create_menu_item(db, item_data)
    return ApiResponse.ok(item, "Menu item created successfully")


@router.put("/{menu_item_id}", response_model=ApiResponse)
async def update_menu_item(
    menu_item_id: int,
    item_data: MenuItemUpdate,
    db: AsyncSession = Depends(get_async_db)
):
    """Update a menu item; a supplied recipe replaces the existing one."""
    item = await AsyncMenuItemService.update_menu_item(db, menu_item_id, item_data)
    return ApiResponse.ok(item, "Menu item updated successfully")


@router.delete("/{menu_item_id}", response_model=ApiResponse)
async def delete_menu_item(menu_item_id: int, db: AsyncSession = Depends(get_async_db)):
    await AsyncMenuItemService.delete_menu_item(db, menu_item_id)
    return ApiResponse.ok(message="Menu item deleted successfully")
