from typing import Optional, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wedding_planner.models.inventory import InventoryItem, InventoryAllocation
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.models.wedding import Wedding
from wedding_planner.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryItemResponse,
    AllocationCreate,
    AllocationUpdate,
    AllocationResponse
)
from wedding_planner.services.async_error_handler import (
    handle_async_db_errors,
    async_transaction_rollback,
    bad_request,
    not_found,
    conflict
)
from wedding_planner.services.costing import CostingService, to_money
from wedding_planner.utils.logger import inventory_logger

ALL = "all"


def build_allocation_response(allocation: InventoryAllocation) -> AllocationResponse:
    item = allocation.item
    return AllocationResponse(
        allocation_id=allocation.allocation_id,
        wedding_id=allocation.wedding_id,
        table_id=allocation.table_id,
        inventory_id=allocation.inventory_id,
        item_name=item.item_name,
        category=item.category,
        item_condition=item.item_condition,
        quantity_used=allocation.quantity_used,
        unit_rental_cost=float(allocation.unit_rental_cost),
        total_cost=float(to_money(allocation.unit_rental_cost) * allocation.quantity_used)
    )


class AsyncInventoryService:
    """
    Rental equipment and its allocation to weddings.

    Every allocation change recomputes the wedding's equipment rental cost and
    total cost; a failed recompute is logged and does not undo the change.
    """

    @staticmethod
    @handle_async_db_errors("fetch inventory items")
    async def get_items(
        db: AsyncSession,
        category: Optional[str] = None,
        item_condition: Optional[str] = None
    ) -> List[InventoryItemResponse]:
        """List inventory items by name; a filter value of ``all`` means no filter."""
        stmt = select(InventoryItem)
        if category and category != ALL:
            stmt = stmt.where(InventoryItem.category == category)
        if item_condition and item_condition != ALL:
            stmt = stmt.where(InventoryItem.item_condition == item_condition)
        stmt = stmt.order_by(InventoryItem.item_name.asc())

        items = (await db.execute(stmt)).scalars().all()
        return [InventoryItemResponse.model_validate(i) for i in items]

    @staticmethod
    @handle_async_db_errors("fetch inventory item")
    async def get_item(db: AsyncSession, inventory_id: int) -> InventoryItemResponse:
        item = await db.get(InventoryItem, inventory_id, populate_existing=True)
        if not item:
            raise not_found("Inventory item not found")
        return InventoryItemResponse.model_validate(item)

    @staticmethod
    @handle_async_db_errors("create inventory item")
    async def create_item(db: AsyncSession, item_data: InventoryItemCreate) -> InventoryItemResponse:
        async with async_transaction_rollback(db):
            item = InventoryItem(**item_data.model_dump())
            db.add(item)
            await db.flush()

        inventory_logger.success("Created inventory item", "ITEM", inventory_id=item.inventory_id, item_name=item.item_name)
        return await AsyncInventoryService.get_item(db, item.inventory_id)

    @staticmethod
    @handle_async_db_errors("update inventory item")
    async def update_item(db: AsyncSession, inventory_id: int, item_data: InventoryItemUpdate) -> InventoryItemResponse:
        item = await db.get(InventoryItem, inventory_id)
        if not item:
            raise not_found("Inventory item not found")

        async with async_transaction_rollback(db):
            for field, value in item_data.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(item, field, value)

        return await AsyncInventoryService.get_item(db, inventory_id)

    @staticmethod
    @handle_async_db_errors("delete inventory item")
    async def delete_item(db: AsyncSession, inventory_id: int) -> None:
        item = await db.get(InventoryItem, inventory_id)
        if not item:
            raise not_found("Inventory item not found")

        allocations = await db.scalar(
            select(func.count(InventoryAllocation.allocation_id)).where(InventoryAllocation.inventory_id == inventory_id)
        )
        if allocations:
            raise conflict("Inventory item is allocated to weddings", f"{allocations} allocation(s) reference it")

        async with async_transaction_rollback(db):
            await db.delete(item)

        inventory_logger.info("Deleted inventory item", "ITEM", inventory_id=inventory_id)

    @staticmethod
    async def _get_allocation(db: AsyncSession, allocation_id: int) -> InventoryAllocation:
        stmt = (
            select(InventoryAllocation)
            .options(selectinload(InventoryAllocation.item))
            .where(InventoryAllocation.allocation_id == allocation_id)
            .execution_options(populate_existing=True)
        )
        allocation = (await db.execute(stmt)).scalar_one_or_none()
        if not allocation:
            raise not_found("Allocation not found")
        return allocation

    @staticmethod
    async def _validate_table(db: AsyncSession, wedding_id: int, table_id: Optional[int]) -> None:
        if table_id is None:
            return
        table = await db.get(SeatingTable, table_id)
        if table is None or table.wedding_id != wedding_id:
            raise bad_request("Invalid table for this wedding")

    @staticmethod
    @handle_async_db_errors("fetch allocations")
    async def get_allocations(db: AsyncSession, wedding_id: int) -> List[AllocationResponse]:
        stmt = (
            select(InventoryAllocation)
            .join(InventoryItem, InventoryItem.inventory_id == InventoryAllocation.inventory_id)
            .options(selectinload(InventoryAllocation.item))
            .where(InventoryAllocation.wedding_id == wedding_id)
            .order_by(InventoryItem.item_name.asc(), InventoryAllocation.allocation_id.asc())
            .execution_options(populate_existing=True)
        )
        allocations = (await db.execute(stmt)).scalars().all()
        return [build_allocation_response(a) for a in allocations]

    @staticmethod
    @handle_async_db_errors("create allocation")
    async def create_allocation(db: AsyncSession, data: AllocationCreate) -> AllocationResponse:
        """Allocate equipment to a wedding; the unit cost defaults to the item's rental cost."""
        if await db.get(Wedding, data.wedding_id) is None:
            raise not_found("Wedding not found")
        item = await db.get(InventoryItem, data.inventory_id)
        if item is None:
            raise not_found("Inventory item not found")
        await AsyncInventoryService._validate_table(db, data.wedding_id, data.table_id)

        unit_rental_cost = data.unit_rental_cost if data.unit_rental_cost is not None else item.rental_cost

        async with async_transaction_rollback(db):
            allocation = InventoryAllocation(
                wedding_id=data.wedding_id,
                table_id=data.table_id,
                inventory_id=data.inventory_id,
                quantity_used=data.quantity_used,
                unit_rental_cost=unit_rental_cost
            )
            db.add(allocation)
            await db.flush()
            await CostingService.try_update_wedding_costs(db, data.wedding_id)

        inventory_logger.success(
            "Allocated inventory to wedding",
            "ALLOCATE",
            allocation_id=allocation.allocation_id,
            wedding_id=data.wedding_id,
            inventory_id=data.inventory_id,
            quantity=data.quantity_used
        )
        return build_allocation_response(await AsyncInventoryService._get_allocation(db, allocation.allocation_id))

    @staticmethod
    @handle_async_db_errors("update allocation")
    async def update_allocation(db: AsyncSession, allocation_id: int, data: AllocationUpdate) -> AllocationResponse:
        allocation = await AsyncInventoryService._get_allocation(db, allocation_id)

        update_data = data.model_dump(exclude_unset=True)
        if "table_id" in update_data:
            await AsyncInventoryService._validate_table(db, allocation.wedding_id, update_data["table_id"])

        async with async_transaction_rollback(db):
            for field, value in update_data.items():
                if value is None and field != "table_id":
                    continue
                setattr(allocation, field, value)
            await db.flush()
            await CostingService.try_update_wedding_costs(db, allocation.wedding_id)

        return build_allocation_response(await AsyncInventoryService._get_allocation(db, allocation_id))

    @staticmethod
    @handle_async_db_errors("delete allocation")
    async def delete_allocation(db: AsyncSession, allocation_id: int) -> None:
        allocation = await AsyncInventoryService._get_allocation(db, allocation_id)
        wedding_id = allocation.wedding_id

        async with async_transaction_rollback(db):
            await db.delete(allocation)
            await db.flush()
            await CostingService.try_update_wedding_costs(db, wedding_id)

        inventory_logger.info("Released allocation", "ALLOCATE", allocation_id=allocation_id, wedding_id=wedding_id)
