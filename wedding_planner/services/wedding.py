from typing import Optional, List

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wedding_planner.models.couple import Couple
from wedding_planner.models.guest import Guest
from wedding_planner.models.inventory import InventoryAllocation
from wedding_planner.models.package import TablePackage
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.models.wedding import Wedding
from wedding_planner.schemas.wedding import WeddingCreate, WeddingUpdate, WeddingResponse, WeddingCosts
from wedding_planner.services.async_error_handler import (
    handle_async_db_errors,
    async_transaction_rollback,
    bad_request,
    not_found
)
from wedding_planner.services.costing import CostingService
from wedding_planner.utils.logger import wedding_logger


def build_wedding_response(wedding: Wedding, couple: Optional[Couple] = None) -> WeddingResponse:
    response = WeddingResponse.model_validate(wedding)
    if couple is not None:
        response.partner1_name = couple.partner1_name
        response.partner2_name = couple.partner2_name
    return response


class AsyncWeddingService:
    """
    Wedding records. Cost fields are derived by CostingService and are never
    written from request data.
    """

    @staticmethod
    @handle_async_db_errors("fetch weddings")
    async def get_weddings(db: AsyncSession, couple_id: Optional[int] = None) -> List[WeddingResponse]:
        """List weddings, latest date first, with the couple's names."""
        stmt = select(Wedding).options(selectinload(Wedding.couple))
        if couple_id is not None:
            stmt = stmt.where(Wedding.couple_id == couple_id)
        stmt = (
            stmt.order_by(Wedding.wedding_date.desc(), Wedding.wedding_id.desc())
            .execution_options(populate_existing=True)
        )

        weddings = (await db.execute(stmt)).scalars().all()
        return [build_wedding_response(w, w.couple) for w in weddings]

    @staticmethod
    @handle_async_db_errors("fetch wedding")
    async def get_wedding(db: AsyncSession, wedding_id: int) -> WeddingResponse:
        stmt = (
            select(Wedding)
            .options(selectinload(Wedding.couple))
            .where(Wedding.wedding_id == wedding_id)
            .execution_options(populate_existing=True)
        )
        wedding = (await db.execute(stmt)).scalar_one_or_none()
        if not wedding:
            raise not_found("Wedding not found")
        return build_wedding_response(wedding, wedding.couple)

    @staticmethod
    async def _require_couple(db: AsyncSession, couple_id: int) -> None:
        if await db.get(Couple, couple_id) is None:
            raise bad_request(f"Unknown couple id: {couple_id}")

    @staticmethod
    @handle_async_db_errors("create wedding")
    async def create_wedding(db: AsyncSession, wedding_data: WeddingCreate) -> WeddingResponse:
        await AsyncWeddingService._require_couple(db, wedding_data.couple_id)

        async with async_transaction_rollback(db):
            db_wedding = Wedding(**wedding_data.model_dump())
            db.add(db_wedding)
            await db.flush()

        wedding_logger.success(
            "Created wedding",
            "CREATE",
            wedding_id=db_wedding.wedding_id,
            couple_id=db_wedding.couple_id,
            wedding_date=str(db_wedding.wedding_date)
        )
        return await AsyncWeddingService.get_wedding(db, db_wedding.wedding_id)

    @staticmethod
    @handle_async_db_errors("update wedding")
    async def update_wedding(db: AsyncSession, wedding_id: int, wedding_data: WeddingUpdate) -> WeddingResponse:
        db_wedding = await db.get(Wedding, wedding_id)
        if not db_wedding:
            raise not_found("Wedding not found")

        update_data = wedding_data.model_dump(exclude_unset=True)
        if update_data.get("couple_id") is not None:
            await AsyncWeddingService._require_couple(db, update_data["couple_id"])

        async with async_transaction_rollback(db):
            for field, value in update_data.items():
                if value is None and field in ("couple_id", "wedding_date", "venue"):
                    continue
                setattr(db_wedding, field, value)

        return await AsyncWeddingService.get_wedding(db, wedding_id)

    @staticmethod
    @handle_async_db_errors("delete wedding")
    async def delete_wedding(db: AsyncSession, wedding_id: int) -> None:
        """Delete a wedding with its guests, tables, package assignments and allocations."""
        db_wedding = await db.get(Wedding, wedding_id)
        if not db_wedding:
            raise not_found("Wedding not found")

        table_ids = select(SeatingTable.table_id).where(SeatingTable.wedding_id == wedding_id)

        async with async_transaction_rollback(db):
            await db.execute(delete(TablePackage).where(TablePackage.table_id.in_(table_ids)))
            await db.execute(delete(InventoryAllocation).where(InventoryAllocation.wedding_id == wedding_id))
            await db.execute(delete(Guest).where(Guest.wedding_id == wedding_id))
            await db.execute(delete(SeatingTable).where(SeatingTable.wedding_id == wedding_id))
            await db.execute(delete(Wedding).where(Wedding.wedding_id == wedding_id))

        wedding_logger.info("Deleted wedding", "DELETE", wedding_id=wedding_id)

    @staticmethod
    @handle_async_db_errors("recalculate wedding costs")
    async def recalculate_costs(db: AsyncSession, wedding_id: int) -> WeddingCosts:
        """Run the cost aggregator for one wedding on demand."""
        if await db.get(Wedding, wedding_id) is None:
            raise not_found("Wedding not found")

        async with async_transaction_rollback(db):
            costs = await CostingService.update_wedding_costs(db, wedding_id)
        return costs
