from typing import List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.models.couple import Couple
from wedding_planner.models.wedding import Wedding
from wedding_planner.schemas.couple import CoupleCreate, CoupleUpdate, CoupleResponse
from wedding_planner.schemas.wedding import WeddingResponse
from wedding_planner.services.async_error_handler import (
    handle_async_db_errors,
    async_transaction_rollback,
    reject_null_fields,
    not_found,
    conflict
)
from wedding_planner.services.wedding import build_wedding_response
from wedding_planner.utils.logger import wedding_logger


class AsyncCoupleService:
    """Couple records and their weddings."""

    @staticmethod
    @handle_async_db_errors("fetch couples")
    async def get_couples(db: AsyncSession) -> List[CoupleResponse]:
        """List couples, newest first, with their wedding count and latest wedding date."""
        stmt = (
            select(
                Couple,
                func.count(Wedding.wedding_id).label("wedding_count"),
                func.max(Wedding.wedding_date).label("last_wedding")
            )
            .outerjoin(Wedding, Wedding.couple_id == Couple.couple_id)
            .group_by(Couple.couple_id)
            .order_by(Couple.couple_id.desc())
        )
        rows = (await db.execute(stmt)).all()

        couples = []
        for couple, wedding_count, last_wedding in rows:
            response = CoupleResponse.model_validate(couple)
            response.wedding_count = wedding_count
            response.last_wedding = last_wedding
            couples.append(response)
        return couples

    @staticmethod
    @handle_async_db_errors("fetch couple")
    async def get_couple(db: AsyncSession, couple_id: int) -> CoupleResponse:
        couple = await db.get(Couple, couple_id, populate_existing=True)
        if not couple:
            raise not_found("Couple not found")
        return CoupleResponse.model_validate(couple)

    @staticmethod
    @handle_async_db_errors("fetch couple weddings")
    async def get_couple_weddings(db: AsyncSession, couple_id: int) -> List[WeddingResponse]:
        couple = await db.get(Couple, couple_id)
        if not couple:
            raise not_found("Couple not found")

        stmt = (
            select(Wedding)
            .where(Wedding.couple_id == couple_id)
            .order_by(Wedding.wedding_date.desc())
        )
        weddings = (await db.execute(stmt)).scalars().all()
        return [build_wedding_response(w, couple) for w in weddings]

    @staticmethod
    @handle_async_db_errors("create couple")
    async def create_couple(db: AsyncSession, couple_data: CoupleCreate) -> CoupleResponse:
        async with async_transaction_rollback(db):
            db_couple = Couple(**couple_data.model_dump())
            db.add(db_couple)
            await db.flush()

        wedding_logger.success("Created couple", "COUPLE", couple_id=db_couple.couple_id)
        return await AsyncCoupleService.get_couple(db, db_couple.couple_id)

    @staticmethod
    @handle_async_db_errors("update couple")
    async def update_couple(db: AsyncSession, couple_id: int, couple_data: CoupleUpdate) -> CoupleResponse:
        db_couple = await db.get(Couple, couple_id)
        if not db_couple:
            raise not_found("Couple not found")

        update_data = couple_data.model_dump(exclude_unset=True)
        reject_null_fields(
            update_data, "partner1_phone", "partner2_phone", "partner1_email", "partner2_email", "planner_contact"
        )

        async with async_transaction_rollback(db):
            for field, value in update_data.items():
                setattr(db_couple, field, value)

        return await AsyncCoupleService.get_couple(db, couple_id)

    @staticmethod
    @handle_async_db_errors("delete couple")
    async def delete_couple(db: AsyncSession, couple_id: int) -> None:
        """Delete a couple that has no weddings on record."""
        db_couple = await db.get(Couple, couple_id)
        if not db_couple:
            raise not_found("Couple not found")

        wedding_count = await db.scalar(select(func.count(Wedding.wedding_id)).where(Wedding.couple_id == couple_id))
        if wedding_count:
            raise conflict(
                "Couple has weddings on record",
                f"Delete the couple's {wedding_count} wedding(s) first"
            )

        async with async_transaction_rollback(db):
            await db.delete(db_couple)

        wedding_logger.info("Deleted couple", "COUPLE", couple_id=couple_id)
