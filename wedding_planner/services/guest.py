from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.models.dietary_restriction import DietaryRestriction
from wedding_planner.models.guest import Guest
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.models.wedding import Wedding
from wedding_planner.schemas.guest import GuestCreate, GuestUpdate, GuestResponse
from wedding_planner.services.async_error_handler import (
    handle_async_db_errors,
    async_transaction_rollback,
    bad_request,
    not_found
)
from wedding_planner.utils.logger import wedding_logger


class AsyncGuestService:

    @staticmethod
    def _query():
        return (
            select(
                Guest,
                DietaryRestriction.restriction_name,
                SeatingTable.table_number
            )
            .outerjoin(DietaryRestriction, DietaryRestriction.restriction_id == Guest.restriction_id)
            .outerjoin(SeatingTable, SeatingTable.table_id == Guest.table_id)
        )

    @staticmethod
    def _response(guest: Guest, restriction_name: Optional[str], table_number: Optional[str]) -> GuestResponse:
        response = GuestResponse.model_validate(guest)
        response.restriction_name = restriction_name
        response.table_number = table_number
        return response

    @staticmethod
    async def _validate_references(
        db: AsyncSession,
        wedding_id: int,
        table_id: Optional[int],
        restriction_id: Optional[int]
    ) -> None:
        if table_id is not None:
            table = await db.get(SeatingTable, table_id)
            if table is None or table.wedding_id != wedding_id:
                raise bad_request("Invalid table for this wedding")
        if restriction_id is not None and await db.get(DietaryRestriction, restriction_id) is None:
            raise bad_request(f"Unknown restriction id: {restriction_id}")

    @staticmethod
    @handle_async_db_errors("fetch guests")
    async def get_guests(db: AsyncSession, wedding_id: Optional[int] = None) -> List[GuestResponse]:
        stmt = AsyncGuestService._query()
        if wedding_id is not None:
            stmt = stmt.where(Guest.wedding_id == wedding_id)
        stmt = stmt.order_by(Guest.guest_name.asc())

        rows = (await db.execute(stmt)).all()
        return [AsyncGuestService._response(*row) for row in rows]

    @staticmethod
    @handle_async_db_errors("fetch guest")
    async def get_guest(db: AsyncSession, guest_id: int) -> GuestResponse:
        stmt = (
            AsyncGuestService._query()
            .where(Guest.guest_id == guest_id)
            .execution_options(populate_existing=True)
        )
        row = (await db.execute(stmt)).first()
        if row is None:
            raise not_found("Guest not found")
        return AsyncGuestService._response(*row)

    @staticmethod
    @handle_async_db_errors("create guest")
    async def create_guest(db: AsyncSession, guest_data: GuestCreate) -> GuestResponse:
        if await db.get(Wedding, guest_data.wedding_id) is None:
            raise bad_request(f"Unknown wedding id: {guest_data.wedding_id}")
        await AsyncGuestService._validate_references(
            db, guest_data.wedding_id, guest_data.table_id, guest_data.restriction_id
        )

        async with async_transaction_rollback(db):
            db_guest = Guest(**guest_data.model_dump())
            db.add(db_guest)
            await db.flush()

        wedding_logger.info("Added guest", "GUEST", guest_id=db_guest.guest_id, wedding_id=db_guest.wedding_id)
        return await AsyncGuestService.get_guest(db, db_guest.guest_id)

    @staticmethod
    @handle_async_db_errors("update guest")
    async def update_guest(db: AsyncSession, guest_id: int, guest_data: GuestUpdate) -> GuestResponse:
        db_guest = await db.get(Guest, guest_id)
        if not db_guest:
            raise not_found("Guest not found")

        update_data = guest_data.model_dump(exclude_unset=True)
        await AsyncGuestService._validate_references(
            db, db_guest.wedding_id, update_data.get("table_id"), update_data.get("restriction_id")
        )

        async with async_transaction_rollback(db):
            for field, value in update_data.items():
                if value is None and field in ("guest_name", "rsvp_status"):
                    continue
                setattr(db_guest, field, value)

        return await AsyncGuestService.get_guest(db, guest_id)

    @staticmethod
    @handle_async_db_errors("delete guest")
    async def delete_guest(db: AsyncSession, guest_id: int) -> None:
        db_guest = await db.get(Guest, guest_id)
        if not db_guest:
            raise not_found("Guest not found")

        async with async_transaction_rollback(db):
            await db.delete(db_guest)

        wedding_logger.info("Removed guest", "GUEST", guest_id=guest_id)
