from typing import List

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.core.config import settings
from wedding_planner.models.guest import Guest
from wedding_planner.models.inventory import InventoryAllocation
from wedding_planner.models.package import TablePackage
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.models.wedding import Wedding
from wedding_planner.schemas.seating import (
    GuestTableCreate,
    GuestAssignment,
    SeatingTableUpdate,
    SeatingTableResponse
)
from wedding_planner.services.async_error_handler import (
    handle_async_db_errors,
    async_transaction_rollback,
    bad_request,
    not_found,
    conflict
)
from wedding_planner.utils.logger import wedding_logger

COUPLE_TABLE = "couple"
GUEST_TABLE = "guest"
COUPLE_TABLE_NUMBER = "C"


def table_sort_key(table: SeatingTable):
    """Couple table first, then guest tables by numeric table number."""
    if table.table_category == COUPLE_TABLE:
        return (0, 0, table.table_number)
    number = int(table.table_number) if table.table_number.isdigit() else float("inf")
    return (1, number, table.table_number)


class AsyncSeatingService:
    """
    Seating tables of a wedding: one couple table plus guest tables whose
    capacity lies within the configured bounds.
    """

    @staticmethod
    async def _require_wedding(db: AsyncSession, wedding_id: int) -> None:
        if await db.get(Wedding, wedding_id) is None:
            raise not_found("Wedding not found")

    @staticmethod
    def _check_capacity(capacity: int) -> None:
        low, high = settings.GUEST_TABLE_MIN_CAPACITY, settings.GUEST_TABLE_MAX_CAPACITY
        if capacity < low or capacity > high:
            raise bad_request(f"Capacity must be an integer between {low} and {high}")

    @staticmethod
    async def _guest_count(db: AsyncSession, table_id: int) -> int:
        return await db.scalar(select(func.count(Guest.guest_id)).where(Guest.table_id == table_id)) or 0

    @staticmethod
    async def _table_response(db: AsyncSession, table: SeatingTable) -> SeatingTableResponse:
        return SeatingTableResponse(
            table_id=table.table_id,
            wedding_id=table.wedding_id,
            table_number=table.table_number,
            table_category=table.table_category,
            capacity=table.capacity,
            guest_count=await AsyncSeatingService._guest_count(db, table.table_id)
        )

    @staticmethod
    @handle_async_db_errors("list seating")
    async def get_tables(db: AsyncSession, wedding_id: int) -> List[SeatingTableResponse]:
        """List a wedding's tables with their seated guest counts."""
        guest_counts = (
            select(Guest.table_id, func.count(Guest.guest_id).label("cnt"))
            .where(Guest.table_id.is_not(None))
            .group_by(Guest.table_id)
            .subquery()
        )
        stmt = (
            select(SeatingTable, func.coalesce(guest_counts.c.cnt, 0))
            .outerjoin(guest_counts, guest_counts.c.table_id == SeatingTable.table_id)
            .where(SeatingTable.wedding_id == wedding_id)
        )
        rows = (await db.execute(stmt)).all()
        rows = sorted(rows, key=lambda row: table_sort_key(row[0]))

        return [
            SeatingTableResponse(
                table_id=table.table_id,
                wedding_id=table.wedding_id,
                table_number=table.table_number,
                table_category=table.table_category,
                capacity=table.capacity,
                guest_count=count
            )
            for table, count in rows
        ]

    @staticmethod
    @handle_async_db_errors("create couple table")
    async def create_couple_table(db: AsyncSession, wedding_id: int) -> SeatingTableResponse:
        """Create the wedding's single couple table."""
        await AsyncSeatingService._require_wedding(db, wedding_id)

        existing = await db.execute(
            select(SeatingTable.table_id).where(
                SeatingTable.wedding_id == wedding_id,
                SeatingTable.table_category == COUPLE_TABLE
            )
        )
        if existing.first() is not None:
            raise conflict("Couple table already exists")

        async with async_transaction_rollback(db):
            table = SeatingTable(
                wedding_id=wedding_id,
                table_number=COUPLE_TABLE_NUMBER,
                table_category=COUPLE_TABLE,
                capacity=None
            )
            db.add(table)
            await db.flush()

        wedding_logger.info("Created couple table", "SEATING", wedding_id=wedding_id, table_id=table.table_id)
        return await AsyncSeatingService._table_response(db, table)

    @staticmethod
    @handle_async_db_errors("create guest table")
    async def create_guest_table(db: AsyncSession, wedding_id: int, table_data: GuestTableCreate) -> SeatingTableResponse:
        """Create a guest table numbered after the wedding's highest guest table."""
        AsyncSeatingService._check_capacity(table_data.capacity)
        await AsyncSeatingService._require_wedding(db, wedding_id)

        numbers = await db.execute(
            select(SeatingTable.table_number).where(
                SeatingTable.wedding_id == wedding_id,
                SeatingTable.table_category == GUEST_TABLE
            )
        )
        highest = max((int(n) for n in numbers.scalars().all() if n.isdigit()), default=0)

        async with async_transaction_rollback(db):
            table = SeatingTable(
                wedding_id=wedding_id,
                table_number=str(highest + 1),
                table_category=GUEST_TABLE,
                capacity=table_data.capacity
            )
            db.add(table)
            await db.flush()

        wedding_logger.info(
            "Created guest table",
            "SEATING",
            wedding_id=wedding_id,
            table_id=table.table_id,
            table_number=table.table_number
        )
        return await AsyncSeatingService._table_response(db, table)

    @staticmethod
    @handle_async_db_errors("assign guests")
    async def assign_guests(
        db: AsyncSession,
        wedding_id: int,
        table_id: int,
        assignment: GuestAssignment
    ) -> SeatingTableResponse:
        """Seat guests of the wedding at a guest table without exceeding its capacity."""
        table = await db.get(SeatingTable, table_id)
        if table is None or table.wedding_id != wedding_id or table.table_category != GUEST_TABLE:
            raise bad_request("Invalid guest table for this wedding")

        guest_ids = set(assignment.guest_ids)
        result = await db.execute(
            select(Guest.guest_id, Guest.table_id).where(
                Guest.guest_id.in_(guest_ids),
                Guest.wedding_id == wedding_id
            )
        )
        guests = result.all()
        unknown = sorted(guest_ids - {g.guest_id for g in guests})
        if unknown:
            raise bad_request(f"Guests not invited to this wedding: {unknown}")

        newly_seated = [g.guest_id for g in guests if g.table_id != table_id]
        current = await AsyncSeatingService._guest_count(db, table_id)
        if table.capacity is not None and current + len(newly_seated) > table.capacity:
            raise conflict(
                "Assigning exceeds table capacity",
                f"Table seats {table.capacity}, {current} already seated, {len(newly_seated)} requested"
            )

        async with async_transaction_rollback(db):
            await db.execute(
                update(Guest)
                .where(Guest.guest_id.in_(newly_seated))
                .values(table_id=table_id)
                .execution_options(synchronize_session="fetch")
            )

        wedding_logger.info("Guests assigned to table", "SEATING", table_id=table_id, guest_ids=sorted(guest_ids))
        return await AsyncSeatingService._table_response(db, table)

    @staticmethod
    @handle_async_db_errors("update table")
    async def update_table(db: AsyncSession, table_id: int, table_data: SeatingTableUpdate) -> SeatingTableResponse:
        table = await db.get(SeatingTable, table_id)
        if not table:
            raise not_found("Table not found")

        update_data = table_data.model_dump(exclude_unset=True)
        if "capacity" in update_data:
            if table.table_category == COUPLE_TABLE:
                raise bad_request("Couple table has no capacity")
            if update_data["capacity"] is None:
                raise bad_request("Guest table capacity is required")
            AsyncSeatingService._check_capacity(update_data["capacity"])
            seated = await AsyncSeatingService._guest_count(db, table_id)
            if seated > update_data["capacity"]:
                raise conflict(f"Table already seats {seated} guests")
        if update_data.get("table_number") is None:
            update_data.pop("table_number", None)

        async with async_transaction_rollback(db):
            for field, value in update_data.items():
                setattr(table, field, value)

        return await AsyncSeatingService._table_response(db, table)

    @staticmethod
    @handle_async_db_errors("delete table")
    async def delete_table(db: AsyncSession, table_id: int) -> None:
        """Delete an empty guest table; the couple table is permanent."""
        table = await db.get(SeatingTable, table_id)
        if not table:
            raise not_found("Table not found")
        if table.table_category == COUPLE_TABLE:
            raise bad_request("Couple table cannot be deleted")

        if await AsyncSeatingService._guest_count(db, table_id) > 0:
            raise conflict("Cannot delete table with assigned guests")

        packages = await db.scalar(select(func.count(TablePackage.assignment_id)).where(TablePackage.table_id == table_id))
        if packages:
            raise conflict("Cannot delete table with assigned packages")

        async with async_transaction_rollback(db):
            await db.execute(
                update(InventoryAllocation)
                .where(InventoryAllocation.table_id == table_id)
                .values(table_id=None)
                .execution_options(synchronize_session=False)
            )
            await db.delete(table)

        wedding_logger.info("Deleted table", "SEATING", table_id=table_id)
