from typing import List, Dict

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.models.couple import Couple
from wedding_planner.models.dietary_restriction import DietaryRestriction
from wedding_planner.models.guest import Guest
from wedding_planner.models.menu_item import MenuItem
from wedding_planner.models.wedding import Wedding
from wedding_planner.schemas.dietary_restriction import (
    DietaryRestrictionCreate,
    DietaryRestrictionUpdate,
    DietaryRestrictionResponse,
    AffectedGuest,
    AffectedMenuItem
)
from wedding_planner.services.async_error_handler import (
    handle_async_db_errors,
    async_transaction_rollback,
    not_found,
    conflict
)
from wedding_planner.utils.logger import menu_logger


class AsyncDietaryRestrictionService:
    """Dietary restrictions with the guests and menu items they affect."""

    @staticmethod
    async def _counts(db: AsyncSession, column) -> Dict[int, int]:
        stmt = (
            select(column, func.count())
            .where(column.is_not(None))
            .group_by(column)
        )
        return {restriction_id: count for restriction_id, count in (await db.execute(stmt)).all()}

    @staticmethod
    def _response(restriction: DietaryRestriction, guests: int, menu_items: int) -> DietaryRestrictionResponse:
        return DietaryRestrictionResponse(
            restriction_id=restriction.restriction_id,
            restriction_name=restriction.restriction_name,
            severity_level=restriction.severity_level,
            restriction_type=restriction.restriction_type,
            affected_guests=guests,
            menu_items_count=menu_items
        )

    @staticmethod
    @handle_async_db_errors("fetch dietary restrictions")
    async def get_restrictions(db: AsyncSession) -> List[DietaryRestrictionResponse]:
        restrictions = (await db.execute(
            select(DietaryRestriction).order_by(DietaryRestriction.restriction_id.desc())
        )).scalars().all()
        guest_counts = await AsyncDietaryRestrictionService._counts(db, Guest.restriction_id)
        menu_counts = await AsyncDietaryRestrictionService._counts(db, MenuItem.restriction_id)

        return [
            AsyncDietaryRestrictionService._response(
                r,
                guest_counts.get(r.restriction_id, 0),
                menu_counts.get(r.restriction_id, 0)
            )
            for r in restrictions
        ]

    @staticmethod
    @handle_async_db_errors("fetch dietary restriction")
    async def get_restriction(db: AsyncSession, restriction_id: int) -> DietaryRestrictionResponse:
        """Get a restriction with the affected guests (and their weddings) and menu items."""
        restriction = await db.get(DietaryRestriction, restriction_id, populate_existing=True)
        if not restriction:
            raise not_found("Dietary restriction not found")

        guest_stmt = (
            select(
                Guest.guest_id,
                Guest.guest_name,
                Wedding.wedding_id,
                Wedding.wedding_date,
                Couple.partner1_name,
                Couple.partner2_name
            )
            .join(Wedding, Wedding.wedding_id == Guest.wedding_id)
            .join(Couple, Couple.couple_id == Wedding.couple_id)
            .where(Guest.restriction_id == restriction_id)
            .order_by(Wedding.wedding_date.desc(), Guest.guest_name)
        )
        guests = [AffectedGuest(**row._asdict()) for row in (await db.execute(guest_stmt)).all()]

        menu_stmt = (
            select(MenuItem.menu_item_id, MenuItem.menu_name, MenuItem.menu_type, MenuItem.selling_price)
            .where(MenuItem.restriction_id == restriction_id)
            .order_by(MenuItem.menu_type, MenuItem.menu_name)
        )
        menu_items = [
            AffectedMenuItem(
                menu_item_id=row.menu_item_id,
                menu_name=row.menu_name,
                menu_type=row.menu_type,
                selling_price=float(row.selling_price)
            )
            for row in (await db.execute(menu_stmt)).all()
        ]

        response = AsyncDietaryRestrictionService._response(restriction, len(guests), len(menu_items))
        response.affected_guests_list = guests
        response.affected_menu_items = menu_items
        return response

    @staticmethod
    @handle_async_db_errors("create dietary restriction")
    async def create_restriction(db: AsyncSession, data: DietaryRestrictionCreate) -> DietaryRestrictionResponse:
        async with async_transaction_rollback(db):
            restriction = DietaryRestriction(**data.model_dump())
            db.add(restriction)
            await db.flush()

        menu_logger.info("Created dietary restriction", "RESTRICTION", restriction_id=restriction.restriction_id)
        return AsyncDietaryRestrictionService._response(restriction, 0, 0)

    @staticmethod
    @handle_async_db_errors("update dietary restriction")
    async def update_restriction(
        db: AsyncSession,
        restriction_id: int,
        data: DietaryRestrictionUpdate
    ) -> DietaryRestrictionResponse:
        restriction = await db.get(DietaryRestriction, restriction_id)
        if not restriction:
            raise not_found("Dietary restriction not found")

        async with async_transaction_rollback(db):
            for field, value in data.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(restriction, field, value)

        return await AsyncDietaryRestrictionService.get_restriction(db, restriction_id)

    @staticmethod
    @handle_async_db_errors("delete dietary restriction")
    async def delete_restriction(db: AsyncSession, restriction_id: int) -> None:
        """Delete a restriction no guest or menu item refers to."""
        restriction = await db.get(DietaryRestriction, restriction_id)
        if not restriction:
            raise not_found("Dietary restriction not found")

        guests = await db.scalar(select(func.count(Guest.guest_id)).where(Guest.restriction_id == restriction_id))
        menu_items = await db.scalar(
            select(func.count(MenuItem.menu_item_id)).where(MenuItem.restriction_id == restriction_id)
        )
        if guests or menu_items:
            raise conflict(
                "Dietary restriction is in use",
                f"Referenced by {guests} guest(s) and {menu_items} menu item(s)"
            )

        async with async_transaction_rollback(db):
            await db.delete(restriction)

        menu_logger.info("Deleted dietary restriction", "RESTRICTION", restriction_id=restriction_id)
