from datetime import date
from typing import Optional, Tuple, Dict, Any

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wedding_planner.models.dietary_restriction import DietaryRestriction
from wedding_planner.models.guest import Guest
from wedding_planner.models.inventory import InventoryAllocation, InventoryItem
from wedding_planner.models.menu_item import MenuItem
from wedding_planner.models.package import Package, PackageMenuItem, TablePackage
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.models.wedding import Wedding
from wedding_planner.schemas.report import (
    ReportPeriod,
    FinancialReport,
    PackageTypeRevenue,
    PreviousPeriod
)
from wedding_planner.services.async_error_handler import handle_async_db_errors, bad_request, not_found
from wedding_planner.services.costing import to_money
from wedding_planner.services.inventory import build_allocation_response
from wedding_planner.services.seating import table_sort_key

DateRange = Optional[Tuple[date, date]]


def period_range(period: ReportPeriod, value: Optional[str]) -> DateRange:
    """
    Convert ``month``/``YYYY-MM`` or ``year``/``YYYY`` into a half-open date range.

    Returns None (no date filter) when value is empty.
    """
    if not value:
        return None
    try:
        if period == ReportPeriod.YEAR:
            year = int(value)
            return date(year, 1, 1), date(year + 1, 1, 1)
        year_str, month_str = value.split("-")
        year, month = int(year_str), int(month_str)
        start = date(year, month, 1)
    except ValueError:
        expected = "YYYY" if period == ReportPeriod.YEAR else "YYYY-MM"
        raise bad_request(f"Invalid {period.value} value '{value}', expected {expected}")
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


def previous_value(period: ReportPeriod, value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if period == ReportPeriod.YEAR:
        return str(int(value) - 1)
    year, month = (int(part) for part in value.split("-"))
    if month == 1:
        return f"{year - 1}-12"
    return f"{year}-{month - 1:02d}"


def _in_range(stmt, date_range: DateRange):
    if date_range is None:
        return stmt
    start, end = date_range
    return stmt.where(Wedding.wedding_date >= start, Wedding.wedding_date < end)


def _pct(part, whole) -> float:
    return round(float(part) / float(whole) * 100, 2) if whole else 0.0


class AsyncReportService:
    """Financial and per-wedding reports."""

    @staticmethod
    def _assigned_packages(*columns):
        return (
            select(*columns)
            .select_from(TablePackage)
            .join(SeatingTable, SeatingTable.table_id == TablePackage.table_id)
            .join(Wedding, Wedding.wedding_id == SeatingTable.wedding_id)
            .join(Package, Package.package_id == TablePackage.package_id)
        )

    @staticmethod
    async def _revenue_and_cogs(db: AsyncSession, date_range: DateRange) -> Tuple[Any, Any]:
        stmt = _in_range(
            AsyncReportService._assigned_packages(
                func.coalesce(func.sum(Package.selling_price), 0),
                func.coalesce(func.sum(Package.unit_cost), 0)
            ),
            date_range
        )
        revenue, cogs = (await db.execute(stmt)).one()
        return to_money(revenue), to_money(cogs)

    @staticmethod
    @handle_async_db_errors("generate financial report")
    async def financial_report(
        db: AsyncSession,
        period: ReportPeriod = ReportPeriod.MONTH,
        value: Optional[str] = None
    ) -> FinancialReport:
        """
        Revenue, cost of goods and profit for weddings dated in the period.

        Revenue is the sum of assigned package selling prices and COGS the sum
        of their unit costs; equipment rental cost is deducted for net profit.
        """
        date_range = period_range(period, value)

        revenue, cogs = await AsyncReportService._revenue_and_cogs(db, date_range)

        counts_stmt = _in_range(
            AsyncReportService._assigned_packages(
                func.count(func.distinct(TablePackage.table_id)),
                func.count(func.distinct(SeatingTable.wedding_id))
            ),
            date_range
        )
        table_assignments, weddings_with_packages = (await db.execute(counts_stmt)).one()

        equipment_stmt = _in_range(
            select(func.coalesce(func.sum(InventoryAllocation.quantity_used * InventoryAllocation.unit_rental_cost), 0))
            .select_from(InventoryAllocation)
            .join(Wedding, Wedding.wedding_id == InventoryAllocation.wedding_id),
            date_range
        )
        equipment_cost = to_money((await db.execute(equipment_stmt)).scalar())

        by_type_stmt = _in_range(
            AsyncReportService._assigned_packages(
                Package.package_type,
                func.coalesce(func.sum(Package.selling_price), 0).label("revenue"),
                func.coalesce(func.sum(Package.unit_cost), 0).label("cost"),
                func.count(func.distinct(TablePackage.table_id)).label("usage_count")
            ),
            date_range
        ).group_by(Package.package_type)
        by_type = [
            PackageTypeRevenue(
                package_type=row.package_type,
                revenue=float(to_money(row.revenue)),
                cost=float(to_money(row.cost)),
                usage_count=row.usage_count
            )
            for row in (await db.execute(by_type_stmt)).all()
        ]
        by_type.sort(key=lambda entry: entry.revenue, reverse=True)

        previous = PreviousPeriod()
        prev_value = previous_value(period, value)
        if prev_value:
            prev_revenue, prev_cogs = await AsyncReportService._revenue_and_cogs(db, period_range(period, prev_value))
            previous = PreviousPeriod(
                value=prev_value,
                total_revenue=float(prev_revenue),
                total_cogs=float(prev_cogs),
                net_profit=float(prev_revenue - prev_cogs)
            )

        gross_profit = revenue - cogs
        net_profit = gross_profit - equipment_cost

        return FinancialReport(
            period=period,
            value=value,
            total_revenue=float(revenue),
            total_cogs=float(cogs),
            total_gross_profit=float(gross_profit),
            total_equipment_cost=float(equipment_cost),
            net_profit=float(net_profit),
            gross_profit_margin=_pct(gross_profit, revenue),
            net_profit_margin=_pct(net_profit, revenue),
            total_table_assignments=table_assignments,
            weddings_with_packages=weddings_with_packages,
            revenue_by_package_type=by_type,
            previous_period=previous
        )

    @staticmethod
    async def _require_wedding(db: AsyncSession, wedding_id: int) -> None:
        if await db.get(Wedding, wedding_id) is None:
            raise not_found("Wedding not found")

    @staticmethod
    @handle_async_db_errors("generate seating report")
    async def seating_report(db: AsyncSession, wedding_id: int) -> Dict[str, Any]:
        """Tables of a wedding with the guests seated at each, plus unseated guests."""
        await AsyncReportService._require_wedding(db, wedding_id)

        tables = (await db.execute(
            select(SeatingTable).where(SeatingTable.wedding_id == wedding_id)
        )).scalars().all()
        guests = (await db.execute(
            select(Guest).where(Guest.wedding_id == wedding_id).order_by(Guest.guest_name.asc())
        )).scalars().all()

        by_table: Dict[Optional[int], list] = {}
        for guest in guests:
            by_table.setdefault(guest.table_id, []).append({
                "guest_id": guest.guest_id,
                "guest_name": guest.guest_name,
                "rsvp_status": guest.rsvp_status,
                "restriction_id": guest.restriction_id
            })

        seating = [
            {
                "table_id": table.table_id,
                "table_number": table.table_number,
                "table_category": table.table_category,
                "capacity": table.capacity,
                "guests": by_table.get(table.table_id, [])
            }
            for table in sorted(tables, key=table_sort_key)
        ]
        return {"seating": seating, "unseated": by_table.get(None, [])}

    @staticmethod
    @handle_async_db_errors("generate inventory report")
    async def inventory_report(db: AsyncSession, wedding_id: int) -> Dict[str, Any]:
        """Equipment allocated to a wedding, flagging items that need repair or are out of stock."""
        await AsyncReportService._require_wedding(db, wedding_id)

        stmt = (
            select(InventoryAllocation)
            .join(InventoryItem, InventoryItem.inventory_id == InventoryAllocation.inventory_id)
            .options(selectinload(InventoryAllocation.item))
            .where(InventoryAllocation.wedding_id == wedding_id)
            .order_by(InventoryItem.item_name.asc())
            .execution_options(populate_existing=True)
        )
        allocations = (await db.execute(stmt)).scalars().all()

        needs_attention = [
            build_allocation_response(a)
            for a in allocations
            if "repair" in (a.item.item_condition or "").lower() or a.item.quantity_available <= 0
        ]
        return {
            "allocations": [build_allocation_response(a) for a in allocations],
            "needs_attention": needs_attention,
            "equipment_rental_cost": float(sum(
                (to_money(a.unit_rental_cost) * a.quantity_used for a in allocations), to_money(0)
            ))
        }

    @staticmethod
    @handle_async_db_errors("generate menu & dietary report")
    async def menu_dietary_report(db: AsyncSession, wedding_id: int) -> Dict[str, Any]:
        """Dishes served at a wedding, their restriction tags and the guests' restrictions."""
        await AsyncReportService._require_wedding(db, wedding_id)

        dish_stmt = (
            select(
                MenuItem.menu_item_id,
                MenuItem.menu_name,
                MenuItem.restriction_id,
                func.sum(PackageMenuItem.quantity).label("times_ordered")
            )
            .join(PackageMenuItem, PackageMenuItem.menu_item_id == MenuItem.menu_item_id)
            .join(TablePackage, TablePackage.package_id == PackageMenuItem.package_id)
            .join(SeatingTable, SeatingTable.table_id == TablePackage.table_id)
            .where(SeatingTable.wedding_id == wedding_id)
            .group_by(MenuItem.menu_item_id, MenuItem.menu_name, MenuItem.restriction_id)
        )
        dishes = (await db.execute(dish_stmt)).all()
        dish_counts = sorted(
            (
                {"menu_item_id": d.menu_item_id, "menu_name": d.menu_name, "times_ordered": int(d.times_ordered)}
                for d in dishes
            ),
            key=lambda d: (-d["times_ordered"], d["menu_name"])
        )

        restrictions = {
            r.restriction_id: r
            for r in (await db.execute(select(DietaryRestriction))).scalars().all()
        }
        tagged_dishes = [
            {
                "menu_item_id": d.menu_item_id,
                "menu_name": d.menu_name,
                "restriction_name": restrictions[d.restriction_id].restriction_name,
                "restriction_type": restrictions[d.restriction_id].restriction_type,
                "severity_level": restrictions[d.restriction_id].severity_level
            }
            for d in dishes
            if d.restriction_id in restrictions
        ]

        guest_stmt = (
            select(Guest.restriction_id, func.count(Guest.guest_id))
            .where(Guest.wedding_id == wedding_id, Guest.restriction_id.is_not(None))
            .group_by(Guest.restriction_id)
        )
        guest_restrictions = sorted(
            (
                {"restriction_name": restrictions[rid].restriction_name, "count": count}
                for rid, count in (await db.execute(guest_stmt)).all()
                if rid in restrictions
            ),
            key=lambda r: -r["count"]
        )

        return {
            "dish_counts": dish_counts,
            "restricted_dishes": tagged_dishes,
            "guest_restrictions": guest_restrictions
        }
