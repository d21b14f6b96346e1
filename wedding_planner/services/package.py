from decimal import Decimal
from typing import Optional, List, Dict

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wedding_planner.core.config import settings
from wedding_planner.models.menu_item import MenuItem
from wedding_planner.models.package import Package, PackageMenuItem, TablePackage
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.schemas.package import (
    PackageCreate,
    PackageUpdate,
    PackageResponse,
    PackageMenuItemResponse,
    PackageItemEntry,
    PackageAssignmentCreate,
    PackageAssignmentResponse
)
from wedding_planner.services.async_error_handler import (
    handle_async_db_errors,
    async_transaction_rollback,
    reject_null_fields,
    bad_request,
    not_found
)
from wedding_planner.services.costing import CostingService, to_money, suggested_price
from wedding_planner.utils.logger import package_logger


def normalize_package_items(entries: List[PackageItemEntry]) -> Dict[int, int]:
    """Turn ids or {menu_item_id, quantity} entries into menu_item_id -> quantity, merging repeats."""
    items: Dict[int, int] = {}
    for entry in entries:
        if isinstance(entry, int):
            menu_item_id, quantity = entry, 1
        else:
            menu_item_id, quantity = entry.menu_item_id, entry.quantity
        items[menu_item_id] = items.get(menu_item_id, 0) + quantity
    return items


def build_package_response(package: Package, usage_count: int = 0) -> PackageResponse:
    menu_items = [
        PackageMenuItemResponse(
            menu_item_id=line.menu_item.menu_item_id,
            menu_name=line.menu_item.menu_name,
            menu_type=line.menu_item.menu_type,
            unit_cost=float(line.menu_item.unit_cost),
            selling_price=float(line.menu_item.selling_price),
            quantity=line.quantity
        )
        for line in package.package_items
    ]

    return PackageResponse(
        package_id=package.package_id,
        package_name=package.package_name,
        package_type=package.package_type,
        unit_cost=float(package.unit_cost),
        selling_price=float(package.selling_price),
        default_markup_percentage=float(package.default_markup_percentage),
        profit_margin=float(to_money(package.selling_price) - to_money(package.unit_cost)),
        suggested_price=float(suggested_price(package.unit_cost, package.default_markup_percentage)),
        total_items=len({item.menu_item_id for item in menu_items}),
        usage_count=usage_count,
        menu_items=menu_items
    )


class AsyncPackageService:
    """
    Package management and table assignments.

    Every read re-syncs the stored package cost against its menu items.
    Assigning a package deducts ingredient stock and recomputes the wedding's
    costs; removing it restores stock and recomputes again. Those secondary
    effects are logged on failure and never undo the assignment itself.
    """

    @staticmethod
    def _base_query():
        return select(Package).options(
            selectinload(Package.package_items).selectinload(PackageMenuItem.menu_item)
        )

    @staticmethod
    async def _validate_menu_items(db: AsyncSession, items: Dict[int, int]) -> None:
        if not items:
            return
        result = await db.execute(select(MenuItem.menu_item_id).where(MenuItem.menu_item_id.in_(list(items.keys()))))
        missing = sorted(set(items.keys()) - set(result.scalars().all()))
        if missing:
            raise bad_request(f"Unknown menu item ids: {missing}")

    @staticmethod
    async def _usage_counts(db: AsyncSession, wedding_id: Optional[int] = None) -> Dict[int, int]:
        stmt = select(TablePackage.package_id, func.count(func.distinct(TablePackage.table_id)))
        if wedding_id is not None:
            stmt = (
                stmt.join(SeatingTable, SeatingTable.table_id == TablePackage.table_id)
                .where(SeatingTable.wedding_id == wedding_id)
            )
        stmt = stmt.group_by(TablePackage.package_id)
        return {package_id: count for package_id, count in (await db.execute(stmt)).all()}

    @staticmethod
    async def _weddings_using_package(db: AsyncSession, package_id: int) -> List[int]:
        stmt = (
            select(SeatingTable.wedding_id)
            .join(TablePackage, TablePackage.table_id == SeatingTable.table_id)
            .where(TablePackage.package_id == package_id)
            .distinct()
        )
        return list((await db.execute(stmt)).scalars().all())

    @staticmethod
    async def _sync_costs(db: AsyncSession, packages: List[Package]) -> None:
        changed = False
        for package in packages:
            if await CostingService.sync_package_cost(db, package):
                changed = True
        if changed:
            await db.commit()

    @staticmethod
    @handle_async_db_errors("fetch packages")
    async def get_packages(db: AsyncSession, wedding_id: Optional[int] = None) -> List[PackageResponse]:
        """List packages ordered by name, optionally only those assigned at a wedding."""
        usage_counts = await AsyncPackageService._usage_counts(db, wedding_id)

        stmt = AsyncPackageService._base_query()
        if wedding_id is not None:
            stmt = stmt.where(Package.package_id.in_(list(usage_counts.keys())))
        stmt = stmt.order_by(Package.package_name.asc()).execution_options(populate_existing=True)

        packages = list((await db.execute(stmt)).scalars().all())
        await AsyncPackageService._sync_costs(db, packages)

        return [build_package_response(p, usage_counts.get(p.package_id, 0)) for p in packages]

    @staticmethod
    @handle_async_db_errors("fetch package")
    async def get_package(db: AsyncSession, package_id: int) -> PackageResponse:
        """Get a package with its menu items, re-syncing its stored cost."""
        stmt = (
            AsyncPackageService._base_query()
            .where(Package.package_id == package_id)
            .execution_options(populate_existing=True)
        )
        package = (await db.execute(stmt)).scalar_one_or_none()
        if not package:
            raise not_found("Package not found")

        await AsyncPackageService._sync_costs(db, [package])
        usage_counts = await AsyncPackageService._usage_counts(db)
        return build_package_response(package, usage_counts.get(package_id, 0))

    @staticmethod
    @handle_async_db_errors("create package")
    async def create_package(db: AsyncSession, package_data: PackageCreate) -> PackageResponse:
        """Create a package and its item list; the cost is stored before commit."""
        items = normalize_package_items(package_data.menu_item_ids or [])
        await AsyncPackageService._validate_menu_items(db, items)

        markup = package_data.default_markup_percentage
        if markup is None:
            markup = Decimal(str(settings.DEFAULT_MARKUP_PERCENTAGE))

        async with async_transaction_rollback(db):
            db_package = Package(
                package_name=package_data.package_name,
                package_type=package_data.package_type,
                selling_price=package_data.selling_price,
                default_markup_percentage=markup,
                unit_cost=0
            )
            db.add(db_package)
            await db.flush()

            db.add_all([
                PackageMenuItem(package_id=db_package.package_id, menu_item_id=menu_item_id, quantity=quantity)
                for menu_item_id, quantity in items.items()
            ])
            await db.flush()
            db_package.unit_cost = await CostingService.calculate_package_cost(db, db_package.package_id)

        package_logger.success(
            f"Created package with {len(items)} menu items",
            "CREATE",
            package_id=db_package.package_id,
            package_name=db_package.package_name,
            unit_cost=str(db_package.unit_cost)
        )
        return await AsyncPackageService.get_package(db, db_package.package_id)

    @staticmethod
    @handle_async_db_errors("update package")
    async def update_package(db: AsyncSession, package_id: int, package_data: PackageUpdate) -> PackageResponse:
        """
        Update the supplied fields of a package.

        ``menu_item_ids`` replaces the whole item list when present. The cost is
        recomputed, and weddings using the package get new totals when its
        selling price or items changed.
        """
        db_package = await db.get(Package, package_id)
        if not db_package:
            raise not_found("Package not found")

        update_data = package_data.model_dump(exclude_unset=True, exclude={"menu_item_ids"})
        reject_null_fields(update_data)
        items = None
        if "menu_item_ids" in package_data.model_fields_set and package_data.menu_item_ids is not None:
            items = normalize_package_items(package_data.menu_item_ids)
            await AsyncPackageService._validate_menu_items(db, items)

        async with async_transaction_rollback(db):
            for field, value in update_data.items():
                setattr(db_package, field, value)

            if items is not None:
                await db.execute(delete(PackageMenuItem).where(PackageMenuItem.package_id == package_id))
                db.add_all([
                    PackageMenuItem(package_id=package_id, menu_item_id=menu_item_id, quantity=quantity)
                    for menu_item_id, quantity in items.items()
                ])
                await db.flush()

            db_package.unit_cost = await CostingService.calculate_package_cost(db, package_id)

            if "selling_price" in update_data or items is not None:
                for wedding_id in await AsyncPackageService._weddings_using_package(db, package_id):
                    await CostingService.try_update_wedding_costs(db, wedding_id)

        package_logger.info(
            "Updated package",
            "UPDATE",
            package_id=package_id,
            fields=sorted(update_data.keys()),
            items_replaced=items is not None
        )
        return await AsyncPackageService.get_package(db, package_id)

    @staticmethod
    @handle_async_db_errors("delete package")
    async def delete_package(db: AsyncSession, package_id: int) -> None:
        """Delete a package, its items and table assignments, then refresh affected weddings."""
        db_package = await db.get(Package, package_id)
        if not db_package:
            raise not_found("Package not found")

        async with async_transaction_rollback(db):
            wedding_ids = await AsyncPackageService._weddings_using_package(db, package_id)

            await db.execute(delete(TablePackage).where(TablePackage.package_id == package_id))
            await db.execute(delete(PackageMenuItem).where(PackageMenuItem.package_id == package_id))
            await db.execute(delete(Package).where(Package.package_id == package_id))

            for wedding_id in wedding_ids:
                await CostingService.try_update_wedding_costs(db, wedding_id)

        package_logger.info("Deleted package", "DELETE", package_id=package_id, weddings_updated=len(wedding_ids))

    @staticmethod
    async def _assignment_response(db: AsyncSession, assignment_id: int) -> PackageAssignmentResponse:
        stmt = (
            select(
                TablePackage.assignment_id,
                TablePackage.table_id,
                TablePackage.package_id,
                SeatingTable.table_number,
                SeatingTable.table_category,
                Package.package_name,
                Package.package_type,
                Package.selling_price
            )
            .join(SeatingTable, SeatingTable.table_id == TablePackage.table_id)
            .join(Package, Package.package_id == TablePackage.package_id)
            .where(TablePackage.assignment_id == assignment_id)
        )
        row = (await db.execute(stmt)).one()
        return PackageAssignmentResponse(**{**row._asdict(), "selling_price": float(row.selling_price)})

    @staticmethod
    @handle_async_db_errors("assign package")
    async def assign_package(db: AsyncSession, assignment: PackageAssignmentCreate) -> PackageAssignmentResponse:
        """
        Assign a package to a seating table.

        After the assignment row is written, ingredient stock is deducted and
        the table's wedding costs are recomputed; a failure in either step is
        logged and the assignment is still committed.
        """
        if assignment.table_id is None or assignment.package_id is None:
            raise bad_request("Missing required fields: table_id, package_id")

        table = await db.get(SeatingTable, assignment.table_id)
        if not table:
            raise not_found("Table not found")
        if not await db.get(Package, assignment.package_id):
            raise not_found("Package not found")

        existing = await db.execute(
            select(TablePackage.assignment_id).where(
                TablePackage.table_id == assignment.table_id,
                TablePackage.package_id == assignment.package_id
            )
        )
        if existing.first() is not None:
            raise bad_request("Package is already assigned to this table")

        async with async_transaction_rollback(db):
            db_assignment = TablePackage(table_id=assignment.table_id, package_id=assignment.package_id)
            db.add(db_assignment)
            await db.flush()

            await CostingService.try_adjust_stock(db, assignment.package_id, deduct=True)
            await CostingService.try_update_wedding_costs(db, table.wedding_id)

        package_logger.success(
            "Package assigned to table",
            "ASSIGN",
            table_id=assignment.table_id,
            package_id=assignment.package_id,
            wedding_id=table.wedding_id
        )
        return await AsyncPackageService._assignment_response(db, db_assignment.assignment_id)

    @staticmethod
    @handle_async_db_errors("remove package")
    async def unassign_package(db: AsyncSession, table_id: int, package_id: int) -> None:
        """Remove a package from a table, restoring stock and recomputing wedding costs."""
        result = await db.execute(
            select(TablePackage).where(
                TablePackage.table_id == table_id,
                TablePackage.package_id == package_id
            )
        )
        db_assignment = result.scalars().first()
        if not db_assignment:
            raise not_found("Package assignment not found")

        wedding_id = await CostingService.wedding_id_for_table(db, table_id)

        async with async_transaction_rollback(db):
            await db.execute(
                delete(TablePackage).where(
                    TablePackage.table_id == table_id,
                    TablePackage.package_id == package_id
                )
            )
            await CostingService.try_adjust_stock(db, package_id, deduct=False)
            await CostingService.try_update_wedding_costs(db, wedding_id)

        package_logger.info(
            "Package removed from table",
            "UNASSIGN",
            table_id=table_id,
            package_id=package_id,
            wedding_id=wedding_id
        )

    @staticmethod
    @handle_async_db_errors("fetch table-package assignments")
    async def get_wedding_assignments(db: AsyncSession, wedding_id: int) -> List[PackageAssignmentResponse]:
        """Package assignments of every table at a wedding, ordered by table number."""
        stmt = (
            select(
                TablePackage.assignment_id,
                TablePackage.table_id,
                TablePackage.package_id,
                SeatingTable.table_number,
                SeatingTable.table_category,
                Package.package_name,
                Package.package_type,
                Package.selling_price
            )
            .join(SeatingTable, SeatingTable.table_id == TablePackage.table_id)
            .join(Package, Package.package_id == TablePackage.package_id)
            .where(SeatingTable.wedding_id == wedding_id)
            .order_by(SeatingTable.table_number.asc(), TablePackage.assignment_id.asc())
        )
        rows = (await db.execute(stmt)).all()
        return [
            PackageAssignmentResponse(**{**row._asdict(), "selling_price": float(row.selling_price)})
            for row in rows
        ]
