from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Any

from sqlalchemy import select, update, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.core.config import settings
from wedding_planner.models.ingredient import Ingredient
from wedding_planner.models.inventory import InventoryAllocation
from wedding_planner.models.menu_item import MenuItem, Recipe
from wedding_planner.models.package import Package, PackageMenuItem, TablePackage
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.models.wedding import Wedding
from wedding_planner.schemas.wedding import WeddingCosts
from wedding_planner.utils.logger import inventory_logger, package_logger, wedding_logger

CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Normalize a driver value (Decimal, float, int or None) to a 2dp Decimal."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def suggested_price(unit_cost: Any, markup_percentage: Any) -> Decimal:
    """unit_cost * (1 + markup / 100), rounded to cents."""
    markup = to_money(markup_percentage)
    return to_money(to_money(unit_cost) * (Decimal(1) + markup / Decimal(100)))


class CostingService:
    """
    Cost and stock reconciliation shared by the menu, package and inventory services.

    Covers the ingredient usage of a package, the stock deduction and
    restoration triggered by package assignments, the stored package cost and
    the per-wedding cost totals. Every method works inside the caller's
    transaction and never commits.
    """

    @staticmethod
    async def calculate_ingredient_usage_for_package(db: AsyncSession, package_id: int) -> Dict[int, Decimal]:
        """
        Total amount of each ingredient one serving of the package consumes.

        For every menu item in the package and every line of its recipe,
        ``quantity_needed * package quantity`` is accumulated per ingredient.
        The result does not depend on how many tables the package is assigned to.

        Returns:
            Mapping of ingredient_id to amount
        """
        stmt = (
            select(Recipe.ingredient_id, Recipe.quantity_needed, PackageMenuItem.quantity)
            .join(PackageMenuItem, PackageMenuItem.menu_item_id == Recipe.menu_item_id)
            .where(PackageMenuItem.package_id == package_id)
        )
        result = await db.execute(stmt)

        usage: Dict[int, Decimal] = {}
        for ingredient_id, quantity_needed, package_quantity in result.all():
            amount = to_money(quantity_needed) * (package_quantity or 1)
            usage[ingredient_id] = usage.get(ingredient_id, Decimal("0.00")) + amount

        return usage

    @staticmethod
    async def deduct_ingredient_stock_for_package(db: AsyncSession, package_id: int) -> Dict[int, Decimal]:
        """Subtract the package's ingredient usage from stock, never going below zero."""
        usage = await CostingService.calculate_ingredient_usage_for_package(db, package_id)

        for ingredient_id, amount in usage.items():
            remaining = Ingredient.stock_quantity - amount
            await db.execute(
                update(Ingredient)
                .where(Ingredient.ingredient_id == ingredient_id)
                .values(stock_quantity=case((remaining < 0, 0), else_=remaining))
            )

        inventory_logger.info(
            f"Deducted stock for {len(usage)} ingredients",
            "DEDUCT",
            package_id=package_id,
            usage={str(k): str(v) for k, v in usage.items()}
        )
        return usage

    @staticmethod
    async def restore_ingredient_stock_for_package(db: AsyncSession, package_id: int) -> Dict[int, Decimal]:
        """
        Add the package's ingredient usage back to stock.

        The full amount is added even if the earlier deduction was clamped at
        zero, so stock can end up above its value before the assignment.
        """
        usage = await CostingService.calculate_ingredient_usage_for_package(db, package_id)

        for ingredient_id, amount in usage.items():
            await db.execute(
                update(Ingredient)
                .where(Ingredient.ingredient_id == ingredient_id)
                .values(stock_quantity=Ingredient.stock_quantity + amount)
            )

        inventory_logger.info(
            f"Restored stock for {len(usage)} ingredients",
            "RESTORE",
            package_id=package_id
        )
        return usage

    @staticmethod
    async def calculate_package_cost(db: AsyncSession, package_id: int) -> Decimal:
        """Sum of menu item unit_cost times quantity over the package's items."""
        stmt = (
            select(func.coalesce(func.sum(MenuItem.unit_cost * PackageMenuItem.quantity), 0))
            .select_from(PackageMenuItem)
            .join(MenuItem, MenuItem.menu_item_id == PackageMenuItem.menu_item_id)
            .where(PackageMenuItem.package_id == package_id)
        )
        result = await db.execute(stmt)
        return to_money(result.scalar())

    @staticmethod
    async def sync_package_cost(db: AsyncSession, package: Package) -> bool:
        """
        Recompute a package's cost and store it when it drifted.

        The stored value is only rewritten when it differs from the computed one
        by more than ``PACKAGE_COST_TOLERANCE``.

        Returns:
            True when the stored unit_cost was changed
        """
        computed = await CostingService.calculate_package_cost(db, package.package_id)
        stored = to_money(package.unit_cost)
        tolerance = Decimal(str(settings.PACKAGE_COST_TOLERANCE))

        if abs(computed - stored) <= tolerance:
            return False

        package.unit_cost = computed
        await db.flush()
        package_logger.info(
            "Package cost re-synced",
            "SYNC",
            package_id=package.package_id,
            stored=str(stored),
            computed=str(computed)
        )
        return True

    @staticmethod
    async def update_wedding_costs(db: AsyncSession, wedding_id: int) -> Optional[WeddingCosts]:
        """
        Recompute and store a wedding's equipment, food and total cost.

        - equipment_rental_cost: sum of allocation quantity * unit rental cost
        - food_cost: sum of menu item unit_cost * quantity over assigned packages
        - total_cost: equipment_rental_cost + sum of assigned package selling prices

        food_cost is an internal figure and is not part of total_cost.

        Returns:
            The new totals, or None when the wedding does not exist
        """
        wedding = await db.get(Wedding, wedding_id)
        if wedding is None:
            wedding_logger.warning("Cost update skipped, wedding not found", "COSTS", wedding_id=wedding_id)
            return None

        equipment_stmt = (
            select(func.coalesce(func.sum(InventoryAllocation.quantity_used * InventoryAllocation.unit_rental_cost), 0))
            .where(InventoryAllocation.wedding_id == wedding_id)
        )
        food_stmt = (
            select(func.coalesce(func.sum(MenuItem.unit_cost * PackageMenuItem.quantity), 0))
            .select_from(TablePackage)
            .join(SeatingTable, SeatingTable.table_id == TablePackage.table_id)
            .join(PackageMenuItem, PackageMenuItem.package_id == TablePackage.package_id)
            .join(MenuItem, MenuItem.menu_item_id == PackageMenuItem.menu_item_id)
            .where(SeatingTable.wedding_id == wedding_id)
        )
        invoice_stmt = (
            select(func.coalesce(func.sum(Package.selling_price), 0))
            .select_from(TablePackage)
            .join(SeatingTable, SeatingTable.table_id == TablePackage.table_id)
            .join(Package, Package.package_id == TablePackage.package_id)
            .where(SeatingTable.wedding_id == wedding_id)
        )

        equipment_rental_cost = to_money((await db.execute(equipment_stmt)).scalar())
        food_cost = to_money((await db.execute(food_stmt)).scalar())
        total_invoice_amount = to_money((await db.execute(invoice_stmt)).scalar())
        total_cost = equipment_rental_cost + total_invoice_amount

        wedding.equipment_rental_cost = equipment_rental_cost
        wedding.food_cost = food_cost
        wedding.total_cost = total_cost
        await db.flush()

        wedding_logger.info(
            "Wedding costs updated",
            "COSTS",
            wedding_id=wedding_id,
            equipment=str(equipment_rental_cost),
            food=str(food_cost),
            total=str(total_cost)
        )

        return WeddingCosts(
            wedding_id=wedding_id,
            equipment_rental_cost=float(equipment_rental_cost),
            food_cost=float(food_cost),
            total_invoice_amount=float(total_invoice_amount),
            total_cost=float(total_cost)
        )

    @staticmethod
    async def wedding_id_for_table(db: AsyncSession, table_id: int) -> Optional[int]:
        result = await db.execute(select(SeatingTable.wedding_id).where(SeatingTable.table_id == table_id))
        return result.scalar_one_or_none()

    # Secondary effects: run in a savepoint, failures are logged and never reach the caller

    @staticmethod
    async def try_adjust_stock(db: AsyncSession, package_id: int, deduct: bool) -> bool:
        """Deduct (or restore) a package's ingredient stock without failing the caller."""
        action = "deduct" if deduct else "restore"
        try:
            async with db.begin_nested():
                if deduct:
                    await CostingService.deduct_ingredient_stock_for_package(db, package_id)
                else:
                    await CostingService.restore_ingredient_stock_for_package(db, package_id)
            return True
        except Exception as e:
            inventory_logger.error(
                f"Failed to {action} ingredient stock: {e}",
                action.upper(),
                package_id=package_id
            )
            return False

    @staticmethod
    async def try_update_wedding_costs(db: AsyncSession, wedding_id: Optional[int]) -> bool:
        """Recompute a wedding's costs without failing the caller."""
        if wedding_id is None:
            return False
        try:
            async with db.begin_nested():
                await CostingService.update_wedding_costs(db, wedding_id)
            return True
        except Exception as e:
            wedding_logger.error(f"Failed to update wedding costs: {e}", "COSTS", wedding_id=wedding_id)
            return False
