import math
from decimal import Decimal
from typing import Optional, List, Dict, Iterable

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wedding_planner.core.config import settings
from wedding_planner.models.dietary_restriction import DietaryRestriction
from wedding_planner.models.ingredient import Ingredient
from wedding_planner.models.menu_item import MenuItem, Recipe
from wedding_planner.models.package import PackageMenuItem, TablePackage
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.schemas.menu_item import (
    MenuItemCreate,
    MenuItemUpdate,
    MenuItemResponse,
    RecipeLineInput,
    RecipeLineResponse
)
from wedding_planner.services.async_error_handler import (
    handle_async_db_errors,
    async_transaction_rollback,
    reject_null_fields,
    bad_request,
    not_found
)
from wedding_planner.services.costing import to_money, suggested_price
from wedding_planner.utils.logger import menu_logger


def makeable_quantity(recipe_lines: Iterable[Recipe]) -> Optional[int]:
    """
    Servings the current ingredient stock can produce.

    The minimum of floor(stock / quantity_needed) over recipe lines with a
    positive quantity; None when there is no such line.
    """
    counts = []
    for line in recipe_lines:
        needed = to_money(line.quantity_needed)
        if needed <= 0 or line.ingredient is None:
            continue
        counts.append(math.floor(to_money(line.ingredient.stock_quantity) / needed))
    return min(counts) if counts else None


def build_menu_item_response(
    item: MenuItem,
    usage_count: Optional[int] = None,
    include_recipe: bool = False
) -> MenuItemResponse:
    restriction = item.restriction
    recipe = None
    if include_recipe:
        lines = sorted(item.recipe_lines, key=lambda line: line.ingredient.ingredient_name)
        recipe = [
            RecipeLineResponse(
                recipe_id=line.recipe_id,
                ingredient_id=line.ingredient_id,
                ingredient_name=line.ingredient.ingredient_name,
                unit=line.ingredient.unit,
                quantity_needed=float(line.quantity_needed),
                stock_quantity=float(line.ingredient.stock_quantity),
                re_order_level=float(line.ingredient.re_order_level)
            )
            for line in lines
        ]

    return MenuItemResponse(
        menu_item_id=item.menu_item_id,
        menu_name=item.menu_name,
        menu_type=item.menu_type,
        unit_cost=float(item.unit_cost),
        selling_price=float(item.selling_price),
        default_markup_percentage=float(item.default_markup_percentage),
        cost_override=bool(item.cost_override),
        restriction_id=item.restriction_id,
        restriction_name=restriction.restriction_name if restriction else None,
        restriction_type=restriction.restriction_type if restriction else None,
        severity_level=restriction.severity_level if restriction else None,
        profit_margin=float(to_money(item.selling_price) - to_money(item.unit_cost)),
        suggested_price=float(suggested_price(item.unit_cost, item.default_markup_percentage)),
        makeable_quantity=makeable_quantity(item.recipe_lines),
        usage_count=usage_count,
        recipe=recipe
    )


class AsyncMenuItemService:
    """
    Menu item management: listing with derived pricing and stock fields,
    creation with a mandatory recipe, partial updates and deletion.
    """

    @staticmethod
    def _base_query():
        return select(MenuItem).options(
            selectinload(MenuItem.recipe_lines).selectinload(Recipe.ingredient),
            selectinload(MenuItem.restriction)
        )

    @staticmethod
    async def _validate_references(
        db: AsyncSession,
        recipe: Optional[List[RecipeLineInput]],
        restriction_id: Optional[int]
    ) -> None:
        if recipe:
            ingredient_ids = {line.ingredient_id for line in recipe}
            if len(ingredient_ids) != len(recipe):
                raise bad_request("Recipe lists the same ingredient more than once")

            result = await db.execute(
                select(Ingredient.ingredient_id).where(Ingredient.ingredient_id.in_(ingredient_ids))
            )
            missing = sorted(ingredient_ids - set(result.scalars().all()))
            if missing:
                raise bad_request(f"Unknown ingredient ids: {missing}")

        if restriction_id is not None and await db.get(DietaryRestriction, restriction_id) is None:
            raise bad_request(f"Unknown restriction id: {restriction_id}")

    @staticmethod
    def _recipe_rows(menu_item_id: int, recipe: List[RecipeLineInput]) -> List[Recipe]:
        return [
            Recipe(
                menu_item_id=menu_item_id,
                ingredient_id=line.ingredient_id,
                quantity_needed=line.quantity_needed
            )
            for line in recipe
        ]

    @staticmethod
    @handle_async_db_errors("fetch menu items")
    async def get_menu_items(
        db: AsyncSession,
        menu_type: Optional[str] = None,
        restriction_id: Optional[int] = None,
        wedding_id: Optional[int] = None
    ) -> List[MenuItemResponse]:
        """List menu items ordered by name, optionally restricted to those served at a wedding."""
        stmt = AsyncMenuItemService._base_query()

        if menu_type:
            stmt = stmt.where(MenuItem.menu_type == menu_type)
        if restriction_id is not None:
            stmt = stmt.where(MenuItem.restriction_id == restriction_id)

        usage_counts: Dict[int, int] = {}
        if wedding_id is not None:
            usage_stmt = (
                select(PackageMenuItem.menu_item_id, func.count(func.distinct(TablePackage.table_id)))
                .join(TablePackage, TablePackage.package_id == PackageMenuItem.package_id)
                .join(SeatingTable, SeatingTable.table_id == TablePackage.table_id)
                .where(SeatingTable.wedding_id == wedding_id)
                .group_by(PackageMenuItem.menu_item_id)
            )
            usage_counts = {menu_item_id: count for menu_item_id, count in (await db.execute(usage_stmt)).all()}
            stmt = stmt.where(MenuItem.menu_item_id.in_(list(usage_counts.keys())))

        stmt = stmt.order_by(MenuItem.menu_name.asc()).execution_options(populate_existing=True)
        items = (await db.execute(stmt)).scalars().all()

        return [
            build_menu_item_response(
                item,
                usage_count=usage_counts.get(item.menu_item_id) if wedding_id is not None else None
            )
            for item in items
        ]

    @staticmethod
    @handle_async_db_errors("fetch menu item")
    async def get_menu_item(db: AsyncSession, menu_item_id: int) -> MenuItemResponse:
        """Get a menu item with its recipe lines."""
        stmt = (
            AsyncMenuItemService._base_query()
            .where(MenuItem.menu_item_id == menu_item_id)
            .execution_options(populate_existing=True)
        )
        item = (await db.execute(stmt)).scalar_one_or_none()
        if not item:
            raise not_found("Menu item not found")

        return build_menu_item_response(item, include_recipe=True)

    @staticmethod
    @handle_async_db_errors("create menu item")
    async def create_menu_item(db: AsyncSession, item_data: MenuItemCreate) -> MenuItemResponse:
        """Create a menu item and its recipe in one transaction."""
        await AsyncMenuItemService._validate_references(db, item_data.recipe, item_data.restriction_id)

        markup = item_data.default_markup_percentage
        if markup is None:
            markup = Decimal(str(settings.DEFAULT_MARKUP_PERCENTAGE))
        selling_price = item_data.selling_price
        if selling_price is None:
            selling_price = suggested_price(item_data.unit_cost, markup)

        async with async_transaction_rollback(db):
            db_item = MenuItem(
                menu_name=item_data.menu_name,
                menu_type=item_data.menu_type,
                unit_cost=item_data.unit_cost,
                selling_price=selling_price,
                default_markup_percentage=markup,
                cost_override=item_data.cost_override,
                restriction_id=item_data.restriction_id
            )
            db.add(db_item)
            await db.flush()

            db.add_all(AsyncMenuItemService._recipe_rows(db_item.menu_item_id, item_data.recipe))

        menu_logger.success(
            f"Created menu item with {len(item_data.recipe)} recipe lines",
            "CREATE",
            menu_item_id=db_item.menu_item_id,
            menu_name=db_item.menu_name
        )
        return await AsyncMenuItemService.get_menu_item(db, db_item.menu_item_id)

    @staticmethod
    @handle_async_db_errors("update menu item")
    async def update_menu_item(db: AsyncSession, menu_item_id: int, item_data: MenuItemUpdate) -> MenuItemResponse:
        """
        Update the supplied fields of a menu item.

        When ``recipe`` is present every existing recipe line is deleted and the
        new lines are inserted in the same transaction.
        """
        db_item = await db.get(MenuItem, menu_item_id)
        if not db_item:
            raise not_found("Menu item not found")

        update_data = item_data.model_dump(exclude_unset=True)
        recipe = item_data.recipe if "recipe" in update_data else None
        update_data.pop("recipe", None)
        reject_null_fields(update_data, "restriction_id")

        await AsyncMenuItemService._validate_references(db, recipe, update_data.get("restriction_id"))

        async with async_transaction_rollback(db):
            for field, value in update_data.items():
                setattr(db_item, field, value)

            if recipe is not None:
                await db.execute(delete(Recipe).where(Recipe.menu_item_id == menu_item_id))
                db.add_all(AsyncMenuItemService._recipe_rows(menu_item_id, recipe))

        menu_logger.info(
            "Updated menu item",
            "UPDATE",
            menu_item_id=menu_item_id,
            fields=sorted(update_data.keys()),
            recipe_replaced=recipe is not None
        )
        return await AsyncMenuItemService.get_menu_item(db, menu_item_id)

    @staticmethod
    @handle_async_db_errors("delete menu item")
    async def delete_menu_item(db: AsyncSession, menu_item_id: int) -> None:
        """Delete a menu item together with its recipe lines and package memberships."""
        db_item = await db.get(MenuItem, menu_item_id)
        if not db_item:
            raise not_found("Menu item not found")

        async with async_transaction_rollback(db):
            await db.execute(delete(PackageMenuItem).where(PackageMenuItem.menu_item_id == menu_item_id))
            await db.execute(delete(Recipe).where(Recipe.menu_item_id == menu_item_id))
            await db.execute(delete(MenuItem).where(MenuItem.menu_item_id == menu_item_id))

        menu_logger.info("Deleted menu item", "DELETE", menu_item_id=menu_item_id)
