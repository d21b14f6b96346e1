import math
from typing import List, Dict

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.models.ingredient import Ingredient
from wedding_planner.models.menu_item import MenuItem, Recipe
from wedding_planner.schemas.ingredient import (
    IngredientCreate,
    IngredientUpdate,
    IngredientRestock,
    IngredientResponse,
    IngredientMenuUsage
)
from wedding_planner.services.async_error_handler import (
    handle_async_db_errors,
    async_transaction_rollback,
    reject_null_fields,
    not_found,
    conflict
)
from wedding_planner.services.costing import to_money
from wedding_planner.utils.logger import inventory_logger


def build_ingredient_response(ingredient: Ingredient, usage_count: int = 0, menu_items=None) -> IngredientResponse:
    return IngredientResponse(
        ingredient_id=ingredient.ingredient_id,
        ingredient_name=ingredient.ingredient_name,
        unit=ingredient.unit,
        stock_quantity=float(ingredient.stock_quantity),
        re_order_level=float(ingredient.re_order_level),
        usage_count=usage_count,
        needs_reorder=to_money(ingredient.stock_quantity) <= to_money(ingredient.re_order_level),
        created_at=ingredient.created_at,
        updated_at=ingredient.updated_at,
        menu_items=menu_items
    )


class AsyncIngredientService:
    """Ingredient stock management."""

    @staticmethod
    async def _usage_counts(db: AsyncSession) -> Dict[int, int]:
        stmt = (
            select(Recipe.ingredient_id, func.count(func.distinct(Recipe.menu_item_id)))
            .group_by(Recipe.ingredient_id)
        )
        return {ingredient_id: count for ingredient_id, count in (await db.execute(stmt)).all()}

    @staticmethod
    @handle_async_db_errors("fetch ingredients")
    async def get_ingredients(db: AsyncSession, low_stock_only: bool = False) -> List[IngredientResponse]:
        """List ingredients ordered by name, optionally only those at or below their reorder level."""
        stmt = select(Ingredient)
        if low_stock_only:
            stmt = stmt.where(Ingredient.stock_quantity <= Ingredient.re_order_level)
        stmt = stmt.order_by(Ingredient.ingredient_name.asc())

        ingredients = (await db.execute(stmt)).scalars().all()
        usage_counts = await AsyncIngredientService._usage_counts(db)

        return [
            build_ingredient_response(i, usage_counts.get(i.ingredient_id, 0))
            for i in ingredients
        ]

    @staticmethod
    @handle_async_db_errors("fetch ingredient")
    async def get_ingredient(db: AsyncSession, ingredient_id: int) -> IngredientResponse:
        """Get an ingredient with the menu items that use it."""
        ingredient = await db.get(Ingredient, ingredient_id, populate_existing=True)
        if not ingredient:
            raise not_found("Ingredient not found")

        stmt = (
            select(MenuItem.menu_item_id, MenuItem.menu_name, MenuItem.menu_type, Recipe.quantity_needed)
            .join(Recipe, Recipe.menu_item_id == MenuItem.menu_item_id)
            .where(Recipe.ingredient_id == ingredient_id)
            .order_by(MenuItem.menu_name.asc())
        )
        stock = to_money(ingredient.stock_quantity)
        menu_items = []
        for row in (await db.execute(stmt)).all():
            needed = to_money(row.quantity_needed)
            menu_items.append(IngredientMenuUsage(
                menu_item_id=row.menu_item_id,
                menu_name=row.menu_name,
                menu_type=row.menu_type,
                quantity_needed=float(needed),
                makeable_quantity=math.floor(stock / needed) if needed > 0 else None
            ))

        return build_ingredient_response(ingredient, len({m.menu_item_id for m in menu_items}), menu_items)

    @staticmethod
    @handle_async_db_errors("create ingredient")
    async def create_ingredient(db: AsyncSession, ingredient_data: IngredientCreate) -> IngredientResponse:
        async with async_transaction_rollback(db):
            db_ingredient = Ingredient(**ingredient_data.model_dump())
            db.add(db_ingredient)
            await db.flush()

        inventory_logger.success(
            "Created ingredient",
            "INGREDIENT",
            ingredient_id=db_ingredient.ingredient_id,
            ingredient_name=db_ingredient.ingredient_name
        )
        return await AsyncIngredientService.get_ingredient(db, db_ingredient.ingredient_id)

    @staticmethod
    @handle_async_db_errors("update ingredient")
    async def update_ingredient(db: AsyncSession, ingredient_id: int, ingredient_data: IngredientUpdate) -> IngredientResponse:
        db_ingredient = await db.get(Ingredient, ingredient_id)
        if not db_ingredient:
            raise not_found("Ingredient not found")

        update_data = ingredient_data.model_dump(exclude_unset=True)
        reject_null_fields(update_data)

        async with async_transaction_rollback(db):
            for field, value in update_data.items():
                setattr(db_ingredient, field, value)

        return await AsyncIngredientService.get_ingredient(db, ingredient_id)

    @staticmethod
    @handle_async_db_errors("restock ingredient")
    async def restock_ingredient(db: AsyncSession, ingredient_id: int, restock: IngredientRestock) -> IngredientResponse:
        """Apply a stock delta (negative to write off), never going below zero."""
        db_ingredient = await db.get(Ingredient, ingredient_id)
        if not db_ingredient:
            raise not_found("Ingredient not found")

        async with async_transaction_rollback(db):
            new_quantity = max(to_money(0), to_money(db_ingredient.stock_quantity) + to_money(restock.delta))
            db_ingredient.stock_quantity = new_quantity

        inventory_logger.info(
            "Restocked ingredient",
            "RESTOCK",
            ingredient_id=ingredient_id,
            delta=str(restock.delta),
            stock_quantity=str(new_quantity)
        )
        return await AsyncIngredientService.get_ingredient(db, ingredient_id)

    @staticmethod
    @handle_async_db_errors("delete ingredient")
    async def delete_ingredient(db: AsyncSession, ingredient_id: int) -> None:
        """Delete an ingredient that no recipe uses."""
        db_ingredient = await db.get(Ingredient, ingredient_id)
        if not db_ingredient:
            raise not_found("Ingredient not found")

        in_use = await db.scalar(
            select(func.count(Recipe.recipe_id)).where(Recipe.ingredient_id == ingredient_id)
        )
        if in_use:
            raise conflict(
                "Ingredient is used by menu item recipes",
                f"Remove it from {in_use} recipe line(s) before deleting"
            )

        async with async_transaction_rollback(db):
            await db.delete(db_ingredient)

        inventory_logger.info("Deleted ingredient", "INGREDIENT", ingredient_id=ingredient_id)
