"""
Async test utilities and helper functions.

Database helpers, API assertions on the response envelope and a factory
for building weddings, menus and packages directly through the ORM.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Tuple, Type, TypeVar

from httpx import Response
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

from wedding_planner.models.couple import Couple
from wedding_planner.models.dietary_restriction import DietaryRestriction
from wedding_planner.models.guest import Guest
from wedding_planner.models.ingredient import Ingredient
from wedding_planner.models.inventory import InventoryItem, InventoryAllocation
from wedding_planner.models.menu_item import MenuItem, Recipe
from wedding_planner.models.package import Package, PackageMenuItem, TablePackage
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.models.wedding import Wedding

T = TypeVar('T', bound=DeclarativeBase)


class AsyncDatabaseTestUtils:
    """Utility class for async database testing operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_record(self, model_class: Type[T], record_id: int) -> Optional[T]:
        """Get a record by ID, bypassing anything cached in the session."""
        return await self.session.get(model_class, record_id, populate_existing=True)

    async def count_records(self, model_class: Type[T], **filters) -> int:
        """Count records in a table with optional filters."""
        stmt = select(func.count()).select_from(model_class)
        if filters:
            stmt = stmt.where(*[getattr(model_class, key) == value for key, value in filters.items()])
        result = await self.session.execute(stmt)
        return result.scalar()

    async def assert_record_count(self, model_class: Type[T], expected_count: int, **filters):
        """Assert the number of records in a table."""
        actual_count = await self.count_records(model_class, **filters)
        assert actual_count == expected_count, f"Expected {expected_count} records, found {actual_count}"

    async def stock_of(self, ingredient_id: int) -> float:
        ingredient = await self.get_record(Ingredient, ingredient_id)
        return float(ingredient.stock_quantity)


def assert_success(response: Response, expected_status: int = 200) -> Any:
    """Assert a successful envelope and return its data."""
    assert response.status_code == expected_status, response.text
    body = response.json()
    assert body["success"] is True
    return body.get("data")


def assert_error(response: Response, expected_status: int, expected_error: Optional[str] = None) -> Dict[str, Any]:
    """Assert an error envelope, optionally checking its error summary."""
    assert response.status_code == expected_status, response.text
    body = response.json()
    assert body["success"] is False
    assert "data" not in body
    if expected_error is not None:
        assert body["error"] == expected_error
    return body


class AsyncTestDataFactory:
    """Factory class for creating test data."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _save(self, record: T) -> T:
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def create_couple(self, **overrides) -> Couple:
        data = {
            "partner1_name": "Alex Morgan",
            "partner2_name": "Sam Rivera",
            "partner1_email": "alex@example.com",
        }
        data.update(overrides)
        return await self._save(Couple(**data))

    async def create_wedding(self, couple_id: int, **overrides) -> Wedding:
        data = {
            "couple_id": couple_id,
            "wedding_date": date(2025, 6, 14),
            "venue": "Lakeside Hall",
            "guest_count": 80,
        }
        data.update(overrides)
        return await self._save(Wedding(**data))

    async def create_restriction(self, **overrides) -> DietaryRestriction:
        data = {
            "restriction_name": "Vegetarian",
            "severity_level": "Medium",
            "restriction_type": "Lifestyle",
        }
        data.update(overrides)
        return await self._save(DietaryRestriction(**data))

    async def create_ingredient(self, **overrides) -> Ingredient:
        data = {
            "ingredient_name": "Rice",
            "unit": "kg",
            "stock_quantity": Decimal("10.00"),
            "re_order_level": Decimal("2.00"),
        }
        data.update(overrides)
        return await self._save(Ingredient(**data))

    async def create_menu_item(
        self,
        recipe: Iterable[Tuple[Ingredient, Any]] = (),
        **overrides
    ) -> MenuItem:
        """Create a menu item with recipe lines given as (ingredient, quantity_needed) pairs."""
        data = {
            "menu_name": "Biryani",
            "menu_type": "main",
            "unit_cost": Decimal("4.00"),
            "selling_price": Decimal("6.00"),
            "default_markup_percentage": Decimal("30.00"),
        }
        data.update(overrides)
        item = await self._save(MenuItem(**data))

        for ingredient, quantity in recipe:
            self.session.add(Recipe(
                menu_item_id=item.menu_item_id,
                ingredient_id=ingredient.ingredient_id,
                quantity_needed=Decimal(str(quantity))
            ))
        await self.session.commit()
        return item

    async def create_package(
        self,
        items: Iterable[Tuple[MenuItem, int]] = (),
        **overrides
    ) -> Package:
        """Create a package with items given as (menu_item, quantity) pairs; unit_cost is stored as given."""
        data = {
            "package_name": "Silver",
            "package_type": "standard",
            "unit_cost": Decimal("0.00"),
            "selling_price": Decimal("100.00"),
            "default_markup_percentage": Decimal("30.00"),
        }
        data.update(overrides)
        package = await self._save(Package(**data))

        for menu_item, quantity in items:
            self.session.add(PackageMenuItem(
                package_id=package.package_id,
                menu_item_id=menu_item.menu_item_id,
                quantity=quantity
            ))
        await self.session.commit()
        return package

    async def create_table(self, wedding_id: int, **overrides) -> SeatingTable:
        data = {
            "wedding_id": wedding_id,
            "table_number": "1",
            "table_category": "guest",
            "capacity": 8,
        }
        data.update(overrides)
        return await self._save(SeatingTable(**data))

    async def assign_package(self, table_id: int, package_id: int) -> TablePackage:
        """Insert an assignment row without any of the stock or cost side effects."""
        return await self._save(TablePackage(table_id=table_id, package_id=package_id))

    async def create_guest(self, wedding_id: int, **overrides) -> Guest:
        data = {
            "wedding_id": wedding_id,
            "guest_name": "Jordan Lee",
            "rsvp_status": "accepted",
        }
        data.update(overrides)
        return await self._save(Guest(**data))

    async def create_inventory_item(self, **overrides) -> InventoryItem:
        data = {
            "item_name": "Chiavari Chair",
            "category": "Furniture",
            "item_condition": "Excellent",
            "quantity_available": 200,
            "rental_cost": Decimal("15.00"),
        }
        data.update(overrides)
        return await self._save(InventoryItem(**data))

    async def create_allocation(self, wedding_id: int, inventory_id: int, **overrides) -> InventoryAllocation:
        data = {
            "wedding_id": wedding_id,
            "inventory_id": inventory_id,
            "quantity_used": 3,
            "unit_rental_cost": Decimal("15.00"),
        }
        data.update(overrides)
        return await self._save(InventoryAllocation(**data))

    async def wedding_with_table(self, **wedding_overrides) -> Tuple[Wedding, SeatingTable]:
        couple = await self.create_couple()
        wedding = await self.create_wedding(couple.couple_id, **wedding_overrides)
        table = await self.create_table(wedding.wedding_id)
        return wedding, table
