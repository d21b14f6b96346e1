"""
Unit tests for the costing service: ingredient usage, stock deduction and
restoration, package cost sync and the wedding cost aggregator.
"""

from decimal import Decimal

import pytest
from sqlalchemy import update

from wedding_planner.models.ingredient import Ingredient
from wedding_planner.models.package import Package, TablePackage
from wedding_planner.models.wedding import Wedding
from wedding_planner.services.costing import CostingService, to_money, suggested_price


async def build_package(factory, chicken_stock="5.00"):
    """Biryani x2 (rice 2, chicken 1) and Pilaf x1 (rice 0.5)."""
    rice = await factory.create_ingredient(ingredient_name="Rice", stock_quantity=Decimal("10.00"))
    chicken = await factory.create_ingredient(ingredient_name="Chicken", stock_quantity=Decimal(chicken_stock))
    biryani = await factory.create_menu_item(
        [(rice, "2"), (chicken, "1")], menu_name="Biryani", unit_cost=Decimal("4.00")
    )
    pilaf = await factory.create_menu_item([(rice, "0.5")], menu_name="Pilaf", unit_cost=Decimal("2.50"))
    package = await factory.create_package([(biryani, 2), (pilaf, 1)], selling_price=Decimal("100.00"))
    return rice, chicken, package


def test_to_money_rounds_half_up():
    assert to_money(None) == Decimal("0.00")
    assert to_money(1.005) == Decimal("1.01")
    assert to_money("7") == Decimal("7.00")


def test_suggested_price_applies_markup():
    assert suggested_price(Decimal("10.00"), Decimal("30")) == Decimal("13.00")
    assert suggested_price("4.00", "12.5") == Decimal("4.50")
    assert suggested_price(0, 50) == Decimal("0.00")


class TestIngredientUsage:

    async def test_usage_multiplies_recipe_by_package_quantity(self, async_db_session, factory):
        rice, chicken, package = await build_package(factory)

        usage = await CostingService.calculate_ingredient_usage_for_package(async_db_session, package.package_id)

        assert usage == {rice.ingredient_id: Decimal("4.50"), chicken.ingredient_id: Decimal("2.00")}

    async def test_usage_is_not_scaled_by_assigned_tables(self, async_db_session, factory):
        rice, _, package = await build_package(factory)
        wedding, table = await factory.wedding_with_table()
        second = await factory.create_table(wedding.wedding_id, table_number="2")
        await factory.assign_package(table.table_id, package.package_id)
        await factory.assign_package(second.table_id, package.package_id)

        usage = await CostingService.calculate_ingredient_usage_for_package(async_db_session, package.package_id)

        assert usage[rice.ingredient_id] == Decimal("4.50")

    async def test_empty_package_uses_nothing(self, async_db_session, factory):
        package = await factory.create_package()

        assert await CostingService.calculate_ingredient_usage_for_package(async_db_session, package.package_id) == {}


class TestStockAdjustment:

    async def test_deduct_subtracts_usage(self, async_db_session, factory, db_utils):
        rice, chicken, package = await build_package(factory)

        await CostingService.deduct_ingredient_stock_for_package(async_db_session, package.package_id)
        await async_db_session.commit()

        assert await db_utils.stock_of(rice.ingredient_id) == pytest.approx(5.5)
        assert await db_utils.stock_of(chicken.ingredient_id) == pytest.approx(3.0)

    async def test_deduct_clamps_at_zero(self, async_db_session, factory, db_utils):
        _, chicken, package = await build_package(factory, chicken_stock="1.00")

        await CostingService.deduct_ingredient_stock_for_package(async_db_session, package.package_id)
        await async_db_session.commit()

        assert await db_utils.stock_of(chicken.ingredient_id) == 0

    async def test_restore_adds_full_usage_after_clamped_deduction(self, async_db_session, factory, db_utils):
        _, chicken, package = await build_package(factory, chicken_stock="1.00")

        await CostingService.deduct_ingredient_stock_for_package(async_db_session, package.package_id)
        await CostingService.restore_ingredient_stock_for_package(async_db_session, package.package_id)
        await async_db_session.commit()

        # 1 -> 0 (clamped) -> 2: the full usage comes back, not what was taken
        assert await db_utils.stock_of(chicken.ingredient_id) == pytest.approx(2.0)

    async def test_deduct_then_restore_round_trips_when_stock_suffices(self, async_db_session, factory, db_utils):
        rice, chicken, package = await build_package(factory)

        await CostingService.deduct_ingredient_stock_for_package(async_db_session, package.package_id)
        await CostingService.restore_ingredient_stock_for_package(async_db_session, package.package_id)
        await async_db_session.commit()

        assert await db_utils.stock_of(rice.ingredient_id) == pytest.approx(10.0)
        assert await db_utils.stock_of(chicken.ingredient_id) == pytest.approx(5.0)


class TestPackageCost:

    async def test_calculate_package_cost(self, async_db_session, factory):
        _, _, package = await build_package(factory)

        cost = await CostingService.calculate_package_cost(async_db_session, package.package_id)

        assert cost == Decimal("10.50")

    async def test_empty_package_costs_zero(self, async_db_session, factory):
        package = await factory.create_package()

        assert await CostingService.calculate_package_cost(async_db_session, package.package_id) == Decimal("0.00")

    async def test_sync_rewrites_drifted_cost(self, async_db_session, factory, db_utils):
        _, _, package = await build_package(factory)

        assert await CostingService.sync_package_cost(async_db_session, package) is True
        await async_db_session.commit()

        stored = await db_utils.get_record(Package, package.package_id)
        assert float(stored.unit_cost) == pytest.approx(10.5)
        assert await CostingService.sync_package_cost(async_db_session, stored) is False

    async def test_sync_ignores_drift_within_tolerance(self, async_db_session, factory):
        _, _, package = await build_package(factory)
        package.unit_cost = Decimal("10.51")

        assert await CostingService.sync_package_cost(async_db_session, package) is False
        assert package.unit_cost == Decimal("10.51")


class TestWeddingCosts:

    async def test_total_is_equipment_plus_package_selling_prices(self, async_db_session, factory, db_utils):
        _, _, package = await build_package(factory)
        wedding, table = await factory.wedding_with_table()
        await factory.assign_package(table.table_id, package.package_id)
        chair = await factory.create_inventory_item()
        await factory.create_allocation(wedding.wedding_id, chair.inventory_id, quantity_used=3)

        costs = await CostingService.update_wedding_costs(async_db_session, wedding.wedding_id)
        await async_db_session.commit()

        assert costs.equipment_rental_cost == pytest.approx(45.0)
        assert costs.food_cost == pytest.approx(10.5)
        assert costs.total_invoice_amount == pytest.approx(100.0)
        assert costs.total_cost == pytest.approx(145.0)

        stored = await db_utils.get_record(Wedding, wedding.wedding_id)
        assert float(stored.total_cost) == pytest.approx(145.0)
        assert float(stored.food_cost) == pytest.approx(10.5)

    async def test_each_assigned_table_counts(self, async_db_session, factory):
        _, _, package = await build_package(factory)
        wedding, table = await factory.wedding_with_table()
        second = await factory.create_table(wedding.wedding_id, table_number="2")
        await factory.assign_package(table.table_id, package.package_id)
        await factory.assign_package(second.table_id, package.package_id)

        costs = await CostingService.update_wedding_costs(async_db_session, wedding.wedding_id)

        assert costs.total_cost == pytest.approx(200.0)
        assert costs.food_cost == pytest.approx(21.0)

    async def test_wedding_without_assignments_costs_zero(self, async_db_session, factory):
        wedding, _ = await factory.wedding_with_table()

        costs = await CostingService.update_wedding_costs(async_db_session, wedding.wedding_id)

        assert costs.total_cost == 0
        assert costs.equipment_rental_cost == 0

    async def test_missing_wedding_returns_none(self, async_db_session):
        assert await CostingService.update_wedding_costs(async_db_session, 999) is None


class TestSecondaryEffects:

    async def test_failed_stock_adjustment_keeps_outer_work(self, async_db_session, factory, db_utils, monkeypatch):
        rice, _, package = await build_package(factory)
        _, table = await factory.wedding_with_table()
        rice_id = rice.ingredient_id

        async def partial_deduct(db, package_id):
            await db.execute(
                update(Ingredient)
                .where(Ingredient.ingredient_id == rice_id)
                .values(stock_quantity=0)
            )
            raise RuntimeError("stock ledger unavailable")

        monkeypatch.setattr(CostingService, "deduct_ingredient_stock_for_package", partial_deduct)

        async_db_session.add(TablePackage(table_id=table.table_id, package_id=package.package_id))
        await async_db_session.flush()
        assert await CostingService.try_adjust_stock(async_db_session, package.package_id, deduct=True) is False
        await async_db_session.commit()

        await db_utils.assert_record_count(TablePackage, 1)
        assert await db_utils.stock_of(rice_id) == pytest.approx(10.0)

    async def test_failed_cost_update_is_swallowed(self, async_db_session, factory, monkeypatch):
        wedding, _ = await factory.wedding_with_table()

        async def failing(db, wedding_id):
            raise RuntimeError("aggregation failed")

        monkeypatch.setattr(CostingService, "update_wedding_costs", failing)

        assert await CostingService.try_update_wedding_costs(async_db_session, wedding.wedding_id) is False

    async def test_cost_update_without_wedding_is_skipped(self, async_db_session):
        assert await CostingService.try_update_wedding_costs(async_db_session, None) is False
