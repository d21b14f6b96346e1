"""
Integration tests for the financial and per-wedding reports.
"""

from datetime import date
from decimal import Decimal

import pytest

from tests.async_test_utils import assert_success, assert_error


@pytest.fixture
async def booked_wedding(factory):
    """A June 2025 wedding with one package (selling 100, cost 10.50) and 45 of equipment."""
    wedding, table = await factory.wedding_with_table(wedding_date=date(2025, 6, 14))
    package = await factory.create_package(
        package_type="premium", unit_cost=Decimal("10.50"), selling_price=Decimal("100.00")
    )
    await factory.assign_package(table.table_id, package.package_id)
    chair = await factory.create_inventory_item(item_condition="Needs Repair")
    await factory.create_allocation(wedding.wedding_id, chair.inventory_id, quantity_used=3)
    return wedding, table, package


async def test_financial_report_for_month(async_client, booked_wedding):
    data = assert_success(await async_client.get("/reports/financial", params={"period": "month", "value": "2025-06"}))

    assert data["total_revenue"] == 100.0
    assert data["total_cogs"] == 10.5
    assert data["total_gross_profit"] == 89.5
    assert data["total_equipment_cost"] == 45.0
    assert data["net_profit"] == 44.5
    assert data["gross_profit_margin"] == 89.5
    assert data["total_table_assignments"] == 1
    assert data["weddings_with_packages"] == 1
    assert data["revenue_by_package_type"][0]["package_type"] == "premium"
    assert data["previous_period"]["value"] == "2025-05"
    assert data["previous_period"]["total_revenue"] == 0


async def test_financial_report_outside_period_is_empty(async_client, booked_wedding):
    data = assert_success(await async_client.get("/reports/financial", params={"period": "year", "value": "2024"}))

    assert data["total_revenue"] == 0
    assert data["gross_profit_margin"] == 0


async def test_financial_report_rejects_bad_value(async_client):
    assert_error(await async_client.get("/reports/financial", params={"period": "month", "value": "June"}), 400)


async def test_seating_report(async_client, factory, booked_wedding):
    wedding, table, _ = booked_wedding
    await factory.create_guest(wedding.wedding_id, guest_name="Seated", table_id=table.table_id)
    await factory.create_guest(wedding.wedding_id, guest_name="Standing")

    data = assert_success(await async_client.get(f"/reports/wedding/{wedding.wedding_id}/seating"))

    assert [g["guest_name"] for g in data["seating"][0]["guests"]] == ["Seated"]
    assert [g["guest_name"] for g in data["unseated"]] == ["Standing"]


async def test_inventory_report_flags_items_needing_repair(async_client, booked_wedding):
    wedding, _, _ = booked_wedding

    data = assert_success(await async_client.get(f"/reports/wedding/{wedding.wedding_id}/inventory"))

    assert data["equipment_rental_cost"] == 45.0
    assert len(data["needs_attention"]) == 1


async def test_menu_dietary_report(async_client, factory, booked_wedding):
    wedding, table, _ = booked_wedding
    vegan = await factory.create_restriction(restriction_name="Vegan")
    salad = await factory.create_menu_item(menu_name="Salad", restriction_id=vegan.restriction_id)
    menu_package = await factory.create_package([(salad, 2)], package_name="Garden")
    await factory.assign_package(table.table_id, menu_package.package_id)
    await factory.create_guest(wedding.wedding_id, restriction_id=vegan.restriction_id)

    data = assert_success(await async_client.get(f"/reports/wedding/{wedding.wedding_id}/menu-dietary"))

    assert data["dish_counts"] == [{"menu_item_id": salad.menu_item_id, "menu_name": "Salad", "times_ordered": 2}]
    assert data["restricted_dishes"][0]["restriction_name"] == "Vegan"
    assert data["guest_restrictions"] == [{"restriction_name": "Vegan", "count": 1}]


async def test_wedding_report_for_missing_wedding_is_404(async_client):
    assert_error(await async_client.get("/reports/wedding/99/seating"), 404, "Wedding not found")
