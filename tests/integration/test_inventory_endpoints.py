"""
Integration tests for rental inventory and its allocation to weddings.
"""

from wedding_planner.models.inventory import InventoryItem
from tests.async_test_utils import assert_success, assert_error


async def test_item_crud_and_filters(async_client, db_utils):
    chair = {"item_name": "Chair", "category": "Furniture", "item_condition": "Excellent",
             "quantity_available": 100, "rental_cost": 4.5}
    lamp = {"item_name": "Lamp", "category": "Lighting", "item_condition": "Needs Repair",
            "quantity_available": 10, "rental_cost": 12}

    created = assert_success(await async_client.post("/inventory", json=chair), 201)
    assert_success(await async_client.post("/inventory", json=lamp), 201)

    assert len(assert_success(await async_client.get("/inventory", params={"category": "all"}))) == 2
    lighting = assert_success(await async_client.get("/inventory", params={"category": "Lighting"}))
    assert [i["item_name"] for i in lighting] == ["Lamp"]

    updated = assert_success(
        await async_client.put(f"/inventory/{created['inventory_id']}", json={"item_condition": "Good"})
    )
    assert updated["item_condition"] == "Good"

    assert_success(await async_client.delete(f"/inventory/{created['inventory_id']}"))
    await db_utils.assert_record_count(InventoryItem, 1)


async def test_allocation_updates_wedding_costs(async_client, factory):
    wedding, table = await factory.wedding_with_table()
    chair = await factory.create_inventory_item(rental_cost=15)

    data = assert_success(
        await async_client.post(
            "/inventory/allocations",
            json={"wedding_id": wedding.wedding_id, "inventory_id": chair.inventory_id, "quantity_used": 4}
        ),
        201
    )

    assert data["unit_rental_cost"] == 15.0
    assert data["total_cost"] == 60.0
    wedding_data = assert_success(await async_client.get(f"/weddings/{wedding.wedding_id}"))
    assert wedding_data["equipment_rental_cost"] == 60.0
    assert wedding_data["total_cost"] == 60.0

    updated = assert_success(
        await async_client.put(f"/inventory/allocations/{data['allocation_id']}", json={"unit_rental_cost": 10})
    )
    assert updated["total_cost"] == 40.0

    listed = assert_success(await async_client.get(f"/inventory/allocations/{wedding.wedding_id}"))
    assert [a["item_name"] for a in listed] == ["Chiavari Chair"]

    assert_success(await async_client.delete(f"/inventory/allocations/{data['allocation_id']}"))
    wedding_data = assert_success(await async_client.get(f"/weddings/{wedding.wedding_id}"))
    assert wedding_data["total_cost"] == 0


async def test_allocation_for_missing_wedding_is_404(async_client, factory):
    chair = await factory.create_inventory_item()

    assert_error(
        await async_client.post(
            "/inventory/allocations",
            json={"wedding_id": 123, "inventory_id": chair.inventory_id, "quantity_used": 1}
        ),
        404,
        "Wedding not found"
    )


async def test_delete_allocated_item_is_409(async_client, factory):
    wedding, _ = await factory.wedding_with_table()
    chair = await factory.create_inventory_item()
    await factory.create_allocation(wedding.wedding_id, chair.inventory_id)

    assert_error(await async_client.delete(f"/inventory/{chair.inventory_id}"), 409, "Inventory item is allocated to weddings")
