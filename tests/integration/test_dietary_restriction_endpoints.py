"""
Integration tests for dietary restrictions.
"""

from wedding_planner.models.dietary_restriction import DietaryRestriction
from tests.async_test_utils import assert_success, assert_error


async def test_crud(async_client, db_utils):
    payload = {"restriction_name": "Nut allergy", "severity_level": "High", "restriction_type": "Allergy"}

    created = assert_success(await async_client.post("/dietary-restrictions", json=payload), 201)
    assert created["affected_guests"] == 0

    updated = assert_success(
        await async_client.put(f"/dietary-restrictions/{created['restriction_id']}", json={"severity_level": "Critical"})
    )
    assert updated["severity_level"] == "Critical"

    assert_success(await async_client.delete(f"/dietary-restrictions/{created['restriction_id']}"))
    await db_utils.assert_record_count(DietaryRestriction, 0)


async def test_get_lists_affected_guests_and_menu_items(async_client, factory):
    halal = await factory.create_restriction(restriction_name="Halal", restriction_type="Religious")
    wedding, _ = await factory.wedding_with_table()
    await factory.create_guest(wedding.wedding_id, guest_name="Omar", restriction_id=halal.restriction_id)
    await factory.create_menu_item(menu_name="Lamb Karahi", restriction_id=halal.restriction_id)

    listed = assert_success(await async_client.get("/dietary-restrictions"))
    assert listed[0]["affected_guests"] == 1
    assert listed[0]["menu_items_count"] == 1

    data = assert_success(await async_client.get(f"/dietary-restrictions/{halal.restriction_id}"))
    assert data["affected_guests_list"][0]["guest_name"] == "Omar"
    assert data["affected_guests_list"][0]["partner1_name"] == "Alex Morgan"
    assert data["affected_menu_items"][0]["menu_name"] == "Lamb Karahi"


async def test_delete_referenced_restriction_is_409(async_client, factory):
    vegan = await factory.create_restriction()
    wedding, _ = await factory.wedding_with_table()
    await factory.create_guest(wedding.wedding_id, restriction_id=vegan.restriction_id)

    assert_error(await async_client.delete(f"/dietary-restrictions/{vegan.restriction_id}"), 409)


async def test_missing_restriction_is_404(async_client):
    assert_error(await async_client.get("/dietary-restrictions/3"), 404, "Dietary restriction not found")
