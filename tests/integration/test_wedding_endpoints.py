"""
Integration tests for couples, weddings and guests.
"""

from datetime import date

from wedding_planner.models.guest import Guest
from wedding_planner.models.inventory import InventoryAllocation
from wedding_planner.models.package import TablePackage
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.models.wedding import Wedding
from tests.async_test_utils import assert_success, assert_error


class TestCouples:

    async def test_create_and_list_with_wedding_summary(self, async_client, factory):
        created = assert_success(
            await async_client.post("/couples", json={"partner1_name": "Ana", "partner2_name": "Ben"}),
            201
        )
        await factory.create_wedding(created["couple_id"], wedding_date=date(2024, 5, 1))
        await factory.create_wedding(created["couple_id"], wedding_date=date(2025, 9, 20))

        data = assert_success(await async_client.get("/couples"))

        assert data[0]["partner1_name"] == "Ana"
        assert data[0]["wedding_count"] == 2
        assert data[0]["last_wedding"] == "2025-09-20"

    async def test_update_couple(self, async_client, factory):
        couple = await factory.create_couple()

        data = assert_success(
            await async_client.put(f"/couples/{couple.couple_id}", json={"planner_contact": "planner@example.com"})
        )

        assert data["planner_contact"] == "planner@example.com"
        assert data["partner1_name"] == "Alex Morgan"

    async def test_null_partner_name_is_400(self, async_client, factory):
        couple = await factory.create_couple()

        assert_error(
            await async_client.put(f"/couples/{couple.couple_id}", json={"partner2_name": None, "planner_contact": None}),
            400,
            "Missing or invalid fields: partner2_name"
        )

    async def test_couple_weddings(self, async_client, factory):
        couple = await factory.create_couple()
        await factory.create_wedding(couple.couple_id)

        data = assert_success(await async_client.get(f"/couples/{couple.couple_id}/weddings"))

        assert len(data) == 1
        assert data[0]["partner2_name"] == "Sam Rivera"

    async def test_delete_with_weddings_is_409(self, async_client, factory):
        couple = await factory.create_couple()
        await factory.create_wedding(couple.couple_id)

        assert_error(await async_client.delete(f"/couples/{couple.couple_id}"), 409, "Couple has weddings on record")

    async def test_delete_couple(self, async_client, factory):
        couple = await factory.create_couple()

        assert_success(await async_client.delete(f"/couples/{couple.couple_id}"))
        assert_error(await async_client.get(f"/couples/{couple.couple_id}"), 404, "Couple not found")


class TestWeddings:

    async def test_create_ignores_cost_fields(self, async_client, factory):
        couple = await factory.create_couple()
        payload = {
            "couple_id": couple.couple_id,
            "wedding_date": "2025-08-02",
            "wedding_time": "16:30:00",
            "venue": "Rose Garden",
            "total_cost": 9999
        }

        data = assert_success(await async_client.post("/weddings", json=payload), 201)

        assert data["payment_status"] == "pending"
        assert data["total_cost"] == 0
        assert data["partner1_name"] == "Alex Morgan"

    async def test_create_for_unknown_couple_is_400(self, async_client):
        payload = {"couple_id": 404, "wedding_date": "2025-08-02", "venue": "Rose Garden"}

        assert_error(await async_client.post("/weddings", json=payload), 400, "Unknown couple id: 404")

    async def test_list_latest_first(self, async_client, factory):
        couple = await factory.create_couple()
        await factory.create_wedding(couple.couple_id, venue="Early", wedding_date=date(2024, 1, 10))
        await factory.create_wedding(couple.couple_id, venue="Late", wedding_date=date(2025, 1, 10))

        data = assert_success(await async_client.get("/weddings"))

        assert [w["venue"] for w in data] == ["Late", "Early"]

    async def test_update_wedding(self, async_client, factory):
        wedding, _ = await factory.wedding_with_table()

        data = assert_success(
            await async_client.put(f"/weddings/{wedding.wedding_id}", json={"payment_status": "paid", "guest_count": 120})
        )

        assert data["payment_status"] == "paid"
        assert data["guest_count"] == 120

    async def test_recalculate_costs(self, async_client, factory):
        wedding, table = await factory.wedding_with_table()
        package = await factory.create_package(selling_price=80)
        await factory.assign_package(table.table_id, package.package_id)

        data = assert_success(await async_client.post(f"/weddings/{wedding.wedding_id}/recalculate-costs"))

        assert data["total_cost"] == 80.0
        assert data["total_invoice_amount"] == 80.0

    async def test_recalculate_missing_wedding_is_404(self, async_client):
        assert_error(await async_client.post("/weddings/5/recalculate-costs"), 404, "Wedding not found")

    async def test_delete_removes_dependents(self, async_client, factory, db_utils):
        wedding, table = await factory.wedding_with_table()
        package = await factory.create_package()
        await factory.assign_package(table.table_id, package.package_id)
        await factory.create_guest(wedding.wedding_id, table_id=table.table_id)
        chair = await factory.create_inventory_item()
        await factory.create_allocation(wedding.wedding_id, chair.inventory_id)

        assert_success(await async_client.delete(f"/weddings/{wedding.wedding_id}"))

        await db_utils.assert_record_count(Wedding, 0)
        await db_utils.assert_record_count(SeatingTable, 0)
        await db_utils.assert_record_count(TablePackage, 0)
        await db_utils.assert_record_count(Guest, 0)
        await db_utils.assert_record_count(InventoryAllocation, 0)


class TestGuests:

    async def test_create_defaults_to_pending(self, async_client, factory):
        wedding, table = await factory.wedding_with_table()
        vegan = await factory.create_restriction(restriction_name="Vegan")
        payload = {
            "wedding_id": wedding.wedding_id,
            "guest_name": "Priya",
            "table_id": table.table_id,
            "restriction_id": vegan.restriction_id
        }

        data = assert_success(await async_client.post("/guests", json=payload), 201)

        assert data["rsvp_status"] == "pending"
        assert data["restriction_name"] == "Vegan"
        assert data["table_number"] == "1"

    async def test_table_of_another_wedding_is_400(self, async_client, factory):
        wedding, _ = await factory.wedding_with_table()
        _, other_table = await factory.wedding_with_table()
        payload = {"wedding_id": wedding.wedding_id, "guest_name": "Priya", "table_id": other_table.table_id}

        assert_error(await async_client.post("/guests", json=payload), 400, "Invalid table for this wedding")

    async def test_list_filtered_by_wedding(self, async_client, factory):
        wedding, _ = await factory.wedding_with_table()
        other, _ = await factory.wedding_with_table()
        await factory.create_guest(wedding.wedding_id, guest_name="Zoe")
        await factory.create_guest(wedding.wedding_id, guest_name="Adam")
        await factory.create_guest(other.wedding_id, guest_name="Elsewhere")

        response = await async_client.get("/guests", params={"wedding_id": wedding.wedding_id})

        assert response.json()["count"] == 2
        assert [g["guest_name"] for g in assert_success(response)] == ["Adam", "Zoe"]

    async def test_update_and_delete_guest(self, async_client, factory, db_utils):
        wedding, _ = await factory.wedding_with_table()
        guest = await factory.create_guest(wedding.wedding_id)

        data = assert_success(await async_client.put(f"/guests/{guest.guest_id}", json={"rsvp_status": "declined"}))
        assert data["rsvp_status"] == "declined"

        assert_success(await async_client.delete(f"/guests/{guest.guest_id}"))
        await db_utils.assert_record_count(Guest, 0)
