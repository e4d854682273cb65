import pytest


class TestUnitCrud:
    """Tests for unit management"""

    def test_create_unit_defaults_to_vacant(self, client):
        response = client.post(
            "/api/units",
            json={
                "unit_number": "B12",
                "type": "two_bedroom",
                "bedrooms": 2,
                "bathrooms": 1.5,
                "square_feet": 850,
                "rent_amount": 1450.00,
            },
        )

        assert response.status_code == 201
        unit = response.json()
        assert unit["status"] == "vacant"
        assert unit["bathrooms"] == 1.5
        assert unit["rent_amount"] == 1450.00

    def test_create_unit_duplicate_number_rejected(self, client, make_unit):
        make_unit(unit_number="C1")

        response = client.post(
            "/api/units", json={"unit_number": "C1", "type": "studio", "rent_amount": 700}
        )

        assert response.status_code == 400

    def test_create_unit_invalid_type_rejected(self, client):
        response = client.post(
            "/api/units", json={"unit_number": "X1", "type": "castle", "rent_amount": 700}
        )

        assert response.status_code == 400

    def test_get_unit_by_number(self, client, make_unit):
        unit = make_unit(unit_number="PH-1")

        response = client.get("/api/units/number/PH-1")

        assert response.status_code == 200
        assert response.json()["id"] == unit["id"]
        assert client.get("/api/units/number/NOPE").status_code == 404

    def test_list_units_ordered_by_number(self, client, make_unit):
        make_unit(unit_number="B2")
        make_unit(unit_number="A1")

        numbers = [u["unit_number"] for u in client.get("/api/units").json()]

        assert numbers == ["A1", "B2"]

    def test_vacant_and_occupied_lists(self, client, make_unit, make_lease):
        vacant = make_unit()
        lease = make_lease(status="active")

        vacant_ids = [u["id"] for u in client.get("/api/units/vacant").json()]
        occupied_ids = [u["id"] for u in client.get("/api/units/occupied").json()]

        assert vacant["id"] in vacant_ids
        assert lease["unit_id"] in occupied_ids
        assert lease["unit_id"] not in vacant_ids

    def test_update_unit_partial(self, client, make_unit):
        unit = make_unit(rent_amount=1000)

        response = client.put(f"/api/units/{unit['id']}", json={"rent_amount": 1100})

        assert response.status_code == 200
        assert response.json()["rent_amount"] == 1100
        assert response.json()["unit_number"] == unit["unit_number"]

    def test_update_unit_to_taken_number_rejected(self, client, make_unit):
        make_unit(unit_number="T1")
        unit = make_unit(unit_number="T2")

        response = client.put(f"/api/units/{unit['id']}", json={"unit_number": "T1"})

        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["unit_number", "type", "rent_amount"])
    def test_update_unit_null_field_ignored(self, client, make_unit, field):
        unit = make_unit()

        response = client.put(f"/api/units/{unit['id']}", json={field: None})

        assert response.status_code == 200
        assert response.json()[field] == unit[field]

    def test_delete_unit(self, client, make_unit):
        unit = make_unit()

        response = client.delete(f"/api/units/{unit['id']}")

        assert response.status_code == 200
        assert client.get(f"/api/units/{unit['id']}").status_code == 404

    @pytest.mark.parametrize("status", ["active", "pending"])
    def test_delete_unit_with_open_lease_rejected(self, client, make_lease, status):
        lease = make_lease(status=status)

        response = client.delete(f"/api/units/{lease['unit_id']}")

        assert response.status_code == 400
        assert client.get(f"/api/units/{lease['unit_id']}").status_code == 200


class TestUnitStatus:
    """Manual status changes"""

    def test_set_maintenance(self, client, make_unit):
        unit = make_unit()

        response = client.patch(f"/api/units/{unit['id']}/status", json={"status": "maintenance"})

        assert response.status_code == 200
        assert response.json()["status"] == "maintenance"

    def test_cannot_vacate_unit_with_active_lease(self, client, make_lease):
        lease = make_lease(status="active")

        response = client.patch(f"/api/units/{lease['unit_id']}/status", json={"status": "vacant"})

        assert response.status_code == 400
        assert "active lease" in response.json()["error"]
        assert client.get(f"/api/units/{lease['unit_id']}").json()["status"] == "occupied"

    def test_cannot_vacate_through_update_either(self, client, make_lease):
        lease = make_lease(status="active")

        response = client.put(f"/api/units/{lease['unit_id']}", json={"status": "vacant"})

        assert response.status_code == 400

    def test_status_not_found(self, client):
        response = client.patch("/api/units/999/status", json={"status": "maintenance"})

        assert response.status_code == 404


class TestOccupancyStats:
    """Occupancy summary"""

    def test_stats_counts_rates_and_income(self, client, make_unit, make_lease):
        occupied = make_unit(rent_amount=1000)
        make_lease(unit_id=occupied["id"], status="active")
        make_unit(rent_amount=800)
        maintenance = make_unit(rent_amount=1200)
        client.patch(f"/api/units/{maintenance['id']}/status", json={"status": "maintenance"})

        stats = client.get("/api/units/occupancy-stats").json()

        assert stats["total_units"] == 3
        assert stats["occupied_units"] == 1
        assert stats["vacant_units"] == 1
        assert stats["maintenance_units"] == 1
        assert stats["occupancy_rate"] == 33.33
        assert stats["potential_income"] == 3000.00
        assert stats["actual_income"] == 1000.00
        percentages = {row["status"]: row["percentage"] for row in stats["by_status"]}
        assert percentages == {"vacant": 33.33, "occupied": 33.33, "maintenance": 33.33}

    def test_stats_empty(self, client):
        stats = client.get("/api/units/occupancy-stats").json()

        assert stats["total_units"] == 0
        assert stats["occupancy_rate"] == 0
        assert stats["by_status"] == []

    def test_stats_idempotent(self, client, make_unit, make_lease):
        make_lease(status="active")
        make_unit()

        first = client.get("/api/units/occupancy-stats").json()
        second = client.get("/api/units/occupancy-stats").json()

        assert first == second


class TestUnitOccupant:
    """Active lease details on unit responses"""

    def test_vacant_unit_has_no_occupant(self, client, make_unit):
        unit = make_unit()

        assert unit["tenant_name"] is None
        assert unit["lease_rent"] is None

    def test_get_unit_includes_active_lease(self, client, make_lease):
        lease = make_lease(status="active", rent_amount=975)

        unit = client.get(f"/api/units/{lease['unit_id']}").json()

        assert unit["tenant_name"] == lease["tenant_name"]
        assert unit["tenant_email"] == lease["tenant_email"]
        assert unit["start_date"] == lease["start_date"]
        assert unit["end_date"] == lease["end_date"]
        assert unit["lease_rent"] == 975

    def test_list_ignores_pending_lease(self, client, make_lease):
        active = make_lease(status="active")
        pending = make_lease(status="pending")

        units = {u["id"]: u for u in client.get("/api/units").json()}

        assert units[active["unit_id"]]["tenant_name"] == active["tenant_name"]
        assert units[pending["unit_id"]]["tenant_name"] is None
