from datetime import date, timedelta


class TestTenantCrud:
    """Tests for creating, reading, updating and deleting tenants"""

    def test_create_tenant_success(self, client):
        response = client.post(
            "/api/tenants",
            json={
                "name": "Jane Doe",
                "email": "jane@example.com",
                "phone": "555-0100",
                "emergency_contact": "John Doe",
                "emergency_phone": "555-0199",
            },
        )

        assert response.status_code == 201
        tenant = response.json()
        assert tenant["name"] == "Jane Doe"
        assert tenant["email"] == "jane@example.com"
        assert tenant["emergency_contact"] == "John Doe"
        assert "id" in tenant
        assert "created_at" in tenant

    def test_create_tenant_duplicate_email_rejected(self, client, make_tenant):
        make_tenant(email="dup@example.com")

        response = client.post(
            "/api/tenants", json={"name": "Other", "email": "DUP@example.com"}
        )

        assert response.status_code == 400
        assert "email" in response.json()["error"]

    def test_create_tenant_invalid_email(self, client):
        response = client.post("/api/tenants", json={"name": "Bad", "email": "not-an-email"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request"
        assert body["details"]

    def test_list_tenants_ordered_by_name(self, client, make_tenant):
        make_tenant(name="Charlie")
        make_tenant(name="Alice")
        make_tenant(name="Bob")

        response = client.get("/api/tenants")

        assert response.status_code == 200
        assert [t["name"] for t in response.json()] == ["Alice", "Bob", "Charlie"]

    def test_get_tenant_not_found(self, client):
        response = client.get("/api/tenants/999")

        assert response.status_code == 404
        assert response.json() == {"error": "Tenant not found"}

    def test_update_tenant_partial(self, client, make_tenant):
        tenant = make_tenant(name="Old Name", phone="555-1111")

        response = client.put(f"/api/tenants/{tenant['id']}", json={"name": "New Name"})

        assert response.status_code == 200
        updated = response.json()
        assert updated["name"] == "New Name"
        assert updated["phone"] == "555-1111"
        assert updated["email"] == tenant["email"]

    def test_update_tenant_to_taken_email_rejected(self, client, make_tenant):
        make_tenant(email="taken@example.com")
        tenant = make_tenant()

        response = client.put(f"/api/tenants/{tenant['id']}", json={"email": "taken@example.com"})

        assert response.status_code == 400

    def test_update_tenant_keeps_own_email(self, client, make_tenant):
        tenant = make_tenant(email="same@example.com")

        response = client.put(
            f"/api/tenants/{tenant['id']}", json={"email": "same@example.com", "notes": "VIP"}
        )

        assert response.status_code == 200
        assert response.json()["notes"] == "VIP"

    def test_update_tenant_null_fields_ignored(self, client, make_tenant):
        tenant = make_tenant(name="Kept Name")

        response = client.put(f"/api/tenants/{tenant['id']}", json={"name": None, "email": None})

        assert response.status_code == 200
        assert response.json()["name"] == "Kept Name"
        assert response.json()["email"] == tenant["email"]

    def test_delete_tenant(self, client, make_tenant):
        tenant = make_tenant()

        response = client.delete(f"/api/tenants/{tenant['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Tenant deleted successfully"}
        assert client.get(f"/api/tenants/{tenant['id']}").status_code == 404


class TestTenantSearch:
    """Tests for tenant search"""

    def test_search_matches_name_email_and_phone(self, client, make_tenant):
        make_tenant(name="Maria Lopez", email="maria@example.com", phone="555-2020")
        make_tenant(name="Peter Pan", email="peter@neverland.org", phone="555-3030")

        by_name = client.get("/api/tenants/search/lopez").json()
        by_email = client.get("/api/tenants/search/neverland").json()
        by_phone = client.get("/api/tenants/search/2020").json()

        assert [t["name"] for t in by_name] == ["Maria Lopez"]
        assert [t["name"] for t in by_email] == ["Peter Pan"]
        assert [t["name"] for t in by_phone] == ["Maria Lopez"]

    def test_search_no_match(self, client, make_tenant):
        make_tenant(name="Someone")

        response = client.get("/api/tenants/search/zzz")

        assert response.status_code == 200
        assert response.json() == []


class TestTenantDeletionGuards:
    """Tenants holding open leases cannot be deleted"""

    def test_delete_tenant_with_active_lease_rejected(self, client, make_lease):
        lease = make_lease(status="active")

        response = client.delete(f"/api/tenants/{lease['tenant_id']}")

        assert response.status_code == 400
        assert client.get(f"/api/tenants/{lease['tenant_id']}").status_code == 200

    def test_delete_tenant_with_pending_lease_rejected(self, client, make_lease):
        lease = make_lease(status="pending")

        response = client.delete(f"/api/tenants/{lease['tenant_id']}")

        assert response.status_code == 400

    def test_delete_tenant_after_termination_removes_history(self, client, make_lease):
        lease = make_lease(status="active")
        client.patch(f"/api/leases/{lease['id']}/terminate", json={})
        client.post(
            "/api/payments",
            json={
                "tenant_id": lease["tenant_id"],
                "lease_id": lease["id"],
                "amount": 500,
                "payment_date": str(date.today() - timedelta(days=3)),
                "payment_method": "cash",
            },
        )

        response = client.delete(f"/api/tenants/{lease['tenant_id']}")

        assert response.status_code == 200
        assert client.get(f"/api/leases/{lease['id']}").status_code == 404
        assert client.get(f"/api/payments?tenant_id={lease['tenant_id']}").json() == []


class TestTenantReadModel:
    """Current rental and recent payment totals on tenant responses"""

    def test_tenant_without_lease(self, client, make_tenant):
        tenant = make_tenant()

        assert tenant["active_leases"] == 0
        assert tenant["recent_payments"] == 0
        assert tenant["unit_id"] is None
        assert tenant["unit_number"] is None

    def test_get_tenant_includes_active_lease(self, client, make_lease):
        lease = make_lease(status="active", rent_amount=1250)

        tenant = client.get(f"/api/tenants/{lease['tenant_id']}").json()

        assert tenant["active_leases"] == 1
        assert tenant["unit_id"] == lease["unit_id"]
        assert tenant["unit_number"] == lease["unit_number"]
        assert tenant["rent_amount"] == 1250
        assert tenant["start_date"] == lease["start_date"]
        assert tenant["end_date"] == lease["end_date"]

    def test_list_counts_recent_payments_only(self, client, make_lease):
        lease = make_lease(status="active")
        for days_ago, amount in [(3, 200), (29, 300), (45, 1000)]:
            client.post(
                "/api/payments",
                json={
                    "tenant_id": lease["tenant_id"],
                    "amount": amount,
                    "payment_date": str(date.today() - timedelta(days=days_ago)),
                    "payment_method": "cash",
                },
            )

        tenants = {t["id"]: t for t in client.get("/api/tenants").json()}

        assert tenants[lease["tenant_id"]]["recent_payments"] == 500
        assert tenants[lease["tenant_id"]]["active_leases"] == 1

    def test_terminated_lease_clears_current_rental(self, client, make_lease):
        lease = make_lease(status="active")
        client.patch(f"/api/leases/{lease['id']}/terminate", json={})

        tenant = client.get(f"/api/tenants/{lease['tenant_id']}").json()

        assert tenant["active_leases"] == 0
        assert tenant["unit_id"] is None
