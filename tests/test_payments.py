import pytest
from datetime import date, timedelta

from property_api.core.dates import month_start
from property_api.services.payment_service import PaymentService


def payment_payload(tenant_id, amount=500.0, days_ago=0, **extra):
    data = {
        "tenant_id": tenant_id,
        "amount": amount,
        "payment_date": str(date.today() - timedelta(days=days_ago)),
        "payment_method": "bank_transfer",
    }
    data.update(extra)
    return data


class TestPaymentCrud:
    """Recording and correcting payments"""

    def test_create_payment(self, client, make_lease):
        lease = make_lease(status="active")

        response = client.post(
            "/api/payments",
            json=payment_payload(
                lease["tenant_id"], 1000, lease_id=lease["id"], reference_number="TX-1"
            ),
        )

        assert response.status_code == 201
        payment = response.json()
        assert payment["amount"] == 1000
        assert payment["payment_type"] == "rent"
        assert payment["status"] == "completed"
        assert payment["tenant_name"] == lease["tenant_name"]
        assert payment["unit_number"] == lease["unit_number"]
        assert payment["invoice_id"] is None

    def test_create_mobile_money_payment(self, client, make_tenant):
        tenant = make_tenant()

        response = client.post(
            "/api/payments", json=payment_payload(tenant["id"], payment_method="mobile_money")
        )

        assert response.status_code == 201
        assert response.json()["payment_method"] == "mobile_money"
        assert response.json()["unit_number"] is None

    def test_create_payment_missing_references(self, client, make_tenant):
        tenant = make_tenant()

        assert client.post("/api/payments", json=payment_payload(999)).status_code == 404
        assert (
            client.post("/api/payments", json=payment_payload(tenant["id"], lease_id=999)).status_code
            == 404
        )

    @pytest.mark.parametrize("amount", [0, -10])
    def test_non_positive_amount_rejected(self, client, make_tenant, amount):
        tenant = make_tenant()

        response = client.post("/api/payments", json=payment_payload(tenant["id"], amount))

        assert response.status_code == 400

    def test_list_filters(self, client, make_tenant):
        alice = make_tenant()
        bob = make_tenant()
        client.post("/api/payments", json=payment_payload(alice["id"], 100, days_ago=40))
        client.post("/api/payments", json=payment_payload(alice["id"], 200, days_ago=5))
        client.post("/api/payments", json=payment_payload(bob["id"], 300, days_ago=5))

        all_payments = client.get("/api/payments").json()
        alice_payments = client.get(f"/api/payments?tenant_id={alice['id']}").json()
        recent = client.get(
            "/api/payments",
            params={
                "start_date": str(date.today() - timedelta(days=10)),
                "end_date": str(date.today()),
            },
        ).json()

        assert len(all_payments) == 3
        assert [p["amount"] for p in alice_payments] == [200, 100]
        assert sorted(p["amount"] for p in recent) == [200, 300]

    def test_list_inverted_range_rejected(self, client):
        response = client.get(
            "/api/payments", params={"start_date": "2024-02-01", "end_date": "2024-01-01"}
        )

        assert response.status_code == 400

    def test_update_and_delete_payment(self, client, make_tenant):
        tenant = make_tenant()
        payment = client.post("/api/payments", json=payment_payload(tenant["id"], 100)).json()

        updated = client.put(
            f"/api/payments/{payment['id']}", json={"amount": 150, "status": "failed"}
        )
        deleted = client.delete(f"/api/payments/{payment['id']}")

        assert updated.status_code == 200
        assert updated.json()["amount"] == 150
        assert updated.json()["status"] == "failed"
        assert deleted.json() == {"message": "Payment deleted successfully"}
        assert client.get(f"/api/payments/{payment['id']}").status_code == 404


class TestArrears:
    """Prorated expected rent minus rent paid"""

    def test_full_month_unpaid(self, client, make_lease):
        lease = make_lease(
            status="active", rent_amount=900, start_date=str(date.today() - timedelta(days=30))
        )

        rows = client.get("/api/payments/arrears").json()

        assert len(rows) == 1
        row = rows[0]
        assert row["lease_id"] == lease["id"]
        assert row["days_elapsed"] == 30
        assert row["expected_amount"] == pytest.approx(900)
        assert row["total_paid"] == 0
        assert row["arrears"] == pytest.approx(900)

    def test_only_rent_payments_count(self, client, make_lease):
        lease = make_lease(
            status="active", rent_amount=900, start_date=str(date.today() - timedelta(days=30))
        )
        client.post(
            "/api/payments", json=payment_payload(lease["tenant_id"], 400, payment_type="rent")
        )
        client.post(
            "/api/payments", json=payment_payload(lease["tenant_id"], 900, payment_type="deposit")
        )

        rows = client.get("/api/payments/arrears").json()

        assert rows[0]["total_paid"] == 400
        assert rows[0]["arrears"] == pytest.approx(500)

    def test_paid_up_tenants_excluded(self, client, make_lease):
        lease = make_lease(
            status="active", rent_amount=900, start_date=str(date.today() - timedelta(days=30))
        )
        client.post("/api/payments", json=payment_payload(lease["tenant_id"], 900))

        assert client.get("/api/payments/arrears").json() == []

    def test_only_active_leases_and_sorted_by_amount(self, client, make_lease):
        start = str(date.today() - timedelta(days=60))
        small = make_lease(status="active", rent_amount=500, start_date=start)
        large = make_lease(status="active", rent_amount=1500, start_date=start)
        make_lease(status="pending", rent_amount=5000, start_date=start)

        rows = client.get("/api/payments/arrears").json()

        assert [r["lease_id"] for r in rows] == [large["id"], small["id"]]
        assert rows[0]["arrears"] == pytest.approx(3000)

    def test_service_uses_given_day(self, db_session, client, make_lease):
        lease = make_lease(status="active", rent_amount=300, start_date="2024-01-01")

        rows = PaymentService(db_session).compute_arrears(today=date(2024, 1, 16))

        assert rows[0].lease_id == lease["id"]
        assert rows[0].days_elapsed == 15
        assert rows[0].expected_amount == pytest.approx(150)


class TestPaymentStats:
    def test_monthly_stats_grouped_by_month_and_type(self, client, make_tenant):
        tenant = make_tenant()
        this_month = month_start(date.today())
        last_month = month_start(date.today(), 1)
        for amount, day, kind in [
            (100, this_month, "rent"),
            (200, this_month, "rent"),
            (50, this_month, "late_fee"),
            (400, last_month, "rent"),
            (999, month_start(date.today(), 13), "rent"),
        ]:
            client.post(
                "/api/payments",
                json={
                    "tenant_id": tenant["id"],
                    "amount": amount,
                    "payment_date": str(day),
                    "payment_method": "cash",
                    "payment_type": kind,
                },
            )

        stats = client.get("/api/payments/stats").json()

        assert [(s["month"], s["payment_type"], s["payment_count"], s["total_amount"]) for s in stats] == [
            (this_month.strftime("%Y-%m"), "late_fee", 1, 50),
            (this_month.strftime("%Y-%m"), "rent", 2, 300),
            (last_month.strftime("%Y-%m"), "rent", 1, 400),
        ]
