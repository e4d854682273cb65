import pytest
from datetime import date, timedelta

from property_api.services.invoice_service import InvoiceService

YEAR = date.today().year


def invoice_payload(tenant_id, **extra):
    data = {
        "tenant_id": tenant_id,
        "issue_date": str(date.today()),
        "due_date": str(date.today() + timedelta(days=14)),
        "amount": 1000.0,
        "tax_amount": 80.0,
        "description": "Monthly rent",
        "line_items": [{"description": "Rent", "quantity": 1, "rate": 1000}],
    }
    data.update(extra)
    return data


@pytest.fixture
def make_invoice(client, make_tenant):
    def _make(tenant_id=None, **extra):
        response = client.post(
            "/api/invoices", json=invoice_payload(tenant_id or make_tenant()["id"], **extra)
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make


class TestInvoiceNumbering:
    """INV-<year>-<sequence> numbering"""

    def test_generate_number_is_stable_without_inserts(self, client):
        first = client.get("/api/invoices/generate-number").json()
        second = client.get("/api/invoices/generate-number").json()

        assert first == second == {"invoice_number": f"INV-{YEAR}-001"}

    def test_numbers_increment_per_invoice(self, client, make_invoice):
        first = make_invoice()
        second = make_invoice()

        assert first["invoice_number"] == f"INV-{YEAR}-001"
        assert second["invoice_number"] == f"INV-{YEAR}-002"
        assert client.get("/api/invoices/generate-number").json()["invoice_number"] == f"INV-{YEAR}-003"

    def test_sequence_is_per_year(self, db_session, make_invoice):
        make_invoice()

        service = InvoiceService(db_session)

        assert service.generate_invoice_number(date(YEAR + 1, 1, 1)) == f"INV-{YEAR + 1}-001"

    def test_number_reused_after_delete_conflicts(self, client, make_invoice, make_tenant):
        first = make_invoice()
        make_invoice()
        client.delete(f"/api/invoices/{first['id']}")

        preview = client.get("/api/invoices/generate-number").json()["invoice_number"]
        response = client.post("/api/invoices", json=invoice_payload(make_tenant()["id"]))

        assert preview == f"INV-{YEAR}-002"
        assert response.status_code == 400


class TestInvoiceCrud:
    def test_create_invoice(self, client, make_lease):
        lease = make_lease(status="active")

        response = client.post(
            "/api/invoices",
            json=invoice_payload(
                lease["tenant_id"],
                lease_id=lease["id"],
                line_items=[
                    {"description": "Rent", "quantity": 1, "rate": 900},
                    {"description": "Parking", "quantity": 2, "rate": 50},
                ],
            ),
        )

        assert response.status_code == 201
        invoice = response.json()
        assert invoice["status"] == "draft"
        assert invoice["total_amount"] == 1080.0
        assert invoice["tenant_name"] == lease["tenant_name"]
        assert invoice["unit_number"] == lease["unit_number"]
        assert invoice["line_items"] == [
            {"description": "Rent", "quantity": 1, "rate": 900, "amount": 900},
            {"description": "Parking", "quantity": 2, "rate": 50, "amount": 100},
        ]

    def test_line_item_amount_can_be_given(self, client, make_invoice):
        invoice = make_invoice(
            line_items=[{"description": "Discounted", "quantity": 1, "rate": 100, "amount": 80}]
        )

        assert invoice["line_items"][0]["amount"] == 80

    def test_create_requires_line_items(self, client, make_tenant):
        response = client.post(
            "/api/invoices", json=invoice_payload(make_tenant()["id"], line_items=[])
        )

        assert response.status_code == 400

    def test_due_before_issue_rejected(self, client, make_tenant):
        response = client.post(
            "/api/invoices",
            json=invoice_payload(
                make_tenant()["id"], due_date=str(date.today() - timedelta(days=1))
            ),
        )

        assert response.status_code == 400

    def test_create_missing_tenant(self, client):
        assert client.post("/api/invoices", json=invoice_payload(999)).status_code == 404

    def test_update_recomputes_total_and_replaces_items(self, client, make_invoice):
        invoice = make_invoice()

        response = client.put(
            f"/api/invoices/{invoice['id']}",
            json={
                "amount": 1200,
                "line_items": [{"description": "Rent (revised)", "quantity": 1, "rate": 1200}],
            },
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["total_amount"] == 1280.0
        assert [li["description"] for li in updated["line_items"]] == ["Rent (revised)"]
        assert updated["invoice_number"] == invoice["invoice_number"]

    def test_list_filters(self, client, make_tenant, make_invoice):
        tenant = make_tenant()
        mine = make_invoice(tenant_id=tenant["id"])
        other = make_invoice()
        client.patch(f"/api/invoices/{other['id']}/status", json={"status": "sent"})

        by_tenant = client.get(f"/api/invoices?tenant_id={tenant['id']}").json()
        sent = client.get("/api/invoices?status=sent").json()

        assert [i["id"] for i in by_tenant] == [mine["id"]]
        assert [i["id"] for i in sent] == [other["id"]]

    def test_delete_invoice(self, client, make_invoice):
        invoice = make_invoice()

        response = client.delete(f"/api/invoices/{invoice['id']}")

        assert response.status_code == 200
        assert client.get(f"/api/invoices/{invoice['id']}").status_code == 404


class TestInvoiceStatus:
    def test_legal_transition(self, client, make_invoice):
        invoice = make_invoice()

        response = client.patch(f"/api/invoices/{invoice['id']}/status", json={"status": "sent"})

        assert response.status_code == 200
        assert response.json()["status"] == "sent"

    def test_illegal_transition(self, client, make_invoice):
        invoice = make_invoice()
        client.patch(f"/api/invoices/{invoice['id']}/status", json={"status": "cancelled"})

        response = client.patch(f"/api/invoices/{invoice['id']}/status", json={"status": "paid"})

        assert response.status_code == 400
        assert client.get(f"/api/invoices/{invoice['id']}").json()["status"] == "cancelled"

    def test_invalid_status_value(self, client, make_invoice):
        invoice = make_invoice()

        response = client.patch(f"/api/invoices/{invoice['id']}/status", json={"status": "lost"})

        assert response.status_code == 400


class TestMarkAsPaid:
    def test_mark_paid_links_payment(self, client, make_invoice):
        invoice = make_invoice()
        payment = client.post(
            "/api/payments",
            json={
                "tenant_id": invoice["tenant_id"],
                "amount": 1080,
                "payment_date": str(date.today()),
                "payment_method": "check",
            },
        ).json()

        response = client.patch(
            f"/api/invoices/{invoice['id']}/mark-paid", json={"payment_id": payment["id"]}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "paid"
        assert client.get(f"/api/payments/{payment['id']}").json()["invoice_id"] == invoice["id"]

    def test_mark_paid_without_payment(self, client, make_invoice):
        invoice = make_invoice()

        response = client.patch(f"/api/invoices/{invoice['id']}/mark-paid")

        assert response.status_code == 200
        assert response.json()["status"] == "paid"

    def test_missing_payment_rolls_back(self, client, make_invoice):
        invoice = make_invoice()

        response = client.patch(
            f"/api/invoices/{invoice['id']}/mark-paid", json={"payment_id": 999}
        )

        assert response.status_code == 404
        assert client.get(f"/api/invoices/{invoice['id']}").json()["status"] == "draft"

    def test_cancelled_invoice_cannot_be_paid(self, client, make_invoice):
        invoice = make_invoice()
        client.patch(f"/api/invoices/{invoice['id']}/status", json={"status": "cancelled"})

        response = client.patch(f"/api/invoices/{invoice['id']}/mark-paid")

        assert response.status_code == 400

    def test_missing_invoice(self, client):
        assert client.patch("/api/invoices/999/mark-paid").status_code == 404


class TestInvoiceReports:
    def test_overdue(self, client, make_invoice):
        past = str(date.today() - timedelta(days=40))
        overdue = make_invoice(issue_date=past, due_date=str(date.today() - timedelta(days=10)))
        paid = make_invoice(issue_date=past, due_date=str(date.today() - timedelta(days=10)))
        client.patch(f"/api/invoices/{paid['id']}/mark-paid")
        make_invoice()

        ids = [i["id"] for i in client.get("/api/invoices/overdue").json()]

        assert ids == [overdue["id"]]

    def test_stats_by_status(self, client, make_invoice):
        make_invoice()
        make_invoice()
        sent = make_invoice(amount=500, tax_amount=0)
        client.patch(f"/api/invoices/{sent['id']}/status", json={"status": "sent"})

        stats = {s["status"]: s for s in client.get("/api/invoices/stats").json()}

        assert stats["draft"]["count"] == 2
        assert stats["draft"]["total_amount"] == 2160.0
        assert stats["sent"]["count"] == 1
        assert stats["sent"]["total_amount"] == 500.0
