# Overview: Pytest coverage for tenant isolation between shops.

"""
Multi-Tenant Isolation Tests

SECURITY TESTS: Prove that one shop can never see or touch another shop's data.

Two shops are registered, each with its own admin. For every id-addressed
resource a foreign id must answer exactly like a missing id (404), and
lists must only ever contain the caller's rows.

Test Coverage:
- Customers: read/update/delete/sites blocked
- Quotations: read/confirm/delete/PDF blocked
- Invoices: read/pay/PDF blocked
- Price master: read/update blocked
- Stock and audit lists: scoped
"""

import pytest
from flask import g

from glassshop.services import invoice_service, quotation_service, stock_service
from glassshop.services.tenant_service import (
    TenantAccessError,
    get_current_shop_id,
    get_owned,
    scoped_query,
)
from glassshop.models import Customer

from conftest import sample_item


@pytest.fixture
def quotation_a(shop_a, admin_a, customer_a):
    quotation = quotation_service.create_quotation(shop_a.id, admin_a, {
        "customer_id": customer_a.id, "gst_percentage": 18, "items": [sample_item()],
    })
    quotation_service.set_confirmation(shop_a.id, admin_a, quotation.id, {"action": "CONFIRMED"})
    return quotation


@pytest.fixture
def invoice_a(shop_a, admin_a, quotation_a):
    return invoice_service.create_from_quotation(shop_a.id, admin_a, quotation_a.id)


class TestTenantServiceHelpers:
    """Test tenant_service helper functions."""

    def test_get_current_shop_id_requires_context(self, app):
        with app.app_context():
            with pytest.raises(TenantAccessError):
                get_current_shop_id()

    def test_get_current_shop_id(self, app, shop_a):
        with app.app_context():
            g.shop_id = shop_a.id
            assert get_current_shop_id() == shop_a.id

    def test_scoped_query(self, shop_a, customer_a, customer_b):
        rows = scoped_query(Customer, shop_a.id).all()
        assert [c.id for c in rows] == [customer_a.id]

    def test_get_owned_foreign_row_looks_missing(self, shop_b, customer_a):
        with pytest.raises(TenantAccessError) as exc:
            get_owned(Customer, customer_a.id, shop_b.id, "Customer")
        assert str(exc.value) == "Customer not found"


class TestCustomerIsolation:

    def test_read(self, client, admin_b_headers, customer_a):
        assert client.get(f"/api/customers/{customer_a.id}", headers=admin_b_headers).status_code == 404

    def test_update(self, client, admin_b_headers, customer_a):
        resp = client.put(f"/api/customers/{customer_a.id}", json={"name": "Hijacked"}, headers=admin_b_headers)
        assert resp.status_code == 404
        assert Customer.query.filter_by(id=customer_a.id).one().name == "Ravi Kumar"

    def test_delete(self, client, admin_b_headers, customer_a):
        assert client.delete(f"/api/customers/{customer_a.id}", headers=admin_b_headers).status_code == 404

    def test_sites(self, client, admin_b_headers, customer_a):
        resp = client.post(f"/api/customers/{customer_a.id}/sites", json={"name": "X"}, headers=admin_b_headers)
        assert resp.status_code == 404

    def test_list(self, client, admin_b_headers, customer_a, customer_b):
        resp = client.get("/api/customers", headers=admin_b_headers)
        assert [c["id"] for c in resp.json["customers"]] == [customer_b.id]


class TestQuotationIsolation:

    @pytest.mark.parametrize("suffix", ["", "/download", "/print-cutting-pad"])
    def test_read(self, client, admin_b_headers, quotation_a, suffix):
        resp = client.get(f"/api/quotations/{quotation_a.id}{suffix}", headers=admin_b_headers)
        assert resp.status_code == 404

    def test_confirm(self, client, admin_b_headers, quotation_a):
        resp = client.put(f"/api/quotations/{quotation_a.id}/confirm", json={"action": "REJECTED"},
                          headers=admin_b_headers)
        assert resp.status_code == 404

    def test_delete(self, client, admin_b_headers, quotation_a):
        assert client.delete(f"/api/quotations/{quotation_a.id}", headers=admin_b_headers).status_code == 404

    def test_invoice_from_foreign_quotation(self, client, admin_b_headers, quotation_a):
        resp = client.post("/api/invoices/from-quotation", json={"quotation_id": quotation_a.id},
                           headers=admin_b_headers)
        assert resp.status_code == 404

    def test_list(self, client, admin_b_headers, quotation_a):
        resp = client.get("/api/quotations", headers=admin_b_headers)
        assert resp.json["quotations"] == []


class TestInvoiceIsolation:

    @pytest.mark.parametrize("suffix", [
        "", "/payments", "/installations",
        "/download-invoice", "/print-basic-invoice", "/download-challan",
    ])
    def test_read(self, client, admin_b_headers, invoice_a, suffix):
        resp = client.get(f"/api/invoices/{invoice_a.id}{suffix}", headers=admin_b_headers)
        assert resp.status_code == 404

    def test_pay(self, client, admin_b_headers, invoice_a):
        resp = client.post(f"/api/invoices/{invoice_a.id}/payments", json={
            "amount": 10, "payment_mode": "CASH",
        }, headers=admin_b_headers)
        assert resp.status_code == 404

    def test_list(self, client, admin_b_headers, invoice_a):
        resp = client.get("/api/invoices", headers=admin_b_headers)
        assert resp.json["invoices"] == []


class TestStockIsolation:

    def test_stock_and_audit_scoped(self, client, admin_b_headers, shop_a, admin_a):
        stock_service.update_stock(
            shop_id=shop_a.id, actor=admin_a, glass_type="CLEAR", thickness=5,
            stand_no=1, quantity=3, action="ADD",
        )
        assert client.get("/stock/all", headers=admin_b_headers).json["stock"] == []
        assert client.get("/stock/alert/low", headers=admin_b_headers).json["stock"] == []
        assert client.get("/audit/recent", headers=admin_b_headers).json["entries"] == []

    def test_price_master_update(self, client, admin_b_headers, priced_clear_5mm):
        resp = client.put(f"/api/glass-price-master/{priced_clear_5mm.id}", json={"selling_price": 1},
                          headers=admin_b_headers)
        assert resp.status_code == 404
