# Overview: Pytest coverage for invoicing confirmed quotations and recording payments.

"""
Invoice & Payment Tests

Verifies:
- Only CONFIRMED quotations of the caller's shop can be invoiced
- Invoice copies customer snapshot, amounts and lines (with polish)
- One invoice per quotation
- Payments never exceed the due amount and keep paid + due == grand total
- Payment status moves DUE -> PARTIAL -> PAID
"""

from decimal import Decimal

import pytest

from glassshop.models import Invoice, Payment
from glassshop.services import invoice_service, quotation_service
from glassshop.services.invoice_service import PaymentError
from glassshop.validation import ConflictError, NotFoundError, ValidationError

from conftest import sample_item


def _quotation(shop, actor, customer, confirm=True, **overrides):
    data = {
        "customer_id": customer.id,
        "billing_type": "NON_GST",
        "items": [sample_item(subtotal=1000)],
    }
    data.update(overrides)
    quotation = quotation_service.create_quotation(shop.id, actor, data)
    if confirm:
        quotation_service.set_confirmation(shop.id, actor, quotation.id, {"action": "CONFIRMED"})
    return quotation


@pytest.fixture
def invoice_a(shop_a, admin_a, customer_a):
    """Shop A invoice with a grand total of 1000."""
    quotation = _quotation(shop_a, admin_a, customer_a)
    return invoice_service.create_from_quotation(shop_a.id, admin_a, quotation.id)


class TestCreateInvoice:
    """create_from_quotation()"""

    def test_draft_cannot_be_invoiced(self, shop_a, admin_a, customer_a):
        quotation = _quotation(shop_a, admin_a, customer_a, confirm=False)
        with pytest.raises(NotFoundError):
            invoice_service.create_from_quotation(shop_a.id, admin_a, quotation.id)
        assert Invoice.query.count() == 0

    def test_rejected_cannot_be_invoiced(self, shop_a, admin_a, customer_a):
        quotation = _quotation(shop_a, admin_a, customer_a, confirm=False)
        quotation_service.set_confirmation(shop_a.id, admin_a, quotation.id, {"action": "REJECTED"})
        with pytest.raises(NotFoundError):
            invoice_service.create_from_quotation(shop_a.id, admin_a, quotation.id)

    def test_copies_quotation(self, shop_a, admin_a, customer_a):
        items = [
            sample_item(subtotal=400, polish_sides=[{"side": "HEIGHT_1", "polish_type": "B"}]),
            sample_item(glass_type="MIRROR", subtotal=600),
        ]
        quotation = _quotation(shop_a, admin_a, customer_a, billing_type="GST",
                               gst_percentage=18, installation_charge=100, items=items)
        invoice = invoice_service.create_from_quotation(shop_a.id, admin_a, quotation.id)

        assert invoice.invoice_number == f"INV-{shop_a.id:03d}-00001"
        assert invoice.customer_name == "Ravi Kumar"
        assert invoice.subtotal == quotation.subtotal == Decimal("1000.00")
        assert invoice.grand_total == quotation.grand_total == Decimal("1298.00")
        assert invoice.cgst == quotation.cgst
        assert invoice.paid_amount == Decimal("0.00")
        assert invoice.due_amount == invoice.grand_total
        assert invoice.payment_status == "DUE"

        assert [i.glass_type for i in invoice.items] == ["CLEAR", "MIRROR"]
        assert [i.subtotal for i in invoice.items] == [Decimal("400.00"), Decimal("600.00")]
        assert invoice.items[0].running_ft == quotation.items[0].running_ft
        assert [(p.side, p.polish_type) for p in invoice.items[0].polish_sides] == [("HEIGHT_1", "B")]

    def test_advance_invoice_numbering(self, shop_a, admin_a, customer_a):
        quotation = _quotation(shop_a, admin_a, customer_a)
        invoice = invoice_service.create_from_quotation(
            shop_a.id, admin_a, quotation.id, {"invoice_type": "advance", "invoice_date": "2026-02-01"},
        )
        assert invoice.invoice_type == "ADVANCE"
        assert invoice.invoice_number.startswith("ADV-")
        assert invoice.invoice_date.isoformat() == "2026-02-01"

    def test_second_invoice_conflicts(self, shop_a, admin_a, invoice_a):
        with pytest.raises(ConflictError):
            invoice_service.create_from_quotation(shop_a.id, admin_a, invoice_a.quotation_id)
        assert Invoice.query.count() == 1

    def test_bad_invoice_type(self, shop_a, admin_a, customer_a):
        quotation = _quotation(shop_a, admin_a, customer_a)
        with pytest.raises(ValidationError):
            invoice_service.create_from_quotation(shop_a.id, admin_a, quotation.id, {"invoice_type": "PROFORMA"})

    def test_other_shop_quotation(self, shop_b, admin_b, shop_a, admin_a, customer_a):
        quotation = _quotation(shop_a, admin_a, customer_a)
        with pytest.raises(NotFoundError):
            invoice_service.create_from_quotation(shop_b.id, admin_b, quotation.id)


class TestPayments:
    """add_payment()"""

    def test_partial_then_full(self, shop_a, admin_a, invoice_a):
        invoice, _ = invoice_service.add_payment(shop_a.id, admin_a, invoice_a.id, {
            "amount": 800, "payment_mode": "upi",
        })
        assert invoice.paid_amount == Decimal("800.00")
        assert invoice.due_amount == Decimal("200.00")
        assert invoice.payment_status == "PARTIAL"

        with pytest.raises(PaymentError):
            invoice_service.add_payment(shop_a.id, admin_a, invoice_a.id, {"amount": 300, "payment_mode": "CASH"})
        assert invoice.due_amount == Decimal("200.00")
        assert Payment.query.count() == 1

        invoice, payment = invoice_service.add_payment(shop_a.id, admin_a, invoice_a.id, {
            "amount": "200", "payment_mode": "CHEQUE", "cheque_number": "000123",
        })
        assert invoice.payment_status == "PAID"
        assert invoice.due_amount == Decimal("0.00")
        assert invoice.paid_amount + invoice.due_amount == invoice.grand_total
        assert payment.cheque_number == "000123"
        assert payment.received_by == "admin_a"

    @pytest.mark.parametrize("data", [
        {"amount": 0, "payment_mode": "CASH"},
        {"amount": -5, "payment_mode": "CASH"},
        {"amount": "ten", "payment_mode": "CASH"},
        {"amount": 10},
        {"amount": 10, "payment_mode": "BARTER"},
        {"amount": 10, "payment_mode": "CASH", "payment_date": "01-02-2026"},
    ])
    def test_invalid_payment(self, shop_a, admin_a, invoice_a, data):
        with pytest.raises(PaymentError):
            invoice_service.add_payment(shop_a.id, admin_a, invoice_a.id, data)
        assert invoice_a.payment_status == "DUE"

    def test_payment_on_other_shop_invoice(self, shop_b, admin_b, invoice_a):
        with pytest.raises(NotFoundError):
            invoice_service.add_payment(shop_b.id, admin_b, invoice_a.id, {"amount": 10, "payment_mode": "CASH"})

    def test_payment_status_for(self):
        assert invoice_service.payment_status_for(Decimal("0"), Decimal("10")) == "DUE"
        assert invoice_service.payment_status_for(Decimal("5"), Decimal("5")) == "PARTIAL"
        assert invoice_service.payment_status_for(Decimal("10"), Decimal("0")) == "PAID"


class TestRoutes:
    """/api/invoices endpoints."""

    def test_from_quotation_and_pay(self, client, admin_a_headers, shop_a, admin_a, customer_a):
        quotation = _quotation(shop_a, admin_a, customer_a)
        resp = client.post("/api/invoices/from-quotation", json={"quotation_id": quotation.id},
                           headers=admin_a_headers)
        assert resp.status_code == 201
        invoice_id = resp.json["id"]
        assert resp.json["due_amount"] == 1000.0
        assert resp.json["quotation_number"] == quotation.quotation_number

        resp = client.post("/api/invoices/from-quotation", json={"quotation_id": quotation.id},
                           headers=admin_a_headers)
        assert resp.status_code == 409

        resp = client.post(f"/api/invoices/{invoice_id}/payments", json={
            "amount": 250.5, "payment_mode": "CASH",
        }, headers=admin_a_headers)
        assert resp.status_code == 201
        assert resp.json["invoice"]["paid_amount"] == 250.5
        assert resp.json["invoice"]["payment_status"] == "PARTIAL"

        resp = client.get("/api/invoices/payment-status/partial", headers=admin_a_headers)
        assert [i["id"] for i in resp.json["invoices"]] == [invoice_id]

        resp = client.get(f"/api/invoices/{invoice_id}/payments", headers=admin_a_headers)
        assert len(resp.json["payments"]) == 1

    def test_missing_quotation_id(self, client, admin_a_headers):
        resp = client.post("/api/invoices/from-quotation", json={}, headers=admin_a_headers)
        assert resp.status_code == 400

    def test_draft_quotation_404(self, client, admin_a_headers, shop_a, admin_a, customer_a):
        quotation = _quotation(shop_a, admin_a, customer_a, confirm=False)
        resp = client.post("/api/invoices/from-quotation", json={"quotation_id": quotation.id},
                           headers=admin_a_headers)
        assert resp.status_code == 404

    def test_overpayment_400(self, client, admin_a_headers, invoice_a):
        resp = client.post(f"/api/invoices/{invoice_a.id}/payments", json={
            "amount": 1000.01, "payment_mode": "CASH",
        }, headers=admin_a_headers)
        assert resp.status_code == 400


class TestInstallations:
    """Installation scheduling against invoices."""

    def test_schedule(self, client, admin_a_headers, shop_a, customer_a, invoice_a):
        from glassshop.services import customer_service
        site = customer_service.create_site(shop_a.id, customer_a.id, {"name": "Flat 4B"})
        resp = client.post(f"/api/invoices/{invoice_a.id}/installations", json={
            "site_id": site.id, "scheduled_date": "2026-11-02", "notes": "Morning slot",
        }, headers=admin_a_headers)
        assert resp.status_code == 201
        assert resp.json["status"] == "SCHEDULED"
        assert resp.json["site"]["name"] == "Flat 4B"

        resp = client.get(f"/api/invoices/{invoice_a.id}/installations", headers=admin_a_headers)
        assert len(resp.json["installations"]) == 1
