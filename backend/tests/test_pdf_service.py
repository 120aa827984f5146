# Overview: Pytest coverage for quotation, invoice and challan PDF rendering.

import pytest

from glassshop.services import invoice_service, pdf_service, quotation_service
from glassshop.validation import NotFoundError

from conftest import sample_item


@pytest.fixture
def quotation_a(shop_a, admin_a, customer_a):
    items = [sample_item(glass_type=f"CLEAR {n}", description="Window pane") for n in range(12)]
    items[0]["polish_sides"] = [{"side": "HEIGHT_1", "polish_type": "P"}, {"side": "WIDTH_2", "polish_type": "B"}]
    quotation = quotation_service.create_quotation(shop_a.id, admin_a, {
        "customer_id": customer_a.id, "gst_percentage": 18, "transport_charge": 150, "items": items,
    })
    quotation_service.set_confirmation(shop_a.id, admin_a, quotation.id, {"action": "CONFIRMED"})
    return quotation


@pytest.fixture
def invoice_a(shop_a, admin_a, quotation_a):
    invoice = invoice_service.create_from_quotation(shop_a.id, admin_a, quotation_a.id)
    invoice_service.add_payment(shop_a.id, admin_a, invoice.id, {"amount": 100, "payment_mode": "UPI"})
    return invoice


class TestRenderers:
    """Each document renders a PDF for its own shop only."""

    @pytest.mark.parametrize("render", [pdf_service.quotation_pdf, pdf_service.cutting_pad_pdf])
    def test_quotation_documents(self, shop_a, quotation_a, render):
        filename, data = render(shop_a.id, quotation_a.id)
        assert quotation_a.quotation_number in filename
        assert data.startswith(b"%PDF")

    @pytest.mark.parametrize("render", [
        pdf_service.invoice_pdf, pdf_service.basic_invoice_pdf, pdf_service.challan_pdf,
    ])
    def test_invoice_documents(self, shop_a, invoice_a, render):
        filename, data = render(shop_a.id, invoice_a.id)
        assert filename.endswith(".pdf")
        assert data.startswith(b"%PDF")

    def test_non_gst_invoice(self, shop_a, admin_a, customer_a):
        quotation = quotation_service.create_quotation(shop_a.id, admin_a, {
            "customer_id": customer_a.id, "billing_type": "NON_GST", "items": [sample_item()],
        })
        quotation_service.set_confirmation(shop_a.id, admin_a, quotation.id, {"confirmed": True})
        invoice = invoice_service.create_from_quotation(shop_a.id, admin_a, quotation.id, {"invoice_type": "ADVANCE"})
        _, data = pdf_service.invoice_pdf(shop_a.id, invoice.id)
        assert data.startswith(b"%PDF")

    def test_foreign_invoice(self, shop_b, invoice_a):
        with pytest.raises(NotFoundError):
            pdf_service.challan_pdf(shop_b.id, invoice_a.id)


class TestRoutes:

    def test_download_is_attachment(self, client, admin_a_headers, quotation_a):
        resp = client.get(f"/api/quotations/{quotation_a.id}/download", headers=admin_a_headers)
        assert resp.status_code == 200
        assert resp.mimetype == "application/pdf"
        assert "attachment" in resp.headers["Content-Disposition"]

    def test_print_is_inline(self, client, admin_a_headers, invoice_a):
        resp = client.get(f"/api/invoices/{invoice_a.id}/print-challan", headers=admin_a_headers)
        assert resp.status_code == 200
        assert resp.headers["Content-Disposition"].startswith("inline")


@pytest.fixture
def plain():
    return pdf_service.DocumentRenderer(compress=False)


def _shows(data: bytes, text: str) -> bool:
    return f"({text})".encode("latin-1") in data


class TestLayouts:
    """What each document prints, read from uncompressed page streams."""

    def test_quotation_has_prices_and_polish_box(self, plain, shop_a, quotation_a):
        data = plain.render_quotation(quotation_a, shop_a)
        assert _shows(data, "QUOTATION")
        assert _shows(data, "Shop A Glass")
        assert _shows(data, "Grand Total")
        assert b"Polish H1:P, W2:B" in data

    def test_cutting_pad_has_no_prices(self, plain, shop_a, quotation_a):
        data = plain.render_cutting_pad(quotation_a, shop_a)
        assert _shows(data, "CUTTING PAD")
        assert b"Polish H1:P, W2:B" in data
        for label in ("Rate", "Amount", "Subtotal", "Grand Total"):
            assert not _shows(data, label)
        assert b"Running ft" not in data

    def test_gst_invoice_title_and_letterhead(self, plain, shop_a, invoice_a):
        data = plain.render_invoice(invoice_a, shop_a)
        assert _shows(data, "TAX INVOICE")
        assert _shows(data, "Shop A Glass")
        assert _shows(data, "Payment status: PARTIAL")

    def test_non_gst_advance_title(self, plain, shop_a, admin_a, customer_a):
        quotation = quotation_service.create_quotation(shop_a.id, admin_a, {
            "customer_id": customer_a.id, "billing_type": "NON_GST", "items": [sample_item()],
        })
        quotation_service.set_confirmation(shop_a.id, admin_a, quotation.id, {"confirmed": True})
        invoice = invoice_service.create_from_quotation(shop_a.id, admin_a, quotation.id, {"invoice_type": "ADVANCE"})
        data = plain.render_invoice(invoice, shop_a)
        assert _shows(data, "ADVANCE BILL / CASH MEMO")
        assert not _shows(data, "TAX INVOICE")
        assert b"CGST" not in data

    def test_basic_invoice_hides_shop_identity(self, plain, invoice_a):
        data = plain.render_basic_invoice(invoice_a)
        assert _shows(data, "TAX INVOICE")
        assert _shows(data, "Ravi Kumar")
        assert b"Shop A Glass" not in data

    def test_challan_prints_both_copies_on_every_page(self, plain, shop_a, invoice_a):
        data = plain.render_challan(invoice_a, shop_a)
        # twelve lines at eight per copy make two pages
        assert data.count(b"(ORIGINAL)") == 2
        assert data.count(b"(DUPLICATE)") == 2
        assert data.count(b"(DELIVERY CHALLAN)") == 4
        assert not _shows(data, "Grand Total")
        assert not _shows(data, "Rate")
