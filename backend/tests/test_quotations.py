# Overview: Pytest coverage for quotation pricing, numbering, polish and confirmation.

"""
Quotation Tests

Verifies:
- Totals: charges, discount, GST split (CGST/SGST or IGST), NON_GST
- Customer details are snapshotted at creation
- Lines keep request order; area/subtotal are derived when omitted
- Polish running-feet amounts, structured and legacy
- Confirm / reject flow and the invoiced lock
"""

from decimal import Decimal

import pytest

from glassshop.models import Quotation, QuotationItem
from glassshop.services import invoice_service, quotation_service
from glassshop.services.polish import parse_polish_sides, split_legacy_description
from glassshop.services.quotation_service import QuotationStateError, compute_totals, is_inter_state
from glassshop.services.tenant_service import TenantAccessError
from glassshop.validation import ValidationError

from conftest import sample_item


def _create(shop, actor, customer, **overrides):
    data = {"customer_id": customer.id, "gst_percentage": 18, "items": [sample_item()]}
    data.update(overrides)
    return quotation_service.create_quotation(shop.id, actor, data)


class TestComputeTotals:
    """Pure totals arithmetic."""

    def test_intra_state_split(self):
        totals = compute_totals(item_subtotals=[Decimal("1000")], gst_percentage=Decimal("18"))
        assert totals["gst_amount"] == Decimal("180.00")
        assert totals["cgst"] == Decimal("90.00")
        assert totals["sgst"] == Decimal("90.00")
        assert totals["igst"] == Decimal("0.00")
        assert totals["grand_total"] == Decimal("1180.00")

    def test_inter_state_all_igst(self):
        totals = compute_totals(item_subtotals=[Decimal("1000")], gst_percentage=Decimal("18"), inter_state=True)
        assert totals["igst"] == Decimal("180.00")
        assert totals["cgst"] == Decimal("0.00")
        assert totals["grand_total"] == Decimal("1180.00")

    def test_odd_paise_stay_balanced(self):
        totals = compute_totals(item_subtotals=[Decimal("100.05")], gst_percentage=Decimal("5"))
        assert totals["gst_amount"] == Decimal("5.00")
        assert totals["cgst"] + totals["sgst"] == totals["gst_amount"]

    def test_non_gst_has_no_tax(self):
        totals = compute_totals(
            item_subtotals=[Decimal("1000")], billing_type="NON_GST", gst_percentage=Decimal("18"),
        )
        assert totals["gst_amount"] is None
        assert totals["cgst"] is None
        assert totals["grand_total"] == Decimal("1000.00")

    @pytest.mark.parametrize("rate", [Decimal("0"), None])
    def test_zero_rate_means_no_gst(self, rate):
        totals = compute_totals(item_subtotals=[Decimal("1000")], gst_percentage=rate)
        assert totals["gst_percentage"] is None
        assert totals["gst_amount"] is None
        assert totals["cgst"] is None
        assert totals["sgst"] is None
        assert totals["igst"] is None
        assert totals["grand_total"] == Decimal("1000.00")

    def test_charges_and_discount(self):
        totals = compute_totals(
            item_subtotals=[Decimal("600"), Decimal("400")],
            gst_percentage=Decimal("18"),
            installation_charge=Decimal("200"),
            transport_charge=Decimal("100"),
            discount=Decimal("300"),
        )
        assert totals["subtotal"] == Decimal("1000.00")
        assert totals["gst_amount"] == Decimal("180.00")
        assert totals["grand_total"] == Decimal("1180.00")

    def test_percentage_discount(self):
        totals = compute_totals(
            item_subtotals=[Decimal("1000")], discount_type="PERCENTAGE", discount_value=Decimal("10"),
        )
        assert totals["discount"] == Decimal("100.00")
        assert totals["grand_total"] == Decimal("900.00")

    def test_discount_above_total_rejected(self):
        with pytest.raises(ValidationError):
            compute_totals(item_subtotals=[Decimal("100")], discount=Decimal("150"))

    def test_inter_state_needs_both_states(self):
        assert is_inter_state("Maharashtra", "Gujarat") is True
        assert is_inter_state("Maharashtra", " maharashtra ") is False
        assert is_inter_state(None, "Gujarat") is False


class TestCreateQuotation:
    """create_quotation()"""

    def test_number_status_and_totals(self, shop_a, admin_a, customer_a):
        quotation = _create(shop_a, admin_a, customer_a)
        assert quotation.quotation_number == f"QTN-{shop_a.id:03d}-00001"
        assert quotation.status == "DRAFT"
        assert quotation.subtotal == Decimal("600.00")
        assert quotation.cgst == Decimal("54.00")
        assert quotation.igst == Decimal("0.00")
        assert quotation.grand_total == Decimal("708.00")
        assert quotation.created_by == "admin_a"

    def test_numbers_increase_per_shop(self, shop_a, shop_b, admin_a, admin_b, customer_a, customer_b):
        _create(shop_a, admin_a, customer_a)
        second = _create(shop_a, admin_a, customer_a)
        other = _create(shop_b, admin_b, customer_b)
        assert second.quotation_number.endswith("-00002")
        assert other.quotation_number == f"QTN-{shop_b.id:03d}-00001"

    def test_inter_state_customer_uses_igst(self, shop_a, admin_a, customer_a):
        quotation = _create(shop_a, admin_a, customer_a, customer_state="Karnataka")
        assert quotation.igst == Decimal("108.00")
        assert quotation.cgst == Decimal("0.00")
        assert quotation.customer_state == "Karnataka"

    def test_zero_gst_rate_leaves_tax_empty(self, shop_a, admin_a, customer_a):
        quotation = _create(shop_a, admin_a, customer_a, gst_percentage=0)
        assert quotation.billing_type == "GST"
        assert quotation.gst_percentage is None
        assert quotation.cgst is None
        assert quotation.igst is None
        assert quotation.grand_total == Decimal("600.00")

    def test_snapshot_survives_customer_edit(self, shop_a, admin_a, customer_a, db_session):
        quotation = _create(shop_a, admin_a, customer_a)
        customer_a.name = "Renamed"
        db_session.commit()
        assert db_session.get(Quotation, quotation.id).customer_name == "Ravi Kumar"

    def test_item_order_preserved(self, shop_a, admin_a, customer_a):
        items = [sample_item(glass_type=name) for name in ("TINTED", "CLEAR", "MIRROR")]
        quotation = _create(shop_a, admin_a, customer_a, items=items)
        assert [i.glass_type for i in quotation.items] == ["TINTED", "CLEAR", "MIRROR"]
        assert [i.item_order for i in quotation.items] == [0, 1, 2]

    def test_area_and_subtotal_derived(self, shop_a, admin_a, customer_a):
        item = sample_item(height=600, width=300, height_unit="MM", width_unit="MM",
                           quantity=1, rate_per_sqft=100)
        del item["area"]
        del item["subtotal"]
        quotation = _create(shop_a, admin_a, customer_a, items=[item])
        line = quotation.items[0]
        assert line.area == Decimal("1.94")
        assert line.subtotal == Decimal("193.75")

    def test_other_shop_customer_rejected(self, shop_a, admin_a, customer_b):
        with pytest.raises(TenantAccessError):
            _create(shop_a, admin_a, customer_b)

    @pytest.mark.parametrize("overrides", [
        {"items": []},
        {"customer_id": None},
        {"billing_type": "BARTER"},
        {"gst_percentage": 150},
        {"items": [sample_item(height=0)]},
        {"items": [sample_item(quantity=0)]},
        {"quotation_date": "18/10/2026"},
    ])
    def test_invalid_input(self, shop_a, admin_a, customer_a, overrides):
        with pytest.raises(ValidationError):
            _create(shop_a, admin_a, customer_a, **overrides)
        assert Quotation.query.count() == 0


class TestPolish:
    """Edge polish on glass lines."""

    def test_structured_sides(self, shop_a, admin_a, customer_a):
        item = sample_item(polish_sides=[
            {"side": "HEIGHT_1", "polish_type": "P"},
            {"side": "WIDTH_1", "polish_type": "H"},
        ])
        line = _create(shop_a, admin_a, customer_a, items=[item]).items[0]
        # (4 ft * 15 + 3 ft * 75) * 2 pieces
        assert line.running_ft == Decimal("570.00")
        assert line.subtotal == Decimal("600.00")
        assert {p.side for p in line.polish_sides} == {"HEIGHT_1", "WIDTH_1"}

    def test_legacy_description(self, shop_a, admin_a, customer_a):
        blob = (
            'POLISH_DATA:{"polishSelection": ['
            '{"side": "Height 1 (4)", "checked": true, "type": "P", "rate": 0},'
            '{"side": "Width 1 (3)", "checked": false, "type": "H", "rate": 0}],'
            '"polishRates": {"P": 20}, "itemPolish": "Hand"}'
        )
        item = sample_item(description=f"Kitchen shutter {blob}")
        line = _create(shop_a, admin_a, customer_a, items=[item]).items[0]
        assert line.description == "Kitchen shutter"
        assert line.polish == "Hand"
        assert line.running_ft == Decimal("160.00")

    def test_malformed_legacy_left_alone(self):
        clean, rows, rates, label = split_legacy_description("Door POLISH_DATA:{broken")
        assert clean == "Door POLISH_DATA:{broken"
        assert rows is None

    def test_duplicate_side_rejected(self):
        with pytest.raises(ValidationError):
            parse_polish_sides([
                {"side": "HEIGHT_1", "polish_type": "P"},
                {"side": "HEIGHT_1", "polish_type": "B"},
            ])

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_polish_sides([{"side": "HEIGHT_1", "polish_type": "Z"}])


class TestConfirmation:
    """Status transitions."""

    def test_confirm_then_reject(self, shop_a, admin_a, customer_a):
        quotation = _create(shop_a, admin_a, customer_a)
        quotation_service.set_confirmation(shop_a.id, admin_a, quotation.id, {"action": "CONFIRMED"})
        assert quotation.status == "CONFIRMED"
        assert quotation.confirmed_by == "admin_a"

        quotation_service.set_confirmation(shop_a.id, admin_a, quotation.id, {
            "action": "REJECTED", "rejection_reason": "Too costly",
        })
        assert quotation.status == "REJECTED"
        assert quotation.rejection_reason == "Too costly"
        assert quotation.confirmed_at is None

    def test_invoiced_quotation_locked(self, shop_a, admin_a, customer_a):
        quotation = _create(shop_a, admin_a, customer_a)
        quotation_service.set_confirmation(shop_a.id, admin_a, quotation.id, {"confirmed": True})
        invoice_service.create_from_quotation(shop_a.id, admin_a, quotation.id)

        with pytest.raises(QuotationStateError):
            quotation_service.set_confirmation(shop_a.id, admin_a, quotation.id, {"action": "REJECTED"})
        with pytest.raises(QuotationStateError):
            quotation_service.delete_quotation(shop_a.id, quotation.id)

    def test_delete_draft_removes_items(self, shop_a, admin_a, customer_a):
        quotation = _create(shop_a, admin_a, customer_a)
        quotation_service.delete_quotation(shop_a.id, quotation.id)
        assert Quotation.query.count() == 0
        assert QuotationItem.query.count() == 0


class TestRoutes:
    """/api/quotations endpoints."""

    def test_create_and_filter(self, client, admin_a_headers, customer_a):
        resp = client.post("/api/quotations", json={
            "customer_id": customer_a.id, "gst_percentage": 18, "items": [sample_item()],
        }, headers=admin_a_headers)
        assert resp.status_code == 201
        assert resp.json["grand_total"] == 708.0
        assert resp.json["items"][0]["area"] == 12.0
        quotation_id = resp.json["id"]

        resp = client.put(f"/api/quotations/{quotation_id}/confirm", json={"action": "CONFIRMED"},
                          headers=admin_a_headers)
        assert resp.json["status"] == "CONFIRMED"

        resp = client.get("/api/quotations/status/confirmed", headers=admin_a_headers)
        assert [q["id"] for q in resp.json["quotations"]] == [quotation_id]
        resp = client.get("/api/quotations/status/DRAFT", headers=admin_a_headers)
        assert resp.json["quotations"] == []

    def test_bad_status_filter(self, client, admin_a_headers):
        resp = client.get("/api/quotations/status/LOST", headers=admin_a_headers)
        assert resp.status_code == 400

    def test_missing_items(self, client, admin_a_headers, customer_a):
        resp = client.post("/api/quotations", json={"customer_id": customer_a.id, "items": []},
                           headers=admin_a_headers)
        assert resp.status_code == 400

    def test_delete(self, client, admin_a_headers, shop_a, admin_a, customer_a):
        quotation = _create(shop_a, admin_a, customer_a)
        resp = client.delete(f"/api/quotations/{quotation.id}", headers=admin_a_headers)
        assert resp.status_code == 204
