"""
Column sets shared by quotation and invoice lines.

Invoice lines are verbatim copies of quotation lines, so both tables carry
the same measurement, pricing and polish columns.
"""
from __future__ import annotations

from ..extensions import db
from ..money import money_json


class GlassLineColumns:
    glass_type = db.Column(db.String(64), nullable=True)
    thickness = db.Column(db.String(16), nullable=True)
    height = db.Column(db.Numeric(10, 2), nullable=False)
    width = db.Column(db.Numeric(10, 2), nullable=False)
    height_unit = db.Column(db.String(8), nullable=False, default="FEET")
    width_unit = db.Column(db.String(8), nullable=False, default="FEET")
    design = db.Column(db.String(64), nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    rate_per_sqft = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    area = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    hsn_code = db.Column(db.String(32), nullable=True)
    description = db.Column(db.Text, nullable=True)
    # Hand / CNC finishing label shown on the cutting pad
    polish = db.Column(db.String(16), nullable=True)
    running_ft = db.Column(db.Numeric(12, 2), nullable=True)
    item_order = db.Column(db.Integer, nullable=False, default=0)

    def line_dict(self) -> dict:
        return {
            "id": self.id,
            "glass_type": self.glass_type,
            "thickness": self.thickness,
            "height": float(self.height) if self.height is not None else None,
            "width": float(self.width) if self.width is not None else None,
            "height_unit": self.height_unit,
            "width_unit": self.width_unit,
            "design": self.design,
            "quantity": self.quantity,
            "rate_per_sqft": money_json(self.rate_per_sqft),
            "area": money_json(self.area),
            "subtotal": money_json(self.subtotal),
            "hsn_code": self.hsn_code,
            "description": self.description,
            "polish": self.polish,
            "running_ft": money_json(self.running_ft),
            "item_order": self.item_order,
            "polish_sides": [p.to_dict() for p in self.polish_sides],
        }


class PolishSideColumns:
    # HEIGHT_1 / WIDTH_1 / HEIGHT_2 / WIDTH_2
    side = db.Column(db.String(16), nullable=False)
    # P (plain), H (half-round), B (bevel)
    polish_type = db.Column(db.String(1), nullable=False)
    rate = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "side": self.side,
            "polish_type": self.polish_type,
            "rate": money_json(self.rate),
        }


class BillingColumns:
    """Customer snapshot and the computed totals shared by quotations and invoices."""
    billing_type = db.Column(db.String(16), nullable=False, default="GST")

    customer_name = db.Column(db.String(255), nullable=True)
    customer_mobile = db.Column(db.String(32), nullable=True)
    customer_address = db.Column(db.Text, nullable=True)
    customer_gstin = db.Column(db.String(32), nullable=True)
    customer_state = db.Column(db.String(64), nullable=True)

    subtotal = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    installation_charge = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    transport_charge = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    transportation_required = db.Column(db.Boolean, nullable=False, default=False)
    discount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    discount_type = db.Column(db.String(16), nullable=True)
    discount_value = db.Column(db.Numeric(12, 2), nullable=True)

    gst_percentage = db.Column(db.Numeric(5, 2), nullable=True)
    cgst = db.Column(db.Numeric(12, 2), nullable=True)
    sgst = db.Column(db.Numeric(12, 2), nullable=True)
    igst = db.Column(db.Numeric(12, 2), nullable=True)
    gst_amount = db.Column(db.Numeric(12, 2), nullable=True)
    grand_total = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    def billing_dict(self) -> dict:
        return {
            "billing_type": self.billing_type,
            "customer_name": self.customer_name,
            "customer_mobile": self.customer_mobile,
            "customer_address": self.customer_address,
            "customer_gstin": self.customer_gstin,
            "customer_state": self.customer_state,
            "subtotal": money_json(self.subtotal),
            "installation_charge": money_json(self.installation_charge),
            "transport_charge": money_json(self.transport_charge),
            "transportation_required": self.transportation_required,
            "discount": money_json(self.discount),
            "discount_type": self.discount_type,
            "discount_value": money_json(self.discount_value),
            "gst_percentage": money_json(self.gst_percentage),
            "cgst": money_json(self.cgst),
            "sgst": money_json(self.sgst),
            "igst": money_json(self.igst),
            "gst_amount": money_json(self.gst_amount),
            "grand_total": money_json(self.grand_total),
        }
