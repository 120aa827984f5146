# Overview: Invoices raised from confirmed quotations, and payments against them.

"""
Invoice & Payment Service

An invoice is a frozen copy of one CONFIRMED quotation: same customer
snapshot, same amounts, same lines. After creation only payments change it.

PAYMENT INVARIANTS:
- paid_amount + due_amount == grand_total, 0 <= paid_amount <= grand_total
- a payment never exceeds the amount currently due
- DUE -> PARTIAL -> PAID, never backwards
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Invoice, InvoiceItem, InvoiceItemPolish, Payment, Quotation, User
from ..money import ZERO, quantize, to_decimal
from ..time_utils import parse_iso_date, today
from ..validation import ConflictError, NotFoundError, ValidationError
from .concurrency import atomic, lock_for_update, run_with_retry
from .document_service import DOC_ADVANCE_INVOICE, DOC_INVOICE, next_document_number
from .quotation_service import STATUS_CONFIRMED
from .tenant_service import get_owned, scoped_query

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """Raised for payment operation errors."""
    pass


INVOICE_FINAL = "FINAL"
INVOICE_ADVANCE = "ADVANCE"
INVOICE_TAX = "TAX"
INVOICE_TYPES = {INVOICE_FINAL, INVOICE_ADVANCE, INVOICE_TAX}

PAYMENT_STATUS_DUE = "DUE"
PAYMENT_STATUS_PARTIAL = "PARTIAL"
PAYMENT_STATUS_PAID = "PAID"
PAYMENT_STATUSES = {PAYMENT_STATUS_DUE, PAYMENT_STATUS_PARTIAL, PAYMENT_STATUS_PAID}

VALID_PAYMENT_MODES = ["CASH", "UPI", "CARD", "BANK_TRANSFER", "CHEQUE", "OTHER"]

BILLING_FIELDS = (
    "billing_type",
    "customer_name", "customer_mobile", "customer_address", "customer_gstin", "customer_state",
    "subtotal", "installation_charge", "transport_charge", "transportation_required",
    "discount", "discount_type", "discount_value",
    "gst_percentage", "cgst", "sgst", "igst", "gst_amount", "grand_total",
)

LINE_FIELDS = (
    "glass_type", "thickness", "height", "width", "height_unit", "width_unit",
    "design", "quantity", "rate_per_sqft", "area", "subtotal", "hsn_code",
    "description", "polish", "running_ft", "item_order",
)


def _copy_item(source) -> InvoiceItem:
    item = InvoiceItem(**{f: getattr(source, f) for f in LINE_FIELDS})
    item.polish_sides = [
        InvoiceItemPolish(side=p.side, polish_type=p.polish_type, rate=p.rate)
        for p in source.polish_sides
    ]
    return item


def create_from_quotation(shop_id: int, actor: User, quotation_id: int, data: dict | None = None) -> Invoice:
    """
    Raise the invoice for a confirmed quotation.

    Raises:
        NotFoundError: quotation missing, in another shop, or not CONFIRMED
        ConflictError: the quotation already has an invoice
        ValidationError: bad invoice_type or invoice_date
    """
    data = data or {}
    invoice_type = (str(data.get("invoice_type") or INVOICE_FINAL)).strip().upper()
    if invoice_type not in INVOICE_TYPES:
        raise ValidationError(f"invoice_type must be one of {sorted(INVOICE_TYPES)}")
    try:
        invoice_date = parse_iso_date(data.get("invoice_date")) or today()
    except ValueError:
        raise ValidationError("invoice_date must be YYYY-MM-DD")

    doc_type = DOC_ADVANCE_INVOICE if invoice_type == INVOICE_ADVANCE else DOC_INVOICE

    def _op() -> Invoice:
        quotation = (
            scoped_query(Quotation, shop_id)
            .filter(Quotation.id == quotation_id, Quotation.status == STATUS_CONFIRMED)
            .first()
        )
        if quotation is None:
            raise NotFoundError("Quotation not found or not confirmed")
        if quotation.invoice is not None:
            raise ConflictError("Invoice already exists for this quotation")

        invoice = Invoice(
            shop_id=shop_id,
            quotation_id=quotation.id,
            customer_id=quotation.customer_id,
            invoice_number=next_document_number(shop_id=shop_id, document_type=doc_type),
            invoice_type=invoice_type,
            invoice_date=invoice_date,
            payment_status=PAYMENT_STATUS_DUE,
            paid_amount=ZERO,
            due_amount=quotation.grand_total,
            created_by=actor.username,
            **{f: getattr(quotation, f) for f in BILLING_FIELDS},
        )
        invoice.items = [_copy_item(item) for item in quotation.items]
        db.session.add(invoice)
        db.session.flush()
        return invoice

    try:
        invoice = run_with_retry(lambda: atomic(_op), retry_on=(IntegrityError,))
    except IntegrityError:
        # unique quotation_id: someone else invoiced it first
        raise ConflictError("Invoice already exists for this quotation")
    logger.info("Created invoice %s from quotation %s shop=%s", invoice.invoice_number, quotation_id, shop_id)
    return invoice


def payment_status_for(paid: Decimal, due: Decimal) -> str:
    if due <= 0:
        return PAYMENT_STATUS_PAID
    if paid > 0:
        return PAYMENT_STATUS_PARTIAL
    return PAYMENT_STATUS_DUE


def add_payment(shop_id: int, actor: User, invoice_id: int, data: dict) -> tuple[Invoice, Payment]:
    """
    Record a payment and move the invoice's balance.

    Raises:
        PaymentError: non-positive amount, missing/unknown mode, or amount above due
        NotFoundError: invoice missing or in another shop
    """
    data = data or {}
    try:
        amount = to_decimal(data.get("amount"), "amount")
    except ValidationError as exc:
        raise PaymentError(str(exc))
    if amount is None or amount <= 0:
        raise PaymentError("Payment amount must be positive")
    amount = quantize(amount)

    mode = str(data.get("payment_mode") or "").strip().upper()
    if not mode:
        raise PaymentError("payment_mode is required")
    if mode not in VALID_PAYMENT_MODES:
        raise PaymentError(f"Invalid payment mode: {mode}. Must be one of {VALID_PAYMENT_MODES}")

    try:
        payment_date = parse_iso_date(data.get("payment_date")) or today()
    except ValueError:
        raise PaymentError("payment_date must be YYYY-MM-DD")

    def _opt(key: str) -> str | None:
        value = data.get(key)
        if value is None:
            return None
        return str(value).strip() or None

    def _op() -> tuple[Invoice, Payment]:
        invoice = get_owned(
            Invoice, invoice_id, shop_id, "Invoice",
            query=lock_for_update(scoped_query(Invoice, shop_id)),
        )
        grand_total = quantize(invoice.grand_total)
        due = quantize(invoice.due_amount)
        if amount > due:
            raise PaymentError(f"Payment amount exceeds due amount ({due})")

        payment = Payment(
            invoice_id=invoice.id,
            amount=amount,
            payment_mode=mode,
            payment_date=payment_date,
            reference_number=_opt("reference_number"),
            bank_name=_opt("bank_name"),
            cheque_number=_opt("cheque_number"),
            transaction_id=_opt("transaction_id"),
            notes=_opt("notes"),
            received_by=actor.username,
        )
        db.session.add(payment)

        paid = min(quantize(invoice.paid_amount) + amount, grand_total)
        invoice.paid_amount = paid
        invoice.due_amount = grand_total - paid
        invoice.payment_status = payment_status_for(paid, invoice.due_amount)
        db.session.flush()
        return invoice, payment

    invoice, payment = run_with_retry(lambda: atomic(_op))
    logger.info(
        "Payment %s %s on invoice %s; due now %s",
        payment.amount, payment.payment_mode, invoice.invoice_number, invoice.due_amount,
    )
    return invoice, payment


def list_invoices(shop_id: int, payment_status: str | None = None) -> list[Invoice]:
    q = scoped_query(Invoice, shop_id)
    if payment_status:
        payment_status = payment_status.strip().upper()
        if payment_status not in PAYMENT_STATUSES:
            raise ValidationError(f"payment_status must be one of {sorted(PAYMENT_STATUSES)}")
        q = q.filter(Invoice.payment_status == payment_status)
    return q.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()


def get_invoice(shop_id: int, invoice_id: int) -> Invoice:
    return get_owned(Invoice, invoice_id, shop_id, "Invoice")


def list_payments(shop_id: int, invoice_id: int) -> list[Payment]:
    invoice = get_invoice(shop_id, invoice_id)
    return list(invoice.payments)
