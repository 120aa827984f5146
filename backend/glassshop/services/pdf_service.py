# Overview: PDF rendering for quotations, cutting pads, invoices and delivery challans.

"""
Document Renderer

DocumentRenderer draws with reportlab's canvas and keeps no state between
calls: give it an entity, its lines and (where the layout wants one) the
shop, and it returns PDF bytes. The module-level *_pdf functions load the
entity for the caller's shop first, so a foreign id fails exactly like a
missing one.

Layouts:
- quotation: shop "From", customer "To", priced lines, totals
- cutting pad: the same lines with dimensions and polish only, no prices
- invoice: shop letterhead, TAX INVOICE / BILL / CASH MEMO, payment summary
- basic invoice: the invoice without the shop's identity
- challan: no prices, ORIGINAL and DUPLICATE copy on every page
"""

from __future__ import annotations

from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from ..models import Invoice, Quotation, Shop
from ..money import format_rupees
from ..time_utils import to_display_date
from .invoice_service import get_invoice
from .quotation_service import BILLING_GST, get_quotation
from .tenant_service import get_shop


PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 15 * mm
LINE = 14
FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

CHALLAN_ROWS_PER_COPY = 8

SIDE_LABELS = {
    "HEIGHT_1": "H1",
    "WIDTH_1": "W1",
    "HEIGHT_2": "H2",
    "WIDTH_2": "W2",
}


def _fit(text, width: float, font: str = FONT, size: int = 9) -> str:
    """Truncate text with an ellipsis so it fits in width points."""
    text = "" if text is None else str(text)
    if stringWidth(text, font, size) <= width:
        return text
    while text and stringWidth(text + "...", font, size) > width:
        text = text[:-1]
    return text + "..."


def _qty(value) -> str:
    if value is None:
        return "-"
    number = float(value)
    return f"{number:g}"


def _size(item) -> str:
    return f"{_qty(item.height)} {item.height_unit.lower()} x {_qty(item.width)} {item.width_unit.lower()}"


def _glass(item) -> str:
    parts = [item.glass_type or "", f"{item.thickness}mm" if item.thickness else "", item.design or ""]
    return " ".join(p for p in parts if p)


def _polish_summary(item) -> str:
    if not item.polish_sides:
        return ""
    sides = ", ".join(f"{SIDE_LABELS.get(p.side, p.side)}:{p.polish_type}" for p in item.polish_sides)
    label = f"{item.polish} " if item.polish else ""
    return f"{label}Polish {sides}"


class _Cursor:
    """Top-down writing position on a canvas, with page breaks."""

    def __init__(self, pdf: canvas.Canvas, top: float = PAGE_HEIGHT - MARGIN, bottom: float = MARGIN):
        self.pdf = pdf
        self.top = top
        self.bottom = bottom
        self.y = top

    def need(self, height: float, on_break=None) -> None:
        if self.y - height < self.bottom:
            self.pdf.showPage()
            self.y = self.top
            if on_break:
                on_break()

    def move(self, height: float = LINE) -> None:
        self.y -= height


class DocumentRenderer:
    """
    Stateless PDF renderer; one instance can serve every request.

    compress=False writes plain page streams so the drawn text can be
    searched in the output.
    """

    ITEM_COLUMNS = (
        ("#", 18),
        ("Glass", 150),
        ("Size", 120),
        ("Qty", 35),
        ("Area", 55),
        ("Rate", 60),
        ("Amount", 0),
    )

    def __init__(self, compress: bool = True):
        self.compress = compress

    # ------------------------------------------------------------------
    # shared blocks
    # ------------------------------------------------------------------

    def _new_canvas(self, title: str):
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4, pageCompression=1 if self.compress else 0)
        pdf.setTitle(title)
        return buffer, pdf

    def _title(self, cur: _Cursor, text: str) -> None:
        cur.pdf.setFont(FONT_BOLD, 16)
        cur.pdf.drawCentredString(PAGE_WIDTH / 2, cur.y, text)
        cur.move(LINE + 8)

    def _shop_block(self, cur: _Cursor, shop: Shop, heading: str | None = None) -> None:
        pdf = cur.pdf
        if heading:
            pdf.setFont(FONT_BOLD, 9)
            pdf.drawString(MARGIN, cur.y, heading)
            cur.move(LINE - 2)
        pdf.setFont(FONT_BOLD, 12)
        pdf.drawString(MARGIN, cur.y, _fit(shop.shop_name, PAGE_WIDTH - 2 * MARGIN, FONT_BOLD, 12))
        cur.move()
        pdf.setFont(FONT, 9)
        for line in (
            shop.address,
            f"Owner: {shop.owner_name}" if shop.owner_name else None,
            " | ".join(p for p in (
                f"Email: {shop.email}" if shop.email else "",
                f"WhatsApp: {shop.whatsapp_number}" if shop.whatsapp_number else "",
            ) if p) or None,
            f"GSTIN: {shop.gstin}" if shop.gstin else None,
        ):
            if line:
                pdf.drawString(MARGIN, cur.y, _fit(line, PAGE_WIDTH * 0.55))
                cur.move(LINE - 2)
        cur.move(4)

    def _customer_block(self, cur: _Cursor, doc, heading: str = "To") -> None:
        pdf = cur.pdf
        pdf.setFont(FONT_BOLD, 9)
        pdf.drawString(MARGIN, cur.y, heading)
        cur.move(LINE - 2)
        pdf.setFont(FONT, 9)
        for line in (
            doc.customer_name,
            f"Mobile: {doc.customer_mobile}" if doc.customer_mobile else None,
            doc.customer_address,
            f"GSTIN: {doc.customer_gstin}" if doc.customer_gstin else None,
            f"State: {doc.customer_state}" if doc.customer_state else None,
        ):
            if line:
                pdf.drawString(MARGIN, cur.y, _fit(line, PAGE_WIDTH / 2))
                cur.move(LINE - 2)
        cur.move(4)

    def _meta(self, cur: _Cursor, rows: list[tuple[str, str]]) -> float:
        """Right-aligned label column; returns the y just below it."""
        pdf = cur.pdf
        pdf.setFont(FONT, 9)
        y = cur.y
        for label, value in rows:
            pdf.drawRightString(PAGE_WIDTH - MARGIN, y, f"{label}: {value}")
            y -= LINE - 2
        return y - 4

    def _rule(self, cur: _Cursor) -> None:
        cur.pdf.line(MARGIN, cur.y + 4, PAGE_WIDTH - MARGIN, cur.y + 4)
        cur.move(6)

    def _column_x(self) -> list[float]:
        xs, x = [], MARGIN
        for _, width in self.ITEM_COLUMNS:
            xs.append(x)
            x += width
        return xs

    def _item_header(self, cur: _Cursor, priced: bool) -> None:
        pdf = cur.pdf
        pdf.setFont(FONT_BOLD, 9)
        xs = self._column_x()
        for (label, _), x in zip(self.ITEM_COLUMNS, xs):
            if not priced and label in ("Rate", "Amount", "Area"):
                continue
            if label == "Amount":
                pdf.drawRightString(PAGE_WIDTH - MARGIN, cur.y, label)
            else:
                pdf.drawString(x, cur.y, label)
        cur.move(4)
        self._rule(cur)

    def _items(self, cur: _Cursor, items, priced: bool = True) -> None:
        self._item_header(cur, priced)
        xs = self._column_x()
        for index, item in enumerate(items, start=1):
            polish = _polish_summary(item)
            height = LINE + (LINE - 2 if polish else 0) + (LINE - 2 if item.description else 0)
            cur.need(height, on_break=lambda: self._item_header(cur, priced))
            pdf = cur.pdf
            pdf.setFont(FONT, 9)
            pdf.drawString(xs[0], cur.y, str(index))
            pdf.drawString(xs[1], cur.y, _fit(_glass(item), 145))
            pdf.drawString(xs[2], cur.y, _fit(_size(item), 115))
            pdf.drawString(xs[3], cur.y, str(item.quantity))
            if priced:
                pdf.drawString(xs[4], cur.y, _qty(item.area))
                pdf.drawString(xs[5], cur.y, _qty(item.rate_per_sqft))
                pdf.drawRightString(PAGE_WIDTH - MARGIN, cur.y, format_rupees(item.subtotal))
            cur.move()
            if polish:
                self._polish_box(cur, item, polish, priced)
            if item.description:
                pdf.setFont(FONT, 8)
                pdf.drawString(xs[1], cur.y, _fit(item.description, PAGE_WIDTH - xs[1] - MARGIN, FONT, 8))
                cur.move(LINE - 2)
        cur.move(2)
        self._rule(cur)

    def _polish_box(self, cur: _Cursor, item, summary: str, priced: bool) -> None:
        pdf = cur.pdf
        x = self._column_x()[1]
        text = summary
        if priced and item.running_ft is not None:
            text = f"{summary}  (Running ft: {format_rupees(item.running_ft)})"
        pdf.setFont(FONT, 8)
        width = stringWidth(_fit(text, PAGE_WIDTH - x - MARGIN - 6, FONT, 8), FONT, 8) + 6
        pdf.rect(x - 2, cur.y - 3, width, LINE - 2, stroke=1, fill=0)
        pdf.drawString(x + 1, cur.y, _fit(text, PAGE_WIDTH - x - MARGIN - 6, FONT, 8))
        cur.move(LINE - 2)

    def _totals(self, cur: _Cursor, doc) -> None:
        rows = [("Subtotal", doc.subtotal)]
        if doc.installation_charge:
            rows.append(("Installation", doc.installation_charge))
        if doc.transport_charge:
            rows.append(("Transport", doc.transport_charge))
        if doc.discount:
            rows.append(("Discount", -doc.discount))
        if doc.billing_type == BILLING_GST and doc.gst_amount is not None:
            pct = doc.gst_percentage or 0
            if doc.igst:
                rows.append((f"IGST @ {_qty(pct)}%", doc.igst))
            else:
                rows.append((f"CGST @ {_qty(pct / 2)}%", doc.cgst))
                rows.append((f"SGST @ {_qty(pct / 2)}%", doc.sgst))
        rows.append(("Grand Total", doc.grand_total))

        cur.need(LINE * (len(rows) + 1))
        pdf = cur.pdf
        label_x = PAGE_WIDTH - MARGIN - 180
        for label, value in rows:
            bold = label == "Grand Total"
            pdf.setFont(FONT_BOLD if bold else FONT, 10 if bold else 9)
            pdf.drawString(label_x, cur.y, label)
            pdf.drawRightString(PAGE_WIDTH - MARGIN, cur.y, format_rupees(value))
            cur.move()

    def _payment_summary(self, cur: _Cursor, invoice: Invoice) -> None:
        cur.need(LINE * 4)
        pdf = cur.pdf
        pdf.setFont(FONT_BOLD, 9)
        pdf.drawString(MARGIN, cur.y, f"Payment status: {invoice.payment_status}")
        cur.move()
        pdf.setFont(FONT, 9)
        pdf.drawString(MARGIN, cur.y, f"Paid: {format_rupees(invoice.paid_amount)}")
        pdf.drawString(MARGIN + 150, cur.y, f"Due: {format_rupees(invoice.due_amount)}")
        cur.move()

    def _signature(self, cur: _Cursor, shop_name: str | None) -> None:
        cur.need(LINE * 4)
        cur.move(LINE * 2)
        pdf = cur.pdf
        pdf.setFont(FONT, 9)
        pdf.drawString(MARGIN, cur.y, "Receiver's signature")
        pdf.drawRightString(PAGE_WIDTH - MARGIN, cur.y, f"For {shop_name}" if shop_name else "Authorised signatory")
        cur.move()

    # ------------------------------------------------------------------
    # documents
    # ------------------------------------------------------------------

    def render_quotation(self, quotation: Quotation, shop: Shop) -> bytes:
        buffer, pdf = self._new_canvas(f"Quotation {quotation.quotation_number}")
        cur = _Cursor(pdf)
        self._title(cur, "QUOTATION")
        meta_bottom = self._meta(cur, [
            ("Quotation No", quotation.quotation_number),
            ("Date", to_display_date(quotation.quotation_date)),
            ("Valid until", to_display_date(quotation.valid_until)),
            ("Billing", quotation.billing_type),
        ])
        self._shop_block(cur, shop, heading="From")
        self._customer_block(cur, quotation)
        cur.y = min(cur.y, meta_bottom)
        self._items(cur, quotation.items, priced=True)
        self._totals(cur, quotation)
        self._signature(cur, shop.shop_name)
        pdf.save()
        return buffer.getvalue()

    def render_cutting_pad(self, quotation: Quotation, shop: Shop) -> bytes:
        buffer, pdf = self._new_canvas(f"Cutting pad {quotation.quotation_number}")
        cur = _Cursor(pdf)
        self._title(cur, "CUTTING PAD")
        cur.y = self._meta(cur, [
            ("Quotation No", quotation.quotation_number),
            ("Date", to_display_date(quotation.quotation_date)),
        ])
        pdf.setFont(FONT, 9)
        pdf.drawString(MARGIN, cur.y, _fit(f"{shop.shop_name}  |  Customer: {quotation.customer_name or '-'}",
                                           PAGE_WIDTH - 2 * MARGIN))
        cur.move(LINE + 4)
        self._items(cur, quotation.items, priced=False)
        pdf.save()
        return buffer.getvalue()

    def _invoice_heading(self, cur: _Cursor, invoice: Invoice) -> None:
        title = "TAX INVOICE" if invoice.billing_type == BILLING_GST else "BILL / CASH MEMO"
        if invoice.invoice_type == "ADVANCE":
            title = f"ADVANCE {title}"
        self._title(cur, title)

    def _invoice_meta_rows(self, invoice: Invoice) -> list[tuple[str, str]]:
        return [
            ("Invoice No", invoice.invoice_number),
            ("Date", to_display_date(invoice.invoice_date)),
            ("Quotation", invoice.quotation.quotation_number if invoice.quotation else "-"),
        ]

    def render_invoice(self, invoice: Invoice, shop: Shop) -> bytes:
        buffer, pdf = self._new_canvas(f"Invoice {invoice.invoice_number}")
        cur = _Cursor(pdf)
        self._shop_block(cur, shop)
        self._rule(cur)
        self._invoice_heading(cur, invoice)
        meta_bottom = self._meta(cur, self._invoice_meta_rows(invoice))
        self._customer_block(cur, invoice, heading="Bill to")
        cur.y = min(cur.y, meta_bottom)
        self._items(cur, invoice.items, priced=True)
        self._totals(cur, invoice)
        self._payment_summary(cur, invoice)
        self._signature(cur, shop.shop_name)
        pdf.save()
        return buffer.getvalue()

    def render_basic_invoice(self, invoice: Invoice) -> bytes:
        buffer, pdf = self._new_canvas(f"Invoice {invoice.invoice_number}")
        cur = _Cursor(pdf)
        self._invoice_heading(cur, invoice)
        meta_bottom = self._meta(cur, self._invoice_meta_rows(invoice))
        self._customer_block(cur, invoice, heading="Bill to")
        cur.y = min(cur.y, meta_bottom)
        self._items(cur, invoice.items, priced=True)
        self._totals(cur, invoice)
        self._payment_summary(cur, invoice)
        pdf.save()
        return buffer.getvalue()

    def _challan_copy(self, pdf, invoice: Invoice, shop: Shop, items, start: int,
                      top: float, bottom: float, label: str) -> None:
        cur = _Cursor(pdf, top=top, bottom=bottom)
        pdf.setFont(FONT, 8)
        pdf.drawRightString(PAGE_WIDTH - MARGIN, cur.y, label)
        pdf.setFont(FONT_BOLD, 13)
        pdf.drawCentredString(PAGE_WIDTH / 2, cur.y, "DELIVERY CHALLAN")
        cur.move(LINE + 4)
        pdf.setFont(FONT_BOLD, 10)
        pdf.drawString(MARGIN, cur.y, _fit(shop.shop_name, PAGE_WIDTH / 2, FONT_BOLD, 10))
        pdf.setFont(FONT, 9)
        pdf.drawRightString(PAGE_WIDTH - MARGIN, cur.y, f"Challan for: {invoice.invoice_number}")
        cur.move()
        pdf.drawString(MARGIN, cur.y, _fit(f"To: {invoice.customer_name or '-'}  {invoice.customer_mobile or ''}",
                                           PAGE_WIDTH / 2))
        pdf.drawRightString(PAGE_WIDTH - MARGIN, cur.y, f"Date: {to_display_date(invoice.invoice_date)}")
        cur.move()
        if invoice.customer_address:
            pdf.drawString(MARGIN, cur.y, _fit(invoice.customer_address, PAGE_WIDTH - 2 * MARGIN))
            cur.move()
        cur.move(4)

        xs = self._column_x()
        pdf.setFont(FONT_BOLD, 9)
        for (heading, _), x in zip(self.ITEM_COLUMNS[:4], xs):
            pdf.drawString(x, cur.y, heading)
        cur.move(4)
        self._rule(cur)
        pdf.setFont(FONT, 9)
        for offset, item in enumerate(items):
            pdf.drawString(xs[0], cur.y, str(start + offset))
            pdf.drawString(xs[1], cur.y, _fit(_glass(item), 145))
            pdf.drawString(xs[2], cur.y, _fit(_size(item), 115))
            pdf.drawString(xs[3], cur.y, str(item.quantity))
            polish = _polish_summary(item)
            if polish:
                pdf.setFont(FONT, 8)
                pdf.drawString(xs[3] + 40, cur.y, _fit(polish, PAGE_WIDTH - xs[3] - 40 - MARGIN, FONT, 8))
                pdf.setFont(FONT, 9)
            cur.move()
        pdf.setFont(FONT, 9)
        pdf.drawString(MARGIN, bottom + 4, "Receiver's signature")
        pdf.drawRightString(PAGE_WIDTH - MARGIN, bottom + 4, f"For {shop.shop_name}")

    def render_challan(self, invoice: Invoice, shop: Shop) -> bytes:
        """Every page carries the same rows twice: ORIGINAL on top, DUPLICATE below."""
        buffer, pdf = self._new_canvas(f"Challan {invoice.invoice_number}")
        items = list(invoice.items)
        chunks = [items[i:i + CHALLAN_ROWS_PER_COPY] for i in range(0, len(items), CHALLAN_ROWS_PER_COPY)] or [[]]
        middle = PAGE_HEIGHT / 2
        for page, chunk in enumerate(chunks):
            if page:
                pdf.showPage()
            start = page * CHALLAN_ROWS_PER_COPY + 1
            self._challan_copy(pdf, invoice, shop, chunk, start, PAGE_HEIGHT - MARGIN, middle + MARGIN, "ORIGINAL")
            pdf.setDash([4, 3], 0)
            pdf.line(MARGIN, middle, PAGE_WIDTH - MARGIN, middle)
            pdf.setDash()
            self._challan_copy(pdf, invoice, shop, chunk, start, middle - MARGIN, MARGIN, "DUPLICATE")
        pdf.save()
        return buffer.getvalue()


renderer = DocumentRenderer()


def quotation_pdf(shop_id: int, quotation_id: int) -> tuple[str, bytes]:
    quotation = get_quotation(shop_id, quotation_id)
    data = renderer.render_quotation(quotation, get_shop(shop_id))
    return f"quotation-{quotation.quotation_number}.pdf", data


def cutting_pad_pdf(shop_id: int, quotation_id: int) -> tuple[str, bytes]:
    quotation = get_quotation(shop_id, quotation_id)
    data = renderer.render_cutting_pad(quotation, get_shop(shop_id))
    return f"cutting-pad-{quotation.quotation_number}.pdf", data


def invoice_pdf(shop_id: int, invoice_id: int) -> tuple[str, bytes]:
    invoice = get_invoice(shop_id, invoice_id)
    data = renderer.render_invoice(invoice, get_shop(shop_id))
    return f"invoice-{invoice.invoice_number}.pdf", data


def basic_invoice_pdf(shop_id: int, invoice_id: int) -> tuple[str, bytes]:
    invoice = get_invoice(shop_id, invoice_id)
    return f"invoice-{invoice.invoice_number}-basic.pdf", renderer.render_basic_invoice(invoice)


def challan_pdf(shop_id: int, invoice_id: int) -> tuple[str, bytes]:
    invoice = get_invoice(shop_id, invoice_id)
    data = renderer.render_challan(invoice, get_shop(shop_id))
    return f"challan-{invoice.invoice_number}.pdf", data
