# Overview: Flask API routes for invoices, payments, installations and invoice PDFs (admin only).

"""
Invoice API Routes

- POST /api/invoices/from-quotation           raise invoice from a CONFIRMED quotation
- GET  /api/invoices                          list
- GET  /api/invoices/<id>                     detail with lines and payments
- GET  /api/invoices/payment-status/<status>  DUE / PARTIAL / PAID
- POST /api/invoices/<id>/payments            record a payment
- GET  /api/invoices/<id>/payments
- GET|POST /api/invoices/<id>/installations
- GET  /api/invoices/<id>/(download|print)-(invoice|basic-invoice|challan)
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_admin, require_auth
from ..responses import pdf_response
from ..services import customer_service, invoice_service, pdf_service
from ..services.invoice_service import PaymentError
from ..validation import ConflictError, NotFoundError, ValidationError, parse_positive_int


invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


@invoices_bp.post("/from-quotation")
@require_auth
@require_admin
def create_from_quotation_route():
    """
    Request body:
    {"quotation_id": 12, "invoice_type": "FINAL" | "ADVANCE" | "TAX", "invoice_date": "2026-02-01"}

    Returns:
        201: invoice
        400: missing quotation_id, bad type or date
        404: quotation not found or not confirmed
        409: quotation already invoiced
    """
    try:
        data = request.get_json(silent=True) or {}
        if data.get("quotation_id") in (None, ""):
            return jsonify({"error": "quotation_id is required"}), 400
        quotation_id = parse_positive_int(data["quotation_id"], "quotation_id")
        invoice = invoice_service.create_from_quotation(g.shop_id, g.current_user, quotation_id, data)
        return jsonify(invoice.to_dict()), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create invoice")
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.get("")
@require_auth
@require_admin
def list_invoices_route():
    invoices = invoice_service.list_invoices(g.shop_id)
    return jsonify({"invoices": [i.to_dict(include_items=False) for i in invoices]}), 200


@invoices_bp.get("/payment-status/<status>")
@require_auth
@require_admin
def list_by_payment_status_route(status: str):
    try:
        invoices = invoice_service.list_invoices(g.shop_id, payment_status=status)
        return jsonify({"invoices": [i.to_dict(include_items=False) for i in invoices]}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@invoices_bp.get("/<int:invoice_id>")
@require_auth
@require_admin
def get_invoice_route(invoice_id: int):
    try:
        invoice = invoice_service.get_invoice(g.shop_id, invoice_id)
        return jsonify(invoice.to_dict()), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


# =============================================================================
# PAYMENTS
# =============================================================================

@invoices_bp.post("/<int:invoice_id>/payments")
@require_auth
@require_admin
def add_payment_route(invoice_id: int):
    """
    Request body:
    {
        "amount": 500, "payment_mode": "UPI",
        "payment_date": "2026-02-01", "reference_number": "...",
        "bank_name": "...", "cheque_number": "...", "transaction_id": "...", "notes": "..."
    }

    Returns:
        201: {"payment", "invoice"}
        400: amount <= 0, missing/unknown mode, or amount above due
        404: invoice not in this shop
    """
    try:
        data = request.get_json(silent=True) or {}
        invoice, payment = invoice_service.add_payment(g.shop_id, g.current_user, invoice_id, data)
        return jsonify({
            "payment": payment.to_dict(),
            "invoice": invoice.to_dict(include_items=False),
        }), 201

    except PaymentError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to add payment")
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.get("/<int:invoice_id>/payments")
@require_auth
@require_admin
def list_payments_route(invoice_id: int):
    try:
        payments = invoice_service.list_payments(g.shop_id, invoice_id)
        return jsonify({"payments": [p.to_dict() for p in payments]}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


# =============================================================================
# INSTALLATIONS
# =============================================================================

@invoices_bp.get("/<int:invoice_id>/installations")
@require_auth
@require_admin
def list_installations_route(invoice_id: int):
    try:
        rows = customer_service.list_installations(g.shop_id, invoice_id)
        return jsonify({"installations": [r.to_dict() for r in rows]}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@invoices_bp.post("/<int:invoice_id>/installations")
@require_auth
@require_admin
def schedule_installation_route(invoice_id: int):
    try:
        data = request.get_json(silent=True) or {}
        installation = customer_service.schedule_installation(g.shop_id, invoice_id, data)
        return jsonify(installation.to_dict()), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to schedule installation")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# DOCUMENTS
# =============================================================================

PDF_VARIANTS = {
    "invoice": pdf_service.invoice_pdf,
    "basic-invoice": pdf_service.basic_invoice_pdf,
    "challan": pdf_service.challan_pdf,
}


def _render(invoice_id: int, variant: str, inline: bool):
    try:
        filename, data = PDF_VARIANTS[variant](g.shop_id, invoice_id)
        return pdf_response(filename, data, inline=inline)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to render %s PDF", variant)
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.get("/<int:invoice_id>/download-invoice")
@require_auth
@require_admin
def download_invoice_route(invoice_id: int):
    return _render(invoice_id, "invoice", inline=False)


@invoices_bp.get("/<int:invoice_id>/print-invoice")
@require_auth
@require_admin
def print_invoice_route(invoice_id: int):
    return _render(invoice_id, "invoice", inline=True)


@invoices_bp.get("/<int:invoice_id>/download-basic-invoice")
@require_auth
@require_admin
def download_basic_invoice_route(invoice_id: int):
    return _render(invoice_id, "basic-invoice", inline=False)


@invoices_bp.get("/<int:invoice_id>/print-basic-invoice")
@require_auth
@require_admin
def print_basic_invoice_route(invoice_id: int):
    return _render(invoice_id, "basic-invoice", inline=True)


@invoices_bp.get("/<int:invoice_id>/download-challan")
@require_auth
@require_admin
def download_challan_route(invoice_id: int):
    return _render(invoice_id, "challan", inline=False)


@invoices_bp.get("/<int:invoice_id>/print-challan")
@require_auth
@require_admin
def print_challan_route(invoice_id: int):
    return _render(invoice_id, "challan", inline=True)
