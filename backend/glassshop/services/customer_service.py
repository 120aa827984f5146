# Overview: Customer records, their sites, and installation scheduling.

from __future__ import annotations

from sqlalchemy import or_

from ..extensions import db
from ..models import Customer, Installation, Invoice, Quotation, Site
from ..validation import ConflictError, ModelValidationPolicy, ValidationError, validate_payload
from .tenant_service import get_owned, scoped_query


CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "mobile", "email", "address", "gstin", "state", "city", "pincode"},
    required_on_create={"name"},
)

SITE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "address"},
    required_on_create={"name"},
)

INSTALLATION_POLICY = ModelValidationPolicy(
    writable_fields={"site_id", "scheduled_date", "status", "notes"},
    required_on_create={"site_id"},
)

INSTALLATION_STATUSES = {"SCHEDULED", "COMPLETED", "CANCELLED"}


def list_customers(shop_id: int) -> list[Customer]:
    return scoped_query(Customer, shop_id).order_by(Customer.name.asc(), Customer.id.asc()).all()


def search_customers(shop_id: int, term: str) -> list[Customer]:
    """Case-insensitive substring match on name, mobile or email."""
    term = (term or "").strip()
    if not term:
        return list_customers(shop_id)
    like = f"%{term}%"
    return (
        scoped_query(Customer, shop_id)
        .filter(or_(
            Customer.name.ilike(like),
            Customer.mobile.ilike(like),
            Customer.email.ilike(like),
        ))
        .order_by(Customer.name.asc())
        .all()
    )


def get_customer(shop_id: int, customer_id: int) -> Customer:
    return get_owned(Customer, customer_id, shop_id, "Customer")


def create_customer(shop_id: int, data: dict) -> Customer:
    patch = validate_payload(model=Customer, payload=data, policy=CUSTOMER_POLICY, partial=False)
    customer = Customer(shop_id=shop_id, **patch)
    db.session.add(customer)
    db.session.commit()
    return customer


def update_customer(shop_id: int, customer_id: int, data: dict) -> Customer:
    customer = get_customer(shop_id, customer_id)
    patch = validate_payload(model=Customer, payload=data, policy=CUSTOMER_POLICY, partial=True)
    for key, value in patch.items():
        setattr(customer, key, value)
    db.session.commit()
    return customer


def delete_customer(shop_id: int, customer_id: int) -> None:
    """Customers with quotations keep their history and cannot be deleted."""
    customer = get_customer(shop_id, customer_id)
    if scoped_query(Quotation, shop_id).filter(Quotation.customer_id == customer.id).first():
        raise ConflictError("Customer has quotations and cannot be deleted")
    db.session.delete(customer)
    db.session.commit()


def list_sites(shop_id: int, customer_id: int) -> list[Site]:
    get_customer(shop_id, customer_id)
    return (
        scoped_query(Site, shop_id)
        .filter(Site.customer_id == customer_id)
        .order_by(Site.id.asc())
        .all()
    )


def create_site(shop_id: int, customer_id: int, data: dict) -> Site:
    customer = get_customer(shop_id, customer_id)
    patch = validate_payload(model=Site, payload=data, policy=SITE_POLICY, partial=False)
    site = Site(shop_id=shop_id, customer_id=customer.id, **patch)
    db.session.add(site)
    db.session.commit()
    return site


def schedule_installation(shop_id: int, invoice_id: int, data: dict) -> Installation:
    """Book an installation for an invoice at one of its customer's sites."""
    invoice = get_owned(Invoice, invoice_id, shop_id, "Invoice")
    patch = validate_payload(model=Installation, payload=data, policy=INSTALLATION_POLICY, partial=False)
    site = get_owned(Site, patch["site_id"], shop_id, "Site")
    if invoice.customer_id is not None and site.customer_id != invoice.customer_id:
        raise ValidationError("Site does not belong to the invoice's customer")

    status = (patch.get("status") or "SCHEDULED").upper()
    if status not in INSTALLATION_STATUSES:
        raise ValidationError(f"status must be one of {sorted(INSTALLATION_STATUSES)}")

    installation = Installation(
        shop_id=shop_id,
        invoice_id=invoice.id,
        site_id=site.id,
        scheduled_date=patch.get("scheduled_date"),
        status=status,
        notes=patch.get("notes"),
    )
    db.session.add(installation)
    db.session.commit()
    return installation


def list_installations(shop_id: int, invoice_id: int) -> list[Installation]:
    get_owned(Invoice, invoice_id, shop_id, "Invoice")
    return (
        scoped_query(Installation, shop_id)
        .filter(Installation.invoice_id == invoice_id)
        .order_by(Installation.id.asc())
        .all()
    )
