from .tenancy import Shop
from .auth import User, ROLE_ADMIN, ROLE_STAFF
from .catalog import Glass, GlassPriceMaster
from .inventory import Stock, StockHistory
from .audit import AuditLog
from .customers import Customer, Site, Installation
from .quotations import Quotation, QuotationItem, QuotationItemPolish
from .invoices import Invoice, InvoiceItem, InvoiceItemPolish, Payment
from .documents import DocumentSequence

__all__ = [
    'Shop',
    'User', 'ROLE_ADMIN', 'ROLE_STAFF',
    'Glass', 'GlassPriceMaster',
    'Stock', 'StockHistory',
    'AuditLog',
    'Customer', 'Site', 'Installation',
    'Quotation', 'QuotationItem', 'QuotationItemPolish',
    'Invoice', 'InvoiceItem', 'InvoiceItemPolish', 'Payment',
    'DocumentSequence',
]
