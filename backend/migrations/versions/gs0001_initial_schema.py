"""initial glass shop schema

Revision ID: gs0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates the complete schema:
- shops / users: tenants and their ADMIN / STAFF accounts
- glass / glass_price_master: global catalog and per-shop prices
- stock / stock_history / audit_logs: stand stock and its movement trail
- customers / sites / installations
- quotations / invoices with their lines, polish rows and payments
- document_sequences: per-shop QTN / INV / ADV counters
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'gs0001'
down_revision = None
branch_labels = None
depends_on = None


def _created_at():
    return sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                     server_default=sa.text('CURRENT_TIMESTAMP'))


def _updated_at():
    return sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                     server_default=sa.text('CURRENT_TIMESTAMP'))


def _billing_columns():
    """Customer snapshot and totals shared by quotations and invoices."""
    return [
        sa.Column('billing_type', sa.String(length=16), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('customer_mobile', sa.String(length=32), nullable=True),
        sa.Column('customer_address', sa.Text(), nullable=True),
        sa.Column('customer_gstin', sa.String(length=32), nullable=True),
        sa.Column('customer_state', sa.String(length=64), nullable=True),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('installation_charge', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('transport_charge', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('transportation_required', sa.Boolean(), nullable=False),
        sa.Column('discount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount_type', sa.String(length=16), nullable=True),
        sa.Column('discount_value', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('gst_percentage', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('cgst', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('sgst', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('igst', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('gst_amount', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('grand_total', sa.Numeric(precision=12, scale=2), nullable=False),
    ]


def _glass_line_columns():
    """Measurement, pricing and polish columns shared by quotation and invoice lines."""
    return [
        sa.Column('glass_type', sa.String(length=64), nullable=True),
        sa.Column('thickness', sa.String(length=16), nullable=True),
        sa.Column('height', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('width', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('height_unit', sa.String(length=8), nullable=False),
        sa.Column('width_unit', sa.String(length=8), nullable=False),
        sa.Column('design', sa.String(length=64), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('rate_per_sqft', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('area', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('hsn_code', sa.String(length=32), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('polish', sa.String(length=16), nullable=True),
        sa.Column('running_ft', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('item_order', sa.Integer(), nullable=False),
    ]


def _polish_columns():
    return [
        sa.Column('side', sa.String(length=16), nullable=False),
        sa.Column('polish_type', sa.String(length=1), nullable=False),
        sa.Column('rate', sa.Numeric(precision=12, scale=2), nullable=False),
    ]


def upgrade():
    # ============================================================================
    # Tenants and accounts
    # ============================================================================
    op.create_table(
        'shops',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_name', sa.String(length=255), nullable=False),
        sa.Column('owner_name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('whatsapp_number', sa.String(length=32), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('gstin', sa.String(length=32), nullable=True),
        sa.Column('state', sa.String(length=64), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id', name='pk_shops'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_users_shop_id_shops'),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('username', name='uq_users_username'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_shop_id', 'users', ['shop_id'])

    # ============================================================================
    # Catalog and price master
    # ============================================================================
    op.create_table(
        'glass',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=64), nullable=False),
        sa.Column('thickness', sa.Numeric(precision=6, scale=2), nullable=False),
        sa.Column('unit', sa.String(length=16), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_glass'),
        sa.UniqueConstraint('type', 'thickness', 'unit', name='uq_glass_type_thickness_unit'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'glass_price_master',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('glass_type', sa.String(length=64), nullable=False),
        sa.Column('thickness', sa.Numeric(precision=6, scale=2), nullable=False),
        sa.Column('hsn_no', sa.String(length=32), nullable=True),
        sa.Column('purchase_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('selling_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('is_pending', sa.Boolean(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_glass_price_master_shop_id_shops'),
        sa.PrimaryKeyConstraint('id', name='pk_glass_price_master'),
        sa.UniqueConstraint('shop_id', 'glass_type', 'thickness', name='uq_price_master_shop_type_thickness'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_glass_price_master_shop_id', 'glass_price_master', ['shop_id'])
    op.create_index('ix_price_master_shop_pending', 'glass_price_master', ['shop_id', 'is_pending'])

    # ============================================================================
    # Stand stock and its trail
    # ============================================================================
    # version_id backs optimistic locking on concurrent movements
    op.create_table(
        'stock',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('glass_id', sa.Integer(), nullable=False),
        sa.Column('stand_no', sa.Integer(), nullable=False),
        sa.Column('height', sa.String(length=32), nullable=True),
        sa.Column('width', sa.String(length=32), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('min_quantity', sa.Integer(), nullable=False),
        sa.Column('hsn_no', sa.String(length=32), nullable=True),
        sa.Column('purchase_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('selling_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        _updated_at(),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['glass_id'], ['glass.id'], name='fk_stock_glass_id_glass'),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_stock_shop_id_shops'),
        sa.PrimaryKeyConstraint('id', name='pk_stock'),
        sa.UniqueConstraint('glass_id', 'stand_no', 'shop_id', 'height', 'width',
                            name='uq_stock_glass_stand_shop_size'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_stock_shop_id', 'stock', ['shop_id'])
    op.create_index('ix_stock_glass_id', 'stock', ['glass_id'])
    op.create_index('ix_stock_shop_status', 'stock', ['shop_id', 'status'])
    op.create_index('ix_stock_shop_updated', 'stock', ['shop_id', 'updated_at'])

    op.create_table(
        'stock_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('glass_id', sa.Integer(), nullable=False),
        sa.Column('stand_no', sa.Integer(), nullable=False),
        sa.Column('to_stand_no', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=16), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['glass_id'], ['glass.id'], name='fk_stock_history_glass_id_glass'),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_stock_history_shop_id_shops'),
        sa.PrimaryKeyConstraint('id', name='pk_stock_history'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_stock_history_shop_created', 'stock_history', ['shop_id', 'created_at'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=True),
        sa.Column('action', sa.String(length=16), nullable=False),
        sa.Column('glass_type', sa.String(length=64), nullable=True),
        sa.Column('thickness', sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column('unit', sa.String(length=16), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('stand_no', sa.Integer(), nullable=True),
        sa.Column('from_stand', sa.Integer(), nullable=True),
        sa.Column('to_stand', sa.Integer(), nullable=True),
        sa.Column('height', sa.String(length=32), nullable=True),
        sa.Column('width', sa.String(length=32), nullable=True),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_audit_logs_shop_id_shops'),
        sa.PrimaryKeyConstraint('id', name='pk_audit_logs'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_audit_logs_shop_ts', 'audit_logs', ['shop_id', 'timestamp'])

    # ============================================================================
    # Customers and sites
    # ============================================================================
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('mobile', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('gstin', sa.String(length=32), nullable=True),
        sa.Column('state', sa.String(length=64), nullable=True),
        sa.Column('city', sa.String(length=64), nullable=True),
        sa.Column('pincode', sa.String(length=16), nullable=True),
        _created_at(),
        _updated_at(),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_customers_shop_id_shops'),
        sa.PrimaryKeyConstraint('id', name='pk_customers'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_customers_shop_id', 'customers', ['shop_id'])
    op.create_index('ix_customers_shop_name', 'customers', ['shop_id', 'name'])
    op.create_index('ix_customers_shop_mobile', 'customers', ['shop_id', 'mobile'])

    op.create_table(
        'sites',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], name='fk_sites_customer_id_customers'),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_sites_shop_id_shops'),
        sa.PrimaryKeyConstraint('id', name='pk_sites'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_sites_shop_id', 'sites', ['shop_id'])
    op.create_index('ix_sites_customer_id', 'sites', ['customer_id'])

    op.create_table(
        'document_sequences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('document_type', sa.String(length=32), nullable=False),
        sa.Column('next_number', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_document_sequences_shop_id_shops'),
        sa.PrimaryKeyConstraint('id', name='pk_document_sequences'),
        sa.UniqueConstraint('shop_id', 'document_type', name='uq_document_sequences_shop_type'),
        sqlite_autoincrement=True
    )

    # ============================================================================
    # Quotations
    # ============================================================================
    op.create_table(
        'quotations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=True),
        sa.Column('quotation_number', sa.String(length=32), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('quotation_date', sa.Date(), nullable=False),
        sa.Column('valid_until', sa.Date(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('confirmed_by', sa.String(length=64), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        _created_at(),
        _updated_at(),
        *_billing_columns(),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], name='fk_quotations_customer_id_customers'),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_quotations_shop_id_shops'),
        sa.PrimaryKeyConstraint('id', name='pk_quotations'),
        sa.UniqueConstraint('shop_id', 'quotation_number', name='uq_quotations_shop_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_quotations_shop_id', 'quotations', ['shop_id'])
    op.create_index('ix_quotations_customer_id', 'quotations', ['customer_id'])
    op.create_index('ix_quotations_shop_status', 'quotations', ['shop_id', 'status'])

    op.create_table(
        'quotation_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('quotation_id', sa.Integer(), nullable=False),
        *_glass_line_columns(),
        sa.ForeignKeyConstraint(['quotation_id'], ['quotations.id'], name='fk_quotation_items_quotation_id_quotations'),
        sa.PrimaryKeyConstraint('id', name='pk_quotation_items'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_quotation_items_quotation_id', 'quotation_items', ['quotation_id'])

    op.create_table(
        'quotation_item_polish',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('quotation_item_id', sa.Integer(), nullable=False),
        *_polish_columns(),
        sa.ForeignKeyConstraint(['quotation_item_id'], ['quotation_items.id'],
                                name='fk_quotation_item_polish_quotation_item_id_quotation_items'),
        sa.PrimaryKeyConstraint('id', name='pk_quotation_item_polish'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_quotation_item_polish_quotation_item_id', 'quotation_item_polish', ['quotation_item_id'])

    # ============================================================================
    # Invoices and payments
    # ============================================================================
    # uq_invoices_quotation: one invoice per quotation
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('quotation_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=True),
        sa.Column('invoice_number', sa.String(length=32), nullable=False),
        sa.Column('invoice_type', sa.String(length=16), nullable=False),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('payment_status', sa.String(length=16), nullable=False),
        sa.Column('paid_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('due_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        _created_at(),
        _updated_at(),
        sa.Column('version_id', sa.Integer(), nullable=False),
        *_billing_columns(),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], name='fk_invoices_customer_id_customers'),
        sa.ForeignKeyConstraint(['quotation_id'], ['quotations.id'], name='fk_invoices_quotation_id_quotations'),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_invoices_shop_id_shops'),
        sa.PrimaryKeyConstraint('id', name='pk_invoices'),
        sa.UniqueConstraint('shop_id', 'invoice_number', name='uq_invoices_shop_number'),
        sa.UniqueConstraint('quotation_id', name='uq_invoices_quotation'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_invoices_shop_id', 'invoices', ['shop_id'])
    op.create_index('ix_invoices_customer_id', 'invoices', ['customer_id'])
    op.create_index('ix_invoices_shop_payment_status', 'invoices', ['shop_id', 'payment_status'])

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        *_glass_line_columns(),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], name='fk_invoice_items_invoice_id_invoices'),
        sa.PrimaryKeyConstraint('id', name='pk_invoice_items'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_invoice_items_invoice_id', 'invoice_items', ['invoice_id'])

    op.create_table(
        'invoice_item_polish',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_item_id', sa.Integer(), nullable=False),
        *_polish_columns(),
        sa.ForeignKeyConstraint(['invoice_item_id'], ['invoice_items.id'],
                                name='fk_invoice_item_polish_invoice_item_id_invoice_items'),
        sa.PrimaryKeyConstraint('id', name='pk_invoice_item_polish'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_invoice_item_polish_invoice_item_id', 'invoice_item_polish', ['invoice_item_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_mode', sa.String(length=32), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('reference_number', sa.String(length=64), nullable=True),
        sa.Column('bank_name', sa.String(length=128), nullable=True),
        sa.Column('cheque_number', sa.String(length=64), nullable=True),
        sa.Column('transaction_id', sa.String(length=128), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('received_by', sa.String(length=64), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], name='fk_payments_invoice_id_invoices'),
        sa.PrimaryKeyConstraint('id', name='pk_payments'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_payments_invoice_id', 'payments', ['invoice_id'])

    op.create_table(
        'installations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('site_id', sa.Integer(), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], name='fk_installations_invoice_id_invoices'),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id'], name='fk_installations_shop_id_shops'),
        sa.ForeignKeyConstraint(['site_id'], ['sites.id'], name='fk_installations_site_id_sites'),
        sa.PrimaryKeyConstraint('id', name='pk_installations'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_installations_shop_id', 'installations', ['shop_id'])
    op.create_index('ix_installations_invoice_id', 'installations', ['invoice_id'])


def downgrade():
    """Drop all tables (destructive operation)."""
    for table in (
        'installations',
        'payments',
        'invoice_item_polish',
        'invoice_items',
        'invoices',
        'quotation_item_polish',
        'quotation_items',
        'quotations',
        'document_sequences',
        'sites',
        'customers',
        'audit_logs',
        'stock_history',
        'stock',
        'glass_price_master',
        'glass',
        'users',
        'shops',
    ):
        op.drop_table(table)
