"""Sales & accounts initial schema

Revision ID: 20261019_0900_sales_accounts_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

This migration creates:
- Master data: warehouses, products, vendors, customers, tax_slabs
- Procurement: purchase_orders, purchase_order_items, grn, grn_items
- Sales: quotations, orders, delivery challans, invoices (+ items)
- payments
- Ledger: journal_entries (unique per ref_type/ref_id), ledger_entries
- Stock: stock_ledger, stock_balances (versioned), product_serials
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '20261019_0900_sales_accounts_initial'
down_revision = None
branch_labels = None
depends_on = None


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _totals_columns():
    return [
        sa.Column('subtotal', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('gst_total', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(15, 2), nullable=False, server_default='0'),
    ]


def _sales_line_columns():
    return [
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('unit_price', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('gst_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
    ]


def _party_columns():
    return [
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('gstin', sa.String(20), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('contact_number', sa.String(30), nullable=True),
        sa.Column('contact_person_name', sa.String(255), nullable=True),
    ]


def upgrade() -> None:
    """Create sales & accounts tables."""

    # ===========================================
    # MASTER DATA
    # ===========================================
    op.create_table(
        'warehouses',
        *_base_columns(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(50), nullable=True, unique=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'products',
        *_base_columns(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('sku', sa.String(100), nullable=True, unique=True, comment='Stock Keeping Unit'),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('unit', sa.String(20), nullable=True, comment='e.g., pcs, kg, box'),
        sa.Column('gst_percent', sa.Numeric(5, 2), nullable=True),
        sa.Column('unit_price', sa.Numeric(15, 2), nullable=True),
        sa.Column('has_serial', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('default_warehouse_id', sa.Uuid(), sa.ForeignKey('warehouses.id', ondelete='SET NULL'), nullable=True),
    )

    op.create_table('vendors', *_base_columns(), *_party_columns())
    op.create_table('customers', *_base_columns(), *_party_columns())

    op.create_table(
        'tax_slabs',
        *_base_columns(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('rate', sa.Numeric(5, 2), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
    )

    # ===========================================
    # PROCUREMENT
    # ===========================================
    op.create_table(
        'purchase_orders',
        *_base_columns(),
        *_totals_columns(),
        sa.Column('po_number', sa.String(50), nullable=False, unique=True),
        sa.Column('vendor_id', sa.Uuid(), sa.ForeignKey('vendors.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('warehouse_id', sa.Uuid(), sa.ForeignKey('warehouses.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.String(30), nullable=False, server_default='draft'),
        sa.Column('notes', sa.Text, nullable=True),
    )

    op.create_table(
        'purchase_order_items',
        *_base_columns(),
        sa.Column('po_id', sa.Uuid(), sa.ForeignKey('purchase_orders.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('unit_price', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('gst_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
    )

    op.create_table(
        'grn',
        *_base_columns(),
        *_totals_columns(),
        sa.Column('grn_number', sa.String(50), nullable=False, unique=True),
        sa.Column('po_id', sa.Uuid(), sa.ForeignKey('purchase_orders.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('warehouse_id', sa.Uuid(), sa.ForeignKey('warehouses.id', ondelete='SET NULL'), nullable=True),
        sa.Column('received_date', sa.Date, nullable=False),
        sa.Column('received_by', sa.String(255), nullable=True),
        sa.Column('remarks', sa.Text, nullable=True),
    )

    op.create_table(
        'grn_items',
        *_base_columns(),
        sa.Column('grn_id', sa.Uuid(), sa.ForeignKey('grn.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('quantity_received', sa.Integer, nullable=False),
        sa.Column('unit_price', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('gst_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('serials', sa.JSON, nullable=False),
    )

    # ===========================================
    # SALES
    # ===========================================
    op.create_table(
        'sales_quotations',
        *_base_columns(),
        *_totals_columns(),
        sa.Column('quote_number', sa.String(50), nullable=False, unique=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('status', sa.String(30), nullable=False, server_default='draft'),
        sa.Column('notes', sa.Text, nullable=True),
    )

    op.create_table(
        'sales_quotation_items',
        *_base_columns(),
        *_sales_line_columns(),
        sa.Column('quotation_id', sa.Uuid(), sa.ForeignKey('sales_quotations.id', ondelete='CASCADE'), nullable=False, index=True),
    )

    op.create_table(
        'sales_orders',
        *_base_columns(),
        *_totals_columns(),
        sa.Column('so_number', sa.String(50), nullable=False, unique=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('quotation_id', sa.Uuid(), sa.ForeignKey('sales_quotations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.String(30), nullable=False, server_default='draft'),
        sa.Column('notes', sa.Text, nullable=True),
    )

    op.create_table(
        'sales_order_items',
        *_base_columns(),
        *_sales_line_columns(),
        sa.Column('sales_order_id', sa.Uuid(), sa.ForeignKey('sales_orders.id', ondelete='CASCADE'), nullable=False, index=True),
    )

    op.create_table(
        'delivery_challans',
        *_base_columns(),
        sa.Column('dc_number', sa.String(50), nullable=False, unique=True),
        sa.Column('sales_order_id', sa.Uuid(), sa.ForeignKey('sales_orders.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('warehouse_id', sa.Uuid(), sa.ForeignKey('warehouses.id', ondelete='SET NULL'), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
    )

    op.create_table(
        'delivery_challan_items',
        *_base_columns(),
        sa.Column('delivery_challan_id', sa.Uuid(), sa.ForeignKey('delivery_challans.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('sales_order_item_id', sa.Uuid(), sa.ForeignKey('sales_order_items.id', ondelete='SET NULL'), nullable=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('warehouse_id', sa.Uuid(), sa.ForeignKey('warehouses.id', ondelete='SET NULL'), nullable=True),
        sa.Column('qty', sa.Integer, nullable=False),
        sa.Column('serials', sa.JSON, nullable=False),
    )

    op.create_table(
        'sales_invoices',
        *_base_columns(),
        *_totals_columns(),
        sa.Column('invoice_number', sa.String(50), nullable=False, unique=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('delivery_id', sa.Uuid(), sa.ForeignKey('delivery_challans.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.String(30), nullable=False, server_default='issued'),
        sa.Column('notes', sa.Text, nullable=True),
    )

    op.create_table(
        'sales_invoice_items',
        *_base_columns(),
        *_sales_line_columns(),
        sa.Column('sales_invoice_id', sa.Uuid(), sa.ForeignKey('sales_invoices.id', ondelete='CASCADE'), nullable=False, index=True),
    )

    # ===========================================
    # PAYMENTS
    # ===========================================
    op.create_table(
        'payments',
        *_base_columns(),
        sa.Column('type', sa.Enum('in', 'out', name='paymenttype'), nullable=False),
        sa.Column('payment_direction', sa.String(20), nullable=False, comment='inward or outward'),
        sa.Column('reference_type', sa.String(30), nullable=False, comment='invoice or purchase'),
        sa.Column('reference_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('vendor_id', sa.Uuid(), sa.ForeignKey('vendors.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('method', sa.String(50), nullable=False, server_default='cash'),
        sa.Column('currency', sa.String(3), nullable=False, server_default='INR'),
        sa.Column('payment_date', sa.Date, nullable=True),
        sa.Column('notes', sa.Text, nullable=False, server_default=''),
    )

    # ===========================================
    # GENERAL LEDGER
    # ===========================================
    op.create_table(
        'journal_entries',
        *_base_columns(),
        sa.Column('entry_number', sa.String(30), nullable=False, unique=True),
        sa.Column('ref_type', sa.String(30), nullable=False),
        sa.Column('ref_id', sa.Uuid(), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('total_debit', sa.Numeric(15, 2), nullable=False),
        sa.Column('total_credit', sa.Numeric(15, 2), nullable=False),
        sa.UniqueConstraint('ref_type', 'ref_id', name='uq_journal_entries_ref'),
    )

    op.create_table(
        'ledger_entries',
        *_base_columns(),
        sa.Column('journal_entry_id', sa.Uuid(), sa.ForeignKey('journal_entries.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('line_number', sa.Integer, nullable=False),
        sa.Column('ledger', sa.String(50), nullable=False, index=True),
        sa.Column('debit', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('credit', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('ref_type', sa.String(30), nullable=False, index=True),
        sa.Column('ref_id', sa.Uuid(), nullable=False),
        sa.CheckConstraint('debit >= 0 AND credit >= 0', name='non_negative'),
    )

    # ===========================================
    # STOCK
    # ===========================================
    op.create_table(
        'stock_ledger',
        *_base_columns(),
        sa.Column('ref_type', sa.String(30), nullable=False),
        sa.Column('ref_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('warehouse_id', sa.Uuid(), sa.ForeignKey('warehouses.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('quantity', sa.Integer, nullable=False, comment='Positive for inbound, negative for outbound'),
        sa.Column('qty_delta', sa.Integer, nullable=False),
        sa.Column('serials', sa.JSON, nullable=False),
    )

    op.create_table(
        'stock_balances',
        *_base_columns(),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('warehouse_id', sa.Uuid(), sa.ForeignKey('warehouses.id', ondelete='SET NULL'), nullable=True),
        sa.Column('warehouse_key', sa.String(36), nullable=False, server_default=''),
        sa.Column('quantity', sa.Integer, nullable=False, server_default='0'),
        sa.Column('version', sa.Integer, nullable=False, server_default='0'),
        sa.UniqueConstraint('product_id', 'warehouse_key', name='uq_stock_balances_product_warehouse'),
    )

    op.create_table(
        'product_serials',
        *_base_columns(),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('serial', sa.String(100), nullable=False),
        sa.Column('status', sa.Enum('in_stock', 'delivered', name='serialstatus'), nullable=False, server_default='in_stock'),
        sa.Column('warehouse_id', sa.Uuid(), sa.ForeignKey('warehouses.id', ondelete='SET NULL'), nullable=True),
        sa.Column('received_ref_id', sa.Uuid(), nullable=True),
        sa.Column('delivered_ref_id', sa.Uuid(), nullable=True),
        sa.UniqueConstraint('product_id', 'serial', name='uq_product_serials_product_serial'),
    )


def downgrade() -> None:
    """Drop sales & accounts tables."""
    for table in (
        'product_serials',
        'stock_balances',
        'stock_ledger',
        'ledger_entries',
        'journal_entries',
        'payments',
        'sales_invoice_items',
        'sales_invoices',
        'delivery_challan_items',
        'delivery_challans',
        'sales_order_items',
        'sales_orders',
        'sales_quotation_items',
        'sales_quotations',
        'grn_items',
        'grn',
        'purchase_order_items',
        'purchase_orders',
        'tax_slabs',
        'customers',
        'vendors',
        'products',
        'warehouses',
    ):
        op.drop_table(table)

    sa.Enum(name='serialstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='paymenttype').drop(op.get_bind(), checkfirst=True)
